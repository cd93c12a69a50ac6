"""
Google Drive Tools

This module registers the Drive tools with the tool registry. All calls
support shared drives.
"""
import asyncio
import base64
import io
import logging
from typing import Annotated, Any, Dict, Optional

from googleapiclient.http import MediaIoBaseDownload, MediaIoBaseUpload
from pydantic import Field

from auth.credentials import GoogleClients
from core.tool_registry import ToolArguments, registry
from core.utils import handle_http_errors
from gdrive.drive_helpers import (
    FILE_INFO_FIELDS,
    FOLDER_MIME_TYPE,
    MAX_PAGE_SIZE,
    SHARE_ROLES,
    ShareRole,
    build_drive_list_params,
    decode_upload_payload,
    parents_for,
)

logger = logging.getLogger(__name__)


class ListFilesArgs(ToolArguments):
    query: Optional[str] = None
    page_size: Annotated[Optional[int], Field(alias="pageSize", ge=1, le=MAX_PAGE_SIZE)] = None


class CreateFolderArgs(ToolArguments):
    name: str
    parent_id: Annotated[Optional[str], Field(alias="parentId")] = None


class UploadFileArgs(ToolArguments):
    name: str
    mime_type: Annotated[str, Field(alias="mimeType")]
    data: Annotated[str, Field(description="base64-encoded content (<= 10MB)")]
    parent_id: Annotated[Optional[str], Field(alias="parentId")] = None


class FileIdArgs(ToolArguments):
    file_id: Annotated[str, Field(alias="fileId")]


class ShareFileArgs(FileIdArgs):
    email: str
    # An explicit null also means reader
    role: Optional[ShareRole] = "reader"


class MoveFileArgs(FileIdArgs):
    folder_id: Annotated[str, Field(alias="folderId")]


class RenameFileArgs(FileIdArgs):
    new_name: Annotated[str, Field(alias="newName")]


FILE_ID_SCHEMA = {
    "type": "object",
    "properties": {"fileId": {"type": "string"}},
    "required": ["fileId"],
}


@registry.tool(
    name="drive_list_files",
    description="List Drive files by query.",
    input_schema={
        "type": "object",
        "properties": {
            "query": {"type": ["string", "null"]},
            "pageSize": {"type": ["integer", "null"], "minimum": 1, "maximum": MAX_PAGE_SIZE},
        },
        "required": [],
    },
    args_model=ListFilesArgs,
    service="drive",
)
@handle_http_errors("drive_list_files")
async def list_files(clients: GoogleClients, args: ListFilesArgs) -> Dict[str, Any]:
    """
    Lists files in My Drive and shared drives.

    Args:
        query (Optional[str]): Drive search query, e.g. "name contains 'report'". Lists everything if omitted.
        pageSize (Optional[int]): The maximum number of files to return (1-1000). Defaults to 100.

    Returns:
        dict: FileList with files and nextPageToken.
    """
    logger.info(f"[drive_list_files] Invoked. Query: '{args.query}'")

    list_params = build_drive_list_params(query=args.query, page_size=args.page_size)
    results = await asyncio.to_thread(
        clients.drive.files().list(**list_params).execute
    )

    logger.info(f"Found {len(results.get('files', []))} files.")
    return results


@registry.tool(
    name="drive_create_folder",
    description="Create a Drive folder optionally under a parent.",
    input_schema={
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "parentId": {"type": ["string", "null"]},
        },
        "required": ["name"],
    },
    args_model=CreateFolderArgs,
    service="drive",
)
@handle_http_errors("drive_create_folder")
async def create_folder(clients: GoogleClients, args: CreateFolderArgs) -> Dict[str, Any]:
    logger.info(f"[drive_create_folder] Invoked. Name: {args.name}, Parent: {args.parent_id}")

    folder_metadata = {"name": args.name, "mimeType": FOLDER_MIME_TYPE}
    parents = parents_for(args.parent_id)
    if parents:
        folder_metadata["parents"] = parents

    folder = await asyncio.to_thread(
        clients.drive.files().create(
            body=folder_metadata,
            fields="id,name,parents",
            supportsAllDrives=True,
        ).execute
    )

    logger.info(f"Successfully created folder '{args.name}' (ID: {folder.get('id')}).")
    return folder


@registry.tool(
    name="drive_upload_file",
    description="Upload a file with base64-encoded data.",
    input_schema={
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "mimeType": {"type": "string"},
            "data": {"type": "string", "description": "base64-encoded content (<= 10MB)"},
            "parentId": {"type": ["string", "null"]},
        },
        "required": ["name", "mimeType", "data"],
    },
    args_model=UploadFileArgs,
    service="drive",
)
@handle_http_errors("drive_upload_file")
async def upload_file(clients: GoogleClients, args: UploadFileArgs) -> Dict[str, Any]:
    """
    Uploads base64-encoded content as a new Drive file.

    Args:
        name (str): File name. Required.
        mimeType (str): MIME type of the content. Required.
        data (str): base64-encoded content, at most 10MB once decoded. Required.
        parentId (Optional[str]): Folder to create the file in.

    Returns:
        dict: id, name, mimeType and parents of the created file.

    Raises:
        InvalidArgumentsError: If data is not valid base64. Nothing is sent to Drive.
        PayloadTooLargeError: If the decoded content exceeds 10MB. Nothing is sent to Drive.
    """
    logger.info(f"[drive_upload_file] Invoked. Name: {args.name}, MIME type: {args.mime_type}")

    content = decode_upload_payload(args.data)

    file_metadata = {"name": args.name, "mimeType": args.mime_type}
    parents = parents_for(args.parent_id)
    if parents:
        file_metadata["parents"] = parents

    created_file = await asyncio.to_thread(
        clients.drive.files().create(
            body=file_metadata,
            media_body=MediaIoBaseUpload(io.BytesIO(content), mimetype=args.mime_type, resumable=True),
            fields="id,name,mimeType,parents",
            supportsAllDrives=True,
        ).execute
    )

    logger.info(f"Successfully uploaded {len(content)} bytes as '{args.name}' (ID: {created_file.get('id')}).")
    return created_file


@registry.tool(
    name="drive_delete_file",
    description="Delete a file by ID.",
    input_schema=FILE_ID_SCHEMA,
    args_model=FileIdArgs,
    service="drive",
)
@handle_http_errors("drive_delete_file")
async def delete_file(clients: GoogleClients, args: FileIdArgs) -> Dict[str, Any]:
    logger.info(f"[drive_delete_file] Invoked. File ID: {args.file_id}")

    # Drive answers 204 No Content; failures surface as HttpError
    await asyncio.to_thread(
        clients.drive.files().delete(fileId=args.file_id, supportsAllDrives=True).execute
    )

    logger.info(f"Successfully deleted file {args.file_id}.")
    return {"success": True, "status": 204}


@registry.tool(
    name="drive_get_file_info",
    description="Get file metadata by ID.",
    input_schema=FILE_ID_SCHEMA,
    args_model=FileIdArgs,
    service="drive",
)
@handle_http_errors("drive_get_file_info")
async def get_file_info(clients: GoogleClients, args: FileIdArgs) -> Dict[str, Any]:
    logger.info(f"[drive_get_file_info] Invoked. File ID: {args.file_id}")

    return await asyncio.to_thread(
        clients.drive.files().get(
            fileId=args.file_id, fields=FILE_INFO_FIELDS, supportsAllDrives=True
        ).execute
    )


@registry.tool(
    name="drive_download_file",
    description="Download a file as base64 content.",
    input_schema=FILE_ID_SCHEMA,
    args_model=FileIdArgs,
    service="drive",
)
@handle_http_errors("drive_download_file")
async def download_file(clients: GoogleClients, args: FileIdArgs) -> Dict[str, Any]:
    """
    Downloads a binary file's content.

    Native Google Docs/Sheets/Slides have no binary content and fail with the
    Drive API's error.

    Returns:
        dict: id, name, mimeType and data (base64-encoded content).
    """
    file_id = args.file_id
    logger.info(f"[drive_download_file] Invoked. File ID: '{file_id}'")

    file_metadata = await asyncio.to_thread(
        clients.drive.files().get(
            fileId=file_id, fields="id,name,mimeType", supportsAllDrives=True
        ).execute
    )

    request_obj = clients.drive.files().get_media(fileId=file_id, supportsAllDrives=True)
    fh = io.BytesIO()
    downloader = MediaIoBaseDownload(fh, request_obj)
    done = False
    while not done:
        _, done = await asyncio.to_thread(downloader.next_chunk)

    file_content_bytes = fh.getvalue()
    logger.info(f"Downloaded {len(file_content_bytes)} bytes of '{file_metadata.get('name')}'.")
    return {
        "id": file_metadata.get("id"),
        "name": file_metadata.get("name"),
        "mimeType": file_metadata.get("mimeType"),
        "data": base64.b64encode(file_content_bytes).decode("ascii"),
    }


@registry.tool(
    name="drive_share_file",
    description="Share a file with a user and role.",
    input_schema={
        "type": "object",
        "properties": {
            "fileId": {"type": "string"},
            "email": {"type": "string"},
            "role": {"type": "string", "enum": SHARE_ROLES, "default": "reader"},
        },
        "required": ["fileId", "email"],
    },
    args_model=ShareFileArgs,
    service="drive",
)
@handle_http_errors("drive_share_file")
async def share_file(clients: GoogleClients, args: ShareFileArgs) -> Dict[str, Any]:
    """
    Grants a user a role on a file without sending a notification email.

    Args:
        fileId (str): The file to share. Required.
        email (str): The user's email address. Required.
        role (str): One of reader, commenter, writer, organizer, fileOrganizer, owner. Defaults to reader.

    Returns:
        dict: id and role of the created permission.
    """
    role = args.role or "reader"
    logger.info(f"[drive_share_file] Invoked. File ID: {args.file_id}, Email: {args.email}, Role: {role}")

    permission = await asyncio.to_thread(
        clients.drive.permissions().create(
            fileId=args.file_id,
            body={"type": "user", "role": role, "emailAddress": args.email},
            sendNotificationEmail=False,
            supportsAllDrives=True,
            fields="id,role",
        ).execute
    )

    logger.info(f"Successfully shared {args.file_id} with {args.email} as {role}.")
    return permission


@registry.tool(
    name="drive_move_file",
    description="Move a file to a folder.",
    input_schema={
        "type": "object",
        "properties": {
            "fileId": {"type": "string"},
            "folderId": {"type": "string"},
        },
        "required": ["fileId", "folderId"],
    },
    args_model=MoveFileArgs,
    service="drive",
)
@handle_http_errors("drive_move_file")
async def move_file(clients: GoogleClients, args: MoveFileArgs) -> Dict[str, Any]:
    """Moves a file into folderId, detaching it from all of its current parents."""
    logger.info(f"[drive_move_file] Invoked. File ID: {args.file_id}, Folder ID: {args.folder_id}")

    current = await asyncio.to_thread(
        clients.drive.files().get(fileId=args.file_id, fields="parents", supportsAllDrives=True).execute
    )
    previous_parents = ",".join(current.get("parents", []))

    update_params = {
        "fileId": args.file_id,
        "addParents": args.folder_id,
        "fields": "id,parents",
        "supportsAllDrives": True,
    }
    if previous_parents:
        update_params["removeParents"] = previous_parents

    moved = await asyncio.to_thread(
        clients.drive.files().update(**update_params).execute
    )

    logger.info(f"Successfully moved {args.file_id} to {args.folder_id}.")
    return moved


@registry.tool(
    name="drive_rename_file",
    description="Rename a file.",
    input_schema={
        "type": "object",
        "properties": {
            "fileId": {"type": "string"},
            "newName": {"type": "string"},
        },
        "required": ["fileId", "newName"],
    },
    args_model=RenameFileArgs,
    service="drive",
)
@handle_http_errors("drive_rename_file")
async def rename_file(clients: GoogleClients, args: RenameFileArgs) -> Dict[str, Any]:
    logger.info(f"[drive_rename_file] Invoked. File ID: {args.file_id}, New name: {args.new_name}")

    return await asyncio.to_thread(
        clients.drive.files().update(
            fileId=args.file_id,
            body={"name": args.new_name},
            fields="id,name",
            supportsAllDrives=True,
        ).execute
    )
