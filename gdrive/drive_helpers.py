"""
Google Drive Helper Functions

Shared request builders and payload checks for the Drive tools.
"""
import base64
import binascii
from typing import Any, Dict, List, Literal, Optional, get_args

from core.config import MAX_UPLOAD_BYTES
from core.errors import InvalidArgumentsError, PayloadTooLargeError

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

FILE_LIST_FIELDS = "files(id,name,mimeType,parents,owners,modifiedTime,size),nextPageToken"
FILE_INFO_FIELDS = "id,name,mimeType,parents,owners,modifiedTime,size"

DEFAULT_PAGE_SIZE = 100

ShareRole = Literal["reader", "commenter", "writer", "organizer", "fileOrganizer", "owner"]
SHARE_ROLES = list(get_args(ShareRole))

# Drive rejects larger pages
MAX_PAGE_SIZE = 1000


def build_drive_list_params(query: Optional[str] = None, page_size: Optional[int] = None) -> Dict[str, Any]:
    """
    Build files().list parameters covering My Drive and every shared drive.

    Args:
        query: Drive search query. Omitted when empty.
        page_size: Maximum number of files, passed through as given. Defaults to 100 when None.

    Returns:
        dict: Keyword arguments for files().list.
    """
    list_params: Dict[str, Any] = {
        "pageSize": page_size if page_size is not None else DEFAULT_PAGE_SIZE,
        "fields": FILE_LIST_FIELDS,
        "supportsAllDrives": True,
        "includeItemsFromAllDrives": True,
    }
    if query:
        list_params["q"] = query
    return list_params


def parents_for(parent_id: Optional[str]) -> Optional[List[str]]:
    """Drive 'parents' value for an optional parent folder ID."""
    return [parent_id] if parent_id else None


def decode_upload_payload(data: str, max_bytes: int = MAX_UPLOAD_BYTES) -> bytes:
    """
    Decode a base64 upload payload and enforce the size cap.

    Args:
        data: base64-encoded file content.
        max_bytes: Largest decoded size accepted.

    Returns:
        bytes: The decoded content.

    Raises:
        InvalidArgumentsError: If data is not valid base64, including stray
            non-alphabet characters.
        PayloadTooLargeError: If the decoded content exceeds max_bytes.
    """
    try:
        content = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidArgumentsError(f"data must be base64-encoded: {e}") from e

    if len(content) > max_bytes:
        raise PayloadTooLargeError(
            f"File too large: max {max_bytes // (1024 * 1024)}MB base64 payload supported"
        )
    return content
