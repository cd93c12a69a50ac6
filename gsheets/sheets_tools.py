"""
Google Sheets Tools

This module registers the Sheets tools with the tool registry. Each handler
receives the per-request GoogleClients bundle and its validated arguments
model, and returns the Sheets API response unchanged.
"""

import asyncio
import logging
from typing import Annotated, Any, Dict, List

from pydantic import Field

from auth.credentials import GoogleClients
from core.tool_registry import ToolArguments, registry
from core.utils import handle_http_errors
from gsheets.a1_range import resolve_grid_range
from gsheets.sheets_helpers import get_sheet_id_by_name

# Configure module logger
logger = logging.getLogger(__name__)


class CreateSpreadsheetArgs(ToolArguments):
    title: Annotated[str, Field(description="Title of the new spreadsheet")]


class SpreadsheetArgs(ToolArguments):
    spreadsheet_id: Annotated[str, Field(alias="spreadsheetId")]


class SpreadsheetRangeArgs(SpreadsheetArgs):
    range_name: Annotated[str, Field(alias="range", description="Range in A1 notation")]


class SpreadsheetValuesArgs(SpreadsheetRangeArgs):
    values: Annotated[List[List[Any]], Field(description="Rows of cell values")]


class SheetNameArgs(SpreadsheetArgs):
    sheet_name: Annotated[str, Field(alias="sheetName")]


class FormatCellsArgs(SpreadsheetRangeArgs):
    cell_format: Annotated[Dict[str, Any], Field(alias="format", description="Google Sheets CellFormat object")]


class BatchUpdateArgs(SpreadsheetArgs):
    requests: List[Dict[str, Any]]


SPREADSHEET_RANGE_SCHEMA = {
    "type": "object",
    "properties": {
        "spreadsheetId": {"type": "string"},
        "range": {"type": "string"},
    },
    "required": ["spreadsheetId", "range"],
}

SPREADSHEET_VALUES_SCHEMA = {
    "type": "object",
    "properties": {
        "spreadsheetId": {"type": "string"},
        "range": {"type": "string"},
        "values": {"type": "array", "items": {"type": "array"}},
    },
    "required": ["spreadsheetId", "range", "values"],
}

SPREADSHEET_SHEET_SCHEMA = {
    "type": "object",
    "properties": {
        "spreadsheetId": {"type": "string"},
        "sheetName": {"type": "string"},
    },
    "required": ["spreadsheetId", "sheetName"],
}


async def _batch_update(service, spreadsheet_id: str, requests: list) -> Dict[str, Any]:
    return await asyncio.to_thread(
        service.spreadsheets()
        .batchUpdate(spreadsheetId=spreadsheet_id, body={"requests": requests})
        .execute
    )


@registry.tool(
    name="sheets.create_spreadsheet",
    description="Create a new Google Spreadsheet with a title.",
    input_schema={
        "type": "object",
        "properties": {"title": {"type": "string"}},
        "required": ["title"],
    },
    args_model=CreateSpreadsheetArgs,
    service="sheets",
)
@handle_http_errors("sheets.create_spreadsheet")
async def create_spreadsheet(clients: GoogleClients, args: CreateSpreadsheetArgs) -> Dict[str, Any]:
    """
    Creates a new Google Spreadsheet.

    Args:
        title (str): The title of the new spreadsheet. Required.

    Returns:
        dict: The created Spreadsheet resource, including spreadsheetId and spreadsheetUrl.
    """
    logger.info(f"[sheets.create_spreadsheet] Invoked. Title: {args.title}")

    spreadsheet = await asyncio.to_thread(
        clients.sheets.spreadsheets().create(body={"properties": {"title": args.title}}).execute
    )

    logger.info(f"Successfully created spreadsheet. ID: {spreadsheet.get('spreadsheetId')}")
    return spreadsheet


@registry.tool(
    name="sheets.get_values",
    description="Get values from a range in A1 notation.",
    input_schema=SPREADSHEET_RANGE_SCHEMA,
    args_model=SpreadsheetRangeArgs,
    service="sheets",
)
@handle_http_errors("sheets.get_values")
async def get_values(clients: GoogleClients, args: SpreadsheetRangeArgs) -> Dict[str, Any]:
    """
    Reads values from a specific range in a Google Sheet.

    Args:
        spreadsheetId (str): The ID of the spreadsheet. Required.
        range (str): The range to read (e.g., "Sheet1!A1:D10", "A1:D10"). Required.

    Returns:
        dict: The ValueRange for the requested range.
    """
    logger.info(f"[sheets.get_values] Invoked. Spreadsheet: {args.spreadsheet_id}, Range: {args.range_name}")

    result = await asyncio.to_thread(
        clients.sheets.spreadsheets()
        .values()
        .get(spreadsheetId=args.spreadsheet_id, range=args.range_name)
        .execute
    )

    logger.info(f"Successfully read {len(result.get('values', []))} rows from '{args.range_name}'.")
    return result


@registry.tool(
    name="sheets.update_values",
    description="Update values in a range (RAW) using a 2D array.",
    input_schema=SPREADSHEET_VALUES_SCHEMA,
    args_model=SpreadsheetValuesArgs,
    service="sheets",
)
@handle_http_errors("sheets.update_values")
async def update_values(clients: GoogleClients, args: SpreadsheetValuesArgs) -> Dict[str, Any]:
    """
    Overwrites values in a range. Values are stored as given (RAW), not parsed as formulas.

    Args:
        spreadsheetId (str): The ID of the spreadsheet. Required.
        range (str): The range to write. Required.
        values (List[List[Any]]): 2D array of rows to write. Required.

    Returns:
        dict: The UpdateValuesResponse.
    """
    logger.info(f"[sheets.update_values] Invoked. Spreadsheet: {args.spreadsheet_id}, Range: {args.range_name}")

    result = await asyncio.to_thread(
        clients.sheets.spreadsheets()
        .values()
        .update(
            spreadsheetId=args.spreadsheet_id,
            range=args.range_name,
            valueInputOption="RAW",
            body={"values": args.values},
        )
        .execute
    )

    logger.info(f"Successfully updated {result.get('updatedCells', 0)} cells.")
    return result


@registry.tool(
    name="sheets.append_values",
    description="Append rows to a range (RAW) using a 2D array.",
    input_schema=SPREADSHEET_VALUES_SCHEMA,
    args_model=SpreadsheetValuesArgs,
    service="sheets",
)
@handle_http_errors("sheets.append_values")
async def append_values(clients: GoogleClients, args: SpreadsheetValuesArgs) -> Dict[str, Any]:
    """
    Appends rows after the table found in the range, inserting new rows.

    Returns:
        dict: The AppendValuesResponse.
    """
    logger.info(f"[sheets.append_values] Invoked. Spreadsheet: {args.spreadsheet_id}, Range: {args.range_name}")

    result = await asyncio.to_thread(
        clients.sheets.spreadsheets()
        .values()
        .append(
            spreadsheetId=args.spreadsheet_id,
            range=args.range_name,
            valueInputOption="RAW",
            insertDataOption="INSERT_ROWS",
            body={"values": args.values},
        )
        .execute
    )

    updated_range = result.get("updates", {}).get("updatedRange", args.range_name)
    logger.info(f"Successfully appended rows to '{updated_range}'.")
    return result


@registry.tool(
    name="sheets.clear_values",
    description="Clear values in a range.",
    input_schema=SPREADSHEET_RANGE_SCHEMA,
    args_model=SpreadsheetRangeArgs,
    service="sheets",
)
@handle_http_errors("sheets.clear_values")
async def clear_values(clients: GoogleClients, args: SpreadsheetRangeArgs) -> Dict[str, Any]:
    logger.info(f"[sheets.clear_values] Invoked. Spreadsheet: {args.spreadsheet_id}, Range: {args.range_name}")

    result = await asyncio.to_thread(
        clients.sheets.spreadsheets()
        .values()
        .clear(spreadsheetId=args.spreadsheet_id, range=args.range_name, body={})
        .execute
    )

    logger.info(f"Successfully cleared range '{result.get('clearedRange', args.range_name)}'.")
    return result


@registry.tool(
    name="sheets.create_sheet",
    description="Add a new sheet (tab) to a spreadsheet.",
    input_schema=SPREADSHEET_SHEET_SCHEMA,
    args_model=SheetNameArgs,
    service="sheets",
)
@handle_http_errors("sheets.create_sheet")
async def create_sheet(clients: GoogleClients, args: SheetNameArgs) -> Dict[str, Any]:
    """
    Creates a new sheet within an existing spreadsheet.

    Args:
        spreadsheetId (str): The ID of the spreadsheet. Required.
        sheetName (str): The title of the new sheet. Required.

    Returns:
        dict: The BatchUpdateSpreadsheetResponse; the new sheet id is in replies[0].addSheet.
    """
    logger.info(f"[sheets.create_sheet] Invoked. Spreadsheet: {args.spreadsheet_id}, Sheet: {args.sheet_name}")

    response = await _batch_update(
        clients.sheets,
        args.spreadsheet_id,
        [{"addSheet": {"properties": {"title": args.sheet_name}}}],
    )

    logger.info(f"Successfully created sheet '{args.sheet_name}' in spreadsheet {args.spreadsheet_id}.")
    return response


@registry.tool(
    name="sheets.delete_sheet",
    description="Delete a sheet (tab) by name.",
    input_schema=SPREADSHEET_SHEET_SCHEMA,
    args_model=SheetNameArgs,
    service="sheets",
)
@handle_http_errors("sheets.delete_sheet")
async def delete_sheet(clients: GoogleClients, args: SheetNameArgs) -> Dict[str, Any]:
    """
    Deletes a sheet, looked up by its title.

    Raises:
        SheetNotFoundError: If the spreadsheet has no sheet with that title.
    """
    logger.info(f"[sheets.delete_sheet] Invoked. Spreadsheet: {args.spreadsheet_id}, Sheet: {args.sheet_name}")

    sheet_id = await get_sheet_id_by_name(clients.sheets, args.spreadsheet_id, args.sheet_name)
    response = await _batch_update(
        clients.sheets,
        args.spreadsheet_id,
        [{"deleteSheet": {"sheetId": sheet_id}}],
    )

    logger.info(f"Successfully deleted sheet '{args.sheet_name}' (ID: {sheet_id}).")
    return response


@registry.tool(
    name="sheets.get_info",
    description="Get spreadsheet metadata and sheets.",
    input_schema={
        "type": "object",
        "properties": {"spreadsheetId": {"type": "string"}},
        "required": ["spreadsheetId"],
    },
    args_model=SpreadsheetArgs,
    service="sheets",
)
@handle_http_errors("sheets.get_info")
async def get_info(clients: GoogleClients, args: SpreadsheetArgs) -> Dict[str, Any]:
    logger.info(f"[sheets.get_info] Invoked. Spreadsheet ID: {args.spreadsheet_id}")

    spreadsheet = await asyncio.to_thread(
        clients.sheets.spreadsheets().get(spreadsheetId=args.spreadsheet_id).execute
    )

    logger.info(f"Successfully retrieved info for spreadsheet {args.spreadsheet_id}.")
    return spreadsheet


@registry.tool(
    name="sheets.format_cells",
    description="Apply userEnteredFormat to cells in a range. Range must include sheet name, e.g., 'Sheet1!A1:B2'.",
    input_schema={
        "type": "object",
        "properties": {
            "spreadsheetId": {"type": "string"},
            "range": {"type": "string"},
            "format": {"type": "object", "description": "Google Sheets CellFormat object"},
        },
        "required": ["spreadsheetId", "range", "format"],
    },
    args_model=FormatCellsArgs,
    service="sheets",
)
@handle_http_errors("sheets.format_cells")
async def format_cells(clients: GoogleClients, args: FormatCellsArgs) -> Dict[str, Any]:
    """
    Applies a CellFormat to every cell of a bounded range via repeatCell.

    Args:
        spreadsheetId (str): The ID of the spreadsheet. Required.
        range (str): Bounded range with sheet name, e.g. "Sheet1!A1:B2". Required.
        format (dict): CellFormat to set as userEnteredFormat. Required.

    Raises:
        MalformedRangeError: If the range has no sheet name or is not a bounded span.
        SheetNotFoundError: If the named sheet does not exist.
    """
    logger.info(f"[sheets.format_cells] Invoked. Spreadsheet: {args.spreadsheet_id}, Range: {args.range_name}")

    grid_range = await resolve_grid_range(clients.sheets, args.spreadsheet_id, args.range_name)
    response = await _batch_update(
        clients.sheets,
        args.spreadsheet_id,
        [
            {
                "repeatCell": {
                    "range": grid_range.to_dict(),
                    "cell": {"userEnteredFormat": args.cell_format},
                    "fields": "userEnteredFormat",
                }
            }
        ],
    )

    logger.info(f"Successfully formatted {grid_range.to_a1()} on sheet {grid_range.sheet_id}.")
    return response


@registry.tool(
    name="sheets.batch_update",
    description="Send raw batchUpdate requests to the Sheets API.",
    input_schema={
        "type": "object",
        "properties": {
            "spreadsheetId": {"type": "string"},
            "requests": {"type": "array", "items": {"type": "object"}},
        },
        "required": ["spreadsheetId", "requests"],
    },
    args_model=BatchUpdateArgs,
    service="sheets",
)
@handle_http_errors("sheets.batch_update")
async def batch_update(clients: GoogleClients, args: BatchUpdateArgs) -> Dict[str, Any]:
    logger.info(f"[sheets.batch_update] Invoked. Spreadsheet: {args.spreadsheet_id}, Requests: {len(args.requests)}")

    response = await _batch_update(clients.sheets, args.spreadsheet_id, args.requests)

    logger.info(f"Successfully applied {len(response.get('replies', []))} batch replies.")
    return response
