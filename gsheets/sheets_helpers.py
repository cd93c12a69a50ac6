"""
Google Sheets Helper Functions

Shared lookups used by more than one Sheets tool.
"""
import asyncio
import logging

from core.errors import SheetNotFoundError

logger = logging.getLogger(__name__)

SHEET_TITLES_FIELDS = "sheets(properties(sheetId,title))"


async def get_sheet_id_by_name(service, spreadsheet_id: str, sheet_name: str) -> int:
    """
    Resolve a sheet title to its numeric sheet id.

    Fetches only the sheet titles and ids of the spreadsheet (no cell data) on
    every call and returns the first exact, case-sensitive title match.

    Args:
        service: Authorized Sheets API client.
        spreadsheet_id: The ID of the spreadsheet.
        sheet_name: Sheet title to look for.

    Returns:
        int: The sheet's id.

    Raises:
        SheetNotFoundError: If no sheet has that title.
    """
    metadata = await asyncio.to_thread(
        service.spreadsheets()
        .get(spreadsheetId=spreadsheet_id, fields=SHEET_TITLES_FIELDS)
        .execute
    )

    for sheet in metadata.get("sheets", []):
        properties = sheet.get("properties") or {}
        if properties.get("title") == sheet_name:
            return properties.get("sheetId", 0)

    logger.info(f"Sheet '{sheet_name}' not found in spreadsheet {spreadsheet_id}")
    raise SheetNotFoundError(f"Sheet not found: {sheet_name}")
