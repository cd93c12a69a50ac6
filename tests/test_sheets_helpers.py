import pytest

from core.errors import SheetNotFoundError
from gsheets.sheets_helpers import get_sheet_id_by_name


@pytest.mark.asyncio
async def test_returns_first_exact_match(sheets_service):
    sheets_service.spreadsheets.return_value.get.return_value.execute.return_value = {
        "sheets": [
            {"properties": {"sheetId": 11, "title": "Summary"}},
            {"properties": {"sheetId": 22, "title": "Data"}},
            {"properties": {"sheetId": 33, "title": "Data"}},
        ]
    }

    assert await get_sheet_id_by_name(sheets_service, "ss", "Data") == 22


@pytest.mark.asyncio
async def test_title_match_is_case_sensitive(sheet_titles, sheets_service):
    sheet_titles({"Data": 22})

    with pytest.raises(SheetNotFoundError):
        await get_sheet_id_by_name(sheets_service, "ss", "data")


@pytest.mark.asyncio
async def test_missing_sheet_id_defaults_to_first_sheet(sheets_service):
    sheets_service.spreadsheets.return_value.get.return_value.execute.return_value = {
        "sheets": [{"properties": {"title": "Sheet1"}}]
    }

    assert await get_sheet_id_by_name(sheets_service, "ss", "Sheet1") == 0


@pytest.mark.asyncio
async def test_empty_metadata(sheets_service):
    sheets_service.spreadsheets.return_value.get.return_value.execute.return_value = {}

    with pytest.raises(SheetNotFoundError, match="Sheet not found: Sheet1"):
        await get_sheet_id_by_name(sheets_service, "ss", "Sheet1")


@pytest.mark.asyncio
async def test_every_lookup_fetches_metadata(sheet_titles, sheets_service):
    sheet_titles({"Sheet1": 0})

    await get_sheet_id_by_name(sheets_service, "ss", "Sheet1")
    await get_sheet_id_by_name(sheets_service, "ss", "Sheet1")

    assert sheets_service.spreadsheets.return_value.get.return_value.execute.call_count == 2
