from unittest.mock import MagicMock

import pytest

import gdrive.drive_tools  # noqa: F401
import gsheets.sheets_tools  # noqa: F401
from auth.credentials import GoogleClients
from core.tool_registry import registry


@pytest.fixture(autouse=True)
def all_services_enabled():
    registry.set_enabled_services(None)
    yield
    registry.set_enabled_services(None)


@pytest.fixture
def sheets_service():
    return MagicMock(name="sheets")


@pytest.fixture
def drive_service():
    return MagicMock(name="drive")


@pytest.fixture
def clients(sheets_service, drive_service):
    return GoogleClients(sheets=sheets_service, drive=drive_service)


@pytest.fixture
def sheet_titles(sheets_service):
    """Make spreadsheets().get(...).execute() return the given {title: sheetId} sheets."""

    def _set(titles_to_ids):
        sheets_service.spreadsheets.return_value.get.return_value.execute.return_value = {
            "sheets": [
                {"properties": {"sheetId": sheet_id, "title": title}}
                for title, sheet_id in titles_to_ids.items()
            ]
        }

    return _set
