from typing import Annotated, List, Literal, Optional

import pytest
from pydantic import Field

from core.errors import InvalidArgumentsError, UnknownToolError
from core.tool_registry import ToolArguments, ToolRegistry, registry
from gsheets.sheets_tools import SpreadsheetValuesArgs

SHEETS_TOOLS = [
    "sheets.create_spreadsheet",
    "sheets.get_values",
    "sheets.update_values",
    "sheets.append_values",
    "sheets.clear_values",
    "sheets.create_sheet",
    "sheets.delete_sheet",
    "sheets.get_info",
    "sheets.format_cells",
    "sheets.batch_update",
]

DRIVE_TOOLS = [
    "drive_list_files",
    "drive_create_folder",
    "drive_upload_file",
    "drive_delete_file",
    "drive_get_file_info",
    "drive_download_file",
    "drive_share_file",
    "drive_move_file",
    "drive_rename_file",
]


async def _noop(clients, args):
    return args


class EchoArgs(ToolArguments):
    text: str
    count: Optional[float] = None
    flag: bool = False
    mode: Literal["a", "b"] = "a"
    rows: Annotated[List[List[int]], Field(alias="rowValues")] = []


@pytest.fixture
def local_registry():
    reg = ToolRegistry()
    reg.tool(
        name="demo.echo",
        description="Echo the arguments.",
        input_schema={"type": "object", "properties": {"text": {"type": "string"}}, "required": ["text"]},
        args_model=EchoArgs,
        service="demo",
    )(_noop)
    return reg


def test_global_registry_holds_the_full_catalog():
    assert sorted(registry.names()) == sorted(SHEETS_TOOLS + DRIVE_TOOLS)


def test_manifest_entries_have_name_description_and_schema():
    for entry in registry.manifest_tools():
        assert set(entry) == {"name", "description", "input_schema"}
        assert entry["input_schema"]["type"] == "object"
        assert isinstance(entry["input_schema"]["required"], list)


def test_manifest_preserves_registration_order():
    names = [entry["name"] for entry in registry.manifest_tools()]
    sheets_names = [n for n in names if n.startswith("sheets.")]
    assert sheets_names == SHEETS_TOOLS


def test_service_filtering_hides_tools():
    registry.set_enabled_services({"sheets"})

    assert registry.names() == SHEETS_TOOLS
    assert all(e["name"].startswith("sheets.") for e in registry.manifest_tools())
    with pytest.raises(UnknownToolError, match="Unknown tool: drive_list_files"):
        registry.get("drive_list_files")


def test_unknown_tool():
    with pytest.raises(UnknownToolError) as exc_info:
        registry.get("sheets.nope")
    assert exc_info.value.status_code == 404
    assert exc_info.value.to_dict() == {"error": "Unknown tool: sheets.nope", "kind": "unknown_tool"}


def test_duplicate_registration_is_rejected(local_registry):
    with pytest.raises(ValueError):
        local_registry.tool(
            name="demo.echo", description="", input_schema={}, args_model=EchoArgs, service="demo"
        )(_noop)


def test_parse_arguments_returns_typed_model(local_registry):
    spec = local_registry.get("demo.echo")

    arguments = spec.parse_arguments(
        {"text": "hi", "count": 2.5, "flag": True, "mode": "b", "rowValues": [[1, 2]], "extra": object()}
    )

    assert isinstance(arguments, EchoArgs)
    assert arguments.text == "hi"
    assert arguments.count == 2.5
    assert arguments.flag is True
    assert arguments.mode == "b"
    assert arguments.rows == [[1, 2]]


def test_parse_arguments_applies_defaults(local_registry):
    arguments = local_registry.get("demo.echo").parse_arguments({"text": "hi", "count": None})

    assert arguments.count is None
    assert arguments.flag is False
    assert arguments.mode == "a"
    assert arguments.rows == []


@pytest.mark.parametrize(
    "args, message",
    [
        ({}, "Missing required argument 'text' for tool demo.echo"),
        ({"text": None}, "Argument 'text' for tool demo.echo is invalid"),
        ({"text": 5}, "Argument 'text' for tool demo.echo is invalid"),
        ({"text": "x", "count": "3"}, "Argument 'count'"),
        ({"text": "x", "count": True}, "Argument 'count'"),
        ({"text": "x", "flag": "yes"}, "Argument 'flag'"),
        ({"text": "x", "rowValues": {}}, "Argument 'rowValues'"),
        ({"text": "x", "rowValues": [1, 2]}, r"Argument 'rowValues\.0'"),
        ({"text": "x", "rowValues": [["1"]]}, r"Argument 'rowValues\.0\.0'"),
        ({"text": "x", "mode": "c"}, "Argument 'mode'"),
    ],
)
def test_invalid_arguments(local_registry, args, message):
    spec = local_registry.get("demo.echo")
    with pytest.raises(InvalidArgumentsError, match=message) as exc_info:
        spec.parse_arguments(args)
    assert exc_info.value.status_code == 400


def test_update_values_requires_rows_of_cells():
    spec = registry.get("sheets.update_values")

    arguments = spec.parse_arguments({"spreadsheetId": "s", "range": "Sheet1!A1:B1", "values": [[1, "x"]]})
    assert isinstance(arguments, SpreadsheetValuesArgs)
    assert arguments.values == [[1, "x"]]

    with pytest.raises(InvalidArgumentsError, match=r"Argument 'values\.0' for tool sheets.update_values"):
        spec.parse_arguments({"spreadsheetId": "s", "range": "Sheet1!A1:B1", "values": [1, "x"]})


def test_batch_update_requires_request_objects():
    spec = registry.get("sheets.batch_update")

    spec.parse_arguments({"spreadsheetId": "s", "requests": [{"addSheet": {}}]})
    with pytest.raises(InvalidArgumentsError, match=r"Argument 'requests\.0' for tool sheets.batch_update"):
        spec.parse_arguments({"spreadsheetId": "s", "requests": ["not-an-object"]})


def test_format_cells_requires_format_object():
    spec = registry.get("sheets.format_cells")
    with pytest.raises(InvalidArgumentsError, match="Argument 'format'"):
        spec.parse_arguments({"spreadsheetId": "s", "range": "Sheet1!A1:A1", "format": "bold"})


def test_share_role_enum_is_enforced():
    spec = registry.get("drive_share_file")

    assert spec.parse_arguments({"fileId": "f", "email": "a@example.com"}).role == "reader"
    assert spec.parse_arguments({"fileId": "f", "email": "a@example.com", "role": "writer"}).role == "writer"
    with pytest.raises(InvalidArgumentsError, match="Argument 'role'"):
        spec.parse_arguments({"fileId": "f", "email": "a@example.com", "role": "admin"})


@pytest.mark.parametrize("page_size", [0, -5, 1001, 2.7, "10", True])
def test_list_files_page_size_must_be_in_range(page_size):
    spec = registry.get("drive_list_files")
    with pytest.raises(InvalidArgumentsError, match="Argument 'pageSize'"):
        spec.parse_arguments({"pageSize": page_size})


def test_list_files_page_size_is_optional():
    spec = registry.get("drive_list_files")

    assert spec.parse_arguments({}).page_size is None
    assert spec.parse_arguments({"pageSize": None}).page_size is None
    assert spec.parse_arguments({"pageSize": 1000}).page_size == 1000
