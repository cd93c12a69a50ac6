import itertools
import string

import pytest

from core.errors import MalformedRangeError, SheetNotFoundError
from gsheets.a1_range import (
    GridRange,
    column_index_to_letters,
    column_letters_to_index,
    parse_a1_range,
    resolve_grid_range,
    to_grid_range,
)


def test_column_letters_known_values():
    assert column_letters_to_index("A") == 0
    assert column_letters_to_index("Z") == 25
    assert column_letters_to_index("AA") == 26
    assert column_letters_to_index("AZ") == 51
    assert column_letters_to_index("BA") == 52
    assert column_letters_to_index("ZZZ") == 18277


def test_column_letters_strictly_increasing():
    # Spreadsheet column order: all 1-letter names, then 2-letter, then 3-letter
    columns = [
        "".join(letters)
        for length in (1, 2, 3)
        for letters in itertools.product(string.ascii_uppercase, repeat=length)
    ]
    indexes = [column_letters_to_index(c) for c in columns]
    assert indexes == list(range(len(columns)))


@pytest.mark.parametrize("letters", ["A", "Z", "AA", "AZ", "BA", "ZZ", "AAA", "XFD"])
def test_column_index_to_letters_inverts(letters):
    assert column_index_to_letters(column_letters_to_index(letters)) == letters


def test_column_index_to_letters_rejects_negative():
    with pytest.raises(ValueError):
        column_index_to_letters(-1)


def test_parse_plain_sheet_name():
    a1 = parse_a1_range("Sheet1!A1:B2")
    assert a1.sheet_name == "Sheet1"
    assert (a1.start_column, a1.start_row, a1.end_column, a1.end_row) == ("A", 1, "B", 2)


def test_parse_quoted_sheet_name():
    assert parse_a1_range("'My Sheet'!C3:C3").sheet_name == "My Sheet"


def test_parse_quoted_sheet_name_with_escaped_quote():
    assert parse_a1_range("'Bob''s data'!A1:A2").sheet_name == "Bob's data"


def test_parse_lowercase_span():
    a1 = parse_a1_range("Sheet1!aa1:ab2")
    assert (a1.start_column, a1.end_column) == ("AA", "AB")


@pytest.mark.parametrize("range_ref", ["A1:B2", "Sheet1!", ""])
def test_parse_requires_sheet_name(range_ref):
    with pytest.raises(MalformedRangeError, match="range must include sheet name"):
        parse_a1_range(range_ref)


@pytest.mark.parametrize(
    "range_ref",
    ["Sheet1!A:A", "Sheet1!1:5", "Sheet1!A1", "Sheet1!A1:B", "Sheet1!A1:B2:C3", "Sheet1!A1:B2junk"],
)
def test_parse_rejects_open_or_malformed_spans(range_ref):
    with pytest.raises(MalformedRangeError, match="range must be like A1:B2"):
        parse_a1_range(range_ref)


@pytest.mark.parametrize(
    "span, expected",
    [
        ("B2:A1", (1, 1, 1, 1)),
        ("C1:A5", (2, 1, 0, 5)),
        ("A9:B3", (0, 2, 8, 3)),
    ],
)
def test_inverted_spans_pass_through(span, expected):
    grid = to_grid_range(parse_a1_range(f"Sheet1!{span}"), sheet_id=0)
    assert (
        grid.start_column_index,
        grid.end_column_index,
        grid.start_row_index,
        grid.end_row_index,
    ) == expected


def test_parse_rejects_row_zero():
    with pytest.raises(MalformedRangeError):
        parse_a1_range("Sheet1!A0:B2")


def test_grid_range_to_dict_and_a1():
    grid = GridRange(sheet_id=7, start_row_index=2, end_row_index=3, start_column_index=2, end_column_index=3)
    assert grid.to_dict() == {
        "sheetId": 7,
        "startRowIndex": 2,
        "endRowIndex": 3,
        "startColumnIndex": 2,
        "endColumnIndex": 3,
    }
    assert grid.to_a1() == "C3:C3"


@pytest.mark.asyncio
async def test_resolve_basic_range(sheets_service, sheet_titles):
    sheet_titles({"Sheet1": 0})

    grid = await resolve_grid_range(sheets_service, "spreadsheet-1", "Sheet1!A1:B2")

    assert grid.to_dict() == {
        "sheetId": 0,
        "startRowIndex": 0,
        "endRowIndex": 2,
        "startColumnIndex": 0,
        "endColumnIndex": 2,
    }
    sheets_service.spreadsheets.return_value.get.assert_called_once_with(
        spreadsheetId="spreadsheet-1", fields="sheets(properties(sheetId,title))"
    )


@pytest.mark.asyncio
async def test_resolve_single_cell_in_quoted_sheet(sheets_service, sheet_titles):
    sheet_titles({"Sheet1": 0, "My Sheet": 1234})

    grid = await resolve_grid_range(sheets_service, "spreadsheet-1", "'My Sheet'!C3:C3")

    assert grid.sheet_id == 1234
    assert (grid.start_column_index, grid.end_column_index) == (2, 3)
    assert (grid.start_row_index, grid.end_row_index) == (2, 3)


@pytest.mark.asyncio
async def test_resolve_multi_letter_columns(sheets_service, sheet_titles):
    sheet_titles({"Data": 5})

    grid = await resolve_grid_range(sheets_service, "spreadsheet-1", "Data!AA10:AB20")

    assert (grid.start_column_index, grid.end_column_index) == (26, 28)
    assert (grid.start_row_index, grid.end_row_index) == (9, 20)


@pytest.mark.asyncio
async def test_resolve_validates_before_lookup(sheets_service):
    with pytest.raises(MalformedRangeError):
        await resolve_grid_range(sheets_service, "spreadsheet-1", "Sheet1!A:A")
    sheets_service.spreadsheets.assert_not_called()


@pytest.mark.asyncio
async def test_resolve_unknown_sheet(sheets_service, sheet_titles):
    sheet_titles({"Sheet1": 0})

    with pytest.raises(SheetNotFoundError, match="Sheet not found: sheet1"):
        await resolve_grid_range(sheets_service, "spreadsheet-1", "sheet1!A1:B2")


SHEET_NAMES = ["Sheet1", "My Sheet", "Q3 2024 (final)", "Bob''s data"]
SPANS = [
    ("A1:B2", "A", 1, "B", 2),
    ("C3:C3", "C", 3, "C", 3),
    ("Z9:AB120", "Z", 9, "AB", 120),
    ("aa1:az2", "AA", 1, "AZ", 2),
]


@pytest.mark.asyncio
@pytest.mark.parametrize("raw_name", SHEET_NAMES)
@pytest.mark.parametrize("span, start_col, start_row, end_col, end_row", SPANS)
async def test_quoting_does_not_change_grid_range(
    sheets_service, sheet_titles, raw_name, span, start_col, start_row, end_col, end_row
):
    title = raw_name.replace("''", "'")
    sheet_titles({"Other": 1, title: 99})

    references = [f"'{raw_name}'!{span}"]
    # Only '!' splits a reference, so names without quotes need no quoting
    if "'" not in raw_name:
        references.append(f"{raw_name}!{span}")

    grids = [await resolve_grid_range(sheets_service, "ss", ref) for ref in references]

    for grid in grids:
        assert grid.sheet_id == 99
        assert grid.start_column_index == column_letters_to_index(start_col)
        assert grid.end_column_index == column_letters_to_index(end_col) + 1
        assert grid.start_row_index == start_row - 1
        assert grid.end_row_index == end_row
    assert all(grid == grids[0] for grid in grids)
