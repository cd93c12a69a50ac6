"""
A1 range parsing for coordinate-based Sheets requests.

Requests such as repeatCell address cells by GridRange (numeric sheet id plus
zero-based, half-open row/column bounds) rather than by A1 text. This module
turns 'Sheet1!A1:B2' into that structure.

Only bounded two-corner spans are supported. 'A:A', '1:5' and single cells
such as 'A1' are rejected. Spans whose end precedes their start are passed
through as-is; only row 0, which has no grid index, is refused.
"""

import logging
import re
import string
from dataclasses import dataclass
from typing import Any, Dict

from core.errors import MalformedRangeError
from gsheets.sheets_helpers import get_sheet_id_by_name

logger = logging.getLogger(__name__)

_SPAN_RE = re.compile(r"([A-Z]+)(\d+):([A-Z]+)(\d+)")
_QUOTED_SHEET_RE = re.compile(r"^'(.+)'$")


def column_letters_to_index(letters: str) -> int:
    """
    Convert column letters to a zero-based column index.

    Column names are bijective base-26 ('A'=1 ... 'Z'=26, 'AA'=27), so the
    result is shifted down by one: 'A' -> 0, 'Z' -> 25, 'AA' -> 26.
    Callers are expected to pass uppercase A-Z only.
    """
    index = 0
    for letter in letters:
        index = index * 26 + (ord(letter) - ord("A") + 1)
    return index - 1


def column_index_to_letters(index: int) -> str:
    """Convert a zero-based column index back to column letters (0 -> 'A', 26 -> 'AA')."""
    if index < 0:
        raise ValueError(f"Column index must be non-negative, got {index}")
    letters = []
    current = index + 1
    while current > 0:
        current, remainder = divmod(current - 1, 26)
        letters.append(string.ascii_uppercase[remainder])
    return "".join(reversed(letters))


@dataclass(frozen=True)
class A1Range:
    """A parsed 'Sheet!C1R1:C2R2' reference, still addressed by sheet title."""

    sheet_name: str
    start_column: str
    start_row: int
    end_column: str
    end_row: int


@dataclass(frozen=True)
class GridRange:
    """Zero-based, half-open cell rectangle on one sheet."""

    sheet_id: int
    start_row_index: int
    end_row_index: int
    start_column_index: int
    end_column_index: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sheetId": self.sheet_id,
            "startRowIndex": self.start_row_index,
            "endRowIndex": self.end_row_index,
            "startColumnIndex": self.start_column_index,
            "endColumnIndex": self.end_column_index,
        }

    def to_a1(self) -> str:
        """Render the span part back to A1 text, e.g. 'A1:B2'."""
        return (
            f"{column_index_to_letters(self.start_column_index)}{self.start_row_index + 1}:"
            f"{column_index_to_letters(self.end_column_index - 1)}{self.end_row_index}"
        )


def _unquote_sheet_name(sheet_part: str) -> str:
    match = _QUOTED_SHEET_RE.match(sheet_part)
    if not match:
        return sheet_part
    # Sheets escapes a quote inside a quoted title by doubling it
    return match.group(1).replace("''", "'")


def parse_a1_range(range_ref: str) -> A1Range:
    """
    Split and validate an A1 range reference without touching the network.

    Args:
        range_ref: Reference such as 'Sheet1!A1:B2' or "'My Sheet'!C3:C3".

    Returns:
        A1Range with the unquoted sheet title and both corners.

    Raises:
        MalformedRangeError: If the sheet name is missing, the span is not a
            bounded 'A1:B2' span, or a row number is 0.
    """
    sheet_part, separator, span_part = range_ref.partition("!")
    if not separator or not span_part:
        raise MalformedRangeError('range must include sheet name, e.g., "Sheet1!A1:B2"')

    sheet_name = _unquote_sheet_name(sheet_part)

    match = _SPAN_RE.fullmatch(span_part.strip().upper())
    if not match:
        raise MalformedRangeError("range must be like A1:B2")

    start_column, start_row, end_column, end_row = match.groups()
    a1 = A1Range(
        sheet_name=sheet_name,
        start_column=start_column,
        start_row=int(start_row),
        end_column=end_column,
        end_row=int(end_row),
    )

    # Row 0 would give a negative grid index. Inverted spans pass through unchanged.
    if a1.start_row < 1 or a1.end_row < 1:
        raise MalformedRangeError("range rows start at 1")
    return a1


def to_grid_range(a1: A1Range, sheet_id: int) -> GridRange:
    """Combine a parsed reference with its resolved sheet id."""
    return GridRange(
        sheet_id=sheet_id,
        start_row_index=a1.start_row - 1,
        end_row_index=a1.end_row,
        start_column_index=column_letters_to_index(a1.start_column),
        end_column_index=column_letters_to_index(a1.end_column) + 1,
    )


async def resolve_grid_range(sheets_service, spreadsheet_id: str, range_ref: str) -> GridRange:
    """
    Resolve an A1 range reference into a GridRange.

    The reference is validated first; the sheet title is then looked up with a
    fresh metadata fetch.

    Raises:
        MalformedRangeError: If range_ref is not a bounded 'Sheet!A1:B2' reference.
        SheetNotFoundError: If no sheet carries the referenced title.
    """
    a1 = parse_a1_range(range_ref)
    sheet_id = await get_sheet_id_by_name(sheets_service, spreadsheet_id, a1.sheet_name)
    grid_range = to_grid_range(a1, sheet_id)
    logger.debug(f"Resolved '{range_ref}' to sheet {sheet_id} {grid_range.to_a1()}")
    return grid_range
