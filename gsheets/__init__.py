"""
Google Sheets Tools

Importing this package registers the Sheets tools with core.tool_registry.
"""

from .sheets_tools import (
    create_spreadsheet,
    get_values,
    update_values,
    append_values,
    clear_values,
    create_sheet,
    delete_sheet,
    get_info,
    format_cells,
    batch_update,
)

__all__ = [
    "create_spreadsheet",
    "get_values",
    "update_values",
    "append_values",
    "clear_values",
    "create_sheet",
    "delete_sheet",
    "get_info",
    "format_cells",
    "batch_update",
]
