"""
reportgen/writer.py — Writes mapped values into a worksheet.

Coordinates are 0-based (as decoded from "row_col" addresses); openpyxl is
1-based, so every write lands at (row + 1, col + 1).

Critical rule: None values are NEVER written to cells. Writing None explicitly
via ws.cell(value=None) registers a phantom cell in openpyxl, inflating
ws.max_row and ws.max_column.

Mapped values are always text. openpyxl would otherwise reinterpret a string
starting with "=" as a formula and "#N/A" as an error, so the cell's data
type is pinned to string after the value is bound.
"""
from __future__ import annotations

from typing import Any

from openpyxl.cell.cell import MergedCell
from openpyxl.worksheet.worksheet import Worksheet

# XLSX grid size; openpyxl itself only rejects rows past the limit.
MAX_ROWS = 1048576
MAX_COLUMNS = 16384


def write_cell(ws: Worksheet, row: int, col: int, value: Any) -> bool:
    """
    Upsert a value at the 0-based (row, col). Creates the cell if absent.

    Returns False (and writes nothing) when value is None or the position is
    covered by a merged range other than its top-left cell; those cells are
    read-only in openpyxl.
    """
    if value is None:
        return False

    cell = ws.cell(row=row + 1, column=col + 1)
    if isinstance(cell, MergedCell):
        return False

    if isinstance(value, str):
        cell.value = value
        cell.data_type = "s"
    else:
        cell.value = value
    return True
