"""
reportgen/filler.py — Fills one record into one worksheet.

For each mapping target, in mapping-table order:
  1. Decode the "row_col" address and shift it by column_offset. A bad
     address, or one that lands outside the XLSX grid, is recorded as a
     MAPPING_WARNING and the target is skipped; the run continues.
  2. Resolve and format every source binding. Unresolved sources contribute
     nothing: no placeholder and no empty segment.
  3. Join the resolved values with the delimiter ("/") and write them at
     (row, col + column_offset). With nothing resolved the cell is left
     untouched, so template content survives.

column_offset is the record's position in SINGLE_SHEET mode (records sit
side by side) and 0 everywhere else.
"""
from __future__ import annotations

from typing import List, Mapping, Optional

from openpyxl.worksheet.worksheet import Worksheet

from .config import DEFAULT_JOIN_DELIMITER
from .errors import AppError, MAPPING_WARNING, ReportWarning
from .formatting import format_value
from .logger import get_logger
from .models import LogRecord, MappingTarget
from .parsing import cell_label, decode_address
from .resolver import resolve_value
from .writer import MAX_COLUMNS, MAX_ROWS, write_cell

logger = get_logger(__name__)


def collect_values(target: MappingTarget, record: LogRecord) -> List[str]:
    """Formatted values of every resolvable source of target, in binding order."""
    values: List[str] = []
    for binding in target.sources or ():
        raw = resolve_value(binding.source_key, record)
        if raw is None:
            logger.debug(
                "Source %r not found in record %r", binding.source_key, record.identifier
            )
            continue
        values.append(format_value(raw, binding.decimals, binding.unit))
    return values


def fill_record(
    ws: Worksheet,
    mapping_table: Mapping[str, MappingTarget],
    record: LogRecord,
    column_offset: int = 0,
    warnings: Optional[List[ReportWarning]] = None,
    delimiter: str = DEFAULT_JOIN_DELIMITER,
) -> int:
    """
    Apply every mapping target to ws for one record.
    Returns the number of cells written.
    """
    if warnings is None:
        warnings = []

    written = 0
    for address, target in mapping_table.items():
        try:
            row, col = decode_address(address)
        except AppError as e:
            warning = ReportWarning(MAPPING_WARNING, e.message, {"address": address})
            logger.warning("Skipping mapping target: %s", e.message)
            warnings.append(warning)
            continue

        target_col = col + column_offset
        if row >= MAX_ROWS or target_col >= MAX_COLUMNS:
            logger.warning(
                "Skipping mapping target %r: (%d, %d) is outside the sheet", address, row, target_col
            )
            warnings.append(ReportWarning(
                MAPPING_WARNING,
                f"Cell ({row}, {target_col}) is outside the {MAX_ROWS} x {MAX_COLUMNS} sheet grid.",
                {"address": address, "row": row, "column": target_col},
            ))
            continue

        values = collect_values(target, record)
        if not values:
            continue

        if write_cell(ws, row, target_col, delimiter.join(values)):
            written += 1
        else:
            label = cell_label(row, target_col)
            logger.warning(
                "Skipping mapping target %r: %s on sheet %r is inside a merged range",
                address, label, ws.title,
            )
            warnings.append(ReportWarning(
                MAPPING_WARNING,
                f"Cell {label} is covered by a merged range and cannot be written.",
                {"address": address, "cell": label, "sheet": ws.title},
            ))

    return written
