from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import AppError, INVALID_REQUEST, ReportWarning


XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
ZIP_MEDIA_TYPE = "application/zip"


# ---- Request model ----

@dataclass(frozen=True)
class DetailedItem:
    """One measured test item: name is matched against source keys."""
    name: str
    value: Optional[str] = None


@dataclass(frozen=True)
class LogRecord:
    """
    One measurement session. identifier (the SN) may be None or "";
    such records still fill SINGLE_SHEET and ZIP_FILES outputs but are
    dropped from MULTI_SHEET grouping.
    """
    identifier: Optional[str] = None
    items: Tuple[DetailedItem, ...] = ()


@dataclass(frozen=True)
class SourceBinding:
    """Which value to pull from a record and how to format it."""
    source_key: str
    unit: Optional[str] = None
    decimals: Optional[int] = None


@dataclass(frozen=True)
class MappingTarget:
    """
    A target cell address ("row_col", 0-based) bound to one or more sources.
    Resolved values of all sources are joined into the one cell.
    """
    address: str
    sources: Tuple[SourceBinding, ...] = ()


MappingTable = Dict[str, MappingTarget]
"""address -> MappingTarget, iterated in insertion order."""


class ExportMode(Enum):
    SINGLE_SHEET = "single-sheet"   # every record side by side on one sheet
    MULTI_SHEET = "multi-sheet"     # one sheet per identifier
    ZIP_FILES = "zip-files"         # one workbook per record, zipped

    @classmethod
    def parse(cls, value: Any) -> "ExportMode":
        """
        Accept an ExportMode, its name (SINGLE_SHEET) or its wire literal
        (single-sheet), case-insensitively. Anything else is INVALID_REQUEST.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            s = value.strip()
            for mode in cls:
                if s.upper() == mode.name or s.lower() == mode.value:
                    return mode
        raise AppError(
            INVALID_REQUEST,
            f"Unknown export mode: {value!r}",
            {"export_mode": value},
        )

    @property
    def media_type(self) -> str:
        return ZIP_MEDIA_TYPE if self is ExportMode.ZIP_FILES else XLSX_MEDIA_TYPE

    @property
    def extension(self) -> str:
        return ".zip" if self is ExportMode.ZIP_FILES else ".xlsx"


# ---- Run reporting ----

@dataclass
class GenerationResult:
    """
    Returned by engine.generate_report. Carries the artifact bytes together
    with every non-fatal condition that was skipped while building it.
    """
    content: bytes
    export_mode: ExportMode
    warnings: List[ReportWarning] = field(default_factory=list)
    cells_written: int = 0
    outputs: List[str] = field(default_factory=list)   # sheet titles or archive entry names

    @property
    def media_type(self) -> str:
        return self.export_mode.media_type

    @property
    def extension(self) -> str:
        return self.export_mode.extension

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)
