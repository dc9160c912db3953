"""
reportgen/naming.py — Names derived from record identifiers.

  sanitize_filename     \\ / : * ? " < > |  -> _
  sanitize_sheet_name   \\ / * ? [ ] :      -> _ , then cut to 31 characters
  unique_name           "SN1.xlsx", "SN1 (1).xlsx", "SN1 (2).xlsx", ...

unique_name tracks names in a set owned by the caller: one set per archive
or workbook being built, never shared between calls.
"""
from __future__ import annotations

import os
import re
from datetime import datetime
from typing import Optional, Set

from .models import ExportMode


SHEET_NAME_LIMIT = 31

_FILENAME_ILLEGAL_RE = re.compile(r'[\\/:*?"<>|]')
_SHEET_ILLEGAL_RE = re.compile(r"[\\/*?\[\]:]")

_ARTIFACT_BASENAMES = {
    ExportMode.SINGLE_SHEET: "Report_Single_Sheet",
    ExportMode.MULTI_SHEET: "Report_Multi_Sheet",
    ExportMode.ZIP_FILES: "Report_Archive",
}


def sanitize_filename(name: str) -> str:
    return _FILENAME_ILLEGAL_RE.sub("_", name)


def sanitize_sheet_name(name: str) -> str:
    return _SHEET_ILLEGAL_RE.sub("_", name)[:SHEET_NAME_LIMIT]


def unique_name(name: str, used: Set[str]) -> str:
    """
    Return `name`, or the first free "stem (n)ext" with n = 1, 2, ...,
    and record the result in `used`.
    """
    stem, ext = os.path.splitext(name)
    candidate = name
    n = 0
    while candidate in used:
        n += 1
        candidate = f"{stem} ({n}){ext}"
    used.add(candidate)
    return candidate


def unique_sheet_title(identifier: str, used: Set[str]) -> str:
    """Sanitized, <= 31 characters, unique among `used` ignoring case."""
    title = sanitize_sheet_name(identifier)
    if title.lower() not in used:
        used.add(title.lower())
        return title
    n = 0
    while True:
        n += 1
        suffix = f" ({n})"
        candidate = title[: SHEET_NAME_LIMIT - len(suffix)] + suffix
        if candidate.lower() not in used:
            used.add(candidate.lower())
            return candidate


def archive_entry_name(identifier: Optional[str], used: Set[str], unknown: str) -> str:
    stem = sanitize_filename(identifier or unknown)
    return unique_name(stem + ".xlsx", used)


def suggested_filename(mode: ExportMode, now: Optional[datetime] = None) -> str:
    """Download name for an artifact, e.g. Report_Archive_20240131_235959.zip."""
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"{_ARTIFACT_BASENAMES[mode]}_{stamp}{mode.extension}"
