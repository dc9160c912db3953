from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class AppError(Exception):
    """
    User-facing error with a short code and structured details.
    Raise AppError from reportgen modules; callers (CLI, HTTP layer) map
    .code to an exit status or response and show friendly_message(e).
    """
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.message} ({self.details})"
        return f"{self.code}: {self.message}"


@dataclass(frozen=True)
class ReportWarning:
    """
    A non-fatal condition collected while building an artifact.
    Never raised: carried in GenerationResult.warnings.
    """
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.message} ({self.details})"
        return f"{self.code}: {self.message}"


# ── Error codes (keep stable for tests and callers) ───────────────────────────

INVALID_REQUEST  = "INVALID_REQUEST"
INVALID_PAYLOAD  = "INVALID_PAYLOAD"
TEMPLATE_ERROR   = "TEMPLATE_ERROR"
INVALID_ADDRESS  = "INVALID_ADDRESS"
SAVE_FAILED      = "SAVE_FAILED"

# ── Warning codes ─────────────────────────────────────────────────────────────

MAPPING_WARNING     = "MAPPING_WARNING"
REPLICATION_WARNING = "REPLICATION_WARNING"


# ── Friendly message lookup ───────────────────────────────────────────────────

def friendly_message(e: AppError) -> str:
    """
    Return a plain-English one-liner suitable for a CLI or an HTTP error body.
    Never exposes raw tracebacks or internal code paths.
    """
    code = e.code
    msg  = e.message or ""
    details = e.details or {}

    if code == INVALID_REQUEST:
        if "mode" in msg.lower():
            mode = details.get("export_mode", "")
            shown = f" ({mode})" if mode else ""
            return f"Unknown export mode{shown}. Use single-sheet, multi-sheet or zip-files."
        if "template" in msg.lower():
            return "No template file was supplied. Upload an XLSX template and try again."
        return f"The report request is incomplete. Check the mapping rules and log data.\n({msg})"

    if code == INVALID_PAYLOAD:
        return f"The report request could not be read. Check that it is valid JSON in the expected shape.\n({msg})"

    if code == TEMPLATE_ERROR:
        if "sheet" in msg.lower():
            return "The template workbook has no worksheet to fill."
        return f"Could not open the template. Check that it is a valid XLSX file.\n({msg})"

    if code == INVALID_ADDRESS:
        address = details.get("address", "")
        return f"Invalid cell address {address!r}. Use the form row_col, for example 4_2."

    if code == SAVE_FAILED:
        return f"Could not produce the report file.\n({msg})"

    # Fallback: clean up the raw message, never show raw tracebacks
    clean = msg.splitlines()[0] if msg else "An unexpected error occurred."
    return clean
