"""
reportgen/engine.py — Report assembly, one strategy per export mode.

  SINGLE_SHEET  one template; its first sheet is filled in place, record i
                shifted i columns to the right.
  ZIP_FILES     one freshly loaded template per record (no grouping), filled
                at offset 0, saved as "<SN>.xlsx" inside a ZIP archive.
  MULTI_SHEET   records grouped by SN; one output workbook, one sheet per SN
                replicated from the template's first sheet, filled at offset 0.

Fatal problems raise AppError (INVALID_REQUEST, TEMPLATE_ERROR,
SAVE_FAILED) and nothing is returned. Anything else (a bad address, a
formula or picture that cannot be copied) is skipped, logged and returned
in GenerationResult.warnings next to the artifact.

Everything runs synchronously on the calling thread. Names used for
de-duplication live in sets created inside each call.
"""
from __future__ import annotations

import zipfile
from io import BytesIO
from typing import Any, Mapping, Optional, Sequence, Set

from openpyxl import Workbook

from .config import ReportSettings
from .errors import AppError, INVALID_REQUEST
from .filler import fill_record
from .grouping import group_by_identifier
from .logger import get_logger
from .models import ExportMode, GenerationResult, LogRecord, MappingTarget
from .naming import archive_entry_name, unique_sheet_title
from .replicator import copy_sheet
from .template import TemplateDocument, workbook_to_bytes

logger = get_logger(__name__)


def _validate_request(
    mapping_table: Optional[Mapping[str, MappingTarget]],
    records: Optional[Sequence[LogRecord]],
    template_bytes: Optional[bytes],
) -> None:
    if records is None or mapping_table is None:
        raise AppError(INVALID_REQUEST, "Report request is missing log data or mapping rules.")
    if not template_bytes:
        raise AppError(INVALID_REQUEST, "Template file is empty.")


# ── Strategies ────────────────────────────────────────────────────────────────

def _single_sheet(
    mapping_table: Mapping[str, MappingTarget],
    records: Sequence[LogRecord],
    template_bytes: bytes,
    settings: ReportSettings,
    result: GenerationResult,
) -> bytes:
    template = TemplateDocument(template_bytes)
    ws = template.first_sheet

    for i, record in enumerate(records):
        result.cells_written += fill_record(
            ws, mapping_table, record,
            column_offset=i,
            warnings=result.warnings,
            delimiter=settings.join_delimiter,
        )

    result.outputs.append(ws.title)
    return workbook_to_bytes(template.workbook)


def _zip_files(
    mapping_table: Mapping[str, MappingTarget],
    records: Sequence[LogRecord],
    template_bytes: bytes,
    settings: ReportSettings,
    result: GenerationResult,
) -> bytes:
    used_names: Set[str] = set()
    buffer = BytesIO()

    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for record in records:
            template = TemplateDocument(template_bytes)
            ws = template.first_sheet
            result.cells_written += fill_record(
                ws, mapping_table, record,
                column_offset=0,
                warnings=result.warnings,
                delimiter=settings.join_delimiter,
            )

            entry = archive_entry_name(record.identifier, used_names, settings.unknown_identifier)
            archive.writestr(entry, workbook_to_bytes(template.workbook))
            result.outputs.append(entry)
            logger.debug("Added archive entry %s", entry)

    return buffer.getvalue()


def _multi_sheet(
    mapping_table: Mapping[str, MappingTarget],
    records: Sequence[LogRecord],
    template_bytes: bytes,
    settings: ReportSettings,
    result: GenerationResult,
) -> bytes:
    template = TemplateDocument(template_bytes)
    template_sheet = template.first_sheet
    groups = group_by_identifier(records)

    # Start from an empty sheet list so no SN can collide with the default "Sheet".
    output = Workbook()
    output.remove(output.active)
    if not groups:
        logger.warning("No record carries an identifier; multi-sheet report has no data sheets")
        output.create_sheet(title=template_sheet.title)
        return workbook_to_bytes(output)

    cached_sheet = template.cached_sheet(template_sheet.title)
    used_titles: Set[str] = set()

    for identifier, merged in groups.items():
        title = unique_sheet_title(identifier, used_titles)
        ws = output.create_sheet(title=title)
        copy_sheet(
            template_sheet, ws,
            cached_source=cached_sheet,
            warnings=result.warnings,
            read_picture=template.picture_bytes,
        )
        result.cells_written += fill_record(
            ws, mapping_table, merged,
            column_offset=0,
            warnings=result.warnings,
            delimiter=settings.join_delimiter,
        )
        result.outputs.append(title)

    return workbook_to_bytes(output)


_STRATEGIES = {
    ExportMode.SINGLE_SHEET: _single_sheet,
    ExportMode.ZIP_FILES: _zip_files,
    ExportMode.MULTI_SHEET: _multi_sheet,
}


# ── Public API ────────────────────────────────────────────────────────────────

def generate_report(
    mapping_table: Optional[Mapping[str, MappingTarget]],
    records: Optional[Sequence[LogRecord]],
    export_mode: Any,
    template_bytes: Optional[bytes],
    settings: Optional[ReportSettings] = None,
) -> GenerationResult:
    """
    Build the report artifact for one request.

    export_mode: an ExportMode, its name ("ZIP_FILES") or its wire literal
                 ("zip-files").
    settings:    defaults to ReportSettings.from_env().

    Returns a GenerationResult with the artifact bytes and the warnings for
    everything that was skipped.
    """
    _validate_request(mapping_table, records, template_bytes)
    mode = ExportMode.parse(export_mode)
    settings = settings or ReportSettings.from_env()

    result = GenerationResult(content=b"", export_mode=mode)
    logger.info(
        "Generating %s report: %d record(s), %d mapping target(s)",
        mode.value, len(records), len(mapping_table),
    )

    result.content = _STRATEGIES[mode](mapping_table, list(records), template_bytes, settings, result)

    logger.info(
        "Generated %s report: %d byte(s), %d cell(s) written, %d warning(s)",
        mode.value, len(result.content), result.cells_written, len(result.warnings),
    )
    return result


def generate(
    mapping_table: Optional[Mapping[str, MappingTarget]],
    records: Optional[Sequence[LogRecord]],
    export_mode: Any,
    template_bytes: Optional[bytes],
    settings: Optional[ReportSettings] = None,
) -> bytes:
    """generate_report() for callers that only need the bytes."""
    return generate_report(mapping_table, records, export_mode, template_bytes, settings).content

