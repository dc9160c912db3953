"""
reportgen/template.py — Template workbook loading.

A TemplateDocument is decoded from the uploaded bytes once per output
artifact. It exposes two views of the same file:

  workbook         formulas as written (data_only=False); this is the view
                   that gets filled or replicated.
  cached_workbook  last computed formula results (data_only=True), loaded
                   lazily and only needed when a formula cannot be copied.

Picture bytes are read once per image and memoised: openpyxl closes an
image's underlying stream after the first read.
"""
from __future__ import annotations

from io import BytesIO
from typing import Dict, Optional

from openpyxl import Workbook, load_workbook
from openpyxl.drawing.image import Image
from openpyxl.worksheet.worksheet import Worksheet

from .errors import AppError, TEMPLATE_ERROR, SAVE_FAILED
from .logger import get_logger

logger = get_logger(__name__)


def _load(data: bytes, data_only: bool) -> Workbook:
    try:
        return load_workbook(BytesIO(data), data_only=data_only)
    except AppError:
        raise
    except Exception as e:
        raise AppError(
            TEMPLATE_ERROR,
            f"Could not read template workbook: {e}",
            {"size": len(data)},
        )


class TemplateDocument:

    def __init__(self, data: bytes):
        self._data = data
        self.workbook = _load(data, data_only=False)
        self._cached: Optional[Workbook] = None
        self._picture_bytes: Dict[int, bytes] = {}

    @property
    def first_sheet(self) -> Worksheet:
        sheets = self.workbook.worksheets
        if not sheets:
            raise AppError(TEMPLATE_ERROR, "Template workbook contains no worksheet.")
        return sheets[0]

    @property
    def cached_workbook(self) -> Workbook:
        if self._cached is None:
            self._cached = _load(self._data, data_only=True)
        return self._cached

    def cached_sheet(self, title: str) -> Optional[Worksheet]:
        wb = self.cached_workbook
        if title in wb.sheetnames:
            return wb[title]
        return None

    def picture_bytes(self, image: Image) -> bytes:
        key = id(image)
        if key not in self._picture_bytes:
            self._picture_bytes[key] = image._data()
        return self._picture_bytes[key]


def workbook_to_bytes(wb: Workbook) -> bytes:
    """Serialize a workbook to XLSX bytes. Raises AppError(SAVE_FAILED)."""
    buffer = BytesIO()
    try:
        wb.save(buffer)
    except Exception as e:
        logger.error("Workbook serialization failed: %s", e)
        raise AppError(SAVE_FAILED, f"Could not serialize workbook: {e}")
    return buffer.getvalue()
