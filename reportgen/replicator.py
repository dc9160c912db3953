"""
reportgen/replicator.py — Deep copy of a template sheet into a new sheet.

copy_sheet() copies, in order:
  1. column widths (every column dimension + the sheet default width)
  2. row heights
  3. merged regions, verbatim
  4. cells: value by cell kind and a fresh copy of every style component
  5. sheet view: frozen panes and page margins
  6. pictures anchored cell-to-cell (TwoCellAnchor)

Every aspect is best-effort on its own: an exception inside one aspect is
recorded as a REPLICATION_WARNING and the next aspect still runs. Inside
the cell aspect the same holds per cell.

Formulas are copied as formulas when openpyxl's tokenizer accepts them and
they do not point into another workbook ("[1]Sheet1!A1"); the target
workbook carries no external links. Otherwise the cached result from the
data_only view (a number or text) is written instead, or the cell stays
blank.

Styles are never shared between workbooks: font, fill, border, alignment
and protection objects are copied with copy(), number_format is a plain
string. Assigning a StyleProxy from another workbook would point at the
wrong style table.

Not copied: charts (warned), comments, hyperlinks, data validation,
conditional formatting. Shapes other than pictures are never loaded by
openpyxl in the first place.
"""
from __future__ import annotations

import re
from copy import copy
from io import BytesIO
from typing import Callable, List, Optional

from openpyxl.cell.cell import Cell, MergedCell
from openpyxl.drawing.image import Image
from openpyxl.drawing.spreadsheet_drawing import AnchorMarker, TwoCellAnchor
from openpyxl.formula import Tokenizer
from openpyxl.formula.tokenizer import TokenizerError
from openpyxl.worksheet.formula import ArrayFormula
from openpyxl.worksheet.worksheet import Worksheet

from .cells import FormulaValue, read_cell, store_value
from .errors import REPLICATION_WARNING, ReportWarning
from .logger import get_logger

logger = get_logger(__name__)

PictureReader = Callable[[Image], bytes]

# "[1]Sheet1!A1" or "'[2]My Sheet'!B2"; not "Table1[Col]" structured references.
_EXTERNAL_REF_RE = re.compile(r"(?<![A-Za-z0-9_\]])\[\d+\]")


class _Replication:
    """State of one copy_sheet() call."""

    def __init__(
        self,
        source: Worksheet,
        target: Worksheet,
        cached_source: Optional[Worksheet],
        warnings: List[ReportWarning],
        read_picture: PictureReader,
    ):
        self.source = source
        self.target = target
        self.cached_source = cached_source
        self.warnings = warnings
        self.read_picture = read_picture

    def warn(self, message: str, **details) -> None:
        details.setdefault("sheet", self.target.title)
        logger.warning("Replication of %r: %s", self.source.title, message)
        self.warnings.append(ReportWarning(REPLICATION_WARNING, message, details))

    def aspect(self, name: str, func: Callable[[], None]) -> None:
        try:
            func()
        except Exception as e:
            self.warn(f"Could not copy {name}: {e}", aspect=name)

    # ── aspects ───────────────────────────────────────────────────────────────

    def column_widths(self) -> None:
        for key, dim in self.source.column_dimensions.items():
            new = self.target.column_dimensions[key]
            new.width = dim.width
            new.hidden = dim.hidden
            new.min = dim.min
            new.max = dim.max
            new.outlineLevel = dim.outlineLevel
        self.target.sheet_format = copy(self.source.sheet_format)

    def row_heights(self) -> None:
        for idx, dim in self.source.row_dimensions.items():
            if dim.height is not None:
                self.target.row_dimensions[idx].height = dim.height
            if dim.hidden:
                self.target.row_dimensions[idx].hidden = True

    def merged_regions(self) -> None:
        for cell_range in list(self.source.merged_cells.ranges):
            self.target.merge_cells(cell_range.coord)

    def cells(self) -> None:
        for row in self.source.iter_rows():
            for src in row:
                try:
                    self.copy_cell(src)
                except Exception as e:
                    self.warn(f"Could not copy cell {src.coordinate}: {e}", cell=src.coordinate)

    def sheet_view(self) -> None:
        self.target.freeze_panes = self.source.freeze_panes
        self.target.page_margins = copy(self.source.page_margins)

    def pictures(self) -> None:
        for image in getattr(self.source, "_images", []):
            anchor = image.anchor
            if not isinstance(anchor, TwoCellAnchor):
                kind = type(anchor).__name__
                self.warn(f"Skipped picture with unsupported anchor ({kind})", anchor=kind)
                continue
            try:
                self.target.add_image(self.copy_picture(image, anchor))
            except Exception as e:
                self.warn(f"Could not copy picture: {e}", anchor=_anchor_label(anchor))

        for chart in getattr(self.source, "_charts", []):
            self.warn(f"Skipped chart ({type(chart).__name__}); charts are not replicated")

    # ── helpers ───────────────────────────────────────────────────────────────

    def copy_cell(self, src: Cell) -> None:
        dst = self.target.cell(row=src.row, column=src.column)
        copy_cell_style(src, dst)
        if isinstance(src, MergedCell) or isinstance(dst, MergedCell):
            return

        value = read_cell(src)
        if isinstance(value, FormulaValue):
            self.copy_formula(src, dst, value)
        else:
            store_value(dst, value)

    def copy_formula(self, src: Cell, dst: Cell, formula: FormulaValue) -> None:
        problem = formula_problem(formula)
        if problem is None:
            if formula.array_ref:
                dst.value = ArrayFormula(ref=formula.array_ref, text=formula.expression)
            else:
                dst.value = formula.expression
            return

        cached = self.cached_value(src)
        if isinstance(cached, (int, float)) and not isinstance(cached, bool):
            dst.value = cached
            outcome = "copied its cached number instead"
        elif isinstance(cached, str):
            dst.value = cached
            dst.data_type = "s"
            outcome = "copied its cached text instead"
        else:
            outcome = "left the cell blank"
        self.warn(
            f"Formula in {src.coordinate} {problem}; {outcome}",
            cell=src.coordinate, formula=formula.expression,
        )

    def cached_value(self, src: Cell):
        if self.cached_source is None:
            return None
        return self.cached_source.cell(row=src.row, column=src.column).value

    def copy_picture(self, image: Image, anchor: TwoCellAnchor) -> Image:
        new = Image(BytesIO(self.read_picture(image)))
        new.width = image.width
        new.height = image.height
        new.anchor = TwoCellAnchor(
            editAs=anchor.editAs,
            _from=_copy_marker(anchor._from),
            to=_copy_marker(anchor.to),
        )
        return new


def formula_problem(formula: FormulaValue) -> Optional[str]:
    """Why a formula cannot be copied as-is, or None when it can."""
    if not formula.expression:
        return "has no formula text"
    if _EXTERNAL_REF_RE.search(formula.expression):
        return "references an external workbook"
    try:
        Tokenizer(formula.expression)
    except TokenizerError as e:
        return f"could not be parsed ({e})"
    return None


def copy_cell_style(src: Cell, dst: Cell) -> None:
    dst.font = copy(src.font)
    dst.fill = copy(src.fill)
    dst.border = copy(src.border)
    dst.alignment = copy(src.alignment)
    dst.protection = copy(src.protection)
    dst.number_format = src.number_format


def _copy_marker(marker: AnchorMarker) -> AnchorMarker:
    return AnchorMarker(
        col=marker.col, colOff=marker.colOff, row=marker.row, rowOff=marker.rowOff
    )


def _anchor_label(anchor: TwoCellAnchor) -> str:
    return f"({anchor._from.row},{anchor._from.col})-({anchor.to.row},{anchor.to.col})"


def _read_picture(image: Image) -> bytes:
    return image._data()


def copy_sheet(
    source: Worksheet,
    target: Worksheet,
    cached_source: Optional[Worksheet] = None,
    warnings: Optional[List[ReportWarning]] = None,
    read_picture: Optional[PictureReader] = None,
) -> List[ReportWarning]:
    """
    Copy source's layout, content and pictures into target (usually a fresh
    sheet in another workbook).

    cached_source: the same sheet loaded with data_only=True; used for the
                   cached results of formulas that cannot be copied.
    read_picture:  returns the bytes of a source image. Pass
                   TemplateDocument.picture_bytes when the same template
                   sheet is copied more than once.

    Returns the warnings list (new, or the one passed in, extended).
    """
    if warnings is None:
        warnings = []

    job = _Replication(source, target, cached_source, warnings, read_picture or _read_picture)
    job.aspect("column widths", job.column_widths)
    job.aspect("row heights", job.row_heights)
    job.aspect("merged regions", job.merged_regions)
    job.aspect("cells", job.cells)
    job.aspect("sheet view", job.sheet_view)
    job.aspect("pictures", job.pictures)
    return warnings
