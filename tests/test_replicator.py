"""
test_replicator.py — Unit tests for reportgen.replicator.copy_sheet.

Covers:
  - Column widths, row heights, merged regions
  - Cell values by kind and independent style copies
  - Formulas: copied as-is, or replaced by the cached value with a warning
  - Pictures: cell-anchored kept, other anchors skipped with a warning
"""
from __future__ import annotations

from io import BytesIO

from openpyxl import Workbook
from openpyxl.drawing.image import Image
from openpyxl.drawing.spreadsheet_drawing import AnchorMarker, TwoCellAnchor
from openpyxl.styles import Font, PatternFill
from PIL import Image as PILImage

from reportgen.cells import FormulaValue
from reportgen.errors import REPLICATION_WARNING
from reportgen.replicator import copy_sheet, formula_problem


# ── helpers ───────────────────────────────────────────────────────────────────

def _png_bytes():
    buf = BytesIO()
    PILImage.new("RGB", (4, 4), (255, 0, 0)).save(buf, format="PNG")
    return buf.getvalue()


def _picture(anchor=None):
    img = Image(BytesIO(_png_bytes()))
    if anchor is not None:
        img.anchor = anchor
    return img


def _target_sheet(title="Copy"):
    wb = Workbook()
    ws = wb.active
    ws.title = title
    return ws


# ── layout ────────────────────────────────────────────────────────────────────

def test_copies_widths_heights_and_merges():
    src = Workbook().active
    src.column_dimensions["B"].width = 30
    src.row_dimensions[3].height = 42
    src.merge_cells("A1:C1")
    src["A1"] = "Title"

    dst = _target_sheet()
    warnings = copy_sheet(src, dst)

    assert warnings == []
    assert dst.column_dimensions["B"].width == 30
    assert dst.row_dimensions[3].height == 42
    assert [r.coord for r in dst.merged_cells.ranges] == ["A1:C1"]
    assert dst["A1"].value == "Title"


def test_copies_values_and_styles_independently():
    src = Workbook().active
    src["A1"] = "label"
    src["A1"].font = Font(bold=True, color="FF0000")
    src["A1"].fill = PatternFill("solid", fgColor="FFFF00")
    src["B1"] = 12.5
    src["B1"].number_format = "0.00"
    src["C1"] = True

    dst = _target_sheet()
    copy_sheet(src, dst)

    assert dst["A1"].value == "label"
    assert dst["A1"].font.bold is True
    assert dst["A1"].fill.fgColor.rgb == "00FFFF00"
    assert dst["B1"].value == 12.5
    assert dst["B1"].number_format == "0.00"
    assert dst["C1"].value is True

    dst["A1"].font = Font(bold=False)
    assert src["A1"].font.bold is True


def test_formula_copied_as_formula():
    src = Workbook().active
    src["A1"] = "=SUM(B1:B2)"

    dst = _target_sheet()
    assert copy_sheet(src, dst) == []
    assert dst["A1"].value == "=SUM(B1:B2)"
    assert dst["A1"].data_type == "f"


def test_external_formula_falls_back_to_cached_number():
    src = Workbook().active
    src["A1"] = "=[1]Sheet1!A1"
    cached = Workbook().active
    cached["A1"] = 42

    dst = _target_sheet()
    warnings = copy_sheet(src, dst, cached_source=cached)

    assert dst["A1"].value == 42
    assert len(warnings) == 1
    assert warnings[0].code == REPLICATION_WARNING
    assert warnings[0].details["cell"] == "A1"
    assert warnings[0].details["sheet"] == "Copy"


def test_external_formula_falls_back_to_cached_text():
    src = Workbook().active
    src["A1"] = "=[2]Data!B2"
    cached = Workbook().active
    cached["A1"] = "=looks like formula"
    cached["A1"].data_type = "s"

    dst = _target_sheet()
    copy_sheet(src, dst, cached_source=cached)

    assert dst["A1"].value == "=looks like formula"
    assert dst["A1"].data_type == "s"


def test_formula_without_cached_value_is_left_blank():
    src = Workbook().active
    src["A1"] = "=[1]Sheet1!A1"

    dst = _target_sheet()
    warnings = copy_sheet(src, dst)

    assert dst["A1"].value is None
    assert "left the cell blank" in warnings[0].message


def test_formula_problem():
    assert formula_problem(FormulaValue("=A1+B1")) is None
    assert formula_problem(FormulaValue("=Table1[Col]")) is None
    assert formula_problem(FormulaValue(None)) == "has no formula text"
    assert formula_problem(FormulaValue("='[3]My Sheet'!B2")) == "references an external workbook"
    assert formula_problem(FormulaValue('="abc')).startswith("could not be parsed")


# ── pictures ──────────────────────────────────────────────────────────────────

def test_cell_anchored_picture_is_copied():
    src = Workbook().active
    anchor = TwoCellAnchor(
        editAs="twoCell",
        _from=AnchorMarker(col=1, row=1),
        to=AnchorMarker(col=3, row=4),
    )
    src.add_image(_picture(anchor))

    dst = _target_sheet()
    warnings = copy_sheet(src, dst)

    assert warnings == []
    assert len(dst._images) == 1
    copied = dst._images[0].anchor
    assert isinstance(copied, TwoCellAnchor)
    assert copied is not anchor
    assert (copied._from.col, copied._from.row) == (1, 1)
    assert (copied.to.col, copied.to.row) == (3, 4)


def test_picture_with_other_anchor_is_skipped():
    src = Workbook().active
    src.add_image(_picture(), "B2")

    dst = _target_sheet()
    warnings = copy_sheet(src, dst)

    assert dst._images == []
    assert len(warnings) == 1
    assert warnings[0].code == REPLICATION_WARNING
    assert "unsupported anchor" in warnings[0].message


def test_picture_reader_is_used():
    src = Workbook().active
    src.add_image(_picture(TwoCellAnchor(_from=AnchorMarker(), to=AnchorMarker(col=2, row=2))))
    calls = []

    def read(image):
        calls.append(image)
        return _png_bytes()

    copy_sheet(src, _target_sheet(), read_picture=read)
    copy_sheet(src, _target_sheet(), read_picture=read)
    assert len(calls) == 2
