import pytest

from reportgen.errors import AppError, INVALID_REQUEST
from reportgen.models import (
    ExportMode,
    GenerationResult,
    XLSX_MEDIA_TYPE,
    ZIP_MEDIA_TYPE,
)


@pytest.mark.parametrize("value,expected", [
    ("single-sheet", ExportMode.SINGLE_SHEET),
    ("MULTI-SHEET", ExportMode.MULTI_SHEET),
    ("zip_files", ExportMode.ZIP_FILES),
    ("SINGLE_SHEET", ExportMode.SINGLE_SHEET),
    (" zip-files ", ExportMode.ZIP_FILES),
    (ExportMode.MULTI_SHEET, ExportMode.MULTI_SHEET),
])
def test_export_mode_parse(value, expected):
    assert ExportMode.parse(value) is expected


@pytest.mark.parametrize("value", ["pdf", "", None, 3])
def test_export_mode_parse_rejects_unknown(value):
    with pytest.raises(AppError) as exc:
        ExportMode.parse(value)
    assert exc.value.code == INVALID_REQUEST
    assert exc.value.details == {"export_mode": value}


def test_media_type_and_extension():
    assert ExportMode.ZIP_FILES.media_type == ZIP_MEDIA_TYPE
    assert ExportMode.ZIP_FILES.extension == ".zip"
    assert ExportMode.SINGLE_SHEET.media_type == XLSX_MEDIA_TYPE
    assert ExportMode.MULTI_SHEET.extension == ".xlsx"


def test_generation_result_defaults():
    result = GenerationResult(content=b"x", export_mode=ExportMode.SINGLE_SHEET)
    assert result.warnings == []
    assert result.outputs == []
    assert result.cells_written == 0
    assert not result.has_warnings
    assert result.media_type == XLSX_MEDIA_TYPE
