from datetime import datetime

from reportgen.models import ExportMode
from reportgen.naming import (
    SHEET_NAME_LIMIT,
    archive_entry_name,
    sanitize_filename,
    sanitize_sheet_name,
    suggested_filename,
    unique_name,
    unique_sheet_title,
)


def test_sanitize_filename_replaces_illegal_characters():
    assert sanitize_filename('A/B\\C:D*E?F"G<H>I|J') == "A_B_C_D_E_F_G_H_I_J"
    assert sanitize_filename("SN-001.x") == "SN-001.x"


def test_sanitize_sheet_name_replaces_and_truncates():
    assert sanitize_sheet_name("a/b[c]:d") == "a_b_c__d"
    assert len(sanitize_sheet_name("x" * 40)) == SHEET_NAME_LIMIT


def test_unique_name_numbers_duplicates():
    used = set()
    assert unique_name("SN1.xlsx", used) == "SN1.xlsx"
    assert unique_name("SN1.xlsx", used) == "SN1 (1).xlsx"
    assert unique_name("SN1.xlsx", used) == "SN1 (2).xlsx"
    assert unique_name("SN2.xlsx", used) == "SN2.xlsx"


def test_archive_entry_name_uses_unknown_for_missing_identifier():
    used = set()
    assert archive_entry_name(None, used, "UnknownSN") == "UnknownSN.xlsx"
    assert archive_entry_name("", used, "UnknownSN") == "UnknownSN (1).xlsx"
    assert archive_entry_name("A/B", used, "UnknownSN") == "A_B.xlsx"


def test_unique_sheet_title_ignores_case():
    used = set()
    assert unique_sheet_title("sn1", used) == "sn1"
    assert unique_sheet_title("SN1", used) == "SN1 (1)"


def test_unique_sheet_title_stays_within_limit():
    used = set()
    first = unique_sheet_title("x" * 40, used)
    second = unique_sheet_title("x" * 40, used)
    assert first == "x" * 31
    assert second == "x" * 27 + " (1)"
    assert len(second) == SHEET_NAME_LIMIT


def test_suggested_filename_per_mode():
    now = datetime(2024, 1, 31, 23, 59, 59)
    assert suggested_filename(ExportMode.ZIP_FILES, now) == "Report_Archive_20240131_235959.zip"
    assert suggested_filename(ExportMode.SINGLE_SHEET, now) == "Report_Single_Sheet_20240131_235959.xlsx"
    assert suggested_filename(ExportMode.MULTI_SHEET, now) == "Report_Multi_Sheet_20240131_235959.xlsx"
