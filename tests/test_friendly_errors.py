"""
test_friendly_errors.py — Tests for friendly_message() in reportgen.errors.

Verifies that all error codes produce readable plain-English messages
with no raw tracebacks or code gibberish.
"""
from __future__ import annotations

import pytest

from reportgen.errors import (
    AppError,
    friendly_message,
    INVALID_ADDRESS,
    INVALID_PAYLOAD,
    INVALID_REQUEST,
    SAVE_FAILED,
    TEMPLATE_ERROR,
)


def test_unknown_mode_message_lists_modes():
    e = AppError(INVALID_REQUEST, "Unknown export mode: 'pdf'", {"export_mode": "pdf"})
    msg = friendly_message(e)
    assert "pdf" in msg
    assert "single-sheet" in msg and "multi-sheet" in msg and "zip-files" in msg


def test_empty_template_message_mentions_upload():
    e = AppError(INVALID_REQUEST, "Template file is empty.")
    assert "template" in friendly_message(e).lower()


def test_missing_data_message():
    e = AppError(INVALID_REQUEST, "Report request is missing log data or mapping rules.")
    msg = friendly_message(e)
    assert "mapping rules" in msg.lower()


def test_template_without_sheet_message():
    e = AppError(TEMPLATE_ERROR, "Template workbook contains no worksheet.")
    assert "no worksheet" in friendly_message(e)


def test_unreadable_template_message():
    e = AppError(TEMPLATE_ERROR, "Could not read template workbook: File is not a zip file")
    msg = friendly_message(e)
    assert "valid XLSX" in msg


def test_invalid_address_message_shows_address():
    e = AppError(INVALID_ADDRESS, "bad", {"address": "x_1"})
    msg = friendly_message(e)
    assert "x_1" in msg
    assert "row_col" in msg


def test_payload_and_save_messages():
    assert "JSON" in friendly_message(AppError(INVALID_PAYLOAD, "Expecting value"))
    assert "report file" in friendly_message(AppError(SAVE_FAILED, "disk full"))


@pytest.mark.parametrize("message,expected", [
    ("first line\nTraceback (most recent call last):", "first line"),
    ("", "An unexpected error occurred."),
])
def test_unknown_code_falls_back_to_first_line(message, expected):
    assert friendly_message(AppError("SOMETHING_ELSE", message)) == expected
