from __future__ import annotations

import re

from .errors import AppError, INVALID_ADDRESS


_INDEX_RE = re.compile(r"[0-9]+")


def decode_address(address: str) -> tuple[int, int]:
    """
    Decode a mapping address "row_col" into a 0-based (row, col) pair.
    Both tokens must be non-negative integers ('4_2' -> (4, 2)).
    """
    if not isinstance(address, str):
        raise AppError(INVALID_ADDRESS, f"Bad address: {address!r}", {"address": address})

    parts = address.split("_")
    if len(parts) != 2:
        raise AppError(
            INVALID_ADDRESS,
            f"Address must have exactly two parts: {address!r}",
            {"address": address},
        )

    row_s, col_s = parts
    if not _INDEX_RE.fullmatch(row_s) or not _INDEX_RE.fullmatch(col_s):
        raise AppError(
            INVALID_ADDRESS,
            f"Address row and column must be non-negative integers: {address!r}",
            {"address": address},
        )
    return int(row_s), int(col_s)


def encode_address(row: int, col: int) -> str:
    """Inverse of decode_address."""
    if row < 0 or col < 0:
        raise AppError(INVALID_ADDRESS, f"Bad cell index: ({row}, {col})", {"row": row, "col": col})
    return f"{row}_{col}"


def col_index_to_letters(n: int) -> str:
    """
    Convert 1-based index to Excel column letters (1->A).
    """
    if n <= 0:
        raise AppError(INVALID_ADDRESS, f"Bad column index: {n}")
    out = []
    x = n
    while x:
        x, rem = divmod(x - 1, 26)
        out.append(chr(ord("A") + rem))
    return "".join(reversed(out))


def cell_label(row: int, col: int) -> str:
    """0-based (row, col) -> A1-style label, for messages only."""
    return f"{col_index_to_letters(col + 1)}{row + 1}"
