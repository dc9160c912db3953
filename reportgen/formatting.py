"""
reportgen/formatting.py — Value formatting for mapped cells.

Numbers are parsed as Decimal (never float) so rounding is exact and
reproducible: 12.345 at 2 places is always 12.35. Rounding is
ROUND_HALF_UP, which in the decimal module rounds ties away from zero
(-0.125 -> -0.13). Zero never carries a sign ("-0.001" at 2 places is "0.00").

Units are appended verbatim with no separating space. Formatting never
fails: a value that is not a plain number is passed through with its unit.
"""
from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Optional


# Plain decimal literal with optional exponent. Whitespace, underscores,
# NaN and Infinity are not numbers here even though Decimal() accepts them.
_NUMBER_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _parse_decimal(raw: str) -> Optional[Decimal]:
    if not _NUMBER_RE.fullmatch(raw):
        return None
    try:
        return Decimal(raw)
    except InvalidOperation:
        return None


def _with_unit(text: str, unit: Optional[str]) -> str:
    if unit is not None and unit.strip() != "":
        return text + unit
    return text


def round_half_up(value: Decimal, decimals: int) -> Decimal:
    """Round to `decimals` places, ties away from zero, at any magnitude."""
    with localcontext() as ctx:
        ctx.prec = max(28, value.adjusted() + decimals + 2)
        return value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)


def to_plain_string(value: Decimal) -> str:
    """Render without exponent notation or grouping ('1E+3' -> '1000')."""
    if value.is_zero():
        value = value.copy_abs()
    return format(value, "f")


def format_value(
    raw: Optional[str],
    decimals: Optional[int] = None,
    unit: Optional[str] = None,
) -> str:
    if raw is None or raw.strip() == "":
        return ""

    number = _parse_decimal(raw)
    if number is None:
        return _with_unit(raw, unit)

    if decimals is not None and decimals >= 0:
        number = round_half_up(number, decimals)

    return _with_unit(to_plain_string(number), unit)
