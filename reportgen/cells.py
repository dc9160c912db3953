"""
reportgen/cells.py — Closed set of cell kinds used by sheet replication.

read_cell() classifies an openpyxl cell once, by its data_type, into exactly
one of the variants below; store_value() writes a non-formula variant back.
Formulas are stored by the replicator, which owns the cached-result fallback.

  TextValue     's'  (also inline strings and rich text, flattened)
  NumberValue   'n'
  BooleanValue  'b'
  DateValue     'd'
  FormulaValue  'f'  (plain, array, or data-table formula)
  ErrorValue    'e'
  BlankValue    no value
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from openpyxl.cell.cell import Cell
from openpyxl.worksheet.formula import ArrayFormula


@dataclass(frozen=True)
class TextValue:
    text: str


@dataclass(frozen=True)
class NumberValue:
    number: Union[int, float]


@dataclass(frozen=True)
class BooleanValue:
    flag: bool


@dataclass(frozen=True)
class DateValue:
    moment: Union[datetime, date, time, timedelta]


@dataclass(frozen=True)
class FormulaValue:
    """
    expression is the formula text including the leading "=", or None when
    openpyxl holds a formula object with no text (data-table formulas).
    array_ref is the spill range of an array formula ("A1:A3"), else None.
    """
    expression: Optional[str]
    array_ref: Optional[str] = None


@dataclass(frozen=True)
class ErrorValue:
    code: str


@dataclass(frozen=True)
class BlankValue:
    pass


CellValue = Union[
    TextValue, NumberValue, BooleanValue, DateValue, FormulaValue, ErrorValue, BlankValue
]


def read_cell(cell: Cell) -> CellValue:
    value = cell.value
    if value is None:
        return BlankValue()

    kind = cell.data_type
    if kind == "f":
        if isinstance(value, ArrayFormula):
            text = value.text
            if text is not None and not text.startswith("="):
                text = "=" + text
            return FormulaValue(expression=text, array_ref=value.ref)
        if isinstance(value, str):
            return FormulaValue(expression=value)
        return FormulaValue(expression=None)
    if kind == "b":
        return BooleanValue(bool(value))
    if kind == "e":
        return ErrorValue(str(value))
    if kind == "d":
        return DateValue(value)
    if kind == "n" and isinstance(value, (int, float)) and not isinstance(value, bool):
        return NumberValue(value)
    return TextValue(str(value))


def store_value(cell: Cell, value: CellValue) -> None:
    """Write a non-formula cell kind. BlankValue leaves the cell empty."""
    if isinstance(value, TextValue):
        cell.value = value.text
        cell.data_type = "s"
    elif isinstance(value, NumberValue):
        cell.value = value.number
    elif isinstance(value, BooleanValue):
        cell.value = value.flag
    elif isinstance(value, DateValue):
        cell.value = value.moment
    elif isinstance(value, ErrorValue):
        cell.value = value.code
    elif isinstance(value, BlankValue):
        return
    else:
        raise TypeError(f"store_value does not handle {type(value).__name__}")
