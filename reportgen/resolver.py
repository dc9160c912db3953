"""
reportgen/resolver.py — Source value lookup.

A source key names one value of a record:
  SN_MAPPING_KEY  -> the record identifier itself.
  anything else   -> the value of the FIRST item whose name equals the key
                     exactly. Later duplicates are never consulted.

"Not found" is None, never an exception: a missing source only leaves a
gap in the joined cell value.
"""
from __future__ import annotations

from typing import Optional

from .models import LogRecord


SN_MAPPING_KEY = "[SN] (序列号)"


def resolve_value(source_key: str, record: LogRecord) -> Optional[str]:
    if source_key == SN_MAPPING_KEY:
        return record.identifier or None

    for item in record.items or ():
        if item.name == source_key:
            return item.value
    return None
