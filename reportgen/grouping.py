from __future__ import annotations

from typing import Dict, Iterable, List

from .models import DetailedItem, LogRecord


def group_by_identifier(records: Iterable[LogRecord]) -> Dict[str, LogRecord]:
    """
    Merge records that share an identifier into one synthetic LogRecord.

    Records with a None or empty identifier are dropped. Items keep their
    input order (all items of the first record, then the second, ...), and
    the returned dict iterates groups in order of first occurrence.
    """
    merged: Dict[str, List[DetailedItem]] = {}
    for record in records:
        if not record.identifier:
            continue
        items = merged.setdefault(record.identifier, [])
        items.extend(record.items or ())

    return {
        identifier: LogRecord(identifier=identifier, items=tuple(items))
        for identifier, items in merged.items()
    }
