"""
reportgen/request.py — Report request payload <-> core model.

Wire shape (canonical, multi-source per cell):

    {
      "exportMode": "single-sheet" | "multi-sheet" | "zip-files",
      "mappingRules": {
        "4_2": {"sources": [{"sourceKey": "Voltage", "unit": "V", "decimals": 2}]}
      },
      "logData": [
        {"sn": "SN1", "detailedItems": [{"itemName": "Voltage", "actualValue": "3.3"}]}
      ]
    }

Older clients sent one source per rule, keyed by source:

    "mappingRules": {"Voltage": {"address": "4_2", "unit": "V", "decimals": 2}}

That shape is only read when asked for explicitly (legacy=True); the two
shapes are never guessed between.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from .errors import AppError, INVALID_PAYLOAD, INVALID_REQUEST
from .models import DetailedItem, ExportMode, LogRecord, MappingTable, MappingTarget, SourceBinding


def _expect(value: Any, kind: type, what: str) -> Any:
    if not isinstance(value, kind):
        raise AppError(
            INVALID_PAYLOAD,
            f"{what} must be a {kind.__name__}, got {type(value).__name__}",
            {"field": what},
        )
    return value


_INTEGER_RE = re.compile(r"-?[0-9]+")


def _text(value: Any) -> Optional[str]:
    """JSON scalars as the text the formatter works on (1.10 -> "1.10")."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def _decimals(value: Any, what: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise AppError(INVALID_PAYLOAD, f"{what} must be an integer", {"field": what})
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INTEGER_RE.fullmatch(value.strip()):
        return int(value.strip())
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, Decimal) and value.is_finite() and value == value.to_integral_value():
        return int(value)
    raise AppError(INVALID_PAYLOAD, f"{what} must be an integer, got {value!r}", {"field": what})


def parse_source_binding(data: Dict[str, Any]) -> SourceBinding:
    _expect(data, dict, "source rule")
    key = data.get("sourceKey")
    if not isinstance(key, str):
        raise AppError(INVALID_PAYLOAD, "source rule needs a sourceKey string", {"field": "sourceKey"})
    return SourceBinding(
        source_key=key,
        unit=_text(data.get("unit")),
        decimals=_decimals(data.get("decimals"), "decimals"),
    )


def parse_mapping_rules(data: Dict[str, Any]) -> MappingTable:
    """{"row_col": {"sources": [...]}} -> MappingTable, payload order kept."""
    _expect(data, dict, "mappingRules")
    table: MappingTable = {}
    for address, cell_mapping in data.items():
        sources: Tuple[SourceBinding, ...] = ()
        if cell_mapping is not None:
            _expect(cell_mapping, dict, f"mappingRules[{address!r}]")
            raw_sources = cell_mapping.get("sources") or []
            _expect(raw_sources, list, f"mappingRules[{address!r}].sources")
            sources = tuple(parse_source_binding(s) for s in raw_sources)
        table[address] = MappingTarget(address=address, sources=sources)
    return table


def parse_legacy_rules(data: Dict[str, Any]) -> MappingTable:
    """
    {"sourceKey": {"address": "row_col", "unit", "decimals"}} -> MappingTable.

    Each rule becomes a single-source target. Two legacy rules that point at
    the same address are joined into one target in payload order, which is
    what the multi-source shape would express.
    """
    _expect(data, dict, "mappingRules")
    grouped: Dict[str, List[SourceBinding]] = {}
    for source_key, rule in data.items():
        _expect(rule, dict, f"mappingRules[{source_key!r}]")
        address = rule.get("address")
        if not isinstance(address, str):
            raise AppError(
                INVALID_PAYLOAD,
                f"legacy rule {source_key!r} needs an address string",
                {"field": "address"},
            )
        grouped.setdefault(address, []).append(SourceBinding(
            source_key=source_key,
            unit=_text(rule.get("unit")),
            decimals=_decimals(rule.get("decimals"), "decimals"),
        ))
    return {
        address: MappingTarget(address=address, sources=tuple(bindings))
        for address, bindings in grouped.items()
    }


def parse_log_record(data: Dict[str, Any]) -> LogRecord:
    _expect(data, dict, "logData entry")
    raw_items = data.get("detailedItems") or []
    _expect(raw_items, list, "detailedItems")

    items = []
    for raw in raw_items:
        _expect(raw, dict, "detailedItems entry")
        name = raw.get("itemName")
        if name is None:
            continue
        items.append(DetailedItem(name=_text(name), value=_text(raw.get("actualValue"))))

    return LogRecord(identifier=_text(data.get("sn")), items=tuple(items))


@dataclass(frozen=True)
class ReportRequest:
    export_mode: ExportMode
    mapping_table: MappingTable
    records: Tuple[LogRecord, ...]

    # ---------- Serialization ----------

    @classmethod
    def from_dict(cls, data: Dict[str, Any], legacy: bool = False) -> "ReportRequest":
        _expect(data, dict, "request")

        if data.get("logData") is None or data.get("mappingRules") is None:
            raise AppError(INVALID_REQUEST, "Report request is missing log data or mapping rules.")

        raw_records = _expect(data["logData"], list, "logData")
        rules = data["mappingRules"]
        table = parse_legacy_rules(rules) if legacy else parse_mapping_rules(rules)

        return cls(
            export_mode=ExportMode.parse(data.get("exportMode")),
            mapping_table=table,
            records=tuple(parse_log_record(r) for r in raw_records),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exportMode": self.export_mode.value,
            "mappingRules": {
                address: {
                    "sources": [
                        {"sourceKey": b.source_key, "unit": b.unit, "decimals": b.decimals}
                        for b in target.sources
                    ]
                }
                for address, target in self.mapping_table.items()
            },
            "logData": [
                {
                    "sn": r.identifier,
                    "detailedItems": [
                        {"itemName": i.name, "actualValue": i.value} for i in r.items
                    ],
                }
                for r in self.records
            ],
        }

    # ---------- File IO ----------

    @classmethod
    def from_json(cls, text: str, legacy: bool = False) -> "ReportRequest":
        try:
            # Numbers keep their exact text: 1.10 stays "1.10".
            data = json.loads(text, parse_float=Decimal)
        except ValueError as e:
            raise AppError(INVALID_PAYLOAD, f"Request is not valid JSON: {e}")
        return cls.from_dict(data, legacy=legacy)

    @classmethod
    def load_json(cls, path: str, legacy: bool = False) -> "ReportRequest":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_json(f.read(), legacy=legacy)

    def save_json(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
