"""Purchase context lookup over historical load records.

The purchase context of a product code is the inbound load record line whose
trimmed code equals the trimmed product code, taken from the record with the
earliest ``dataCarico``. ``LoadHistory`` indexes every inbound line once per
request, so repeated codes cost a dictionary lookup.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Mapping

from ..db import collections
from ..db.store import Document, StoreReader
from .coercion import as_utc


@dataclass(frozen=True)
class PurchaseContext:
    supplier_id: Any
    purchase_price: Any
    tag_price: Any
    suggested_price: Any
    affiliate_price: Any
    load_date: Any = None

    @classmethod
    def from_line(cls, record: Mapping[str, Any], line: Mapping[str, Any]) -> "PurchaseContext":
        return cls(
            supplier_id=record.get("fornitore"),
            purchase_price=line.get("prezzoAcquisto"),
            tag_price=line.get("prezzoCartellino"),
            suggested_price=line.get("prezzoSuggerito"),
            affiliate_price=line.get("prezzoAffiliato"),
            load_date=record.get("dataCarico"),
        )


class _NoContext:
    __slots__ = ()

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_CONTEXT"


NO_CONTEXT = _NoContext()


def normalize_code(code: Any) -> str | None:
    if code is None:
        return None
    if isinstance(code, str):
        return code.strip()
    if isinstance(code, (int, float, Decimal)) and not isinstance(code, bool):
        return str(code).strip()
    return None


def load_date_key(value: Any) -> tuple:
    """Sort key mirroring the store's ascending order: null, numbers, strings, dates."""

    if value is None:
        return (0,)
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    if isinstance(value, datetime):
        return (3, as_utc(value))
    return (4, repr(value))


class LoadHistory:
    def __init__(self, records: Iterable[Document]) -> None:
        self._earliest: dict[str, tuple[tuple, PurchaseContext]] = {}
        for record in records:
            if record.get("tipoCarico") != collections.INBOUND_LOAD:
                continue
            key = load_date_key(record.get("dataCarico"))
            lines = record.get("prodotti") or []
            if not isinstance(lines, list):
                continue
            for line in lines:
                if not isinstance(line, Mapping):
                    continue
                code = normalize_code(line.get("codice"))
                if code is None:
                    continue
                current = self._earliest.get(code)
                # strict comparison keeps the first record seen on equal dates
                if current is None or key < current[0]:
                    self._earliest[code] = (key, PurchaseContext.from_line(record, line))

    @classmethod
    def load(cls, reader: StoreReader) -> "LoadHistory":
        return cls(reader.find(collections.LOAD_RECORD, {"tipoCarico": collections.INBOUND_LOAD}))

    def resolve(self, code: Any) -> PurchaseContext | _NoContext:
        normalized = normalize_code(code)
        if normalized is None:
            return NO_CONTEXT
        match = self._earliest.get(normalized)
        return match[1] if match else NO_CONTEXT

    def __len__(self) -> int:
        return len(self._earliest)
