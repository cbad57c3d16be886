"""Semicolon separated exports for spreadsheet users with Italian locale.

Excel opens these files directly: the BOM marks them as UTF-8, ``;`` is the
list separator and prices use a decimal comma.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Sequence

from ..schemas.reports import NO_PURCHASE_CONTEXT, InventoryRow, SalesRow

BOM = "\ufeff"
SEPARATOR = ";"
LINE_END = "\n"
NOT_AVAILABLE = "N/D"
TWOPLACES = Decimal("0.01")

INVENTORY_HEADERS = (
    "Magazzino",
    "Codice",
    "Categoria",
    "Marca",
    "Tipologia",
    "Modello",
    "Colore",
    "Taglia",
    "Quantità",
    "Fornitore",
    "Prezzo Acquisto",
    "Prezzo Cartellino",
    "Prezzo Suggerito",
    "Prezzo Affiliato",
    "Valore Totale",
)

SALES_HEADERS = (
    "Data Appuntamento",
    "Atelier",
    "Dipendente",
    "Cliente",
    "Data Matrimonio",
    "Categoria",
    "Modello",
    "Marca",
    "Tipologia",
    "Taglia",
    "Quantità",
    "Vendita/Noleggio",
    "Colore",
    "Codice Prodotto",
    "Prezzo Vendita",
    "Fornitore",
    "Prezzo Acquisto",
    "Prezzo Cartellino",
    "Prezzo Suggerito",
    "Prezzo Affiliato",
)


def format_price(value: float | None) -> str:
    """Two decimals with a decimal comma, halves rounded away from zero."""

    if not value or not math.isfinite(value):
        return "0,00"
    # Decimal(float) is exact, so halves are judged on the stored binary value.
    rounded = Decimal(value).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    return f"{rounded:f}".replace(".", ",")


def format_quantity(value: float | None) -> str:
    if not value or not math.isfinite(value):
        return "0"
    value = float(value)
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def format_purchase_price(value: float) -> str:
    if value == NO_PURCHASE_CONTEXT:
        return NOT_AVAILABLE
    return format_price(value)


def escape_field(value: Any) -> str:
    text = str(value)
    if SEPARATOR in text or '"' in text or "\n" in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _encode(headers: Sequence[str], records: Iterable[Sequence[Any]]) -> str:
    lines = [SEPARATOR.join(headers)]
    lines.extend(SEPARATOR.join(escape_field(value) for value in record) for record in records)
    return BOM + LINE_END.join(lines) + LINE_END


def inventory_record(row: InventoryRow) -> list[str]:
    return [
        _text(row.warehouse),
        _text(row.code),
        _text(row.category),
        _text(row.brand),
        _text(row.type),
        _text(row.model),
        _text(row.color),
        _text(row.size),
        format_quantity(row.quantity),
        _text(row.supplier),
        format_price(row.purchase_price),
        format_price(row.tag_price),
        format_price(row.suggested_price),
        format_price(row.affiliate_price),
        format_price(row.total_value),
    ]


def sales_record(row: SalesRow) -> list[str]:
    return [
        _text(row.appointment_date),
        _text(row.atelier),
        _text(row.employee),
        _text(row.client),
        _text(row.wedding_date),
        _text(row.category),
        _text(row.model),
        _text(row.brand),
        _text(row.type),
        _text(row.size),
        format_quantity(row.quantity),
        _text(row.sale_type),
        _text(row.color),
        _text(row.code),
        format_price(row.sale_price),
        _text(row.supplier),
        format_purchase_price(row.purchase_price),
        format_purchase_price(row.tag_price),
        format_purchase_price(row.suggested_price),
        format_purchase_price(row.affiliate_price),
    ]


def encode_inventory_csv(rows: Iterable[InventoryRow]) -> str:
    return _encode(INVENTORY_HEADERS, (inventory_record(row) for row in rows))


def encode_sales_csv(rows: Iterable[SalesRow]) -> str:
    return _encode(SALES_HEADERS, (sales_record(row) for row in rows))


__all__ = [
    "INVENTORY_HEADERS",
    "SALES_HEADERS",
    "encode_inventory_csv",
    "encode_sales_csv",
    "escape_field",
    "format_price",
]
