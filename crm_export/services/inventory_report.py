from __future__ import annotations

import logging
from typing import Any, Iterator

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import ValidationError

from ..core.errors import StoreQueryError
from ..db import collections
from ..db.store import Document, DocumentStore, StoreReader
from ..schemas.reports import InventoryRow, Warehouse
from .coercion import to_number
from .joins import (
    PLACEHOLDER,
    SUPPLIER_JOIN,
    Cardinality,
    JoinExecutor,
    JoinSpec,
    dimension_joins,
    display_text,
    explode,
)
from .load_history import LoadHistory

LOGGER = logging.getLogger(__name__)

ALL_WAREHOUSES = "all"
UNNAMED_WAREHOUSE = "Senza nome"

STOCK_JOINS = (
    JoinSpec(
        name="product",
        collection=collections.PRODUCT,
        local_key="line.prodotto",
        cardinality=Cardinality.ONE,
    ),
    *dimension_joins("product"),
    JoinSpec(
        name="warehouse",
        collection=collections.WAREHOUSE,
        local_key="stock.magazzino",
        field="nomeMagazzino",
        default=PLACEHOLDER,
    ),
)


def _warehouse_filter(warehouse_id: str | None) -> dict[str, Any]:
    if not warehouse_id or warehouse_id == ALL_WAREHOUSES:
        return {}
    try:
        return {"magazzino": ObjectId(warehouse_id)}
    except (InvalidId, TypeError) as exc:
        raise StoreQueryError(f"Identificativo magazzino non valido: {warehouse_id}") from exc


def _stock_lines(stock_documents: list[Document]) -> Iterator[dict[str, Any]]:
    """One context per embedded stock line that holds at least one unit."""

    for stock in stock_documents:
        for line in explode(stock.get("giacenza")):
            if not isinstance(line, dict):
                continue
            quantity = to_number(line.get("quantita"), 0.0, 0.0)
            if quantity < 1:
                continue
            yield {"stock": stock, "line": line, "quantity": quantity}


def _to_row(context: dict[str, Any]) -> InventoryRow:
    line = context["line"]
    return InventoryRow(
        warehouse=context["warehouse"],
        code=line.get("codice"),
        category=context["category"],
        brand=context["brand"],
        type=context["type"],
        model=context["model"],
        color=context["color"],
        size=context["size"],
        quantity=context["quantity"],
        supplier=context["supplier"],
        purchase_price=to_number(line.get("prezzoAcquisto"), 0.0, 0.0),
        tag_price=to_number(line.get("prezzoCartellino"), 0.0, 0.0),
        suggested_price=to_number(line.get("prezzoSuggerito"), 0.0, 0.0),
        affiliate_price=to_number(line.get("prezzoAffiliato"), 0.0, 0.0),
    )


def _build_rows(reader: StoreReader, warehouse_id: str | None) -> list[InventoryRow]:
    stock_documents = reader.find(collections.STOCK, _warehouse_filter(warehouse_id))
    executor = JoinExecutor(reader)
    history = LoadHistory.load(reader)

    rows: list[InventoryRow] = []
    for context in executor.run(_stock_lines(stock_documents), STOCK_JOINS):
        purchase = history.resolve(context["line"].get("codice"))
        if purchase:
            context["supplier_id"] = purchase.supplier_id
            executor.join(context, (SUPPLIER_JOIN,))
        else:
            context["supplier"] = PLACEHOLDER
        rows.append(_to_row(context))

    # sorted() is stable: equal quantities keep store order.
    return sorted(rows, key=lambda row: row.quantity, reverse=True)


def build_inventory_report(store: DocumentStore, warehouse_id: str | None = None) -> list[InventoryRow]:
    """Stock lines with at least one unit, largest quantity first.

    ``warehouse_id`` limits the report to one warehouse; ``None``, ``""`` and
    ``"all"`` report every warehouse. Any store failure aborts the report.
    """

    LOGGER.info(
        "Building inventory report",
        extra={"extra_data": {"report": "inventory", "warehouse": warehouse_id or ALL_WAREHOUSES}},
    )
    with store.snapshot() as reader:
        try:
            rows = _build_rows(reader, warehouse_id)
        except ValidationError as exc:
            raise StoreQueryError(f"Documento non valido nel report giacenze: {exc}") from exc
    LOGGER.info("Inventory report ready", extra={"extra_data": {"report": "inventory", "rows": len(rows)}})
    return rows


def list_warehouses(store: DocumentStore) -> list[Warehouse]:
    with store.snapshot() as reader:
        documents = reader.find(collections.WAREHOUSE)
    return [
        Warehouse(
            id=str(document.get("_id")),
            name=display_text(document.get("nomeMagazzino")) or UNNAMED_WAREHOUSE,
            location=display_text(document.get("ubicazioneMagazzino")) or "",
        )
        for document in documents
    ]


__all__ = ["build_inventory_report", "list_warehouses", "ALL_WAREHOUSES"]
