from __future__ import annotations

import logging
import re
from typing import Any, Callable, Iterable, Iterator

from pydantic import ValidationError

from ..core.errors import StoreQueryError
from ..db import collections
from ..db.store import DocumentStore, StoreReader
from ..schemas.reports import NO_PURCHASE_CONTEXT, UNUSABLE_PRICE, SalesRow
from .coercion import as_utc, format_date, full_name, to_number
from .joins import (
    PLACEHOLDER,
    SUPPLIER_JOIN,
    Cardinality,
    JoinExecutor,
    JoinSpec,
    dimension_joins,
    display_text,
    explode,
    resolve_reference,
)
from .load_history import LoadHistory, PurchaseContext
from .pricing import sale_price_of

LOGGER = logging.getLogger(__name__)

ALL_YEARS = "all"
RENTED_STATUS = "2"
RENTED_LABEL = "Noleggiato"
SOLD_LABEL = "Venduto"

_LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")

APPOINTMENT_JOINS = (
    JoinSpec(name="client", collection=collections.CLIENT, local_key="association.cliente", cardinality=Cardinality.ONE),
    JoinSpec(
        name="appointment",
        collection=collections.APPOINTMENT,
        local_key="association.appuntamento",
        cardinality=Cardinality.ONE,
    ),
)

STAFF_JOINS = (
    JoinSpec(name="atelier", collection=collections.ATELIER, local_key="appointment.atelier", cardinality=Cardinality.ONE),
    JoinSpec(
        name="employee",
        collection=collections.EMPLOYEE,
        local_key="appointment.dipendente",
        cardinality=Cardinality.ONE,
    ),
)

LINE_JOINS = (
    JoinSpec(name="product", collection=collections.PRODUCT, local_key="line.prodotto", cardinality=Cardinality.ONE),
    *dimension_joins("product"),
)


def year_matcher(year: str | None) -> Callable[[Any], bool] | None:
    """Predicate on appointment dates for ``year``, or ``None`` for every year.

    Only the leading integer of ``year`` counts; without one nothing matches.
    """

    if not year or year == ALL_YEARS:
        return None
    match = _LEADING_INTEGER.match(year)
    if match is None:
        return lambda value: False
    wanted = int(match.group(1))

    def matches(value: Any) -> bool:
        moment = as_utc(value)
        return moment is not None and moment.year == wanted

    return matches


def sale_type_label(status: Any) -> str:
    return RENTED_LABEL if status == RENTED_STATUS else SOLD_LABEL


def purchase_prices(purchase: PurchaseContext | None) -> dict[str, float]:
    """Purchase-side prices, keeping "no context" and "unusable value" apart."""

    if not purchase:
        return {
            "purchase_price": NO_PURCHASE_CONTEXT,
            "tag_price": NO_PURCHASE_CONTEXT,
            "suggested_price": NO_PURCHASE_CONTEXT,
            "affiliate_price": NO_PURCHASE_CONTEXT,
        }
    return {
        "purchase_price": to_number(purchase.purchase_price, UNUSABLE_PRICE, UNUSABLE_PRICE),
        "tag_price": to_number(purchase.tag_price, UNUSABLE_PRICE, UNUSABLE_PRICE),
        "suggested_price": to_number(purchase.suggested_price, UNUSABLE_PRICE, UNUSABLE_PRICE),
        "affiliate_price": to_number(purchase.affiliate_price, UNUSABLE_PRICE, UNUSABLE_PRICE),
    }


def _line_contexts(contexts: Iterable[dict[str, Any]]) -> Iterator[dict[str, Any]]:
    for context in contexts:
        for line in explode(context["association"].get("prodotti")):
            if isinstance(line, dict):
                yield {**context, "line": line}


def _to_row(context: dict[str, Any], purchase: PurchaseContext | None) -> SalesRow:
    appointment = context["appointment"]
    client = context["client"]
    employee = context["employee"]
    line = context["line"]
    return SalesRow(
        appointment_date=format_date(appointment.get("dataAppuntamento")),
        atelier=display_text(resolve_reference(context["atelier"], "nomeAtelier", None)),
        employee=full_name(employee.get("firstName"), employee.get("lastName")),
        client=full_name(client.get("nome"), client.get("cognome")),
        wedding_date=format_date(appointment.get("dataMatrimonio")),
        category=context["category"],
        model=context["model"],
        brand=context["brand"],
        type=context["type"],
        size=context["size"],
        quantity=to_number(line.get("quantita"), 1.0, 1.0),
        sale_type=sale_type_label(line.get("checked")),
        color=context["color"],
        code=line.get("codice"),
        sale_price=sale_price_of(line),
        supplier=context["supplier"],
        **purchase_prices(purchase),
    )


def _build_rows(reader: StoreReader, year: str | None) -> list[SalesRow]:
    executor = JoinExecutor(reader)
    associations = ({"association": document} for document in reader.find(collections.CLIENT_PRODUCT))
    contexts: Iterable[dict[str, Any]] = executor.run(associations, APPOINTMENT_JOINS)

    matches_year = year_matcher(year)
    if matches_year is not None:
        contexts = (c for c in contexts if matches_year(c["appointment"].get("dataAppuntamento")))

    contexts = executor.run(contexts, STAFF_JOINS)
    history = LoadHistory.load(reader)

    rows: list[SalesRow] = []
    for context in executor.run(_line_contexts(contexts), LINE_JOINS):
        purchase = history.resolve(context["line"].get("codice")) or None
        if purchase is not None:
            context["supplier_id"] = purchase.supplier_id
            executor.join(context, (SUPPLIER_JOIN,))
        else:
            context["supplier"] = PLACEHOLDER
        rows.append(_to_row(context, purchase))
    return rows


def build_sales_report(store: DocumentStore, year: str | None = None) -> list[SalesRow]:
    """One row per sold or rented item, in store order.

    ``year`` keeps only appointments of that calendar year (UTC); ``None``,
    ``""`` and ``"all"`` keep everything.
    """

    LOGGER.info("Building sales report", extra={"extra_data": {"report": "sales", "year": year or ALL_YEARS}})
    with store.snapshot() as reader:
        try:
            rows = _build_rows(reader, year)
        except ValidationError as exc:
            raise StoreQueryError(f"Documento non valido nel report vendite: {exc}") from exc
    LOGGER.info("Sales report ready", extra={"extra_data": {"report": "sales", "rows": len(rows)}})
    return rows


__all__ = ["build_sales_report", "year_matcher", "sale_type_label", "ALL_YEARS"]
