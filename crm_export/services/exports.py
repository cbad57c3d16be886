"""Report orchestration: pick a builder, optionally encode, name the file."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from ..db.store import DocumentStore
from ..schemas.reports import InventoryRow, SalesRow
from .csv_export import encode_inventory_csv, encode_sales_csv
from .inventory_report import ALL_WAREHOUSES, build_inventory_report
from .sales_report import ALL_YEARS, build_sales_report

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"
FULL_PERIOD_SUFFIX = "completo"


@dataclass(frozen=True)
class CsvExport:
    filename: str
    content: str

    @property
    def body(self) -> bytes:
        return self.content.encode("utf-8")


def export_timestamp(now: datetime | None = None) -> str:
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H-%M-%S")


def inventory_filename(now: datetime | None = None) -> str:
    return f"statistiche_crm_{export_timestamp(now)}.csv"


def sales_filename(year: str | None, now: datetime | None = None) -> str:
    suffix = year if year and year != ALL_YEARS else FULL_PERIOD_SUFFIX
    return f"report_vendite_{suffix}_{export_timestamp(now)}.csv"


def inventory_report(store: DocumentStore, warehouse_id: str | None = None) -> list[InventoryRow]:
    return build_inventory_report(store, warehouse_id or ALL_WAREHOUSES)


def sales_report(store: DocumentStore, year: str | None = None) -> list[SalesRow]:
    return build_sales_report(store, year or ALL_YEARS)


def export_inventory_csv(
    store: DocumentStore, warehouse_id: str | None = None, now: datetime | None = None
) -> CsvExport:
    rows = inventory_report(store, warehouse_id)
    return CsvExport(filename=inventory_filename(now), content=encode_inventory_csv(rows))


def export_sales_csv(store: DocumentStore, year: str | None = None, now: datetime | None = None) -> CsvExport:
    rows = sales_report(store, year)
    return CsvExport(filename=sales_filename(year, now), content=encode_sales_csv(rows))
