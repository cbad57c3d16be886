from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from ..core.errors import ReportError, report_failure
from ..core.settings import get_settings
from ..db.store import DocumentStore, get_store
from ..schemas.reports import InventoryReportOut, SalesReportOut, WarehouseListOut
from ..services.exports import (
    CSV_MEDIA_TYPE,
    export_inventory_csv,
    export_sales_csv,
    inventory_report,
    sales_report,
)
from ..services.inventory_report import list_warehouses

LOGGER = logging.getLogger(__name__)

router = APIRouter(tags=["reports"])

ENDPOINTS = {
    "statistiche": "/api/statistiche",
    "exportCSV": "/api/export-csv",
    "magazzini": "/api/magazzini",
    "reportVendite": "/api/report-vendite",
    "exportVenditeCSV": "/api/export-vendite-csv",
    "health": "/api/health",
}


def _csv_response(filename: str, body: bytes) -> Response:
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return Response(content=body, media_type=CSV_MEDIA_TYPE, headers=headers)


@router.get("/")
def api_status():
    settings = get_settings()
    return {
        "status": "online",
        "message": settings.APP_NAME,
        "environment": settings.APP_ENV,
        "database": "configured" if settings.database_configured else "not configured",
        "endpoints": ENDPOINTS,
    }


@router.get("/api/health")
def api_health(store: DocumentStore = Depends(get_store)):
    connected = store.ping()
    return {
        "status": "healthy" if connected else "unhealthy",
        "database": "connected" if connected else "disconnected",
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    }


@router.get("/api/statistiche", response_model=InventoryReportOut)
def api_inventory_report(
    magazzino: str | None = Query(default=None),
    store: DocumentStore = Depends(get_store),
):
    try:
        rows = inventory_report(store, magazzino)
    except ReportError as exc:
        LOGGER.error("Inventory report failed: %s", exc)
        return report_failure(exc)
    return InventoryReportOut(count=len(rows), data=rows)


@router.get("/api/export-csv")
def api_inventory_export(
    magazzino: str | None = Query(default=None),
    store: DocumentStore = Depends(get_store),
):
    try:
        export = export_inventory_csv(store, magazzino)
    except ReportError as exc:
        LOGGER.error("Inventory export failed: %s", exc)
        return report_failure(exc, "Errore durante l'export")
    return _csv_response(export.filename, export.body)


@router.get("/api/magazzini", response_model=WarehouseListOut)
def api_warehouses(store: DocumentStore = Depends(get_store)):
    try:
        warehouses = list_warehouses(store)
    except ReportError as exc:
        LOGGER.error("Warehouse listing failed: %s", exc)
        return report_failure(exc, "Errore nel recupero magazzini")
    return WarehouseListOut(data=warehouses)


@router.get("/api/report-vendite", response_model=SalesReportOut)
def api_sales_report(
    anno: str | None = Query(default=None),
    store: DocumentStore = Depends(get_store),
):
    try:
        rows = sales_report(store, anno)
    except ReportError as exc:
        LOGGER.error("Sales report failed: %s", exc)
        return report_failure(exc, "Errore nel recupero dati vendite")
    return SalesReportOut(count=len(rows), data=rows)


@router.get("/api/export-vendite-csv")
def api_sales_export(
    anno: str | None = Query(default=None),
    store: DocumentStore = Depends(get_store),
):
    try:
        export = export_sales_csv(store, anno)
    except ReportError as exc:
        LOGGER.error("Sales export failed: %s", exc)
        return report_failure(exc, "Errore durante l'export vendite")
    return _csv_response(export.filename, export.body)
