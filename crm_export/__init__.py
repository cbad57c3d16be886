"""Application factory and top-level wiring for the CRM export API.

The service reads the CRM's MongoDB collections and turns them into two
reports: current stock per warehouse and sold/rented items per appointment.
Both are served as JSON or as semicolon separated CSV files.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.errors import (
    ReportError,
    http_exception_handler,
    report_error_handler,
    validation_exception_handler,
)
from .core.settings import get_settings
from .db.store import close_store, get_store
from .middlewares import RequestIdMiddleware

logger = logging.getLogger("crm_export")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    if not settings.database_configured:
        logger.warning("MONGODB_URI is not configured, using the local database")
    # Honour test overrides so startup never dials a real server.
    store = app.dependency_overrides.get(get_store, get_store)()
    if not await run_in_threadpool(store.ping):
        logger.error("Cannot reach the database %s", settings.DATABASE_NAME)
    try:
        yield
    finally:
        close_store()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

    # Origins come from ALLOWED_ORIGINS plus ALLOWED_DOMAINS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Request-ID"],
    )
    app.add_middleware(RequestIdMiddleware)

    from .routers import api_reports as api_reports_router  # type: ignore

    app.include_router(api_reports_router.router)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ReportError, report_error_handler)
    return app


__all__ = ["create_app", "lifespan"]
