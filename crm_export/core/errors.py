from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from .settings import get_settings

GENERIC_ERROR_MESSAGE = "Errore interno del server"


class ReportError(Exception):
    """A report request failed and produced no rows."""


class StoreUnavailableError(ReportError):
    """The document store could not be reached."""


class StoreQueryError(ReportError):
    """The document store rejected or failed to run a query."""


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        message: str,
        code: str | None = None,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"success": False, "error": message}
        if code is not None:
            payload["code"] = code
        if details is not None:
            payload["details"] = details
        super().__init__(payload, status_code=status_code, headers=headers)


def public_message(exc: Exception, fallback: str) -> str:
    """Expose the diagnostic text only while running in development."""

    if get_settings().is_development:
        return str(exc) or fallback
    return fallback


def report_failure(exc: ReportError, fallback: str = GENERIC_ERROR_MESSAGE) -> ErrorEnvelope:
    code = "store_unavailable" if isinstance(exc, StoreUnavailableError) else "report_failed"
    return ErrorEnvelope(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=code,
        message=public_message(exc, fallback),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Errore"
    details = detail if isinstance(detail, dict) else None
    return ErrorEnvelope(status_code=exc.status_code, code="http_error", message=message, details=details)


async def validation_exception_handler(request: Request, exc):  # type: ignore[override]
    from fastapi.exceptions import RequestValidationError

    if isinstance(exc, RequestValidationError):
        return ErrorEnvelope(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            code="validation_error",
            message="Parametri non validi",
            details={"errors": exc.errors()},
        )
    raise exc


async def report_error_handler(request: Request, exc: ReportError):
    return report_failure(exc)
