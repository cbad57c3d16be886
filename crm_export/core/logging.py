"""JSON log lines for the export service.

Every line carries the service name and environment. Lines emitted while a
request is in flight also carry its request id. Report builders attach their
filter and row counts through ``extra={"extra_data": {...}}``; those keys are
merged into the line without overwriting the base fields.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Mapping

from ..middlewares import request_id_ctx_var
from .settings import get_settings

BASE_FIELDS = ("timestamp", "level", "logger", "message", "service", "environment", "request_id")
# The driver logs connection pool chatter at INFO/DEBUG.
QUIET_LOGGERS = ("pymongo",)


class JsonLogFormatter(logging.Formatter):
    def __init__(self, service: str, environment: str) -> None:
        super().__init__()
        self.service = service
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        moment = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "timestamp": moment.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service,
            "environment": self.environment,
        }
        request_id = request_id_ctx_var.get()
        if request_id:
            payload["request_id"] = request_id
        extra = getattr(record, "extra_data", None)
        if isinstance(extra, Mapping):
            for key, value in extra.items():
                if key not in BASE_FIELDS:
                    payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, separators=(",", ":"), default=str)


def configure_logging(level: int | str | None = None) -> None:
    settings = get_settings()
    handler = logging.StreamHandler()
    handler.setFormatter(JsonLogFormatter(settings.APP_NAME, settings.APP_ENV))
    logging.root.handlers = [handler]
    logging.root.setLevel(level or settings.LOG_LEVEL.upper())
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
