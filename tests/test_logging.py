import json
import logging

from crm_export.core.logging import JsonLogFormatter
from crm_export.middlewares import request_id_ctx_var


def make_record(message, extra_data=None):
    record = logging.LogRecord("crm_export.services", logging.INFO, __file__, 1, message, None, None)
    if extra_data is not None:
        record.extra_data = extra_data
    return record


def test_line_carries_service_request_id_and_report_fields():
    formatter = JsonLogFormatter("CRM Export API", "production")
    token = request_id_ctx_var.set("req-1")
    try:
        line = formatter.format(make_record("Sales report ready", {"report": "sales", "rows": 3}))
    finally:
        request_id_ctx_var.reset(token)

    payload = json.loads(line)
    assert payload["message"] == "Sales report ready"
    assert payload["service"] == "CRM Export API"
    assert payload["environment"] == "production"
    assert payload["request_id"] == "req-1"
    assert payload["report"] == "sales"
    assert payload["rows"] == 3
    assert payload["timestamp"].endswith("Z")


def test_extra_data_cannot_overwrite_base_fields():
    formatter = JsonLogFormatter("CRM Export API", "development")

    payload = json.loads(formatter.format(make_record("hello", {"level": "FAKE", "warehouse": "all"})))

    assert payload["level"] == "INFO"
    assert payload["warehouse"] == "all"
    assert "request_id" not in payload
