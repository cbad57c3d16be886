"""Value coercion shared by the report builders.

The CRM stores quantities and prices as free text, numbers or nothing at all.
``to_number`` turns any of those into a float without ever raising: callers
choose what a missing value and an unparseable value become.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from bson.decimal128 import Decimal128

DATE_FORMAT = "%d/%m/%Y"


def to_number(value: Any, on_error: float = 0.0, on_null: float = 0.0) -> float:
    if value is None:
        return on_null
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, Decimal128):
        value = value.to_decimal()
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        # the store's conversion rejects padding and digit separators
        if value != value.strip() or "_" in value:
            return on_error
        try:
            number = float(value)
        except ValueError:
            return on_error
    else:
        return on_error
    if not math.isfinite(number):
        return on_error
    return number


def as_utc(value: Any) -> datetime | None:
    """Return ``value`` as a UTC datetime, or ``None`` when it is not a date."""

    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        # pymongo hands back naive datetimes that are already UTC.
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_date(value: Any) -> str | None:
    moment = as_utc(value)
    return moment.strftime(DATE_FORMAT) if moment else None


def full_name(first: Any, last: Any) -> str | None:
    """Join first and last name; a missing part yields no name at all."""

    if not isinstance(first, str) or not isinstance(last, str):
        return None
    return f"{first} {last}"
