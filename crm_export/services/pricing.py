from __future__ import annotations

from typing import Any

from .coercion import to_number


def compute_sale_price(base: float, percent: float, flat: float) -> float:
    """Apply the percentage discount first, then the flat one. Never clamped."""

    return (base - base * (percent / 100)) - flat


def sale_price_of(line: dict[str, Any]) -> float:
    return compute_sale_price(
        to_number(line.get("prezzoVendita"), 0.0, 0.0),
        to_number(line.get("scontoPerc"), 0.0, 0.0),
        to_number(line.get("sconto"), 0.0, 0.0),
    )


__all__ = ["compute_sale_price", "sale_price_of"]
