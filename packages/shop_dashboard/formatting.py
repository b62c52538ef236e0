"""Display helpers for the single fixed locale (Indian rupee, en-IN dates)."""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

CURRENCY_SYMBOL = "₹"

_CENTS = Decimal("0.01")


def to_decimal_2(raw: Any) -> Decimal:
    """Round ``raw`` half-up to two fractional digits for display."""

    try:
        d = raw if isinstance(raw, Decimal) else Decimal(str(raw))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"not a decimal amount: {raw!r}") from exc
    return d.quantize(_CENTS, rounding=ROUND_HALF_UP)


def format_amount(raw: Any) -> str:
    """``Decimal("1234.5")`` -> ``"₹1,234.50"``."""

    return f"{CURRENCY_SYMBOL}{to_decimal_2(raw):,.2f}"


def format_date(d: date) -> str:
    """Short history-row date, e.g. ``19 Oct 2026``."""

    return f"{d.day} {d:%b %Y}"


def format_long_date(d: date) -> str:
    """Dashboard header date, e.g. ``Monday, 19 October 2026``."""

    return f"{d:%A}, {d.day} {d:%B %Y}"


def format_timestamp(ts: datetime) -> str:
    """Receipt timestamp in local time, e.g. ``19/10/2026, 6:05:09 pm``."""

    local = ts.astimezone() if ts.tzinfo is not None else ts
    hour = local.hour % 12 or 12
    meridiem = "am" if local.hour < 12 else "pm"
    return f"{local:%d/%m/%Y}, {hour}:{local:%M:%S} {meridiem}"


__all__ = [
    "CURRENCY_SYMBOL",
    "format_amount",
    "format_date",
    "format_long_date",
    "format_timestamp",
    "to_decimal_2",
]
