"""Read-only projections: today's summary and the past-days history."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from shop_db.gateway import PersistenceGateway
from shop_db.models import DailySale, SalesTransactionRow

from .config import DEFAULT_HISTORY_LIMIT
from .models import DailySummary, HistoryEntry


def daily_summary(gateway: PersistenceGateway, day: date) -> DailySummary:
    """Total and transaction count for ``day``.

    The total comes from the day's aggregate (zero when none exists yet); the
    count comes from the transaction log.
    """

    row = gateway.find_one(DailySale, where={"date": day})
    total = Decimal(row.total_amount) if row is not None else Decimal(0)
    count = gateway.count(SalesTransactionRow, where={"sale_date": day})
    return DailySummary(date=day, total_amount=total, transaction_count=count)


def sales_history(
    gateway: PersistenceGateway,
    *,
    limit: int = DEFAULT_HISTORY_LIMIT,
    exclude: date | None = None,
) -> list[HistoryEntry]:
    """Most recent aggregates, newest first.

    ``limit`` applies before ``exclude`` is filtered out, so excluding today
    shows at most ``limit - 1`` days when today already has a row.
    """

    rows = gateway.find(DailySale, order_by="date", descending=True, limit=limit)
    return [
        HistoryEntry(date=row.date, total_amount=Decimal(row.total_amount))
        for row in rows
        if row.date != exclude
    ]


__all__ = ["daily_summary", "sales_history"]
