"""Daily Aggregator: exactly one ``daily_sales`` row per calendar date.

The aggregator caches today's row in memory as the session's source of truth.
Callers must let :meth:`DailyAggregator.ensure_today_record` run (directly, or
implicitly through :meth:`DailyAggregator.apply_delta`) before reading
:attr:`DailyAggregator.cached`.

Failure policy: on any gateway error the cache keeps its last-known-good value
(or stays unset) and the error propagates; nothing is retried here.

Cross-session writes: increments use the gateway's atomic ``col = col + :amount``
update keyed by the aggregate id, and the row returned by the store replaces
the cache. Two registers recording sales for the same day therefore never lose
an increment, although each session's cached total may lag until its next write.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import UTC, date, datetime
from decimal import Decimal

from shop_db.errors import ConflictError
from shop_db.gateway import PersistenceGateway
from shop_db.models import DailySale

from .logging_setup import get_logger
from .models import DailyAggregate

_logger = get_logger("shop_dashboard.aggregator")


class DailyAggregator:
    """Owns writes to today's ``daily_sales`` row within a session."""

    def __init__(
        self, gateway: PersistenceGateway, *, today: Callable[[], date] = date.today
    ) -> None:
        self._gateway = gateway
        self._today = today
        self._cached: DailyAggregate | None = None
        # The rollover monitor ticks on a scheduler thread; serialize cache access.
        self._lock = threading.RLock()

    @property
    def cached(self) -> DailyAggregate | None:
        return self._cached

    def today(self) -> date:
        return self._today()

    def clear(self) -> None:
        """Forget the cached aggregate (rollover, reset)."""

        with self._lock:
            self._cached = None

    def ensure_today_record(self) -> DailyAggregate:
        """Return today's aggregate, creating it with a zero total if absent."""

        with self._lock:
            aggregate = DailyAggregate.from_row(self._find_or_create(self._today()))
            self._cached = aggregate
            return aggregate

    def _find_or_create(self, day: date) -> DailySale:
        row = self._gateway.find_one(DailySale, where={"date": day})
        if row is not None:
            return row
        try:
            row = self._gateway.insert(
                DailySale,
                {"date": day, "total_amount": Decimal(0), "updated_at": datetime.now(UTC)},
            )
        except ConflictError:
            # Another session created the row between our read and insert.
            existing = self._gateway.find_one(DailySale, where={"date": day})
            if existing is None:
                raise
            _logger.info("daily aggregate for %s was created concurrently", day.isoformat())
            return existing
        _logger.info("created daily aggregate for %s", day.isoformat())
        return row

    def apply_delta(self, amount: Decimal, *, sale_date: date | None = None) -> DailyAggregate:
        """Add a just-persisted transaction total to today's aggregate.

        ``sale_date`` is the transaction's date; when it differs from the
        cached aggregate's date (a sale recorded right after midnight, before
        the rollover monitor noticed) the aggregate is re-resolved first so the
        amount lands on the correct day.
        """

        amount = Decimal(amount)
        if not amount > 0:
            raise ValueError(f"delta must be positive, got {amount}")

        with self._lock:
            current = self._cached
            if current is None or (sale_date is not None and current.date != sale_date):
                current = self.ensure_today_record()
            target = current
            if sale_date is not None and current.date != sale_date:
                # The sale belongs to a day other than today (clock moved on
                # between the ledger write and this call).
                target = DailyAggregate.from_row(self._find_or_create(sale_date))

            row = self._gateway.increment(
                DailySale,
                target.id,
                column="total_amount",
                amount=amount,
                touch={"updated_at": datetime.now(UTC)},
            )
            updated = DailyAggregate.from_row(row)
            if updated.date == current.date:
                self._cached = updated
            _logger.debug(
                "daily aggregate %s: %s + %s -> %s",
                updated.date.isoformat(),
                target.total_amount,
                amount,
                updated.total_amount,
            )
            return updated


__all__ = ["DailyAggregator"]
