"""Session facade wiring ledger, aggregator, rollover monitor and views together.

Presentation code talks only to :class:`ShopDashboard` and listens for its
events; it never calls the persistence gateway directly. Every failure is
surfaced twice: as an ``on_error`` event and as the raised, typed exception.
Background view refreshes (after a sale or a rollover) report failures through
``on_error`` only, since the operation that triggered them already succeeded.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from datetime import date

from shop_db.errors import PersistenceError
from shop_db.gateway import PersistenceGateway, SqlGateway

from .aggregator import DailyAggregator
from .config import DEFAULT_HISTORY_LIMIT, DEFAULT_ROLLOVER_INTERVAL, Settings
from .errors import DashboardError, error_kind
from .events import DashboardListener, EventBus
from .history import daily_summary, sales_history
from .ledger import SalesLedger
from .logging_setup import get_logger
from .models import (
    CandidateItem,
    DailyAggregate,
    DailySummary,
    HistoryEntry,
    LineItem,
    SalesTransaction,
)
from .reset import reset_all
from .rollover import DayRolloverMonitor

_logger = get_logger("shop_dashboard.dashboard")


class ShopDashboard:
    """One register session against the shop database."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        *,
        listeners: Sequence[DashboardListener] = (),
        today: Callable[[], date] = date.today,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        rollover_interval: float = DEFAULT_ROLLOVER_INTERVAL,
    ) -> None:
        self.gateway = gateway
        self.events = EventBus(listeners)
        self.history_limit = history_limit
        self.aggregator = DailyAggregator(gateway, today=today)
        self.ledger = SalesLedger(gateway, today=today)
        self.monitor = DayRolloverMonitor(
            self.aggregator,
            on_rollover=self._handle_rollover,
            on_error=self._report,
            interval_seconds=rollover_interval,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, *, listeners: Sequence[DashboardListener] = ()
    ) -> ShopDashboard:
        gateway = SqlGateway(
            database_url=settings.database_url, timeout_seconds=settings.request_timeout
        )
        return cls(
            gateway,
            listeners=listeners,
            history_limit=settings.history_limit,
            rollover_interval=settings.rollover_interval,
        )

    # ---- error surfacing -------------------------------------------------------

    def _report(self, exc: BaseException) -> None:
        self.events.on_error(error_kind(exc), str(exc))

    @contextmanager
    def _surfacing(self) -> Iterator[None]:
        try:
            yield
        except (DashboardError, PersistenceError) as exc:
            self._report(exc)
            raise

    # ---- lifecycle -------------------------------------------------------------

    def check_connection(self) -> None:
        """Round-trip to ``daily_sales``; raises ``PersistenceError`` when unreachable."""

        with self._surfacing():
            self.gateway.ping()

    def start(self, *, monitor: bool = True) -> DailyAggregate:
        """Initialize today's aggregate, publish the views, optionally start the monitor."""

        with self._surfacing():
            aggregate = self.aggregator.ensure_today_record()
        self.monitor.track(aggregate.date)
        self.events.on_day_changed(aggregate.date)
        self.refresh()
        if monitor:
            self.monitor.start()
        return aggregate

    def stop(self) -> None:
        self.monitor.shutdown()

    # ---- operations ------------------------------------------------------------

    def submit_sale(self, candidates: Sequence[CandidateItem | LineItem]) -> SalesTransaction:
        """Record a sale, then add its total to the day's aggregate.

        The two writes are sequenced: the aggregate is touched only after the
        transaction row exists.
        """

        with self._surfacing():
            transaction = self.ledger.record_sale(candidates)
            try:
                self.aggregator.apply_delta(
                    transaction.total_amount, sale_date=transaction.sale_date
                )
            except PersistenceError as exc:
                _logger.error(
                    "sale %s saved but the daily total was not updated: %s", transaction.id, exc
                )
                raise PersistenceError(
                    f"Sale {transaction.id} was saved but today's total could not be "
                    f"updated: {exc}",
                    transient=exc.transient,
                ) from exc
        self.events.on_sale_recorded(transaction)
        self._publish_summary()
        return transaction

    def summary(self) -> DailySummary:
        with self._surfacing():
            return daily_summary(self.gateway, self.aggregator.today())

    def history(
        self, *, include_today: bool = False, limit: int | None = None
    ) -> list[HistoryEntry]:
        with self._surfacing():
            return sales_history(
                self.gateway,
                limit=limit or self.history_limit,
                exclude=None if include_today else self.aggregator.today(),
            )

    def reset(self, *, confirm: Callable[[str], bool]) -> bool:
        """Delete all data after two confirmations; True when the reset ran."""

        with self._surfacing():
            aggregate = reset_all(self.gateway, self.aggregator, confirm=confirm)
        if aggregate is None:
            return False
        self.refresh()
        return True

    # ---- view refresh ----------------------------------------------------------

    def refresh(self) -> None:
        """Re-publish today's summary and the history to listeners."""

        self._publish_summary()
        self._publish_history()

    def _publish_summary(self) -> None:
        try:
            summary = daily_summary(self.gateway, self.aggregator.today())
        except PersistenceError as exc:
            _logger.warning("could not refresh today's summary: %s", exc)
            self._report(exc)
            return
        self.events.on_daily_summary_changed(summary.total_amount, summary.transaction_count)

    def _publish_history(self) -> None:
        try:
            history = sales_history(
                self.gateway, limit=self.history_limit, exclude=self.aggregator.today()
            )
        except PersistenceError as exc:
            _logger.warning("could not refresh sales history: %s", exc)
            self._report(exc)
            return
        self.events.on_history_changed(history)

    def _handle_rollover(self, aggregate: DailyAggregate) -> None:
        self.events.on_day_changed(aggregate.date)
        self.refresh()


__all__ = ["ShopDashboard"]
