"""Day-Rollover Monitor: notices when the local date moves past the cached aggregate.

:meth:`DayRolloverMonitor.tick` is the whole behavior and is safe to call
directly (tests do). :meth:`DayRolloverMonitor.start` merely schedules it on an
APScheduler ``BackgroundScheduler`` with an ``IntervalTrigger``. A rollover is
noticed within one interval of midnight.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import date

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from shop_db.errors import PersistenceError

from .aggregator import DailyAggregator
from .config import DEFAULT_ROLLOVER_INTERVAL
from .logging_setup import get_logger
from .models import DailyAggregate

_logger = get_logger("shop_dashboard.rollover")

_JOB_ID = "day_rollover"


class DayRolloverMonitor:
    """Periodically re-initializes the Daily Aggregator when the date changes.

    Parameters
    ----------
    aggregator:
        The session's :class:`DailyAggregator`; its ``today`` clock is used.
    on_rollover:
        Called with the new day's aggregate after a successful rollover so
        dependents (summary, history, date display) can refresh.
    on_error:
        Called with the failure when re-initialization fails. Errors are never
        raised out of :meth:`tick`; the next tick retries.
    interval_seconds:
        Scheduling period for :meth:`start`.
    """

    def __init__(
        self,
        aggregator: DailyAggregator,
        *,
        on_rollover: Callable[[DailyAggregate], None] | None = None,
        on_error: Callable[[PersistenceError], None] | None = None,
        interval_seconds: float = DEFAULT_ROLLOVER_INTERVAL,
        scheduler: BackgroundScheduler | None = None,
    ) -> None:
        self._aggregator = aggregator
        self._on_rollover = on_rollover
        self._on_error = on_error
        self._interval_seconds = interval_seconds
        self._scheduler = scheduler
        self._tick_lock = threading.Lock()
        # Set when a rollover cleared the cache but re-initialization failed.
        self._pending_since: date | None = None
        # Last date dependents were told about (start or a completed rollover).
        self._announced: date | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def track(self, day: date) -> None:
        """Record ``day`` as the date dependents are currently showing."""

        self._announced = day

    def tick(self) -> bool:
        """Run one rollover check; return True when a rollover completed.

        Returns False without doing anything while a previous tick is still
        waiting on the network (ticks are skipped, never queued).
        """

        if not self._tick_lock.acquire(blocking=False):
            _logger.debug("previous rollover check still running; skipping tick")
            return False
        try:
            return self._check()
        finally:
            self._tick_lock.release()

    def _check(self) -> bool:
        today = self._aggregator.today()
        cached = self._aggregator.cached
        if self._pending_since is not None:
            previous = self._pending_since
        elif cached is None:
            # Not initialized yet; the session start or the next sale will do it.
            return False
        else:
            # A sale recorded after midnight may already have moved the cache to
            # today; dependents still need the rollover signal.
            previous = self._announced or cached.date
            if previous == today and cached.date == today:
                self._announced = today
                return False

        if cached is not None and cached.date != today:
            self._aggregator.clear()
        _logger.info("day rolled over: %s -> %s", previous.isoformat(), today.isoformat())
        try:
            aggregate = self._aggregator.ensure_today_record()
        except PersistenceError as exc:
            self._pending_since = previous
            _logger.error("rollover to %s failed, will retry: %s", today.isoformat(), exc)
            if self._on_error is not None:
                self._on_error(exc)
            return False

        self._pending_since = None
        self._announced = aggregate.date
        if self._on_rollover is not None:
            self._on_rollover(aggregate)
        return True

    def start(self) -> None:
        """Schedule :meth:`tick` every ``interval_seconds`` on a background thread."""

        if self._scheduler is None:
            self._scheduler = BackgroundScheduler(daemon=True)
        self._scheduler.add_job(
            self.tick,
            trigger=IntervalTrigger(seconds=self._interval_seconds),
            id=_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        if not self._scheduler.running:
            self._scheduler.start()
        _logger.info("rollover monitor started (every %ss)", self._interval_seconds)

    def shutdown(self) -> None:
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            _logger.info("rollover monitor stopped")


__all__ = ["DayRolloverMonitor"]
