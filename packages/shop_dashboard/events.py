"""Presentation-facing notifications emitted by :class:`~shop_dashboard.dashboard.ShopDashboard`.

Front ends subclass :class:`DashboardListener` and override the hooks they care
about; every hook defaults to a no-op. A listener that raises is logged and
skipped so one broken view cannot stop the others from refreshing.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from .logging_setup import get_logger
from .models import HistoryEntry, SalesTransaction

_logger = get_logger("shop_dashboard.events")


class DashboardListener:
    def on_daily_summary_changed(self, total_amount: Decimal, transaction_count: int) -> None:
        pass

    def on_history_changed(self, history: Sequence[HistoryEntry]) -> None:
        pass

    def on_sale_recorded(self, transaction: SalesTransaction) -> None:
        pass

    def on_error(self, kind: str, message: str) -> None:
        pass

    def on_day_changed(self, today: date) -> None:
        pass


class EventBus(DashboardListener):
    """Fans each hook out to every subscribed listener, in subscription order."""

    def __init__(self, listeners: Sequence[DashboardListener] = ()) -> None:
        self._listeners: list[DashboardListener] = list(listeners)

    def subscribe(self, listener: DashboardListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: DashboardListener) -> None:
        self._listeners.remove(listener)

    def _emit(self, hook: str, *args: object) -> None:
        for listener in list(self._listeners):
            try:
                getattr(listener, hook)(*args)
            except Exception:
                _logger.exception("listener %r failed in %s", listener, hook)

    def on_daily_summary_changed(self, total_amount: Decimal, transaction_count: int) -> None:
        self._emit("on_daily_summary_changed", total_amount, transaction_count)

    def on_history_changed(self, history: Sequence[HistoryEntry]) -> None:
        self._emit("on_history_changed", history)

    def on_sale_recorded(self, transaction: SalesTransaction) -> None:
        self._emit("on_sale_recorded", transaction)

    def on_error(self, kind: str, message: str) -> None:
        self._emit("on_error", kind, message)

    def on_day_changed(self, today: date) -> None:
        self._emit("on_day_changed", today)


__all__ = ["DashboardListener", "EventBus"]
