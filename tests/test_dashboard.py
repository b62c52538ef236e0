from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from shop_dashboard.dashboard import ShopDashboard
from shop_dashboard.errors import PersistenceError, ValidationError
from shop_dashboard.events import DashboardListener
from shop_dashboard.models import HistoryEntry
from shop_db.models import SalesTransactionRow

from tests.helpers.db import count_rows, daily_rows
from tests.helpers.gateways import FaultyGateway


class RecordingListener(DashboardListener):
    def __init__(self) -> None:
        self.events: list[tuple] = []

    def on_daily_summary_changed(self, total_amount, transaction_count):
        self.events.append(("summary", total_amount, transaction_count))

    def on_history_changed(self, history):
        self.events.append(("history", list(history)))

    def on_sale_recorded(self, transaction):
        self.events.append(("sale", transaction.total_amount))

    def on_error(self, kind, message):
        self.events.append(("error", kind, message))

    def on_day_changed(self, today):
        self.events.append(("day", today))

    def of(self, name: str) -> list[tuple]:
        return [e for e in self.events if e[0] == name]


class ExplodingListener(DashboardListener):
    def on_daily_summary_changed(self, total_amount, transaction_count):
        raise RuntimeError("view crashed")


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def dashboard(gateway, clock, listener) -> ShopDashboard:
    return ShopDashboard(gateway, listeners=[listener], today=clock, history_limit=30)


def test_start_publishes_today_and_empty_history(dashboard, listener, clock):
    aggregate = dashboard.start(monitor=False)

    assert aggregate.date == clock.today
    assert listener.events == [
        ("day", clock.today),
        ("summary", Decimal(0), 0),
        ("history", []),
    ]


def test_submit_sale_updates_total_and_emits_events(dashboard, listener, db_url):
    dashboard.start(monitor=False)
    listener.events.clear()

    txn = dashboard.submit_sale([{"name": "Tea", "price": "20", "quantity": "3"}])

    assert txn.total_amount == Decimal("60")
    assert listener.of("sale") == [("sale", txn.total_amount)]
    assert listener.of("summary") == [("summary", Decimal("60"), 1)]
    assert daily_rows(db_url)[0].total_amount == Decimal("60")

    summary = dashboard.summary()
    assert (summary.total_amount, summary.transaction_count) == (Decimal("60"), 1)


def test_validation_failure_is_raised_and_reported(dashboard, listener, db_url):
    dashboard.start(monitor=False)
    listener.events.clear()

    with pytest.raises(ValidationError):
        dashboard.submit_sale([{"name": "", "price": "5", "quantity": "1"}])

    [(_, kind, message)] = listener.of("error")
    assert kind == "validation"
    assert "at least one valid item" in message
    assert listener.of("sale") == []
    assert count_rows(db_url, SalesTransactionRow) == 0


def test_aggregate_failure_after_saved_sale_says_so(gateway, clock, listener, db_url):
    faulty = FaultyGateway(gateway)
    dash = ShopDashboard(faulty, listeners=[listener], today=clock)
    dash.start(monitor=False)
    listener.events.clear()

    faulty.fail("increment")
    with pytest.raises(PersistenceError, match="was saved"):
        dash.submit_sale([{"name": "Tea", "price": "20", "quantity": "1"}])

    [(_, kind, _message)] = listener.of("error")
    assert kind == "persistence"
    assert listener.of("sale") == []
    assert dash.summary().transaction_count == 1
    assert dash.aggregator.cached.total_amount == Decimal(0)


def test_broken_listener_does_not_block_the_others(gateway, clock, listener):
    dash = ShopDashboard(gateway, listeners=[ExplodingListener(), listener], today=clock)
    dash.start(monitor=False)

    dash.submit_sale([{"name": "Tea", "price": "20", "quantity": "1"}])

    assert listener.of("summary")[-1] == ("summary", Decimal("20"), 1)


def test_rollover_refreshes_every_view(dashboard, listener, clock):
    dashboard.start(monitor=False)
    dashboard.submit_sale([{"name": "Tea", "price": "20", "quantity": "2"}])
    yesterday = clock.today
    listener.events.clear()

    new_day = clock.advance()
    assert dashboard.monitor.tick() is True

    assert listener.events == [
        ("day", new_day),
        ("summary", Decimal(0), 0),
        ("history", [HistoryEntry(date=yesterday, total_amount=Decimal("40"))]),
    ]


def test_history_is_newest_first_and_excludes_today(dashboard, clock):
    dashboard.start(monitor=False)
    for amount in ("10", "20", "30"):
        dashboard.submit_sale([{"name": "Tea", "price": amount, "quantity": "1"}])
        clock.advance()
        dashboard.monitor.tick()

    history = dashboard.history()
    assert [(e.date, e.total_amount) for e in history] == [
        (date(2026, 10, 21), Decimal("30")),
        (date(2026, 10, 20), Decimal("20")),
        (date(2026, 10, 19), Decimal("10")),
    ]

    with_today = dashboard.history(include_today=True, limit=2)
    assert [e.date for e in with_today] == [clock.today, date(2026, 10, 21)]


def test_background_refresh_failure_is_only_reported(gateway, clock, listener):
    faulty = FaultyGateway(gateway)
    dash = ShopDashboard(faulty, listeners=[listener], today=clock)
    dash.start(monitor=False)
    listener.events.clear()

    faulty.fail("find")
    dash.refresh()

    assert [e[1] for e in listener.of("error")] == ["persistence"]
    assert len(listener.of("summary")) == 1
    assert listener.of("history") == []


def test_reset_through_the_facade(dashboard, listener, clock, db_url):
    dashboard.start(monitor=False)
    dashboard.submit_sale([{"name": "Tea", "price": "20", "quantity": "1"}])

    assert dashboard.reset(confirm=lambda _msg: False) is False
    assert len(daily_rows(db_url)) == 1

    listener.events.clear()
    assert dashboard.reset(confirm=lambda _msg: True) is True
    assert listener.events == [("summary", Decimal(0), 0), ("history", [])]
    assert [(r.date, r.total_amount) for r in daily_rows(db_url)] == [(clock.today, Decimal(0))]


def test_check_connection_failure_is_reported(gateway, clock, listener):
    faulty = FaultyGateway(gateway)
    dash = ShopDashboard(faulty, listeners=[listener], today=clock)
    faulty.fail("ping")

    with pytest.raises(PersistenceError):
        dash.check_connection()
    assert [e[1] for e in listener.of("error")] == ["persistence"]


def test_sale_after_midnight_before_tick_still_signals_the_new_day(dashboard, listener, clock):
    dashboard.start(monitor=False)
    dashboard.submit_sale([{"name": "Tea", "price": "20", "quantity": "2"}])
    yesterday = clock.today

    new_day = clock.advance()
    dashboard.submit_sale([{"name": "Bun", "price": "5", "quantity": "1"}])
    listener.events.clear()

    assert dashboard.monitor.tick() is True

    assert listener.events == [
        ("day", new_day),
        ("summary", Decimal("5"), 1),
        ("history", [HistoryEntry(date=yesterday, total_amount=Decimal("40"))]),
    ]
