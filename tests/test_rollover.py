from __future__ import annotations

from decimal import Decimal

from shop_dashboard.aggregator import DailyAggregator
from shop_dashboard.rollover import DayRolloverMonitor

from tests.helpers.db import daily_rows
from tests.helpers.gateways import FaultyGateway


def _monitor(aggregator, **kwargs):
    rolled = []
    errors = []
    monitor = DayRolloverMonitor(
        aggregator,
        on_rollover=rolled.append,
        on_error=errors.append,
        interval_seconds=3600,
        **kwargs,
    )
    return monitor, rolled, errors


def test_date_change_creates_a_fresh_aggregate(gateway, db_url, clock):
    agg = DailyAggregator(gateway, today=clock)
    before = agg.ensure_today_record()
    agg.apply_delta(Decimal("100"))
    monitor, rolled, errors = _monitor(agg)

    new_day = clock.advance()
    assert monitor.tick() is True

    assert agg.cached.date == new_day
    assert agg.cached.total_amount == Decimal(0)
    assert agg.cached.id != before.id
    assert rolled == [agg.cached]
    assert errors == []
    # Yesterday's total is untouched.
    assert [r.total_amount for r in daily_rows(db_url)] == [Decimal("100"), Decimal("0")]


def test_same_day_tick_does_nothing(gateway, clock):
    agg = DailyAggregator(gateway, today=clock)
    cached = agg.ensure_today_record()
    monitor, rolled, _ = _monitor(agg)

    assert monitor.tick() is False
    assert agg.cached == cached
    assert rolled == []


def test_uninitialized_aggregator_is_left_alone(gateway, db_url, clock):
    faulty = FaultyGateway(gateway)
    agg = DailyAggregator(faulty, today=clock)
    monitor, rolled, _ = _monitor(agg)

    clock.advance()
    assert monitor.tick() is False

    assert faulty.calls == []
    assert daily_rows(db_url) == []
    assert rolled == []


def test_failed_rollover_is_reported_and_retried(gateway, clock):
    faulty = FaultyGateway(gateway)
    agg = DailyAggregator(faulty, today=clock)
    agg.ensure_today_record()
    monitor, rolled, errors = _monitor(agg)

    new_day = clock.advance()
    faulty.fail("find_one")
    assert monitor.tick() is False

    assert len(errors) == 1
    assert errors[0].transient is True
    assert agg.cached is None
    assert rolled == []

    # Next tick retries even though the cache is now empty.
    assert monitor.tick() is True
    assert agg.cached.date == new_day
    assert len(rolled) == 1


def test_overlapping_tick_is_skipped(gateway, clock):
    faulty = FaultyGateway(gateway)
    agg = DailyAggregator(faulty, today=clock)
    agg.ensure_today_record()
    monitor, rolled, _ = _monitor(agg)
    clock.advance()
    calls_before = len(faulty.calls)

    # Simulate a previous tick still waiting on the network.
    monitor._tick_lock.acquire()
    try:
        assert monitor.tick() is False
    finally:
        monitor._tick_lock.release()

    assert len(faulty.calls) == calls_before
    assert rolled == []
    assert monitor.tick() is True


def test_start_and_shutdown_manage_the_scheduler(gateway, clock):
    agg = DailyAggregator(gateway, today=clock)
    monitor, _, _ = _monitor(agg)
    assert monitor.running is False

    monitor.start()
    try:
        assert monitor.running is True
    finally:
        monitor.shutdown()
    assert monitor.running is False


def test_rollover_is_signalled_after_a_sale_already_moved_the_cache(gateway, db_url, clock):
    agg = DailyAggregator(gateway, today=clock)
    monitor, rolled, _ = _monitor(agg)
    monitor.track(agg.ensure_today_record().date)

    new_day = clock.advance()
    # A sale after midnight re-resolves the aggregate before the monitor ticks.
    agg.apply_delta(Decimal("5"), sale_date=new_day)
    assert agg.cached.date == new_day

    assert monitor.tick() is True
    assert [a.date for a in rolled] == [new_day]
    assert agg.cached.total_amount == Decimal("5")
    assert len(daily_rows(db_url)) == 2

    # Announced once; later ticks on the same day stay quiet.
    assert monitor.tick() is False
    assert len(rolled) == 1
