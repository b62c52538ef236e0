from __future__ import annotations

from decimal import Decimal

import pytest
from shop_dashboard.aggregator import DailyAggregator
from shop_dashboard.errors import PersistenceError
from shop_dashboard.ledger import SalesLedger
from shop_dashboard.reset import FINAL_WARNING, FIRST_WARNING, reset_all
from shop_db.client import session_scope
from shop_db.models import DailySale, SalesTransactionRow
from sqlalchemy import text

from tests.helpers.db import count_rows, daily_rows
from tests.helpers.gateways import FaultyGateway


class Answers:
    """Scripted confirmation callback that records each prompt."""

    def __init__(self, *answers: bool) -> None:
        self._answers = list(answers)
        self.prompts: list[str] = []

    def __call__(self, message: str) -> bool:
        self.prompts.append(message)
        return self._answers.pop(0)


@pytest.fixture
def seeded(gateway, clock):
    ledger = SalesLedger(gateway, today=clock)
    agg = DailyAggregator(gateway, today=clock)
    for day_offset in (0, 1):
        if day_offset:
            clock.advance()
        txn = ledger.record_sale([{"name": "Tea", "price": "20", "quantity": "2"}])
        agg.apply_delta(txn.total_amount, sale_date=txn.sale_date)
    return agg


def test_declined_first_confirmation_deletes_nothing(gateway, db_url, seeded):
    answers = Answers(False)

    assert reset_all(gateway, seeded, confirm=answers) is None

    assert answers.prompts == [FIRST_WARNING]
    assert count_rows(db_url, SalesTransactionRow) == 2
    assert count_rows(db_url, DailySale) == 2
    assert seeded.cached is not None


def test_declined_final_confirmation_deletes_nothing(gateway, db_url, seeded):
    answers = Answers(True, False)

    assert reset_all(gateway, seeded, confirm=answers) is None

    assert answers.prompts == [FIRST_WARNING, FINAL_WARNING]
    assert count_rows(db_url, SalesTransactionRow) == 2
    assert count_rows(db_url, DailySale) == 2


def test_confirmed_reset_leaves_only_a_fresh_today_record(gateway, db_url, clock, seeded):
    old_id = seeded.cached.id

    fresh = reset_all(gateway, seeded, confirm=Answers(True, True))

    assert fresh is not None
    assert fresh.date == clock.today
    assert fresh.total_amount == Decimal(0)
    assert fresh.id != old_id
    assert seeded.cached == fresh
    assert count_rows(db_url, SalesTransactionRow) == 0
    assert [(r.date, r.total_amount) for r in daily_rows(db_url)] == [(clock.today, Decimal(0))]


def test_failed_delete_is_all_or_nothing(gateway, db_url, seeded):
    faulty = FaultyGateway(gateway)
    faulty.fail("delete_all")

    with pytest.raises(PersistenceError):
        reset_all(faulty, seeded, confirm=Answers(True, True))

    assert count_rows(db_url, SalesTransactionRow) == 2
    assert count_rows(db_url, DailySale) == 2


def test_delete_failure_in_the_store_rolls_back_both_tables(gateway, db_url, seeded):
    with session_scope(database_url=db_url) as session:
        session.execute(
            text(
                "CREATE TRIGGER keep_daily_sales BEFORE DELETE ON daily_sales "
                "BEGIN SELECT RAISE(ABORT, 'daily_sales is locked'); END"
            )
        )

    with pytest.raises(PersistenceError):
        reset_all(gateway, seeded, confirm=Answers(True, True))

    # sales_transactions was deleted first, then rolled back with the failure.
    assert count_rows(db_url, SalesTransactionRow) == 2
    assert count_rows(db_url, DailySale) == 2
