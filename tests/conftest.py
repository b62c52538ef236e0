"""Pytest configuration for test isolation.

Every test runs with the dashboard's environment variables cleared and the
working directory set to its own temporary directory, so neither a developer's
shell nor a local ``.env`` can point a test at a real database. Database-backed
tests get a fresh file-backed SQLite database per test.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date, timedelta
from pathlib import Path

import pytest
from shop_db.client import dispose_engines
from shop_db.gateway import SqlGateway

from tests.helpers.db import bootstrap_sqlite_db

_ENV_VARS = (
    "SHOP_DATABASE_URL",
    "DATABASE_URL",
    "SHOP_DATABASE_PASSWORD",
    "SHOP_REQUEST_TIMEOUT",
    "SHOP_ROLLOVER_INTERVAL",
    "SHOP_HISTORY_LIMIT",
    "SHOP_DASHBOARD_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # load_dotenv() reads ./.env; keep it pointed at an empty directory.
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def db_url(tmp_path: Path) -> Iterator[str]:
    url = bootstrap_sqlite_db(tmp_path / "db" / "shop.sqlite3")
    yield url
    dispose_engines()


@pytest.fixture
def gateway(db_url: str) -> SqlGateway:
    return SqlGateway(database_url=db_url, timeout_seconds=5)


class Clock:
    """Settable stand-in for ``date.today``."""

    def __init__(self, today: date) -> None:
        self.today = today

    def __call__(self) -> date:
        return self.today

    def advance(self, days: int = 1) -> date:
        self.today += timedelta(days=days)
        return self.today


@pytest.fixture
def clock() -> Clock:
    return Clock(date(2026, 10, 19))
