"""Runtime settings for the dashboard.

Settings come from the process environment, optionally seeded from a ``.env``
in the current working directory (python-dotenv, never overriding variables
that are already set). The database endpoint is required: a missing or
unparsable URL raises :class:`~shop_dashboard.errors.ConfigurationError`,
which entrypoints treat as fatal at startup.

Variables
---------
- ``SHOP_DATABASE_URL`` (fallback ``DATABASE_URL``): SQLAlchemy URL of the
  hosted database, e.g. ``postgresql+psycopg://postgres@db.<ref>.supabase.co:5432/postgres``.
- ``SHOP_DATABASE_PASSWORD``: credential injected into the URL when the URL
  itself carries none.
- ``SHOP_REQUEST_TIMEOUT``: seconds allowed per gateway call (default 10).
- ``SHOP_ROLLOVER_INTERVAL``: seconds between day-rollover checks (default 60).
- ``SHOP_HISTORY_LIMIT``: number of daily aggregates shown in history (default 30).
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from shop_db.client import with_password

from .errors import ConfigurationError

DEFAULT_REQUEST_TIMEOUT: float = 10.0
DEFAULT_ROLLOVER_INTERVAL: float = 60.0
DEFAULT_HISTORY_LIMIT: int = 30


@dataclass(frozen=True, slots=True)
class Settings:
    database_url: str
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    rollover_interval: float = DEFAULT_ROLLOVER_INTERVAL
    history_limit: int = DEFAULT_HISTORY_LIMIT

    @property
    def redacted_url(self) -> str:
        """Database URL with the password masked, safe for logs and output."""

        return make_url(self.database_url).render_as_string(hide_password=True)


def _positive_number(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None
    if not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive finite number, got {raw!r}")
    return value


def _resolve_url(override: str | None) -> str:
    raw = override or os.getenv("SHOP_DATABASE_URL") or os.getenv("DATABASE_URL")
    if not raw or not raw.strip():
        raise ConfigurationError(
            "SHOP_DATABASE_URL is not set. Provide it via the environment or a local .env file."
        )
    try:
        return with_password(raw.strip(), os.getenv("SHOP_DATABASE_PASSWORD"))
    except ArgumentError as exc:
        raise ConfigurationError(f"SHOP_DATABASE_URL is not a valid database URL: {exc}") from exc


def load_settings(*, database_url: str | None = None, dotenv: bool = True) -> Settings:
    """Build :class:`Settings` from ``database_url`` and the environment.

    ``database_url`` (e.g. a ``--database-url`` CLI option) wins over the
    environment.
    """

    if dotenv:
        load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    history_limit = _positive_number("SHOP_HISTORY_LIMIT", DEFAULT_HISTORY_LIMIT)
    if history_limit != int(history_limit):
        raise ConfigurationError(f"SHOP_HISTORY_LIMIT must be an integer, got {history_limit}")

    return Settings(
        database_url=_resolve_url(database_url),
        request_timeout=_positive_number("SHOP_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
        rollover_interval=_positive_number("SHOP_ROLLOVER_INTERVAL", DEFAULT_ROLLOVER_INTERVAL),
        history_limit=int(history_limit),
    )


__all__ = ["Settings", "load_settings"]
