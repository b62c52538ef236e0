"""Centralized SQLAlchemy engine/session helpers for the shop database.

Usage
-----
from shop_db.client import session_scope

with session_scope(database_url=url) as s:
    s.execute(...)

Engines are cached per database URL so a long-lived dashboard session reuses a
single connection pool. Every engine is created with a request timeout so a
stalled network call to the hosted database surfaces as an error instead of
hanging the session.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

DEFAULT_TIMEOUT_SECONDS: float = 10.0

_ENGINES: dict[str, Engine] = {}
_SESSION_MAKERS: dict[str, sessionmaker[Session]] = {}


def _database_url(override: str | None = None) -> str:
    url = override or os.getenv("SHOP_DATABASE_URL") or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("SHOP_DATABASE_URL is not set; cannot initialize database client")
    return url


def with_password(url: str, password: str | None) -> str:
    """Return ``url`` with ``password`` injected unless the URL already carries one.

    Raises :class:`sqlalchemy.exc.ArgumentError` when ``url`` cannot be parsed.
    """

    parsed = make_url(url)
    if password and parsed.password is None:
        parsed = parsed.set(password=password)
    return parsed.render_as_string(hide_password=False)


def _engine_kwargs(url: str, timeout_seconds: float) -> dict[str, Any]:
    """Return dialect-specific engine options enforcing ``timeout_seconds``."""

    backend = make_url(url).get_backend_name()
    if backend == "sqlite":
        # Busy timeout for the file lock; SQLite has no network round trip.
        return {"connect_args": {"timeout": timeout_seconds}}
    kwargs: dict[str, Any] = {"pool_timeout": timeout_seconds}
    if backend == "postgresql":
        timeout_ms = int(timeout_seconds * 1000)
        kwargs["connect_args"] = {
            "connect_timeout": max(1, int(timeout_seconds)),
            "options": f"-c statement_timeout={timeout_ms}",
        }
    return kwargs


def get_engine(
    *, database_url: str | None = None, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
) -> Engine:
    """Return the shared engine for ``database_url``, creating it on first use."""

    url = _database_url(database_url)
    engine = _ENGINES.get(url)
    if engine is None:
        engine = create_engine(url, pool_pre_ping=True, **_engine_kwargs(url, timeout_seconds))
        _SESSION_MAKERS[url] = sessionmaker(bind=engine, expire_on_commit=False, class_=Session)
        _ENGINES[url] = engine
    return engine


def get_session(
    *, database_url: str | None = None, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
) -> Session:
    """Return a new SQLAlchemy session bound to the shared engine."""

    url = _database_url(database_url)
    get_engine(database_url=url, timeout_seconds=timeout_seconds)
    return _SESSION_MAKERS[url]()


@contextmanager
def session_scope(
    *, database_url: str | None = None, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
) -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""

    session = get_session(database_url=database_url, timeout_seconds=timeout_seconds)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def dispose_engines() -> None:
    """Dispose every cached engine (test teardown and process shutdown)."""

    for engine in _ENGINES.values():
        engine.dispose()
    _ENGINES.clear()
    _SESSION_MAKERS.clear()


__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "dispose_engines",
    "get_engine",
    "get_session",
    "session_scope",
    "with_password",
]
