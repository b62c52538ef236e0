"""Persistence gateway over the shop database.

The dashboard core talks to the store only through the small capability
described by :class:`PersistenceGateway`: filtered reads, inserts, updates by
id, an atomic additive increment, and unconditional deletes. ``SqlGateway`` is
the SQLAlchemy implementation used against the hosted Postgres database (and
against SQLite in tests).

Every call runs in its own short transaction via :func:`shop_db.client.session_scope`
and returns detached ORM rows (sessions use ``expire_on_commit=False``), so
callers can read attributes after the call returns.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Protocol, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from .client import DEFAULT_TIMEOUT_SECONDS, session_scope
from .errors import ConflictError, NotFoundError, PersistenceError
from .models import Base, DailySale

ModelT = TypeVar("ModelT", bound=Base)

_logger = logging.getLogger("shop_db.gateway")


class PersistenceGateway(Protocol):
    """Capability the dashboard core depends on (see ``SqlGateway``)."""

    def find(
        self,
        model: type[ModelT],
        *,
        where: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[ModelT]: ...

    def find_one(self, model: type[ModelT], *, where: Mapping[str, Any]) -> ModelT | None: ...

    def count(self, model: type[Base], *, where: Mapping[str, Any] | None = None) -> int: ...

    def insert(self, model: type[ModelT], values: Mapping[str, Any]) -> ModelT: ...

    def update(self, model: type[ModelT], row_id: Any, values: Mapping[str, Any]) -> ModelT: ...

    def increment(
        self,
        model: type[ModelT],
        row_id: Any,
        *,
        column: str,
        amount: Decimal,
        touch: Mapping[str, Any] | None = None,
    ) -> ModelT: ...

    def delete_where(
        self, model: type[Base], where: Mapping[str, Any] | None = None
    ) -> int: ...

    def delete_all(self, models: Sequence[type[Base]]) -> None: ...

    def ping(self) -> None: ...


def _translate(exc: SQLAlchemyError, action: str) -> PersistenceError:
    """Map a SQLAlchemy failure onto the gateway's error taxonomy."""

    if isinstance(exc, IntegrityError):
        return ConflictError(f"{action} violated a constraint: {exc.orig}")
    transient = isinstance(exc, (OperationalError, PoolTimeoutError)) or (
        isinstance(exc, DBAPIError) and exc.connection_invalidated
    )
    return PersistenceError(f"{action} failed: {exc}", transient=transient)


def _columns(model: type[Base], names: Mapping[str, Any] | Sequence[str]) -> None:
    known = set(model.__table__.columns.keys())
    unknown = sorted(set(names) - known)
    if unknown:
        raise ValueError(f"Unknown column(s) for {model.__tablename__}: {', '.join(unknown)}")


def _criteria(model: type[Base], where: Mapping[str, Any] | None) -> list[Any]:
    if not where:
        return []
    _columns(model, where)
    return [getattr(model, name) == value for name, value in where.items()]


class SqlGateway:
    """SQLAlchemy-backed :class:`PersistenceGateway`."""

    def __init__(
        self, *, database_url: str, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    ) -> None:
        self._database_url = database_url
        self._timeout_seconds = timeout_seconds

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        try:
            with session_scope(
                database_url=self._database_url, timeout_seconds=self._timeout_seconds
            ) as session:
                yield session
        except SQLAlchemyError as exc:
            err = _translate(exc, action)
            _logger.warning("%s (transient=%s)", err, err.transient)
            raise err from exc

    # ---- reads -----------------------------------------------------------------

    def find(
        self,
        model: type[ModelT],
        *,
        where: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[ModelT]:
        stmt = select(model).where(*_criteria(model, where))
        if order_by is not None:
            _columns(model, [order_by])
            col = getattr(model, order_by)
            stmt = stmt.order_by(col.desc() if descending else col.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._session(f"find {model.__tablename__}") as session:
            return list(session.scalars(stmt).all())

    def find_one(self, model: type[ModelT], *, where: Mapping[str, Any]) -> ModelT | None:
        stmt = select(model).where(*_criteria(model, where)).limit(2)
        with self._session(f"find {model.__tablename__}") as session:
            rows = list(session.scalars(stmt).all())
        if len(rows) > 1:
            raise PersistenceError(
                f"find {model.__tablename__}: expected at most one row for {dict(where)!r}"
            )
        return rows[0] if rows else None

    def count(self, model: type[Base], *, where: Mapping[str, Any] | None = None) -> int:
        stmt = select(func.count()).select_from(model).where(*_criteria(model, where))
        with self._session(f"count {model.__tablename__}") as session:
            return int(session.scalar(stmt) or 0)

    # ---- writes ----------------------------------------------------------------

    def insert(self, model: type[ModelT], values: Mapping[str, Any]) -> ModelT:
        _columns(model, values)
        with self._session(f"insert into {model.__tablename__}") as session:
            row = model(**dict(values))
            session.add(row)
            session.flush()
            # Pull server-side defaults (timestamps) before the session closes.
            session.refresh(row)
        return row

    def update(self, model: type[ModelT], row_id: Any, values: Mapping[str, Any]) -> ModelT:
        _columns(model, values)
        with self._session(f"update {model.__tablename__}") as session:
            row = session.get(model, row_id)
            if row is None:
                raise NotFoundError(f"update {model.__tablename__}: no row with id {row_id}")
            for name, value in values.items():
                setattr(row, name, value)
            session.flush()
            session.refresh(row)
        return row

    def increment(
        self,
        model: type[ModelT],
        row_id: Any,
        *,
        column: str,
        amount: Decimal,
        touch: Mapping[str, Any] | None = None,
    ) -> ModelT:
        """Add ``amount`` to ``column`` in a single UPDATE and return the row.

        The addition happens inside the database (``col = col + :amount``), so
        concurrent increments from other sessions are not lost.
        """

        _columns(model, [column, *(touch or {})])
        target = getattr(model, column)
        values: dict[str, Any] = {column: target + amount, **(touch or {})}
        stmt = (
            update(model)
            .where(model.id == row_id)
            .values(values)
            .execution_options(synchronize_session=False)
        )
        with self._session(f"increment {model.__tablename__}.{column}") as session:
            result = session.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError(
                    f"increment {model.__tablename__}: no row with id {row_id}"
                )
            row = session.get(model, row_id, populate_existing=True)
        assert row is not None  # updated within the same transaction
        return row

    def delete_where(self, model: type[Base], where: Mapping[str, Any] | None = None) -> int:
        stmt = delete(model).where(*_criteria(model, where))
        with self._session(f"delete from {model.__tablename__}") as session:
            return int(session.execute(stmt).rowcount or 0)

    def delete_all(self, models: Sequence[type[Base]]) -> None:
        """Delete every row of each model, in order, inside one transaction."""

        names = ", ".join(m.__tablename__ for m in models)
        with self._session(f"delete all from {names}") as session:
            for model in models:
                session.execute(delete(model))

    def ping(self) -> None:
        """Cheap round trip used by the connection check."""

        with self._session("connection check") as session:
            session.execute(select(DailySale.id).limit(1)).all()


__all__ = ["PersistenceGateway", "SqlGateway"]
