from __future__ import annotations

import uuid
import datetime as dt
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Date,
    DateTime,
    Index,
    Numeric,
    Uuid,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Aggregate: daily_sales
# ---------------------------


class DailySale(Base):
    __tablename__ = "daily_sales"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # One row per calendar date; the Daily Aggregator relies on this to detect
    # a concurrent creation by another session.
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, unique=True)
    # Unconstrained NUMERIC keeps full precision; rounding happens on display.
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric, nullable=False, server_default="0"
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="ck_daily_sales_total_non_negative"),
    )


# ---------------------------
# Log: sales_transactions
# ---------------------------


class SalesTransactionRow(Base):
    __tablename__ = "sales_transactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    sale_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    # Ordered line items: [{"name": str, "price": "<decimal str>", "quantity": int}, ...]
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric, nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("total_amount > 0", name="ck_sales_transactions_total_positive"),
        Index("ix_sales_transactions_sale_date", "sale_date"),
    )


__all__ = [
    "Base",
    "DailySale",
    "SalesTransactionRow",
]
