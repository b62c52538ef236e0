"""Data models for ``shop_dashboard``.

Line items are validated with pydantic because they arrive as loosely typed
form input (strings from a prompt, floats from JSON). Persisted records are
plain frozen dataclasses built from the ORM rows returned by the gateway, so
nothing outside ``shop_db`` ever holds a live SQLAlchemy object.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, TypeAlias

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from shop_db.models import DailySale, SalesTransactionRow

# ---------------------------------------------------------------------------
# Sale line items (transient)
# ---------------------------------------------------------------------------

CandidateItem: TypeAlias = Mapping[str, Any]
"""Raw line-item input: ``name``, ``price`` (or ``unit_price``) and ``quantity``.

Values may be strings, ints, floats or Decimals. Candidates are filtered by
:func:`shop_dashboard.ledger.accept_line_items` before anything is persisted.
"""


class LineItem(BaseModel):
    """One accepted line of a sale: non-empty name, price > 0, quantity >= 1."""

    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    name: str = Field(min_length=1)
    unit_price: Decimal = Field(
        gt=0, validation_alias=AliasChoices("unit_price", "price")
    )
    quantity: int = Field(ge=1)

    @field_validator("unit_price", mode="before")
    @classmethod
    def _price_from_input(cls, v: Any) -> Any:
        # Floats go through str() so 20.1 becomes Decimal("20.1"), not its binary expansion.
        if isinstance(v, float):
            return Decimal(str(v))
        if isinstance(v, str):
            return v.strip()
        return v

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_record(self) -> dict[str, Any]:
        """JSON-safe shape stored in ``sales_transactions.items``."""

        return {"name": self.name, "price": str(self.unit_price), "quantity": self.quantity}


# ---------------------------------------------------------------------------
# Persisted records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SalesTransaction:
    """An immutable, persisted sale."""

    id: uuid.UUID
    sale_date: date
    items: tuple[LineItem, ...]
    total_amount: Decimal
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: SalesTransactionRow) -> SalesTransaction:
        return cls(
            id=row.id,
            sale_date=row.sale_date,
            items=tuple(LineItem.model_validate(item) for item in row.items),
            total_amount=Decimal(row.total_amount),
            created_at=row.created_at,
        )


@dataclass(frozen=True, slots=True)
class DailyAggregate:
    """The single per-date summary row (``daily_sales``)."""

    id: uuid.UUID
    date: date
    total_amount: Decimal
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: DailySale) -> DailyAggregate:
        return cls(
            id=row.id,
            date=row.date,
            total_amount=Decimal(row.total_amount),
            updated_at=row.updated_at,
        )


# ---------------------------------------------------------------------------
# Read-side projections
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DailySummary:
    """Today's running figures shown on the dashboard."""

    date: date
    total_amount: Decimal
    transaction_count: int


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """One past day in the sales history."""

    date: date
    total_amount: Decimal


__all__ = [
    "CandidateItem",
    "DailyAggregate",
    "DailySummary",
    "HistoryEntry",
    "LineItem",
    "SalesTransaction",
]
