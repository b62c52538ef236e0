"""Sales Ledger: validates candidate line items and persists one transaction.

The ledger never touches ``daily_sales``. Callers apply the returned
transaction's total to the Daily Aggregator only after :meth:`SalesLedger.record_sale`
succeeds, so a failed write can never leave an orphaned aggregate increment.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, date, datetime
from decimal import Decimal

from pydantic import ValidationError as PydanticValidationError

from shop_db.gateway import PersistenceGateway
from shop_db.models import SalesTransactionRow

from .errors import ValidationError
from .logging_setup import get_logger
from .models import CandidateItem, LineItem, SalesTransaction

_logger = get_logger("shop_dashboard.ledger")


def accept_line_items(candidates: Iterable[CandidateItem | LineItem]) -> list[LineItem]:
    """Return the valid items in input order, dropping the rest.

    An item is dropped when its (stripped) name is empty, its price is not a
    positive number, or its quantity is not an integer >= 1.
    """

    accepted: list[LineItem] = []
    for pos, raw in enumerate(candidates):
        if isinstance(raw, LineItem):
            accepted.append(raw)
            continue
        try:
            accepted.append(LineItem.model_validate(dict(raw)))
        except (PydanticValidationError, TypeError, ValueError) as exc:
            _logger.debug("dropping line item %d: %s", pos, exc)
    return accepted


def compute_total(items: Iterable[LineItem]) -> Decimal:
    """Exact sum of ``unit_price * quantity`` (no rounding)."""

    return sum((item.line_total for item in items), Decimal(0))


class SalesLedger:
    """Owns creation of ``sales_transactions`` rows."""

    def __init__(
        self, gateway: PersistenceGateway, *, today: Callable[[], date] = date.today
    ) -> None:
        self._gateway = gateway
        self._today = today

    def record_sale(self, candidates: Sequence[CandidateItem | LineItem]) -> SalesTransaction:
        """Persist one sale built from the valid subset of ``candidates``.

        Raises
        ------
        ValidationError
            No candidate survived filtering; nothing is written.
        PersistenceError
            The insert failed; nothing is written.
        """

        items = accept_line_items(candidates)
        if not items:
            raise ValidationError(
                "Please add at least one valid item (name, price > 0, quantity >= 1)."
            )

        total = compute_total(items)
        sale_date = self._today()
        row = self._gateway.insert(
            SalesTransactionRow,
            {
                "sale_date": sale_date,
                "items": [item.to_record() for item in items],
                "total_amount": total,
                "created_at": datetime.now(UTC),
            },
        )
        transaction = SalesTransaction.from_row(row)
        _logger.info(
            "recorded sale %s on %s: %d item(s), total %s",
            transaction.id,
            sale_date.isoformat(),
            len(items),
            total,
        )
        return transaction


__all__ = ["SalesLedger", "accept_line_items", "compute_total"]
