"""Full reset: delete every transaction and every daily aggregate.

Both deletes run inside one database transaction, so a failure leaves the store
exactly as it was. The operation is irreversible and therefore gated behind two
explicit confirmations.
"""

from __future__ import annotations

from collections.abc import Callable

from shop_db.gateway import PersistenceGateway
from shop_db.models import DailySale, SalesTransactionRow

from .aggregator import DailyAggregator
from .logging_setup import get_logger
from .models import DailyAggregate

_logger = get_logger("shop_dashboard.reset")

FIRST_WARNING = (
    "WARNING: This will permanently delete ALL sales data from the database.\n\n"
    "This includes:\n"
    "  - All daily sales records\n"
    "  - All transaction history\n"
    "  - All historical data\n\n"
    "This action CANNOT be undone!\n\n"
    "Are you sure you want to proceed?"
)

FINAL_WARNING = (
    "FINAL WARNING!\n\n"
    "This is your last chance to cancel.\n\n"
    "Confirm to DELETE ALL DATA permanently."
)


def reset_all(
    gateway: PersistenceGateway,
    aggregator: DailyAggregator,
    *,
    confirm: Callable[[str], bool],
) -> DailyAggregate | None:
    """Wipe all sales data after two confirmations and re-create today's aggregate.

    Returns the fresh aggregate, or ``None`` when either confirmation was
    declined (in which case nothing was touched).

    Raises
    ------
    PersistenceError
        The delete or the re-initialization failed. A failed delete is rolled
        back as a whole; a failed re-initialization leaves an empty store and
        an unset cache, recoverable by ``ensure_today_record``.
    """

    if not confirm(FIRST_WARNING):
        _logger.info("reset cancelled at first confirmation")
        return None
    if not confirm(FINAL_WARNING):
        _logger.info("reset cancelled at final confirmation")
        return None

    gateway.delete_all([SalesTransactionRow, DailySale])
    aggregator.clear()
    _logger.warning("all sales data deleted")
    return aggregator.ensure_today_record()


__all__ = ["FINAL_WARNING", "FIRST_WARNING", "reset_all"]
