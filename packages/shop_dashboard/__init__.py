"""Public interface for the ``shop_dashboard`` package.

This module exposes the session facade, the core components and the public
models/errors as the stable import surface. There is no runtime logic here,
only symbol re-exports.
"""

from .aggregator import DailyAggregator
from .config import Settings, load_settings
from .dashboard import ShopDashboard
from .errors import (
    ConfigurationError,
    ConflictError,
    DashboardError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from .events import DashboardListener
from .ledger import SalesLedger, accept_line_items, compute_total
from .models import (
    CandidateItem,
    DailyAggregate,
    DailySummary,
    HistoryEntry,
    LineItem,
    SalesTransaction,
)
from .reset import reset_all
from .rollover import DayRolloverMonitor

__all__ = [
    # Session / components
    "ShopDashboard",
    "SalesLedger",
    "DailyAggregator",
    "DayRolloverMonitor",
    "DashboardListener",
    "accept_line_items",
    "compute_total",
    "reset_all",
    # Configuration
    "Settings",
    "load_settings",
    # Models / types
    "CandidateItem",
    "LineItem",
    "SalesTransaction",
    "DailyAggregate",
    "DailySummary",
    "HistoryEntry",
    # Errors
    "DashboardError",
    "ValidationError",
    "ConfigurationError",
    "PersistenceError",
    "ConflictError",
    "NotFoundError",
]
