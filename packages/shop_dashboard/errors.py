"""Error taxonomy surfaced by the dashboard core.

``PersistenceError`` (and its ``ConflictError``/``NotFoundError`` subclasses)
are defined by the ``shop_db`` gateway and re-exported here so presentation
code can import every failure type from one place.
"""

from __future__ import annotations

from shop_db.errors import ConflictError, NotFoundError, PersistenceError


class DashboardError(Exception):
    """Base class for failures raised by the dashboard itself."""


class ValidationError(DashboardError):
    """A sale was submitted without a single valid line item."""


class ConfigurationError(DashboardError):
    """Endpoint/credential configuration is missing or invalid (fatal at startup)."""


def error_kind(exc: BaseException) -> str:
    """Short, stable label for ``exc`` used in ``on_error`` events."""

    if isinstance(exc, ValidationError):
        return "validation"
    if isinstance(exc, ConfigurationError):
        return "configuration"
    if isinstance(exc, PersistenceError):
        return "persistence"
    return "unexpected"


__all__ = [
    "ConfigurationError",
    "ConflictError",
    "DashboardError",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
    "error_kind",
]
