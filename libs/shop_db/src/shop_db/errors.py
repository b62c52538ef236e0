"""Typed failures raised by the persistence gateway.

SQLAlchemy exceptions never cross the gateway boundary; callers only ever see
``PersistenceError`` or one of its subclasses.
"""

from __future__ import annotations


class PersistenceError(Exception):
    """Any failure talking to the store (network, auth, constraint, timeout).

    ``transient`` is True for failures a caller may reasonably retry as-is
    (timeouts, dropped connections).
    """

    def __init__(self, message: str, *, transient: bool = False) -> None:
        super().__init__(message)
        self.transient = transient


class ConflictError(PersistenceError):
    """A unique or check constraint rejected the write."""


class NotFoundError(PersistenceError):
    """The row addressed by id does not exist."""


__all__ = ["ConflictError", "NotFoundError", "PersistenceError"]
