"""shop_db: shared database library (SQLAlchemy/Alembic/Supabase).

Public exports
--------------
- ``Base`` and ``metadata`` for Alembic autogenerate/targeting
- ORM models in ``shop_db.models.sales`` (re-exported for convenience)
- The persistence gateway in ``shop_db.gateway`` and its errors
- Engine/session helpers in ``shop_db.client``
"""

from __future__ import annotations

from .errors import ConflictError, NotFoundError, PersistenceError
from .gateway import PersistenceGateway, SqlGateway
from .models.sales import Base, DailySale, SalesTransactionRow

# Re-export SQLAlchemy metadata for Alembic's env.py
metadata = Base.metadata

__all__ = [
    "Base",
    "ConflictError",
    "DailySale",
    "NotFoundError",
    "PersistenceError",
    "PersistenceGateway",
    "SalesTransactionRow",
    "SqlGateway",
    "metadata",
]
