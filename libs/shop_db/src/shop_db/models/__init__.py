"""Shared SQLAlchemy models registry for the shop database.

Holds the two collections used by the dashboard: ``daily_sales`` (one
aggregate per calendar date) and ``sales_transactions`` (the sale log).
"""

from .sales import Base, DailySale, SalesTransactionRow

__all__ = [
    "Base",
    "DailySale",
    "SalesTransactionRow",
]
