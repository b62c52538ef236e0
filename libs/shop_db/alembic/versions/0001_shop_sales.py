# ruff: noqa: I001
"""Daily aggregates and the sales transaction log.

Revision ID: 0001_shop_sales
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "0001_shop_sales"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # daily_sales: one aggregate row per calendar date
    op.create_table(
        "daily_sales",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("total_amount", sa.Numeric(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.UniqueConstraint("date", name="uq_daily_sales_date"),
        sa.CheckConstraint("total_amount >= 0", name="ck_daily_sales_total_non_negative"),
    )

    # sales_transactions: immutable sale log
    op.create_table(
        "sales_transactions",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("sale_date", sa.Date(), nullable=False),
        sa.Column("items", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("total_amount", sa.Numeric(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.CheckConstraint("total_amount > 0", name="ck_sales_transactions_total_positive"),
    )
    op.create_index(
        "ix_sales_transactions_sale_date", "sales_transactions", ["sale_date"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_sales_transactions_sale_date", table_name="sales_transactions")
    op.drop_table("sales_transactions")
    op.drop_table("daily_sales")
