# ruff: noqa: I001
"""Statement core tables: categories (matching rules) and transactions.

Revision ID: 0001_statement_core
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_statement_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "st_categories",
        sa.Column("code", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False, unique=True),
        sa.Column("kind", sa.String(), nullable=False, server_default=sa.text("'expense'")),
        sa.Column("keywords", sa.JSON(), nullable=False),
        sa.Column("patterns", sa.JSON(), nullable=False),
        sa.Column("icon", sa.String(), nullable=True),
        sa.Column("color", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.CheckConstraint(
            "kind in ('expense','income','transfer','investment')",
            name="ck_st_category_kind",
        ),
    )

    op.create_table(
        "st_transactions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("account_id", sa.String(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("remarks", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("direction", sa.String(6), nullable=False),
        sa.Column("category", sa.String(), nullable=False, server_default=sa.text("'Other'")),
        sa.Column("merchant", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("balance", sa.Numeric(18, 2), nullable=True),
        sa.Column("reference", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("mode", sa.String(), nullable=False, server_default=sa.text("'Other'")),
        sa.Column("raw_record", sa.JSON(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.CheckConstraint("direction in ('credit','debit')", name="ck_st_tx_direction"),
        sa.CheckConstraint("amount > 0", name="ck_st_tx_amount_positive"),
    )
    op.create_index(
        "ix_st_tx_duplicate_key",
        "st_transactions",
        ["account_id", "date", "amount", "direction"],
    )
    op.create_index("ix_st_tx_category", "st_transactions", ["category"])


def downgrade() -> None:
    op.drop_index("ix_st_tx_category", table_name="st_transactions")
    op.drop_index("ix_st_tx_duplicate_key", table_name="st_transactions")
    op.drop_table("st_transactions")
    op.drop_table("st_categories")
