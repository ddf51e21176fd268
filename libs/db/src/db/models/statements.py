from __future__ import annotations

from datetime import date as dt_date
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    text,
    true,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Reference: st_categories
# ---------------------------


class StCategory(Base):
    __tablename__ = "st_categories"

    code: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    # Direction-type hint: expense | income | transfer | investment
    kind: Mapped[str] = mapped_column(String, nullable=False, server_default=text("'expense'"))
    # Matching rules are stored as JSON lists so user-defined categories go
    # through the same categorizer code path as the packaged seed.
    keywords: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    patterns: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    # Display-only attributes; never read by the parsing core.
    icon: Mapped[str | None] = mapped_column(String, nullable=True)
    color: Mapped[str | None] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=true())
    sort_order: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    __table_args__ = (
        CheckConstraint(
            "kind in ('expense','income','transfer','investment')",
            name="ck_st_category_kind",
        ),
    )


# ---------------------------
# Core: st_transactions
# ---------------------------


class StTransaction(Base):
    __tablename__ = "st_transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    # Accounts are owned by an external collaborator; only the id is recorded.
    account_id: Mapped[str] = mapped_column(String, nullable=False)
    date: Mapped[dt_date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("''"))
    remarks: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("''"))
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    direction: Mapped[str] = mapped_column(String(6), nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False, server_default=text("'Other'"))
    merchant: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("''"))
    # Running balance exactly as printed on the statement (never recomputed).
    balance: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    reference: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("''"))
    mode: Mapped[str] = mapped_column(String, nullable=False, server_default=text("'Other'"))
    raw_record: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    __table_args__ = (
        CheckConstraint("direction in ('credit','debit')", name="ck_st_tx_direction"),
        CheckConstraint("amount > 0", name="ck_st_tx_amount_positive"),
        # Duplicate key: (account_id, date, amount, direction). Not unique on
        # purpose; the duplicate checker decides what to do with collisions.
        Index("ix_st_tx_duplicate_key", "account_id", "date", "amount", "direction"),
        Index("ix_st_tx_category", "category"),
    )


__all__ = [
    "Base",
    "StCategory",
    "StTransaction",
]
