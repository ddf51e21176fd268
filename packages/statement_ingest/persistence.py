"""Persistence integration for statement_ingest.

Writes enriched transactions to the shared database owned by ``libs/db``
using the ORM models in ``db.models.statements`` and a session provided by
``db.client``. The session's owner (usually ``db.client.session_scope``)
decides commit/rollback, so one import batch is all-or-nothing.
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from db.models import StTransaction
from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import Direction, EnrichedTransaction

_CENTS = Decimal("0.01")


def _to_decimal_2(value: Decimal | None) -> Decimal | None:
    if value is None:
        return None
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


class SqlTransactionStore:
    """:class:`~statement_ingest.duplicates.TransactionStore` over ``st_transactions``."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def insert(self, account_id: str, txn: EnrichedTransaction) -> str:
        row = StTransaction(
            id=str(uuid.uuid4()),
            account_id=account_id,
            date=date.fromisoformat(txn.date),
            description=txn.description,
            remarks=txn.remarks,
            amount=_to_decimal_2(txn.amount),
            direction=txn.direction,
            category=txn.category,
            merchant=txn.merchant,
            balance=_to_decimal_2(txn.balance),
            reference=txn.reference,
            mode=txn.mode,
            raw_record=txn.as_record(),
        )
        self.session.add(row)
        # Flush so the generated id is available to the caller.
        self.session.flush()
        return row.id

    def exists_by_key(
        self, account_id: str, date: str, amount: Decimal, direction: Direction
    ) -> str | None:
        stmt = (
            select(StTransaction.id)
            .where(
                StTransaction.account_id == account_id,
                StTransaction.date == _parse_iso(date),
                StTransaction.amount == _to_decimal_2(amount),
                StTransaction.direction == direction,
            )
            .order_by(StTransaction.created_at, StTransaction.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()

    def list_transactions(self, account_id: str) -> list[StTransaction]:
        stmt = (
            select(StTransaction)
            .where(StTransaction.account_id == account_id)
            .order_by(StTransaction.date, StTransaction.created_at)
        )
        return list(self.session.execute(stmt).scalars().all())


def _parse_iso(value: str) -> date:
    return date.fromisoformat(value)


__all__ = ["SqlTransactionStore"]
