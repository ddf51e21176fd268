"""Duplicate detection and duplicate-checked import.

Re-imports are common (monthly PDFs with overlapping ranges, the same month
as PDF and as CSV). Two records are duplicates when they share the exact key
``(account_id, date, amount, direction)``. Description is not part of the key
because the same transaction is narrated differently across export formats.
There is no fuzzy matching.

Storage is abstracted behind :class:`TransactionStore`;
:class:`statement_ingest.persistence.SqlTransactionStore` is the SQLAlchemy
implementation.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from .logging_setup import get_logger
from .models import Direction, DuplicateMatch, EnrichedTransaction, ImportReport

_log = get_logger("statement_ingest.duplicates")

type DuplicateKey = tuple[str, str, Decimal, Direction]


class TransactionStore(Protocol):
    def insert(self, account_id: str, txn: EnrichedTransaction) -> str:
        """Persist ``txn`` and return its new identifier."""
        ...

    def exists_by_key(
        self, account_id: str, date: str, amount: Decimal, direction: Direction
    ) -> str | None:
        """Return the id of a stored record with this key, or ``None``."""
        ...


def duplicate_key(account_id: str, txn: EnrichedTransaction) -> DuplicateKey:
    amount = txn.amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return (account_id, txn.date, amount, txn.direction)


def _stored_id(store: TransactionStore, account_id: str, txn: EnrichedTransaction) -> str | None:
    _, date, amount, direction = duplicate_key(account_id, txn)
    return store.exists_by_key(account_id, date, amount, direction)


def find_duplicates(
    store: TransactionStore, account_id: str, candidates: Iterable[EnrichedTransaction]
) -> list[DuplicateMatch]:
    """Return the candidates that already exist in ``store``, in input order."""

    matches: list[DuplicateMatch] = []
    for txn in candidates:
        existing = _stored_id(store, account_id, txn)
        if existing is not None:
            matches.append(DuplicateMatch(transaction=txn, existing_id=existing))
    return matches


def import_transactions(
    store: TransactionStore,
    account_id: str,
    candidates: Iterable[EnrichedTransaction],
    *,
    skip_duplicates: bool = True,
) -> ImportReport:
    """Insert candidates that are not duplicates and report what happened.

    Every candidate is checked against the store before anything is inserted,
    so identical rows within one statement (two equal purchases on the same
    day) are all kept. A candidate colliding with a stored record is reported
    in ``ImportReport.duplicates``; with ``skip_duplicates=False`` it is
    reported and inserted anyway. Atomicity is the caller's session scope.
    """

    # Resolve every lookup up front; inserts flush and must not be seen here.
    checked = [(txn, _stored_id(store, account_id, txn)) for txn in candidates]

    report = ImportReport()
    for txn, existing in checked:
        if existing is not None:
            report.duplicates.append(DuplicateMatch(transaction=txn, existing_id=existing))
            if skip_duplicates:
                continue
        report.inserted_ids.append(store.insert(account_id, txn))

    _log.info(
        "import for account %s: %d inserted, %d duplicates",
        account_id,
        report.inserted,
        len(report.duplicates),
    )
    return report


__all__ = [
    "DuplicateKey",
    "TransactionStore",
    "duplicate_key",
    "find_duplicates",
    "import_transactions",
]
