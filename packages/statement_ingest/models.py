"""Data models for ``statement_ingest``.

Parsers emit :class:`RawTransaction` rows; enrichment turns them into
:class:`EnrichedTransaction` rows that are ready for a storage collaborator.
Amounts are always non-negative ``Decimal`` magnitudes; ``direction`` carries
the sign semantics. Dates are ISO ``YYYY-MM-DD`` strings.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Literal

type Direction = Literal["credit", "debit"]
type ExtractionOutcome = Literal["ok", "empty", "no_transactions"]

_CENTS = Decimal("0.01")


def fmt_decimal(value: Decimal | None) -> str | None:
    """Render a decimal with exactly two places (``None`` passes through)."""

    if value is None:
        return None
    return f"{value.quantize(_CENTS, rounding=ROUND_HALF_UP):.2f}"


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RawTransaction:
    """One transaction as extracted from a statement, before enrichment.

    ``balance`` is the running balance exactly as printed on the statement,
    or ``None`` when the source has no balance column. It is never derived
    from running sums.
    """

    date: str
    description: str
    amount: Decimal
    direction: Direction
    remarks: str = ""
    balance: Decimal | None = None
    reference: str = ""
    mode: str = "Other"


@dataclass(frozen=True, slots=True)
class EnrichedTransaction:
    """A :class:`RawTransaction` plus derived merchant and category."""

    date: str
    description: str
    amount: Decimal
    direction: Direction
    remarks: str = ""
    balance: Decimal | None = None
    reference: str = ""
    mode: str = "Other"
    merchant: str = ""
    category: str = "Other"

    @classmethod
    def from_raw(
        cls, raw: RawTransaction, *, merchant: str, category: str
    ) -> EnrichedTransaction:
        return cls(
            date=raw.date,
            description=raw.description,
            amount=raw.amount,
            direction=raw.direction,
            remarks=raw.remarks,
            balance=raw.balance,
            reference=raw.reference,
            mode=raw.mode,
            merchant=merchant,
            category=category,
        )

    def as_record(self) -> dict[str, Any]:
        """Return a JSON-friendly dict (decimals rendered as 2dp strings)."""

        rec = asdict(self)
        rec["amount"] = fmt_decimal(self.amount)
        rec["balance"] = fmt_decimal(self.balance)
        return rec


@dataclass(frozen=True, slots=True)
class CreditCardTransaction:
    """A card statement line; the card parser assigns merchant and category."""

    date: str
    description: str
    amount: Decimal
    direction: Direction
    merchant: str
    category: str
    remarks: str = ""
    reference: str = ""


# ---------------------------------------------------------------------------
# Parse results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Outcome of parsing one statement.

    ``lines_total`` counts candidate input lines/rows and ``lines_extracted``
    the transactions produced from them. A non-empty statement yielding zero
    transactions is reported through ``outcome == "no_transactions"`` rather
    than an exception so callers can suggest another export format.
    """

    transactions: tuple[RawTransaction, ...]
    issuer: str
    lines_total: int
    lines_extracted: int
    used_fallback: bool = False

    @property
    def outcome(self) -> ExtractionOutcome:
        if self.lines_extracted > 0:
            return "ok"
        if self.lines_total == 0:
            return "empty"
        return "no_transactions"


@dataclass(frozen=True, slots=True)
class CardParseResult:
    transactions: tuple[CreditCardTransaction, ...]
    issuer: str
    lines_total: int
    lines_extracted: int


@dataclass(frozen=True, slots=True)
class MerchantSpend:
    merchant: str
    amount: Decimal
    count: int


@dataclass(frozen=True, slots=True)
class CreditCardSummary:
    total_spending: Decimal
    total_payments: Decimal
    cashback_received: Decimal
    transaction_count: int
    category_breakdown: dict[str, Decimal]
    top_merchants: tuple[MerchantSpend, ...]


# ---------------------------------------------------------------------------
# Duplicate detection / import
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DuplicateMatch:
    """A candidate that collides with an already stored record."""

    transaction: EnrichedTransaction
    existing_id: str


@dataclass(slots=True)
class ImportReport:
    inserted_ids: list[str] = field(default_factory=list)
    duplicates: list[DuplicateMatch] = field(default_factory=list)

    @property
    def inserted(self) -> int:
        return len(self.inserted_ids)


__all__ = [
    "Direction",
    "ExtractionOutcome",
    "RawTransaction",
    "EnrichedTransaction",
    "CreditCardTransaction",
    "ParseResult",
    "CardParseResult",
    "MerchantSpend",
    "CreditCardSummary",
    "DuplicateMatch",
    "ImportReport",
    "fmt_decimal",
]
