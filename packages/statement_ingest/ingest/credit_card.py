"""Credit-card statement parser and spend summary.

Same two-stage shape as :mod:`statement_ingest.ingest.pdf_statement`
(issuer fingerprint, then line regexes) but card lines carry a single amount
with an optional ``Cr``/``Dr`` suffix and no running balance. Merchant and a
spend-scoped category are assigned here, so card rows skip the bank
enrichment step. Credits (payments, refunds, cashback) are categorized
``Refund``.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from os import PathLike

from ..categorization import Categorizer
from ..errors import StatementFormatError
from ..logging_setup import get_logger
from ..models import (
    CardParseResult,
    CreditCardSummary,
    CreditCardTransaction,
    Direction,
    MerchantSpend,
)
from ..normalizers import is_iso_date, is_storable_amount, parse_amount, parse_date
from ..taxonomy import card_spend_taxonomy
from .pdf_statement import extract_pdf_text

_log = get_logger("statement_ingest.ingest.credit_card")

REFUND_CATEGORY = "Refund"
TOP_MERCHANTS = 10

# Plausible single-line card amounts, inclusive.
_MIN_AMOUNT = Decimal("1")
_MAX_AMOUNT = Decimal("10000000")
_MIN_DESCRIPTION_LEN = 3


@dataclass(frozen=True, slots=True)
class CardIssuerRule:
    tag: str
    detect: Callable[[str], bool]
    parse: Callable[[str, Categorizer], list[CreditCardTransaction]]


_PREFIX_RE = re.compile(r"^(POS|ECOM|ONLINE|INTL|INT'?L?)\s*", re.IGNORECASE)
_TRAILING_DIGITS_RE = re.compile(r"\s*\d{4,}.*$")


def clean_card_merchant(description: str) -> str:
    """Drop channel prefixes and trailing reference/card digits, title-case."""

    merchant = _PREFIX_RE.sub("", description)
    merchant = _TRAILING_DIGITS_RE.sub("", merchant).strip()
    return " ".join(w[:1].upper() + w[1:].lower() for w in merchant.split(" ") if w)


def _card_row(
    date_raw: str,
    description: str,
    amount: Decimal,
    direction: Direction,
    categorizer: Categorizer,
) -> CreditCardTransaction | None:
    date = parse_date(date_raw)
    if not is_iso_date(date) or not is_storable_amount(amount):
        return None
    description = description.strip()
    category = (
        REFUND_CATEGORY if direction == "credit" else categorizer.categorize(description)
    )
    return CreditCardTransaction(
        date=date,
        description=description,
        amount=amount,
        direction=direction,
        merchant=clean_card_merchant(description),
        category=category,
    )


# ---------------------------------------------------------------------------
# HDFC: date (DD-Mon-YYYY) / description / amount / optional Cr|Dr
# ---------------------------------------------------------------------------

HDFC_CARD_ROW_RE = re.compile(
    r"(\d{2}[/-]\w{3}[/-]\d{4})\s+(.+?)\s+([\d,]+\.?\d*)\s*(Cr|Dr)?", re.IGNORECASE
)


def parse_hdfc_card(text: str, categorizer: Categorizer) -> list[CreditCardTransaction]:
    out: list[CreditCardTransaction] = []
    for line in text.splitlines():
        m = HDFC_CARD_ROW_RE.search(line)
        if not m:
            continue
        date_raw, desc, amount_raw, marker = m.groups()
        direction: Direction = "credit" if (marker or "").lower() == "cr" else "debit"
        row = _card_row(date_raw, desc, parse_amount(amount_raw), direction, categorizer)
        if row is not None:
            out.append(row)
    return out


# ---------------------------------------------------------------------------
# Generic card lines: date + first amount on the line
# ---------------------------------------------------------------------------

_CARD_DATE_RE = re.compile(r"\d{2}[/-]\d{2}[/-]\d{2,4}|\d{2}[/-]\w{3}[/-]\d{2,4}")
_CARD_AMOUNT_RE = re.compile(r"[\d,]+\.\d{2}")
_CARD_CREDIT_RE = re.compile(r"cr|credit|refund|cashback", re.IGNORECASE)


def parse_generic_card(text: str, categorizer: Categorizer) -> list[CreditCardTransaction]:
    out: list[CreditCardTransaction] = []
    for line in text.splitlines():
        date_m = _CARD_DATE_RE.search(line)
        amount_m = _CARD_AMOUNT_RE.search(line)
        if not date_m or not amount_m:
            continue
        amount = parse_amount(amount_m.group(0))
        if amount < _MIN_AMOUNT or amount > _MAX_AMOUNT:
            continue
        description = line[date_m.end() : amount_m.start()].strip()
        if len(description) < _MIN_DESCRIPTION_LEN:
            continue
        direction: Direction = "credit" if _CARD_CREDIT_RE.search(line) else "debit"
        row = _card_row(date_m.group(0), description, amount, direction, categorizer)
        if row is not None:
            out.append(row)
    return out


CARD_ISSUERS: tuple[CardIssuerRule, ...] = (
    CardIssuerRule(
        "HDFC Credit Card",
        lambda t: "HDFC Bank" in t and ("Credit Card" in t or "CC Statement" in t),
        parse_hdfc_card,
    ),
    CardIssuerRule(
        "ICICI Credit Card",
        lambda t: "ICICI Bank" in t and "Card Statement" in t,
        parse_generic_card,
    ),
    CardIssuerRule(
        "SBI Card",
        lambda t: "SBI Card" in t or ("SBI" in t and "Credit Card" in t),
        parse_generic_card,
    ),
    CardIssuerRule(
        "Axis Credit Card",
        lambda t: "Axis Bank" in t and "Card Statement" in t,
        parse_generic_card,
    ),
    CardIssuerRule("Generic Credit Card", lambda _t: True, parse_generic_card),
)


def detect_card_issuer(
    text: str, issuers: Sequence[CardIssuerRule] = CARD_ISSUERS
) -> CardIssuerRule:
    for rule in issuers:
        if rule.detect(text):
            return rule
    raise StatementFormatError("no card issuer rule matched and no catch-all rule is configured")


def parse_card_statement_text(
    text: str,
    *,
    categorizer: Categorizer | None = None,
    issuers: Sequence[CardIssuerRule] = CARD_ISSUERS,
) -> CardParseResult:
    cat = categorizer or Categorizer(card_spend_taxonomy())
    rule = detect_card_issuer(text, issuers)
    _log.info("detected card issuer: %s", rule.tag)
    txns = rule.parse(text, cat)
    lines_total = sum(1 for ln in text.splitlines() if ln.strip())
    return CardParseResult(
        transactions=tuple(txns),
        issuer=rule.tag,
        lines_total=lines_total,
        lines_extracted=len(txns),
    )


def parse_card_pdf_file(
    path: str | PathLike[str], *, categorizer: Categorizer | None = None
) -> CardParseResult:
    return parse_card_statement_text(extract_pdf_text(path), categorizer=categorizer)


def summarize_card_transactions(txns: Iterable[CreditCardTransaction]) -> CreditCardSummary:
    """Reduce card rows to spend totals, category breakdown and top merchants.

    Payments are credits not categorized ``Refund``; cashback is the sum of
    ``Refund`` credits. Top merchants are ranked by debit spend; ties keep
    first-seen order.
    """

    zero = Decimal("0")
    total_spending = zero
    total_payments = zero
    cashback = zero
    count = 0
    breakdown: dict[str, Decimal] = {}
    merchants: dict[str, tuple[Decimal, int]] = {}

    for t in txns:
        count += 1
        if t.direction == "credit":
            if t.category == REFUND_CATEGORY:
                cashback += t.amount
            else:
                total_payments += t.amount
            continue
        total_spending += t.amount
        breakdown[t.category] = breakdown.get(t.category, zero) + t.amount
        spent, n = merchants.get(t.merchant, (zero, 0))
        merchants[t.merchant] = (spent + t.amount, n + 1)

    ranked = sorted(merchants.items(), key=lambda kv: kv[1][0], reverse=True)
    top = tuple(
        MerchantSpend(merchant=name, amount=amount, count=n)
        for name, (amount, n) in ranked[:TOP_MERCHANTS]
    )
    return CreditCardSummary(
        total_spending=total_spending,
        total_payments=total_payments,
        cashback_received=cashback,
        transaction_count=count,
        category_breakdown=breakdown,
        top_merchants=top,
    )


__all__ = [
    "REFUND_CATEGORY",
    "CardIssuerRule",
    "CARD_ISSUERS",
    "clean_card_merchant",
    "detect_card_issuer",
    "parse_hdfc_card",
    "parse_generic_card",
    "parse_card_statement_text",
    "parse_card_pdf_file",
    "summarize_card_transactions",
]
