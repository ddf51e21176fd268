"""Issuer-aware parser for flattened bank statement text.

The input is line-oriented text as produced by any PDF text extraction layer
(table structure lost, reading order kept). Parsing is two-stage:

1. issuer detection: the document text is tested against an ordered list of
   :class:`IssuerRule` fingerprints; the first hit wins and an always-true
   ``Generic`` rule sits last;
2. line extraction with the issuer's row regexes. Each regex documents its
   capture groups below; the layouts are deliberately kept separate instead
   of being folded into one clever pattern.

A dedicated issuer parser that yields nothing falls through to the generic
extractor (``ParseResult.used_fallback``). Balances are copied verbatim from
the document and never recomputed.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from os import PathLike
from pathlib import Path

import pdfplumber

from ..errors import StatementFormatError
from ..logging_setup import get_logger
from ..models import Direction, ParseResult, RawTransaction
from ..modes import detect_mode
from ..normalizers import is_iso_date, is_storable_amount, parse_amount, parse_date

_log = get_logger("statement_ingest.ingest.pdf_statement")

GENERIC_TAG = "Generic"

type LineParser = Callable[[str], list[RawTransaction]]


@dataclass(frozen=True, slots=True)
class IssuerRule:
    tag: str
    detect: Callable[[str], bool]
    parse: LineParser


def _lines(text: str) -> list[str]:
    return [ln for ln in text.splitlines() if ln.strip()]


def _column_amount(raw: str | None) -> Decimal:
    # Optional numeric columns use "-" as an explicit empty placeholder.
    if not raw or raw == "-":
        return Decimal("0")
    return parse_amount(raw)


def _debit_or_credit(debit: Decimal, credit: Decimal) -> tuple[Decimal, Direction] | None:
    if debit > 0:
        return debit, "debit"
    if credit > 0:
        return credit, "credit"
    return None


def _row(
    date_raw: str,
    description: str,
    amount: Decimal,
    direction: Direction,
    *,
    balance: Decimal | None,
    reference: str = "",
    mode: str | None = None,
) -> RawTransaction | None:
    date = parse_date(date_raw)
    if not is_iso_date(date) or not is_storable_amount(amount):
        return None
    description = description.strip()
    return RawTransaction(
        date=date,
        description=description,
        amount=amount,
        direction=direction,
        balance=balance,
        reference=reference,
        mode=mode if mode is not None else detect_mode(description),
    )


# ---------------------------------------------------------------------------
# SBI: date / description / ref no / debit / credit / balance
# ---------------------------------------------------------------------------

SBI_ROW_RE = re.compile(
    r"(\d{2}[/-]\d{2}[/-]\d{4})\s+(.+?)\s+(\d+)\s+([\d,]+\.?\d*|-)?\s+([\d,]+\.?\d*|-)?\s+([\d,]+\.?\d*)"
)


def parse_sbi(text: str) -> list[RawTransaction]:
    out: list[RawTransaction] = []
    for line in _lines(text):
        m = SBI_ROW_RE.search(line)
        if not m:
            continue
        date_raw, desc, ref, debit_raw, credit_raw, balance_raw = m.groups()
        picked = _debit_or_credit(_column_amount(debit_raw), _column_amount(credit_raw))
        if picked is None:
            continue
        row = _row(date_raw, desc, *picked, balance=parse_amount(balance_raw), reference=ref)
        if row is not None:
            out.append(row)
    return out


# ---------------------------------------------------------------------------
# HDFC
#   (1) date / narration / chq-ref / value date / withdrawal / deposit / balance
#   (2) date / narration / amount / Dr|Cr / balance
# ---------------------------------------------------------------------------

HDFC_TABLE_RE = re.compile(
    r"(\d{2}/\d{2}/\d{2,4})\s+(.+?)\s+(\S+)\s+\d{2}/\d{2}/\d{2,4}\s+"
    r"([\d,]+\.?\d*|0\.00)\s+([\d,]+\.?\d*|0\.00)\s+([\d,]+\.?\d*)"
)
HDFC_MARKER_RE = re.compile(
    r"(\d{2}[/-]\d{2}[/-]\d{2,4})\s+(.+?)\s+([\d,]+\.?\d*)\s+(Dr|Cr)\s+([\d,]+\.?\d*)",
    re.IGNORECASE,
)


def parse_hdfc(text: str) -> list[RawTransaction]:
    out: list[RawTransaction] = []
    for line in _lines(text):
        row: RawTransaction | None = None
        m = HDFC_TABLE_RE.search(line)
        if m:
            date_raw, desc, ref, withdrawal, deposit, balance_raw = m.groups()
            picked = _debit_or_credit(parse_amount(withdrawal), parse_amount(deposit))
            if picked is not None:
                row = _row(date_raw, desc, *picked, balance=parse_amount(balance_raw), reference=ref)
        else:
            m = HDFC_MARKER_RE.search(line)
            if m:
                date_raw, desc, amount_raw, marker, balance_raw = m.groups()
                direction: Direction = "credit" if marker.lower() == "cr" else "debit"
                row = _row(
                    date_raw, desc, parse_amount(amount_raw), direction, balance=parse_amount(balance_raw)
                )
        if row is not None:
            out.append(row)
    return out


# ---------------------------------------------------------------------------
# ICICI: date / mode / particulars / deposit / withdrawal / balance
# ---------------------------------------------------------------------------

ICICI_ROW_RE = re.compile(
    r"(\d{2}[/-]\d{2}[/-]\d{4})\s+(\w+)\s+(.+?)\s+([\d,]+\.?\d*|-)?\s+([\d,]+\.?\d*|-)?\s+([\d,]+\.?\d*)"
)


def parse_icici(text: str) -> list[RawTransaction]:
    out: list[RawTransaction] = []
    for line in _lines(text):
        m = ICICI_ROW_RE.search(line)
        if not m:
            continue
        date_raw, mode_token, desc, deposit_raw, withdrawal_raw, balance_raw = m.groups()
        # Column order is deposit then withdrawal; a withdrawal decides debit.
        picked = _debit_or_credit(_column_amount(withdrawal_raw), _column_amount(deposit_raw))
        if picked is None:
            continue
        row = _row(
            date_raw,
            desc,
            *picked,
            balance=parse_amount(balance_raw),
            mode=detect_mode(f"{mode_token} {desc}"),
        )
        if row is not None:
            out.append(row)
    return out


# ---------------------------------------------------------------------------
# Axis: date / particulars / debit / credit / balance
# ---------------------------------------------------------------------------

AXIS_ROW_RE = re.compile(
    r"(\d{2}[/-]\d{2}[/-]\d{4})\s+(.+?)\s+([\d,]+\.?\d*)\s+([\d,]+\.?\d*)\s+([\d,]+\.?\d*)"
)


def parse_axis(text: str) -> list[RawTransaction]:
    out: list[RawTransaction] = []
    for line in _lines(text):
        m = AXIS_ROW_RE.search(line)
        if not m:
            continue
        date_raw, desc, debit_raw, credit_raw, balance_raw = m.groups()
        picked = _debit_or_credit(parse_amount(debit_raw), parse_amount(credit_raw))
        if picked is None:
            continue
        row = _row(date_raw, desc, *picked, balance=parse_amount(balance_raw))
        if row is not None:
            out.append(row)
    return out


# ---------------------------------------------------------------------------
# Generic fallback
# ---------------------------------------------------------------------------

# Trigger patterns; only the first one captures an explicit Dr/Cr marker.
GENERIC_TRIGGERS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"(\d{2}[/-]\d{2}[/-]\d{2,4})\s+(.{10,50}?)\s+([\d,]+\.?\d*)\s*"
        r"(?:(Dr|Cr|D|C)(?![a-z]))?\s*([\d,]+\.?\d*)?",
        re.IGNORECASE,
    ),
    re.compile(
        r"(\d{2}[/-]\w{3}[/-]\d{2,4})\s+(.+?)\s+([\d,]+\.?\d*)\s+([\d,]+\.?\d*)\s+([\d,]+\.?\d*)"
    ),
    re.compile(r"(UPI|NEFT|IMPS|RTGS)[/-](.+?)\s+([\d,]+\.?\d*)", re.IGNORECASE),
)

_GENERIC_DATE_RE = re.compile(r"\d{2}[/-]\d{2}[/-]\d{2,4}|\d{2}[/-]\w{3}[/-]\d{2,4}")
_GENERIC_AMOUNT_RE = re.compile(r"[\d,]+\.\d{2}")
_DEBIT_HINT_RE = re.compile(r"dr|debit|withdrawal|paid|transferred", re.IGNORECASE)
_CREDIT_HINT_RE = re.compile(r"cr|credit|deposit|received|credited", re.IGNORECASE)


def _generic_direction(line: str, marker: str | None) -> Direction:
    if marker:
        return "credit" if marker.lower().startswith("c") else "debit"
    if _DEBIT_HINT_RE.search(line):
        return "debit"
    if _CREDIT_HINT_RE.search(line):
        return "credit"
    # Unclassifiable narration is more often spend than income.
    return "debit"


def parse_generic_line(line: str) -> RawTransaction | None:
    """Extract one transaction from a single line, or ``None``."""

    trigger = next((m for m in (p.search(line) for p in GENERIC_TRIGGERS) if m), None)
    if trigger is None:
        return None

    date_m = _GENERIC_DATE_RE.search(line)
    if date_m is None:
        return None
    amounts = list(_GENERIC_AMOUNT_RE.finditer(line))
    if not amounts:
        return None

    amount = parse_amount(amounts[0].group(0))
    balance = parse_amount(amounts[-1].group(0)) if len(amounts) > 1 else None

    description = line[date_m.end() : amounts[0].start()].strip()
    if not description:
        description = line[:50].strip()

    marker = trigger.group(4) if trigger.re is GENERIC_TRIGGERS[0] else None
    date = parse_date(date_m.group(0))
    if not is_iso_date(date) or not is_storable_amount(amount):
        return None
    return RawTransaction(
        date=date,
        description=description,
        amount=amount,
        direction=_generic_direction(line, marker),
        balance=balance,
        mode=detect_mode(line),
    )


def parse_generic(text: str) -> list[RawTransaction]:
    out: list[RawTransaction] = []
    for line in _lines(text):
        row = parse_generic_line(line)
        if row is not None:
            out.append(row)
    return out


# ---------------------------------------------------------------------------
# Issuer table
# ---------------------------------------------------------------------------


def _contains_any(*needles: str) -> Callable[[str], bool]:
    def detect(text: str) -> bool:
        return any(n in text for n in needles)

    return detect


BANK_ISSUERS: tuple[IssuerRule, ...] = (
    IssuerRule("SBI", _contains_any("State Bank of India", "SBI"), parse_sbi),
    IssuerRule("HDFC", _contains_any("HDFC Bank", "HDFC BANK"), parse_hdfc),
    IssuerRule("ICICI", _contains_any("ICICI Bank", "ICICI BANK"), parse_icici),
    IssuerRule("Axis", _contains_any("Axis Bank", "AXIS BANK"), parse_axis),
    IssuerRule("Kotak", _contains_any("Kotak Mahindra", "KOTAK"), parse_generic),
    IssuerRule("PNB", _contains_any("Punjab National Bank", "PNB"), parse_generic),
    IssuerRule("BOB", _contains_any("Bank of Baroda", "BOB"), parse_generic),
    IssuerRule("Canara", _contains_any("Canara Bank"), parse_generic),
    IssuerRule(GENERIC_TAG, lambda _text: True, parse_generic),
)


def detect_issuer(text: str, issuers: Sequence[IssuerRule] = BANK_ISSUERS) -> IssuerRule:
    for rule in issuers:
        if rule.detect(text):
            return rule
    raise StatementFormatError("no issuer rule matched and no catch-all rule is configured")


def parse_statement_text(text: str, issuers: Sequence[IssuerRule] = BANK_ISSUERS) -> ParseResult:
    """Detect the issuer and extract transactions from flattened text."""

    lines_total = len(_lines(text))
    rule = detect_issuer(text, issuers)
    _log.info("detected issuer: %s", rule.tag)

    txns = rule.parse(text)
    used_fallback = False
    if not txns and rule.parse is not parse_generic and lines_total:
        _log.info("%s parser matched no lines; falling back to generic extraction", rule.tag)
        txns = parse_generic(text)
        used_fallback = True

    _log.debug("extracted %d transactions from %d lines", len(txns), lines_total)
    return ParseResult(
        transactions=tuple(txns),
        issuer=rule.tag,
        lines_total=lines_total,
        lines_extracted=len(txns),
        used_fallback=used_fallback,
    )


def extract_pdf_text(path: str | PathLike[str]) -> str:
    """Return the text of every page joined by newlines."""

    p = Path(path)
    try:
        with pdfplumber.open(p) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]
    except Exception as exc:
        raise StatementFormatError(f"cannot read PDF {p}: {exc}") from exc
    if not any(t.strip() for t in pages):
        _log.warning("no text extracted from %s; the PDF may be scanned", p)
    return "\n".join(pages)


def parse_pdf_file(path: str | PathLike[str]) -> ParseResult:
    return parse_statement_text(extract_pdf_text(path))


__all__ = [
    "GENERIC_TAG",
    "IssuerRule",
    "BANK_ISSUERS",
    "GENERIC_TRIGGERS",
    "detect_issuer",
    "parse_sbi",
    "parse_hdfc",
    "parse_icici",
    "parse_axis",
    "parse_generic",
    "parse_generic_line",
    "parse_statement_text",
    "extract_pdf_text",
    "parse_pdf_file",
]
