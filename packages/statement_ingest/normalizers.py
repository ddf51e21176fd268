"""Amount and date normalization shared by every statement parser.

Both normalizers are total functions: they never raise. ``parse_amount``
returns ``Decimal("0")`` for unusable input and ``parse_date`` returns its
input unchanged; callers treat those sentinels as "skip this row".

Date handling is an ordered list of ``(regex, builder)`` pairs tried first to
last. Adding a convention for a new issuer means appending a pattern; the
existing ones are never reordered.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from dateutil import parser as dateutil_parser

from .models import Direction

# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------

_ZERO = Decimal("0")
_CENTS = Decimal("0.01")
_CURRENCY_PREFIX_RE = re.compile(r"^(?:rs\.?|inr)\s*", re.IGNORECASE)
_STRIP_RE = re.compile(r"[₹$€£,\s]")
_NUMERIC_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)$")
# Trailing Dr/Cr marker, matched after whitespace is removed ("450.00 Dr").
_MARKER_SUFFIX_RE = re.compile(r"(dr|cr)\.?$", re.IGNORECASE)


def parse_amount(raw: str | None) -> Decimal:
    """Return the non-negative magnitude of a formatted money string.

    Strips currency symbols (``₹ $ € £`` and ``Rs``/``INR`` prefixes),
    thousands separators, whitespace and a trailing ``Dr``/``Cr`` marker. A
    parenthesized or signed value is returned as its magnitude; the sign is
    conveyed by the caller through ``direction`` (see :func:`amount_marker`).
    Unparseable input yields ``Decimal("0")``.
    """

    if raw is None:
        return _ZERO
    s = _STRIP_RE.sub("", str(raw))
    s = _CURRENCY_PREFIX_RE.sub("", s)
    s = _MARKER_SUFFIX_RE.sub("", s)
    if s.startswith("(") and s.endswith(")"):
        s = s[1:-1]
    s = _STRIP_RE.sub("", s)
    if not _NUMERIC_RE.match(s):
        return _ZERO
    try:
        d = Decimal(s)
    except InvalidOperation:
        return _ZERO
    return abs(d)


def amount_marker(raw: str | None) -> Direction | None:
    """Direction spelled by a trailing ``Dr``/``Cr`` on a money cell, if any."""

    if not raw:
        return None
    m = _MARKER_SUFFIX_RE.search(_STRIP_RE.sub("", raw))
    if m is None:
        return None
    return "credit" if m.group(1).lower() == "cr" else "debit"


def is_negative_amount(raw: str | None) -> bool:
    """True when a raw cell carries a literal ``-`` or ``(``."""

    if not raw:
        return False
    return "-" in raw or "(" in raw


def is_storable_amount(amount: Decimal) -> bool:
    """True when ``amount`` is still positive once rounded to whole cents."""

    return amount.quantize(_CENTS, rounding=ROUND_HALF_UP) > 0


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

MONTHS: dict[str, int] = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

_ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# "Looks like a date" sniff used to skip non-transaction CSV rows.
_DATE_SHAPE_RE = re.compile(
    r"\d{1,2}[/.-]\d{1,2}[/.-]\d{2,4}|\d{4}[/-]\d{1,2}[/-]\d{1,2}|\d{1,2}[/ -][A-Za-z]{3}[/ -]\d{2,4}"
)


def _pivot_year(yy: str) -> int:
    # Two-digit years: > 50 belongs to the 1900s, <= 50 to the 2000s.
    n = int(yy)
    return 1900 + n if n > 50 else 2000 + n


def _dmy(m: re.Match[str]) -> tuple[int, int, int]:
    return int(m.group(3)), int(m.group(2)), int(m.group(1))


def _ymd(m: re.Match[str]) -> tuple[int, int, int]:
    return int(m.group(1)), int(m.group(2)), int(m.group(3))


def _dmy_short(m: re.Match[str]) -> tuple[int, int, int]:
    return _pivot_year(m.group(3)), int(m.group(2)), int(m.group(1))


def _d_mon_y(m: re.Match[str]) -> tuple[int, int, int] | None:
    month = MONTHS.get(m.group(2).lower())
    if month is None:
        return None
    year = m.group(3)
    return (int(year) if len(year) == 4 else _pivot_year(year)), month, int(m.group(1))


type _Builder = Callable[[re.Match[str]], tuple[int, int, int] | None]

# Ordered: first pattern producing a real calendar date wins.
_DATE_PATTERNS: tuple[tuple[re.Pattern[str], _Builder], ...] = (
    # DD/MM/YYYY
    (re.compile(r"(?<!\d)(\d{2})/(\d{2})/(\d{4})"), _dmy),
    # DD-MM-YYYY
    (re.compile(r"(?<!\d)(\d{2})-(\d{2})-(\d{4})"), _dmy),
    # DD.MM.YYYY
    (re.compile(r"(?<!\d)(\d{2})\.(\d{2})\.(\d{4})"), _dmy),
    # YYYY-MM-DD, YYYY/MM/DD
    (re.compile(r"(\d{4})[-/](\d{2})[-/](\d{2})"), _ymd),
    # DD/MM/YY and DD-MM-YY
    (re.compile(r"(?<!\d)(\d{2})[/-](\d{2})[/-](\d{2})(?!\d)"), _dmy_short),
    # DD-MMM-YYYY, DD/MMM/YYYY, DD MMM YYYY
    (re.compile(r"(\d{1,2})[-/ ]([A-Za-z]{3})[A-Za-z]*[-/ ](\d{4})"), _d_mon_y),
    # DD-MMM-YY
    (re.compile(r"(\d{1,2})[-/ ]([A-Za-z]{3})[-/ ](\d{2})(?!\d)"), _d_mon_y),
    # D/M/YYYY
    (re.compile(r"(\d{1,2})[/-](\d{1,2})[/-](\d{4})"), _dmy),
)


def _valid_iso(parts: tuple[int, int, int] | None) -> str | None:
    if parts is None:
        return None
    try:
        return date(*parts).isoformat()
    except ValueError:
        return None


def _fallback_parse(s: str) -> str | None:
    # dateutil happily fills missing fields from today's date, so require at
    # least a digit and some structure before trusting it.
    if not re.search(r"\d", s) or len(s) < 6:
        return None
    try:
        return dateutil_parser.parse(s, dayfirst=True).date().isoformat()
    except (ValueError, OverflowError):
        return None


def parse_date(raw: str | None) -> str:
    """Normalize a statement date to ``YYYY-MM-DD``.

    Returns the stripped input unchanged when no pattern yields a valid
    calendar date; use :func:`is_iso_date` to detect that case.
    """

    if raw is None:
        return ""
    s = str(raw).strip()
    if not s:
        return s

    for regex, build in _DATE_PATTERNS:
        m = regex.search(s)
        if not m:
            continue
        iso = _valid_iso(build(m))
        if iso is not None:
            return iso

    return _fallback_parse(s) or s


def is_iso_date(value: str | None) -> bool:
    return bool(value) and bool(_ISO_RE.match(value or ""))


def looks_like_date(value: str | None) -> bool:
    """Cheap sniff test: does the cell contain a date-shaped substring?"""

    if not value:
        return False
    return bool(_DATE_SHAPE_RE.search(value))


__all__ = [
    "MONTHS",
    "parse_amount",
    "amount_marker",
    "is_negative_amount",
    "is_storable_amount",
    "parse_date",
    "is_iso_date",
    "looks_like_date",
]
