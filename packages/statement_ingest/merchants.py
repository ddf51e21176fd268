"""Merchant-name extraction from bank narration text.

Rail-prefixed narrations (``UPI/<merchant>/...``, ``NEFT/<merchant>/...``,
``POS/<merchant>``, ``paid to <merchant>``) are tried first; otherwise the
first significant token is used. An empty string means "unknown merchant".
"""

from __future__ import annotations

import re

# Ordered; each pattern's first group is the merchant candidate.
_MERCHANT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"upi[/-]([^/-]+)[/-]", re.IGNORECASE),
    re.compile(r"paid to ([^/@-]+)", re.IGNORECASE),
    re.compile(r"received from ([^/@-]+)", re.IGNORECASE),
    re.compile(r"neft[/-]([^/-]+)[/-]", re.IGNORECASE),
    re.compile(r"imps[/-]([^/-]+)[/-]", re.IGNORECASE),
    re.compile(r"pos[/-]([^/-]+)", re.IGNORECASE),
    re.compile(r"to\s+([a-z\s]+?)(?:\s+on|\s+ref|\s+\d)", re.IGNORECASE),
    re.compile(r"from\s+([a-z\s]+?)(?:\s+on|\s+ref|\s+\d)", re.IGNORECASE),
)

_TOKEN_SPLIT_RE = re.compile(r"[/\-\s]+")
_STOPWORDS = frozenset({"upi", "neft", "imps", "rtgs", "pos", "ref", "txn"})
_LEGAL_SUFFIX_RE = re.compile(r"\b(?:pvt|ltd|limited|private|llp|inc|corp|co)\b\.?", re.IGNORECASE)

# Plausible merchant-name length window (exclusive bounds).
_MIN_LEN = 3
_MAX_LEN = 50


def clean_merchant_name(name: str) -> str:
    """Drop legal-entity suffixes, collapse whitespace and title-case words."""

    stripped = _LEGAL_SUFFIX_RE.sub(" ", name)
    return " ".join(word.capitalize() for word in stripped.split())


def extract_merchant(description: str | None) -> str:
    if not description:
        return ""

    for regex in _MERCHANT_PATTERNS:
        m = regex.search(description)
        if not m:
            continue
        candidate = m.group(1).strip()
        if _MIN_LEN < len(candidate) < _MAX_LEN:
            return clean_merchant_name(candidate)

    for part in _TOKEN_SPLIT_RE.split(description):
        if len(part) <= _MIN_LEN or part.isdigit() or part.lower() in _STOPWORDS:
            continue
        return clean_merchant_name(part)

    return ""


__all__ = ["extract_merchant", "clean_merchant_name"]
