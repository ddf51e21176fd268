"""Payment-rail (mode) detection from free transaction text."""

from __future__ import annotations

import re

DEFAULT_MODE = "Other"

# Ordered; the first matching rail wins. Wallet brands are UPI front-ends.
_MODE_TABLE: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("UPI", re.compile(r"upi|phonepe|gpay|google pay|paytm|bhim", re.IGNORECASE)),
    ("NEFT", re.compile(r"neft", re.IGNORECASE)),
    ("RTGS", re.compile(r"rtgs", re.IGNORECASE)),
    ("IMPS", re.compile(r"imps", re.IGNORECASE)),
    ("ATM", re.compile(r"atm|cash withdrawal", re.IGNORECASE)),
    ("Cheque", re.compile(r"chq|cheque|check", re.IGNORECASE)),
    ("Card", re.compile(r"debit card|credit card|\bpos\b|ecom", re.IGNORECASE)),
    (
        "Auto Debit",
        re.compile(r"auto|ecs|nach|mandate|standing instruction|\bsi/", re.IGNORECASE),
    ),
    ("Interest", re.compile(r"interest|int\.cred", re.IGNORECASE)),
    ("Transfer", re.compile(r"transfer|trf", re.IGNORECASE)),
    ("EMI", re.compile(r"\bemi\b|loan", re.IGNORECASE)),
)

MODE_LABELS: tuple[str, ...] = tuple(label for label, _ in _MODE_TABLE) + (DEFAULT_MODE,)


def detect_mode(text: str | None) -> str:
    """Return the payment rail label for ``text`` (``"Other"`` when unknown)."""

    if not text:
        return DEFAULT_MODE
    for label, regex in _MODE_TABLE:
        if regex.search(text):
            return label
    return DEFAULT_MODE


__all__ = ["DEFAULT_MODE", "MODE_LABELS", "detect_mode"]
