"""Ingest utilities shared by CLI commands and callers.

Exposes a single helper that picks a statement parser from the file
extension and account type and logs line-level extraction telemetry.
"""

from __future__ import annotations

from os import PathLike
from pathlib import Path
from typing import Literal

from ..errors import StatementFormatError
from ..logging_setup import get_logger
from ..models import CardParseResult, ParseResult

type AccountType = Literal["bank", "credit_card"]

ACCOUNT_TYPES: tuple[str, ...] = ("bank", "credit_card")
SUPPORTED_EXTENSIONS: tuple[str, ...] = (".csv", ".pdf", ".txt")

_log = get_logger("statement_ingest.ingest")


def _read_text(p: Path) -> str:
    try:
        return p.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise StatementFormatError(f"cannot read statement {p}: {exc}") from exc


def load_statement(
    path: str | PathLike[str], *, account_type: AccountType = "bank"
) -> ParseResult | CardParseResult:
    """Parse a statement file and return its extraction result.

    Dispatch:
    - ``.csv``: header-synonym CSV parser (bank accounts only);
    - ``.pdf``: bank or credit-card PDF parser depending on ``account_type``;
    - ``.txt``: already-flattened statement text, same split as ``.pdf``.

    Any other extension raises :class:`StatementFormatError`. A readable
    document that yields no transactions is not an error; it is logged at
    WARNING and reported through the result's line counts.
    """

    from .credit_card import parse_card_pdf_file, parse_card_statement_text
    from .csv_statement import parse_csv_file
    from .pdf_statement import parse_pdf_file, parse_statement_text

    if account_type not in ACCOUNT_TYPES:
        raise ValueError(f"unknown account type: {account_type!r}")

    p = Path(path)
    if not p.is_file():
        raise StatementFormatError(f"statement file not found: {p}")
    ext = p.suffix.lower()
    card = account_type == "credit_card"

    result: ParseResult | CardParseResult
    if ext == ".csv" and card:
        raise StatementFormatError("credit-card statements are read from .pdf or .txt, not .csv")
    if ext == ".csv":
        result = parse_csv_file(p)
    elif ext == ".pdf":
        result = parse_card_pdf_file(p) if card else parse_pdf_file(p)
    elif ext == ".txt":
        text = _read_text(p)
        result = parse_card_statement_text(text) if card else parse_statement_text(text)
    else:
        raise StatementFormatError(
            f"unsupported statement type {ext or '<none>'!r}; expected one of "
            + ", ".join(SUPPORTED_EXTENSIONS)
        )

    _log.info(
        "%s: issuer=%s extracted %d of %d lines",
        p.name,
        result.issuer,
        result.lines_extracted,
        result.lines_total,
    )
    if result.lines_total and not result.lines_extracted:
        _log.warning(
            "%s: no transactions extracted from a non-empty statement; "
            "try the bank's CSV export instead",
            p.name,
        )
    return result


__all__ = ["AccountType", "ACCOUNT_TYPES", "SUPPORTED_EXTENSIONS", "load_statement"]
