"""Header-synonym CSV parser for bank statement exports.

Bank CSV exports disagree on column names (``Txn Date`` vs ``Value Date``,
``Narration`` vs ``Particulars``, ``Withdrawal Amt.`` vs ``Debit``). Columns
are resolved by substring matching the lower-cased header against ranked
synonym lists; the first candidate that matches any header wins.

Amount/direction cascade per row
--------------------------------
1. separate debit and credit columns: a non-zero debit wins, else credit;
2. single amount column plus a type column: credit iff the type contains
   ``cr``/``credit`` or equals ``c``;
3. amount column only: debit iff the raw cell carries ``-`` or ``(``.

Rows whose date cell is not date-shaped (opening-balance lines, footers) or
whose amount is not positive are skipped and only show up in the
``ParseResult`` line counts.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from os import PathLike
from pathlib import Path
from typing import TextIO

from ..errors import StatementFormatError
from ..logging_setup import get_logger
from ..models import Direction, ParseResult, RawTransaction
from ..modes import detect_mode
from ..normalizers import (
    amount_marker,
    is_iso_date,
    is_negative_amount,
    is_storable_amount,
    looks_like_date,
    parse_amount,
    parse_date,
)

ISSUER_TAG = "CSV"

_log = get_logger("statement_ingest.ingest.csv_statement")

# Ranked; earlier candidates win even when a later one matches an earlier header.
COLUMN_SYNONYMS: dict[str, tuple[str, ...]] = {
    "date": (
        "date",
        "txn date",
        "transaction date",
        "value date",
        "posting date",
        "trans date",
        "tran date",
        "dt",
    ),
    "description": (
        "description",
        "narration",
        "particulars",
        "transaction details",
        "remarks",
        "details",
        "desc",
        "transaction description",
        "txn details",
    ),
    "remarks": ("remarks", "notes", "memo", "additional info", "comment"),
    "debit": (
        "debit",
        "withdrawal",
        "withdrawals",
        "debit amount",
        "dr",
        "amount debited",
        "debit(rs)",
        "withdrawn",
    ),
    "credit": (
        "credit",
        "deposit",
        "deposits",
        "credit amount",
        "cr",
        "amount credited",
        "credit(rs)",
        "deposited",
    ),
    "amount": ("amount", "transaction amount", "txn amount", "value", "amt"),
    "balance": (
        "balance",
        "closing balance",
        "available balance",
        "running balance",
        "bal",
        "closing bal",
    ),
    "reference": (
        "reference",
        "ref no",
        "reference number",
        "ref",
        "transaction id",
        "txn id",
        "chq no",
        "cheque no",
        "utr",
    ),
    "type": ("type", "transaction type", "txn type", "cr/dr", "dr/cr"),
}


@dataclass(frozen=True, slots=True)
class ColumnMap:
    """Resolved header name per logical field (``None`` when absent)."""

    date: str | None = None
    description: str | None = None
    remarks: str | None = None
    debit: str | None = None
    credit: str | None = None
    amount: str | None = None
    balance: str | None = None
    reference: str | None = None
    type: str | None = None


def _find_column(header: Sequence[str], candidates: Sequence[str]) -> str | None:
    lowered = [(h, h.strip().lower()) for h in header]
    for cand in candidates:
        for original, low in lowered:
            if cand in low:
                return original
    return None


def map_columns(header: Sequence[str]) -> ColumnMap:
    """Resolve each logical field to a header name.

    A single header cell may satisfy more than one field (``Remarks`` can
    serve as both description and remarks).
    """

    names = [h for h in header if h is not None]
    resolved = {field: _find_column(names, cands) for field, cands in COLUMN_SYNONYMS.items()}
    return ColumnMap(**resolved)


def _cell(row: Mapping[str, str | None], column: str | None) -> str:
    if column is None:
        return ""
    value = row.get(column)
    if value is None:
        return ""
    return str(value)


def _amount_and_direction(
    row: Mapping[str, str | None], cols: ColumnMap
) -> tuple[Decimal, Direction]:
    if cols.debit and cols.credit:
        debit = parse_amount(_cell(row, cols.debit))
        if debit > 0:
            return debit, "debit"
        credit = parse_amount(_cell(row, cols.credit))
        if credit > 0:
            return credit, "credit"
        return debit, "debit"

    if cols.amount and cols.type:
        amount = parse_amount(_cell(row, cols.amount))
        kind = _cell(row, cols.type).strip().lower()
        is_credit = "cr" in kind or "credit" in kind or kind == "c"
        return amount, ("credit" if is_credit else "debit")

    if cols.amount:
        raw = _cell(row, cols.amount)
        marker = amount_marker(raw)
        if marker is not None:
            return parse_amount(raw), marker
        return parse_amount(raw), ("debit" if is_negative_amount(raw) else "credit")

    return parse_amount(""), "debit"


def parse_csv_rows(rows: Sequence[Mapping[str, str | None]]) -> ParseResult:
    """Parse already-split rows keyed by header name.

    Raises :class:`StatementFormatError` when no date column can be found.
    """

    if not rows:
        return ParseResult(transactions=(), issuer=ISSUER_TAG, lines_total=0, lines_extracted=0)

    header = [k for k in rows[0].keys() if isinstance(k, str)]
    cols = map_columns(header)
    if cols.date is None:
        raise StatementFormatError("could not find a date column in CSV header")
    _log.debug("csv column map: %s", cols)

    out: list[RawTransaction] = []
    for row in rows:
        date_cell = _cell(row, cols.date)
        if not looks_like_date(date_cell):
            continue
        date = parse_date(date_cell)
        if not is_iso_date(date):
            continue

        amount, direction = _amount_and_direction(row, cols)
        if not is_storable_amount(amount):
            continue

        description = _cell(row, cols.description).strip()
        remarks = _cell(row, cols.remarks).strip()
        balance = parse_amount(_cell(row, cols.balance)) if cols.balance else None

        out.append(
            RawTransaction(
                date=date,
                description=description,
                remarks=remarks,
                amount=amount,
                direction=direction,
                balance=balance or None,
                reference=_cell(row, cols.reference).strip(),
                mode=detect_mode(f"{description} {remarks}"),
            )
        )

    return ParseResult(
        transactions=tuple(out),
        issuer=ISSUER_TAG,
        lines_total=len(rows),
        lines_extracted=len(out),
    )


def _read_rows(stream: TextIO) -> list[dict[str, str | None]]:
    reader = csv.DictReader(stream)
    if reader.fieldnames is None:
        return []
    # Header names are matched after trimming.
    reader.fieldnames = [(name or "").strip() for name in reader.fieldnames]
    rows: list[dict[str, str | None]] = []
    for row in reader:
        # Overflow cells land under the ``None`` restkey; drop them.
        row.pop(None, None)  # type: ignore[call-overload]
        if not any((v or "").strip() for v in row.values()):
            continue
        rows.append(row)
    return rows


def parse_csv_text(text: str) -> ParseResult:
    text = text.lstrip("\ufeff")
    try:
        rows = _read_rows(io.StringIO(text, newline=""))
    except csv.Error as exc:
        raise StatementFormatError(f"malformed CSV: {exc}") from exc
    return parse_csv_rows(rows)


def parse_csv_file(path: str | PathLike[str]) -> ParseResult:
    p = Path(path)
    try:
        with p.open(encoding="utf-8-sig", newline="") as f:
            rows = _read_rows(f)
    except (OSError, UnicodeDecodeError) as exc:
        raise StatementFormatError(f"cannot read CSV file {p}: {exc}") from exc
    except csv.Error as exc:
        raise StatementFormatError(f"malformed CSV {p}: {exc}") from exc
    return parse_csv_rows(rows)


__all__ = [
    "ISSUER_TAG",
    "COLUMN_SYNONYMS",
    "ColumnMap",
    "map_columns",
    "parse_csv_rows",
    "parse_csv_text",
    "parse_csv_file",
]
