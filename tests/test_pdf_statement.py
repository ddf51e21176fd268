# ruff: noqa: E501
from __future__ import annotations

import textwrap
from decimal import Decimal
from pathlib import Path

import pytest

from statement_ingest.enrich import enrich_transactions
from statement_ingest.errors import StatementFormatError
from statement_ingest.ingest import pdf_statement
from statement_ingest.ingest.pdf_statement import (
    GENERIC_TAG,
    IssuerRule,
    detect_issuer,
    parse_generic,
    parse_generic_line,
    parse_pdf_file,
    parse_statement_text,
)


def _dedent(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n").rstrip()


def test_sbi_rows_with_reference_and_verbatim_balance() -> None:
    text = _dedent(
        """
        State Bank of India
        Statement of Account
        05/01/2024 UPI/SWIGGY/ORDER 402918374 500.00 - 12,000.00
        06/01/2024 NEFT/ACME CORP 402918375 - 50,000.00 62,000.00
        """
    )

    result = parse_statement_text(text)

    assert result.issuer == "SBI"
    assert not result.used_fallback
    assert result.lines_total == 4
    assert result.lines_extracted == 2
    debit, credit = result.transactions
    assert debit.date == "2024-01-05"
    assert debit.description == "UPI/SWIGGY/ORDER"
    assert debit.reference == "402918374"
    assert (debit.amount, debit.direction) == (Decimal("500.00"), "debit")
    assert debit.balance == Decimal("12000.00")
    assert debit.mode == "UPI"
    assert (credit.amount, credit.direction) == (Decimal("50000.00"), "credit")
    assert credit.balance == Decimal("62000.00")


def test_hdfc_table_layout() -> None:
    text = _dedent(
        """
        HDFC Bank
        01/02/24 ZOMATO ONLINE ORDER ZMT123456 01/02/24 349.00 0.00 5,651.00
        """
    )

    (row,) = parse_statement_text(text).transactions

    assert row.date == "2024-02-01"
    assert row.description == "ZOMATO ONLINE ORDER"
    assert row.reference == "ZMT123456"
    assert (row.amount, row.direction) == (Decimal("349.00"), "debit")
    assert row.balance == Decimal("5651.00")


def test_hdfc_dr_cr_marker_layout() -> None:
    text = _dedent(
        """
        HDFC BANK
        05/01/2024 POS AMAZON 1,299.00 Dr 10,701.00
        06/01/2024 REFUND AMAZON 299.00 Cr 11,000.00
        """
    )

    result = parse_statement_text(text)

    assert result.issuer == "HDFC"
    assert not result.used_fallback
    debit, credit = result.transactions
    assert (debit.description, debit.amount, debit.direction) == ("POS AMAZON", Decimal("1299.00"), "debit")
    assert debit.mode == "Card"
    assert (credit.amount, credit.direction, credit.balance) == (Decimal("299.00"), "credit", Decimal("11000.00"))


def test_icici_withdrawal_decides_debit() -> None:
    text = _dedent(
        """
        ICICI Bank
        05/01/2024 UPI SWIGGY ORDER - 450.00 9,550.00
        06/01/2024 NEFT SALARY ACME 50,000.00 - 59,550.00
        """
    )

    result = parse_statement_text(text)

    assert result.issuer == "ICICI"
    debit, credit = result.transactions
    assert (debit.description, debit.amount, debit.direction) == ("SWIGGY ORDER", Decimal("450.00"), "debit")
    assert debit.mode == "UPI"
    assert debit.balance == Decimal("9550.00")
    assert (credit.amount, credit.direction) == (Decimal("50000.00"), "credit")
    assert credit.mode == "NEFT"


def test_axis_rows() -> None:
    text = _dedent(
        """
        AXIS BANK
        05/01/2024 AMAZON PAY 1,000.00 0.00 9,000.00
        """
    )

    (row,) = parse_statement_text(text).transactions

    assert (row.amount, row.direction, row.balance) == (Decimal("1000.00"), "debit", Decimal("9000.00"))


def test_generic_line_with_marker_then_enrich() -> None:
    result = parse_statement_text("05/01/2024 SWIGGY ORDER 450.00 Dr 12500.00")

    assert result.issuer == GENERIC_TAG
    (row,) = result.transactions
    assert row.date == "2024-01-05"
    assert row.description == "SWIGGY ORDER"
    assert (row.amount, row.direction) == (Decimal("450.00"), "debit")
    assert row.balance == Decimal("12500.00")

    (enriched,) = enrich_transactions(result.transactions)
    assert enriched.category == "Food & Dining"
    assert enriched.merchant == "Swiggy"


def test_generic_direction_hints_and_default() -> None:
    credit = parse_generic_line("07/01/2024 SALARY CREDITED BY EMPLOYER 50,000.00 62,500.00")
    assert credit is not None
    assert (credit.amount, credit.direction, credit.balance) == (
        Decimal("50000.00"),
        "credit",
        Decimal("62500.00"),
    )

    unknown = parse_generic_line("08/01/2024 SOME MERCHANT NAME 300.00")
    assert unknown is not None
    assert unknown.direction == "debit"
    assert unknown.balance is None


def test_generic_skips_invalid_dates() -> None:
    assert parse_generic_line("32/13/2024 SOMETHING LONG HERE 100.00") is None
    assert parse_generic("Opening balance 5,000.00") == []


def test_issuer_parser_miss_falls_back_to_generic() -> None:
    text = _dedent(
        """
        State Bank of India
        05/01/2024 SWIGGY ORDER 450.00 Dr 12500.00
        """
    )

    result = parse_statement_text(text)

    assert result.issuer == "SBI"
    assert result.used_fallback
    assert result.lines_extracted == 1
    assert result.transactions[0].amount == Decimal("450.00")


def test_banks_without_dedicated_layout_use_generic() -> None:
    text = _dedent(
        """
        Kotak Mahindra Bank
        05/01/2024 SWIGGY ORDER 450.00 Dr 12500.00
        """
    )

    result = parse_statement_text(text)

    assert result.issuer == "Kotak"
    assert not result.used_fallback
    assert result.lines_extracted == 1


def test_outcomes_for_empty_and_unmatched_text() -> None:
    assert parse_statement_text("").outcome == "empty"

    result = parse_statement_text("Hello world\nNothing here")
    assert result.issuer == GENERIC_TAG
    assert result.lines_total == 2
    assert result.outcome == "no_transactions"


def test_custom_issuer_table_without_catch_all() -> None:
    rules = [IssuerRule("Only", lambda t: "ONLY BANK" in t, parse_generic)]
    assert detect_issuer("ONLY BANK statement", rules).tag == "Only"
    with pytest.raises(StatementFormatError):
        detect_issuer("something else", rules)


class _FakePage:
    def __init__(self, text: str | None) -> None:
        self._text = text

    def extract_text(self) -> str | None:
        return self._text


class _FakePdf:
    def __init__(self, pages: list[_FakePage]) -> None:
        self.pages = pages

    def __enter__(self) -> _FakePdf:
        return self

    def __exit__(self, *exc: object) -> None:
        return None


def test_parse_pdf_file_joins_page_text(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    pages = [
        _FakePage("HDFC BANK\n05/01/2024 POS AMAZON 1,299.00 Dr 10,701.00"),
        _FakePage(None),
        _FakePage("06/01/2024 REFUND AMAZON 299.00 Cr 11,000.00"),
    ]
    monkeypatch.setattr(pdf_statement.pdfplumber, "open", lambda _path: _FakePdf(pages))

    result = parse_pdf_file(tmp_path / "stmt.pdf")

    assert result.issuer == "HDFC"
    assert result.lines_extracted == 2


def test_unreadable_pdf_raises(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def _boom(_path: object) -> _FakePdf:
        raise ValueError("not a PDF")

    monkeypatch.setattr(pdf_statement.pdfplumber, "open", _boom)

    with pytest.raises(StatementFormatError):
        parse_pdf_file(tmp_path / "broken.pdf")
