# ruff: noqa: E501
import textwrap
from decimal import Decimal
from pathlib import Path

import pytest

from statement_ingest.errors import StatementFormatError
from statement_ingest.ingest.csv_statement import (
    ISSUER_TAG,
    map_columns,
    parse_csv_file,
    parse_csv_text,
)


def _dedent(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n").rstrip()


def test_separate_debit_credit_columns() -> None:
    csv_text = _dedent(
        """
        Txn Date,Narration,Withdrawal Amt,Deposit Amt,Balance
        Opening Balance,,,,10000
        05/01/2024,UPI/SWIGGY/ORDER,500,0,12000.00
        06/01/2024,NEFT/ACME CORP/SALARY,0,50000.00,62000.00
        """
    )

    result = parse_csv_text(csv_text)

    assert result.issuer == ISSUER_TAG
    assert result.lines_total == 3
    assert result.lines_extracted == 2
    assert result.outcome == "ok"

    debit, credit = result.transactions
    assert debit.date == "2024-01-05"
    assert debit.description == "UPI/SWIGGY/ORDER"
    assert debit.amount == Decimal("500")
    assert debit.direction == "debit"
    assert debit.balance == Decimal("12000.00")
    assert debit.mode == "UPI"

    assert credit.amount == Decimal("50000.00")
    assert credit.direction == "credit"
    assert credit.mode == "NEFT"


def test_amount_with_type_column() -> None:
    csv_text = _dedent(
        """
        Date,Description,Amount,Type
        2024-01-05,Coffee,120.00,DR
        2024-01-06,Refund,50.00,CR
        2024-01-07,Transfer in,75.00,C
        """
    )

    rows = parse_csv_text(csv_text).transactions

    assert [(r.amount, r.direction) for r in rows] == [
        (Decimal("120.00"), "debit"),
        (Decimal("50.00"), "credit"),
        (Decimal("75.00"), "credit"),
    ]
    assert all(r.balance is None for r in rows)


def test_amount_only_uses_sign_of_raw_cell() -> None:
    csv_text = _dedent(
        """
        Date,Details,Amount
        05/01/2024,ATM WDL,-2000.00
        06/01/2024,SMS CHARGES,(15.00)
        07/01/2024,INT.CRED,15.00
        """
    )

    rows = parse_csv_text(csv_text).transactions

    assert [(r.description, r.direction) for r in rows] == [
        ("ATM WDL", "debit"),
        ("SMS CHARGES", "debit"),
        ("INT.CRED", "credit"),
    ]
    assert rows[0].amount == Decimal("2000.00")
    assert rows[0].mode == "ATM"


def test_amount_cells_with_dr_cr_suffix() -> None:
    csv_text = _dedent(
        """
        Date,Description,Amount,Type
        05/01/2024,SWIGGY,450.00 Dr,DR
        06/01/2024,NEFT/SALARY,"50,000.00 Cr",CR
        """
    )

    rows = parse_csv_text(csv_text).transactions

    assert [(r.description, r.amount, r.direction) for r in rows] == [
        ("SWIGGY", Decimal("450.00"), "debit"),
        ("NEFT/SALARY", Decimal("50000.00"), "credit"),
    ]


def test_amount_only_honours_dr_cr_suffix() -> None:
    csv_text = _dedent(
        """
        Date,Narration,Amount
        05/01/2024,ATM WDL,2000.00 Dr
        06/01/2024,INT.CRED,15.00 Cr
        """
    )

    rows = parse_csv_text(csv_text).transactions

    assert [(r.amount, r.direction) for r in rows] == [
        (Decimal("2000.00"), "debit"),
        (Decimal("15.00"), "credit"),
    ]


def test_missing_date_column_raises() -> None:
    with pytest.raises(StatementFormatError):
        parse_csv_text("Narration,Amount\nfoo,1\n")


def test_header_only_and_empty_input() -> None:
    assert parse_csv_text("").outcome == "empty"
    assert parse_csv_text("Date,Description,Amount\n").outcome == "empty"


def test_zero_amount_rows_are_skipped() -> None:
    csv_text = _dedent(
        """
        Date,Description,Debit,Credit,Balance
        05/01/2024,Balance brought forward,0,0,9000.00
        06/01/2024,Swiggy,450.00,,8550.00
        """
    )

    result = parse_csv_text(csv_text)

    assert result.lines_total == 2
    assert result.lines_extracted == 1
    assert result.transactions[0].amount == Decimal("450.00")


def test_sub_cent_amounts_are_skipped() -> None:
    csv_text = _dedent(
        """
        Date,Description,Debit,Credit
        05/01/2024,Rounding adjustment,0.004,
        06/01/2024,Interest,,0.005
        """
    )

    rows = parse_csv_text(csv_text).transactions

    assert [(r.description, r.direction) for r in rows] == [("Interest", "credit")]


def test_unparseable_date_rows_are_skipped() -> None:
    csv_text = _dedent(
        """
        Date,Description,Amount
        31/02/2024,Impossible day,-10.00
        01/03/2024,Real day,-10.00
        """
    )

    rows = parse_csv_text(csv_text).transactions

    assert [r.date for r in rows] == ["2024-03-01"]


def test_bom_whitespace_headers_and_extra_cells() -> None:
    csv_text = "\ufeff Date , Description , Debit , Credit , Balance \n05/01/2024, Swiggy ,450.00,,9550.00,EXTRA\n"

    rows = parse_csv_text(csv_text).transactions

    assert len(rows) == 1
    assert rows[0].description == "Swiggy"
    assert rows[0].balance == Decimal("9550.00")


def test_zero_balance_is_reported_as_missing() -> None:
    csv_text = _dedent(
        """
        Date,Description,Debit,Credit,Balance
        05/01/2024,Swiggy,450.00,,0
        """
    )

    (row,) = parse_csv_text(csv_text).transactions

    assert row.balance is None


def test_reference_and_remarks_columns() -> None:
    csv_text = _dedent(
        """
        Value Date,Particulars,Remarks,Ref No,Debit,Credit
        05/01/2024,UPI/ZOMATO/771,dinner,UTR771,300.00,
        """
    )

    (row,) = parse_csv_text(csv_text).transactions

    assert row.description == "UPI/ZOMATO/771"
    assert row.remarks == "dinner"
    assert row.reference == "UTR771"


def test_remarks_header_can_serve_two_fields() -> None:
    cols = map_columns(["Date", "Remarks", "Debit", "Credit"])
    assert cols.description == "Remarks"
    assert cols.remarks == "Remarks"


def test_candidate_rank_beats_header_position() -> None:
    cols = map_columns(["Remarks", "Description", "Amount"])
    assert cols.description == "Description"
    assert cols.remarks == "Remarks"


def test_first_header_matching_a_candidate_wins() -> None:
    cols = map_columns(["Value Date", "Posting Date", "Narration", "Amount"])
    assert cols.date == "Value Date"
    assert cols.amount == "Amount"
    assert cols.debit is None


def test_parse_csv_file(tmp_path: Path) -> None:
    path = tmp_path / "stmt.csv"
    path.write_text(
        "Date,Description,Debit,Credit,Balance\n05/01/2024,ZOMATO,300.00,,700.00\n",
        encoding="utf-8-sig",
    )

    result = parse_csv_file(path)

    assert result.lines_extracted == 1
    assert result.transactions[0].description == "ZOMATO"


def test_parse_csv_file_missing(tmp_path: Path) -> None:
    with pytest.raises(StatementFormatError):
        parse_csv_file(tmp_path / "nope.csv")
