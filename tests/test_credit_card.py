from __future__ import annotations

import textwrap
from decimal import Decimal

import pytest

from statement_ingest.ingest.credit_card import (
    REFUND_CATEGORY,
    clean_card_merchant,
    detect_card_issuer,
    parse_card_statement_text,
    summarize_card_transactions,
)
from statement_ingest.models import CreditCardTransaction


def _dedent(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n").rstrip()


def _txn(
    merchant: str, amount: str, *, category: str = "Food & Dining", direction: str = "debit"
) -> CreditCardTransaction:
    return CreditCardTransaction(
        date="2024-01-05",
        description=merchant.upper(),
        amount=Decimal(amount),
        direction=direction,  # type: ignore[arg-type]
        merchant=merchant,
        category=category,
    )


def test_hdfc_card_statement() -> None:
    text = _dedent(
        """
        HDFC Bank Credit Card Statement
        05-Jan-2024 SWIGGY BANGALORE 450.00
        06-Jan-2024 PAYMENT RECEIVED THANK YOU 10,000.00 Cr
        07-Jan-2024 NETFLIX SUBSCRIPTION 649.00
        """
    )

    result = parse_card_statement_text(text)

    assert result.issuer == "HDFC Credit Card"
    assert result.lines_total == 4
    assert result.lines_extracted == 3
    swiggy, payment, netflix = result.transactions
    assert swiggy.date == "2024-01-05"
    assert (swiggy.amount, swiggy.direction) == (Decimal("450.00"), "debit")
    assert swiggy.merchant == "Swiggy Bangalore"
    assert swiggy.category == "Food & Dining"
    assert (payment.direction, payment.category) == ("credit", REFUND_CATEGORY)
    assert payment.amount == Decimal("10000.00")
    assert netflix.category == "Entertainment"


def test_generic_card_lines_and_plausibility_filters() -> None:
    text = _dedent(
        """
        Some Card Issuer
        05/01/2024 UBER TRIP BLR 250.00
        06/01/2024 CASHBACK CREDIT 50.00
        07/01/2024 XY 100.00
        08/01/2024 BIG PURCHASE 0.50
        """
    )

    result = parse_card_statement_text(text)

    assert result.issuer == "Generic Credit Card"
    assert result.lines_extracted == 2
    uber, cashback = result.transactions
    assert (uber.category, uber.direction, uber.merchant) == ("Transportation", "debit", "Uber Trip Blr")
    assert (cashback.category, cashback.direction) == (REFUND_CATEGORY, "credit")


@pytest.mark.parametrize(
    ("text", "tag"),
    [
        ("ICICI Bank Card Statement", "ICICI Credit Card"),
        ("SBI Card monthly statement", "SBI Card"),
        ("Axis Bank Card Statement", "Axis Credit Card"),
        ("HDFC Bank Bank Statement", "Generic Credit Card"),
    ],
)
def test_card_issuer_detection(text: str, tag: str) -> None:
    assert detect_card_issuer(text).tag == tag


@pytest.mark.parametrize(
    ("description", "expected"),
    [
        ("POS AMAZON SELLER 123456 BLR", "Amazon Seller"),
        ("ECOMFLIPKART", "Flipkart"),
        ("swiggy   bangalore", "Swiggy Bangalore"),
    ],
)
def test_clean_card_merchant(description: str, expected: str) -> None:
    assert clean_card_merchant(description) == expected


def test_summary_totals_breakdown_and_top_merchants() -> None:
    txns = [
        _txn("Swiggy", "450.00"),
        _txn("Zomato", "300.00"),
        _txn("Swiggy", "200.00"),
        _txn("Netflix", "649.00", category="Entertainment"),
        _txn("Cashback", "50.00", category=REFUND_CATEGORY, direction="credit"),
        _txn("Payment", "1000.00", category="Other", direction="credit"),
    ]

    summary = summarize_card_transactions(txns)

    assert summary.total_spending == Decimal("1599.00")
    assert summary.total_payments == Decimal("1000.00")
    assert summary.cashback_received == Decimal("50.00")
    assert summary.transaction_count == 6
    assert summary.category_breakdown == {
        "Food & Dining": Decimal("950.00"),
        "Entertainment": Decimal("649.00"),
    }
    assert [(m.merchant, m.amount, m.count) for m in summary.top_merchants] == [
        ("Swiggy", Decimal("650.00"), 2),
        ("Netflix", Decimal("649.00"), 1),
        ("Zomato", Decimal("300.00"), 1),
    ]


def test_top_merchants_capped_and_ties_keep_first_seen_order() -> None:
    txns = [_txn(f"Shop {i:02d}", "100.00") for i in range(12)]

    top = summarize_card_transactions(txns).top_merchants

    assert len(top) == 10
    assert [m.merchant for m in top] == [f"Shop {i:02d}" for i in range(10)]


def test_empty_summary() -> None:
    summary = summarize_card_transactions([])
    assert summary.total_spending == Decimal("0")
    assert summary.transaction_count == 0
    assert summary.top_merchants == ()
