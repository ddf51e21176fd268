from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from statement_ingest.cli import app, cmd_parse
from tests.helpers.db import bootstrap_sqlite_db, count_transactions

runner = CliRunner()

BANK_CSV = (
    "Txn Date,Narration,Withdrawal Amt,Deposit Amt,Balance\n"
    "05/01/2024,UPI/SWIGGY/ORDER,500,0,12000.00\n"
    "06/01/2024,NEFT/ACME CORP/SALARY,0,50000.00,62000.00\n"
    "07/01/2024,QWERTY HOLDINGS,120.00,0,61880.00\n"
)

CARD_TEXT = (
    "HDFC Bank Credit Card Statement\n"
    "05-Jan-2024 SWIGGY BANGALORE 450.00\n"
    "06-Jan-2024 PAYMENT RECEIVED THANK YOU 10,000.00 Cr\n"
    "07-Jan-2024 NETFLIX SUBSCRIPTION 649.00\n"
)


def _json_lines(output: str) -> list[dict]:
    return [json.loads(line) for line in output.splitlines() if line.strip()]


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_parse_prints_json_lines(tmp_path: Path) -> None:
    stmt = _write(tmp_path / "bank.csv", BANK_CSV)

    result = runner.invoke(app, ["parse", str(stmt)])

    assert result.exit_code == 0, result.output
    rows = _json_lines(result.stdout)
    assert [r["category"] for r in rows] == ["Food & Dining", "Salary", "Other"]
    assert rows[0]["amount"] == "500.00"
    assert rows[0]["balance"] == "12000.00"
    assert rows[0]["merchant"] == "Swiggy"
    assert rows[1]["direction"] == "credit"


def test_parse_with_custom_taxonomy_file(tmp_path: Path) -> None:
    stmt = _write(tmp_path / "bank.csv", BANK_CSV)
    tax = _write(
        tmp_path / "tax.json",
        json.dumps([{"name": "Holding Co", "keywords": ["qwerty"]}, {"name": "Other"}]),
    )

    result = runner.invoke(app, ["parse", str(stmt), "--taxonomy", str(tax)])

    assert result.exit_code == 0, result.output
    assert [r["category"] for r in _json_lines(result.stdout)] == ["Other", "Other", "Holding Co"]


def test_parse_card_statement(tmp_path: Path) -> None:
    stmt = _write(tmp_path / "card.txt", CARD_TEXT)

    result = runner.invoke(app, ["parse", str(stmt), "--account-type", "credit_card"])

    assert result.exit_code == 0, result.output
    rows = _json_lines(result.stdout)
    assert [r["category"] for r in rows] == ["Food & Dining", "Refund", "Entertainment"]


def test_parse_errors_exit_non_zero(tmp_path: Path, capsys) -> None:
    assert cmd_parse(tmp_path / "missing.csv") == 1
    assert "Error:" in capsys.readouterr().err

    bad = _write(tmp_path / "bad.csv", "Narration,Amount\nfoo,1\n")
    assert cmd_parse(bad) == 1


def test_card_summary(tmp_path: Path) -> None:
    stmt = _write(tmp_path / "card.txt", CARD_TEXT)

    result = runner.invoke(app, ["card-summary", str(stmt)])

    assert result.exit_code == 0, result.output
    (summary,) = _json_lines(result.stdout)
    assert summary["total_spending"] == "1099.00"
    assert summary["cashback_received"] == "10000.00"
    assert summary["transaction_count"] == 3
    assert summary["top_merchants"][0] == {
        "merchant": "Netflix Subscription",
        "amount": "649.00",
        "count": 1,
    }


def test_card_summary_rejects_csv(tmp_path: Path) -> None:
    stmt = _write(tmp_path / "card.csv", BANK_CSV)

    result = runner.invoke(app, ["card-summary", str(stmt)])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert not isinstance(result.exception, AssertionError)


def test_suggest_categories(tmp_path: Path) -> None:
    stmt = _write(tmp_path / "bank.csv", BANK_CSV)

    result = runner.invoke(app, ["suggest-categories", str(stmt)])

    assert result.exit_code == 0, result.output
    (suggestions,) = _json_lines(result.stdout)
    assert suggestions == {"qwerty": ["QWERTY HOLDINGS"], "holdings": ["QWERTY HOLDINGS"]}


def test_import_then_reimport_reports_duplicates(tmp_path: Path) -> None:
    url = bootstrap_sqlite_db(tmp_path / "cli.db")
    stmt = _write(tmp_path / "bank.csv", BANK_CSV)
    args = ["import", str(stmt), "--account-id", "acct-1", "--database-url", url]

    first = runner.invoke(app, args)
    second = runner.invoke(app, args)

    assert first.exit_code == 0, first.output
    assert second.exit_code == 0, second.output
    assert _json_lines(first.stdout)[0]["inserted"] == 3
    report = _json_lines(second.stdout)[0]
    assert report["inserted"] == 0
    assert report["duplicates"] == 3
    assert count_transactions(database_url=url, account_id="acct-1") == 3

    check = runner.invoke(
        app,
        ["check-duplicates", str(stmt), "--account-id", "acct-1", "--database-url", url],
    )
    assert check.exit_code == 0, check.output
    assert len(_json_lines(check.stdout)) == 3


def test_import_allow_duplicates(tmp_path: Path) -> None:
    url = bootstrap_sqlite_db(tmp_path / "dups.db")
    stmt = _write(tmp_path / "bank.csv", BANK_CSV)
    args = ["import", str(stmt), "--account-id", "acct-1", "--database-url", url]

    runner.invoke(app, args)
    again = runner.invoke(app, [*args, "--allow-duplicates"])

    assert again.exit_code == 0, again.output
    assert _json_lines(again.stdout)[0]["inserted"] == 3
    assert count_transactions(database_url=url, account_id="acct-1") == 6


def test_seed_taxonomy_then_import_with_db_taxonomy(tmp_path: Path) -> None:
    url = bootstrap_sqlite_db(tmp_path / "seeded.db")
    stmt = _write(tmp_path / "bank.csv", BANK_CSV)

    seeded = runner.invoke(app, ["seed-taxonomy", "--database-url", url])
    assert seeded.exit_code == 0, seeded.output
    assert "Seeded 24 categories" in seeded.stdout

    result = runner.invoke(
        app,
        ["import", str(stmt), "--account-id", "acct-2", "--database-url", url, "--db-taxonomy"],
    )
    assert result.exit_code == 0, result.output
    assert _json_lines(result.stdout)[0]["inserted"] == 3


def test_import_card_statement(tmp_path: Path) -> None:
    url = bootstrap_sqlite_db(tmp_path / "card.db")
    stmt = _write(tmp_path / "card.txt", CARD_TEXT)

    result = runner.invoke(
        app,
        [
            "import",
            str(stmt),
            "--account-id",
            "card-1",
            "--account-type",
            "credit_card",
            "--database-url",
            url,
        ],
    )

    assert result.exit_code == 0, result.output
    assert _json_lines(result.stdout)[0]["inserted"] == 3
