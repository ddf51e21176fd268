"""CLI for the ``statement_ingest`` package.

Command handlers (``cmd_*``) return a process exit code and print errors to
stderr; the Typer commands below are thin wrappers around them. Environment
variables (``DATABASE_URL``, ``STATEMENT_INGEST_LOG_LEVEL``,
``STATEMENT_INGEST_TAXONOMY``) are loaded from a local ``.env`` using
``python-dotenv`` before any command runs. Results go to stdout as JSON (one
object per line for transaction listings) so they can be piped.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import typer
from dotenv import load_dotenv
from typer.models import ArgumentInfo, OptionInfo

from .errors import StatementIngestError
from .logging_setup import configure_logging
from .models import (
    CardParseResult,
    CreditCardSummary,
    CreditCardTransaction,
    EnrichedTransaction,
    fmt_decimal,
)

if TYPE_CHECKING:
    from .categorization import Categorizer

TAXONOMY_ENV = "STATEMENT_INGEST_TAXONOMY"


# ---- Small module-level helpers used by CLI commands -------------------------


def _resolve_categorizer(
    taxonomy_path: Path | None, *, database_url: str | None = None, from_db: bool = False
) -> Categorizer:
    """Build the categorizer from ``--taxonomy``, the env var, the DB or the seed.

    Precedence: explicit file, ``STATEMENT_INGEST_TAXONOMY``, ``st_categories``
    (only with ``from_db``), packaged default.
    """

    from .categorization import Categorizer
    from .taxonomy import default_taxonomy, load_taxonomy, load_taxonomy_from_db

    path = taxonomy_path or (Path(p) if (p := os.getenv(TAXONOMY_ENV)) else None)
    if path is not None:
        return Categorizer(load_taxonomy(path))
    if from_db:
        from db.client import session_scope

        with session_scope(database_url=database_url) as session:
            return Categorizer(load_taxonomy_from_db(session))
    return Categorizer(default_taxonomy())


def _card_record(t: CreditCardTransaction) -> dict[str, Any]:
    return {
        "date": t.date,
        "description": t.description,
        "amount": fmt_decimal(t.amount),
        "direction": t.direction,
        "merchant": t.merchant,
        "category": t.category,
    }


def _card_to_enriched(t: CreditCardTransaction) -> EnrichedTransaction:
    return EnrichedTransaction(
        date=t.date,
        description=t.description,
        amount=t.amount,
        direction=t.direction,
        remarks=t.remarks,
        reference=t.reference,
        mode="Card",
        merchant=t.merchant,
        category=t.category,
    )


def _summary_record(s: CreditCardSummary) -> dict[str, Any]:
    return {
        "total_spending": fmt_decimal(s.total_spending),
        "total_payments": fmt_decimal(s.total_payments),
        "cashback_received": fmt_decimal(s.cashback_received),
        "transaction_count": s.transaction_count,
        "category_breakdown": {k: fmt_decimal(v) for k, v in s.category_breakdown.items()},
        "top_merchants": [
            {"merchant": m.merchant, "amount": fmt_decimal(m.amount), "count": m.count}
            for m in s.top_merchants
        ],
    }


def _emit(obj: Any) -> None:
    print(json.dumps(obj, ensure_ascii=False))


def _load_enriched(
    path: Path,
    *,
    account_type: str,
    taxonomy_path: Path | None,
    database_url: str | None = None,
    db_taxonomy: bool = False,
) -> list[EnrichedTransaction]:
    """Parse ``path`` and return enriched rows (card rows are pre-categorized)."""

    from .enrich import enrich_transactions
    from .ingest.utils import load_statement

    result = load_statement(path, account_type=account_type)  # type: ignore[arg-type]
    if isinstance(result, CardParseResult):
        return [_card_to_enriched(t) for t in result.transactions]
    categorizer = _resolve_categorizer(
        taxonomy_path, database_url=database_url, from_db=db_taxonomy
    )
    return enrich_transactions(result.transactions, categorizer=categorizer)


# ---- Command handlers -------------------------------------------------------


def cmd_parse(path: Path, *, account_type: str = "bank", taxonomy_path: Path | None = None) -> int:
    """Print one JSON object per extracted transaction to stdout."""

    from .enrich import enrich_transactions
    from .ingest.utils import load_statement

    try:
        result = load_statement(path, account_type=account_type)  # type: ignore[arg-type]
        if isinstance(result, CardParseResult):
            for t in result.transactions:
                _emit(_card_record(t))
            return 0
        categorizer = _resolve_categorizer(taxonomy_path)
        rows = enrich_transactions(result.transactions, categorizer=categorizer)
    except (StatementIngestError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for row in rows:
        _emit(row.as_record())
    if result.outcome == "no_transactions":
        print(
            "Warning: no transactions could be extracted; try the CSV export.",
            file=sys.stderr,
        )
    return 0


def cmd_import(
    path: Path,
    *,
    account_id: str,
    account_type: str = "bank",
    database_url: str | None = None,
    taxonomy_path: Path | None = None,
    db_taxonomy: bool = False,
    allow_duplicates: bool = False,
) -> int:
    """Parse, enrich and persist a statement with duplicate checking."""

    from db.client import session_scope

    from .duplicates import import_transactions
    from .persistence import SqlTransactionStore

    try:
        rows = _load_enriched(
            path,
            account_type=account_type,
            taxonomy_path=taxonomy_path,
            database_url=database_url,
            db_taxonomy=db_taxonomy,
        )
    except (StatementIngestError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        with session_scope(database_url=database_url) as session:
            report = import_transactions(
                SqlTransactionStore(session),
                account_id,
                rows,
                skip_duplicates=not allow_duplicates,
            )
    except Exception as e:
        print(f"Error: import failed: {e}", file=sys.stderr)
        return 1

    _emit(
        {
            "inserted": report.inserted,
            "duplicates": len(report.duplicates),
            "inserted_ids": report.inserted_ids,
        }
    )
    return 0


def cmd_check_duplicates(
    path: Path,
    *,
    account_id: str,
    account_type: str = "bank",
    database_url: str | None = None,
) -> int:
    """Print the statement rows that already exist for ``account_id``."""

    from db.client import session_scope

    from .duplicates import find_duplicates
    from .persistence import SqlTransactionStore

    try:
        rows = _load_enriched(path, account_type=account_type, taxonomy_path=None)
    except (StatementIngestError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        with session_scope(database_url=database_url) as session:
            matches = find_duplicates(SqlTransactionStore(session), account_id, rows)
    except Exception as e:
        print(f"Error: duplicate check failed: {e}", file=sys.stderr)
        return 1

    for m in matches:
        _emit({"existing_id": m.existing_id, **m.transaction.as_record()})
    return 0


def cmd_suggest_categories(path: Path, *, taxonomy_path: Path | None = None) -> int:
    """Print word -> descriptions buckets for uncategorized rows as JSON."""

    from .ingest.utils import load_statement

    try:
        result = load_statement(path)
        categorizer = _resolve_categorizer(taxonomy_path)
    except (StatementIngestError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    descriptions = [t.description or t.remarks for t in result.transactions]
    _emit(categorizer.suggest_categories(descriptions))
    return 0


def cmd_card_summary(path: Path) -> int:
    from .ingest.credit_card import summarize_card_transactions
    from .ingest.utils import load_statement

    try:
        result = load_statement(path, account_type="credit_card")
    except (StatementIngestError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not isinstance(result, CardParseResult):
        print(f"Error: {path} did not parse as a credit-card statement", file=sys.stderr)
        return 1
    _emit(_summary_record(summarize_card_transactions(result.transactions)))
    return 0


def cmd_seed_taxonomy(*, file: Path | None = None, database_url: str | None = None) -> int:
    from .ingest.seed_taxonomy import reseed_taxonomy
    from .taxonomy import DEFAULT_TAXONOMY_FILE

    try:
        n = reseed_taxonomy(database_url=database_url, file=file or DEFAULT_TAXONOMY_FILE)
    except Exception as e:
        print(f"Error: seeding failed: {e}", file=sys.stderr)
        return 1
    print(f"Seeded {n} categories")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Parse bank and credit-card statements (CSV, PDF, flattened text) into "
        "normalized, categorized transactions. Loads settings from a local .env."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults). Typer reads them from the Annotated metadata below.
STATEMENT_ARG: ArgumentInfo = typer.Argument(
    ...,
    help="Statement file (.csv, .pdf or .txt)",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)
ACCOUNT_TYPE_OPTION: OptionInfo = typer.Option(
    "--account-type", help="Statement kind: bank or credit_card."
)
TAXONOMY_OPTION: OptionInfo = typer.Option(
    "--taxonomy",
    help=f"Custom taxonomy JSON (falls back to ${TAXONOMY_ENV}, then the packaged seed).",
)
DATABASE_URL_OPTION: OptionInfo = typer.Option(
    "--database-url", help="Override DATABASE_URL (falls back to env var)."
)
ACCOUNT_ID_OPTION: OptionInfo = typer.Option(
    "--account-id", help="Identifier of the account the statement belongs to."
)


@app.command("parse")
def parse_cmd(
    path: Annotated[Path, STATEMENT_ARG],
    account_type: Annotated[str, ACCOUNT_TYPE_OPTION] = "bank",
    taxonomy: Annotated[Path | None, TAXONOMY_OPTION] = None,
) -> None:
    """Print extracted transactions as JSON lines."""

    raise typer.Exit(cmd_parse(path, account_type=account_type, taxonomy_path=taxonomy))


@app.command("import")
def import_cmd(
    path: Annotated[Path, STATEMENT_ARG],
    account_id: Annotated[str, ACCOUNT_ID_OPTION],
    account_type: Annotated[str, ACCOUNT_TYPE_OPTION] = "bank",
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
    taxonomy: Annotated[Path | None, TAXONOMY_OPTION] = None,
    db_taxonomy: bool = typer.Option(
        False, "--db-taxonomy", help="Categorize with the st_categories table."
    ),
    allow_duplicates: bool = typer.Option(
        False, "--allow-duplicates", help="Insert rows even when they collide."
    ),
) -> None:
    """Persist a statement, skipping rows already stored for the account."""

    raise typer.Exit(
        cmd_import(
            path,
            account_id=account_id,
            account_type=account_type,
            database_url=database_url,
            taxonomy_path=taxonomy,
            db_taxonomy=db_taxonomy,
            allow_duplicates=allow_duplicates,
        )
    )


@app.command("check-duplicates")
def check_duplicates_cmd(
    path: Annotated[Path, STATEMENT_ARG],
    account_id: Annotated[str, ACCOUNT_ID_OPTION],
    account_type: Annotated[str, ACCOUNT_TYPE_OPTION] = "bank",
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    """List statement rows that already exist in the database."""

    raise typer.Exit(
        cmd_check_duplicates(
            path, account_id=account_id, account_type=account_type, database_url=database_url
        )
    )


@app.command("suggest-categories")
def suggest_categories_cmd(
    path: Annotated[Path, STATEMENT_ARG],
    taxonomy: Annotated[Path | None, TAXONOMY_OPTION] = None,
) -> None:
    """Group uncategorized descriptions by significant word."""

    raise typer.Exit(cmd_suggest_categories(path, taxonomy_path=taxonomy))


@app.command("card-summary")
def card_summary_cmd(path: Annotated[Path, STATEMENT_ARG]) -> None:
    """Summarize a credit-card statement (spend, payments, top merchants)."""

    raise typer.Exit(cmd_card_summary(path))


@app.command("seed-taxonomy")
def seed_taxonomy_cmd(
    file: Annotated[Path | None, TAXONOMY_OPTION] = None,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    """Replace st_categories with a taxonomy JSON (destructive)."""

    raise typer.Exit(cmd_seed_taxonomy(file=file, database_url=database_url))


@app.callback()
def _root() -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging once.
    """

    # Load environment from .env in CWD (override=False to keep existing env)
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging()


if __name__ == "__main__":  # pragma: no cover - exercised via the console script
    # Running as a module: `python -m statement_ingest.cli`
    app()
