from __future__ import annotations

# Seeder for the category taxonomy table.
#
# Usage (example):
#   uv run python -m statement_ingest.ingest.seed_taxonomy \
#     --database-url sqlite:///statements.db \
#     --file packages/statement_ingest/ingest/seeds/taxonomy.v1.json
#
# This script:
#   1) Deletes every st_categories row and reseeds the taxonomy, preserving
#      input order via sort_order.
#   2) Leaves st_transactions.category as-is (it stores the category name).
import argparse
import json
from pathlib import Path

from db.client import session_scope
from db.models import StCategory
from sqlalchemy import delete

from ..errors import TaxonomyError
from ..taxonomy import DEFAULT_TAXONOMY_FILE, CategoryRule, Taxonomy, parse_specs


def _load_json(path: Path) -> list[dict]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise TaxonomyError(f"cannot read taxonomy file {path}: {exc}") from exc
    if not isinstance(data, list):
        raise TaxonomyError("Seed JSON must be a list of category objects")
    return data


def reseed_taxonomy(*, database_url: str | None, file: Path = DEFAULT_TAXONOMY_FILE) -> int:
    """Replace ``st_categories`` with the entries in ``file``.

    Returns the number of rows written.
    """

    specs = parse_specs(_load_json(Path(file)))
    # Fails on duplicate names before touching the table.
    Taxonomy.from_specs(specs)

    with session_scope(database_url=database_url) as session:
        # Destructive reset acceptable for a reference table
        session.execute(delete(StCategory))
        for order, spec in enumerate(specs):
            rule = CategoryRule.from_spec(spec)
            session.add(
                StCategory(
                    code=rule.code,
                    name=spec.name,
                    kind=spec.kind,
                    keywords=list(spec.keywords),
                    patterns=list(spec.patterns),
                    icon=spec.icon,
                    color=spec.color,
                    is_active=True,
                    sort_order=order,
                )
            )
        session.flush()
    return len(specs)


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        description="Reseed the statement category taxonomy",
    )
    ap.add_argument(
        "--database-url",
        required=False,
        default=None,
        help=("SQLAlchemy database URL; falls back to $DATABASE_URL when not set"),
    )
    ap.add_argument(
        "--file",
        type=Path,
        required=False,
        default=DEFAULT_TAXONOMY_FILE,
    )
    args = ap.parse_args(argv)

    db_url: str | None = args.database_url or None
    reseed_taxonomy(database_url=db_url, file=args.file)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual utility
    raise SystemExit(main())
