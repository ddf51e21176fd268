"""Category taxonomy: the ordered keyword/pattern table behind categorization.

The taxonomy is data. The packaged seed (``ingest/seeds/taxonomy.v1.json``)
is validated with pydantic and compiled into an immutable :class:`Taxonomy`
whose order is significant: the categorizer returns the *first* matching
category, not the best one. User-defined categories are added with
:meth:`Taxonomy.with_category` and go through exactly the same matching code.

Exports
-------
- ``CategorySpec``: validated JSON/DB entry.
- ``CategoryRule`` / ``Taxonomy``: compiled, read-only matching table.
- ``load_taxonomy(path)``, ``default_taxonomy()``, ``card_spend_taxonomy()``,
  ``load_taxonomy_from_db(session)``.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from sqlalchemy import select
from sqlalchemy.orm import Session

from .errors import TaxonomyError
from .logging_setup import get_logger

type CategoryKind = Literal["expense", "income", "transfer", "investment"]

SEEDS_DIR = Path(__file__).resolve().parent / "ingest" / "seeds"
DEFAULT_TAXONOMY_FILE = SEEDS_DIR / "taxonomy.v1.json"
CARD_TAXONOMY_FILE = SEEDS_DIR / "card_taxonomy.v1.json"

_log = get_logger("statement_ingest.taxonomy")


class CategorySpec(BaseModel):
    """One taxonomy entry as stored in JSON or ``st_categories``."""

    model_config = ConfigDict(strict=True, extra="forbid", str_strip_whitespace=True)

    name: str
    code: str | None = None
    kind: CategoryKind = "expense"
    keywords: list[str] = []
    patterns: list[str] = []
    # Display-only passthrough
    icon: str | None = None
    color: str | None = None

    @field_validator("name")
    @classmethod
    def _name_non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("name must be non-empty")
        return v

    @field_validator("keywords")
    @classmethod
    def _normalize_keywords(cls, v: list[str]) -> list[str]:
        return [k.strip().lower() for k in v if k.strip()]

    @field_validator("patterns")
    @classmethod
    def _patterns_compile(cls, v: list[str]) -> list[str]:
        for p in v:
            try:
                re.compile(p, re.IGNORECASE)
            except re.error as exc:
                raise ValueError(f"invalid pattern {p!r}: {exc}") from None
        return v


@dataclass(frozen=True, slots=True)
class CategoryRule:
    name: str
    code: str
    kind: CategoryKind
    keywords: tuple[str, ...]
    patterns: tuple[re.Pattern[str], ...]

    @classmethod
    def from_spec(cls, spec: CategorySpec) -> CategoryRule:
        return cls(
            name=spec.name,
            code=spec.code or _slug(spec.name),
            kind=spec.kind,
            keywords=tuple(spec.keywords),
            patterns=tuple(re.compile(p, re.IGNORECASE) for p in spec.patterns),
        )

    def matches_keyword(self, lowered: str) -> bool:
        return any(k in lowered for k in self.keywords)

    def matches_pattern(self, text: str) -> bool:
        return any(p.search(text) for p in self.patterns)


def _slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


class Taxonomy:
    """Immutable ordered collection of :class:`CategoryRule` objects."""

    __slots__ = ("_rules", "_by_name")

    def __init__(self, rules: Iterable[CategoryRule]) -> None:
        self._rules: tuple[CategoryRule, ...] = tuple(rules)
        by_name: dict[str, CategoryRule] = {}
        for rule in self._rules:
            if rule.name in by_name:
                raise TaxonomyError(f"duplicate category name: {rule.name!r}")
            by_name[rule.name] = rule
        self._by_name = by_name

    @classmethod
    def from_specs(cls, specs: Iterable[CategorySpec]) -> Taxonomy:
        return cls(CategoryRule.from_spec(s) for s in specs)

    @property
    def rules(self) -> tuple[CategoryRule, ...]:
        return self._rules

    def names(self) -> list[str]:
        return [r.name for r in self._rules]

    def get(self, name: str) -> CategoryRule | None:
        return self._by_name.get(name)

    def with_category(self, spec: CategorySpec, *, before: str | None = None) -> Taxonomy:
        """Return a new taxonomy with ``spec`` inserted.

        The new category goes immediately before the category named ``before``
        or, when ``before`` is ``None``, ahead of a trailing ``Other`` entry
        (appended at the end otherwise). Names must stay unique.
        """

        rule = CategoryRule.from_spec(spec)
        rules = list(self._rules)
        if before is not None:
            if before not in self._by_name:
                raise TaxonomyError(f"unknown category: {before!r}")
            idx = next(i for i, r in enumerate(rules) if r.name == before)
        elif rules and rules[-1].name == "Other":
            idx = len(rules) - 1
        else:
            idx = len(rules)
        rules.insert(idx, rule)
        return Taxonomy(rules)

    def __iter__(self):
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"Taxonomy({self.names()!r})"


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------


def parse_specs(data: Any) -> list[CategorySpec]:
    """Validate a decoded JSON document (a list of category objects)."""

    if not isinstance(data, list):
        raise TaxonomyError("taxonomy JSON must be a list of category objects")
    specs: list[CategorySpec] = []
    for i, item in enumerate(data):
        try:
            specs.append(CategorySpec.model_validate(item))
        except ValidationError as exc:
            raise TaxonomyError(f"invalid taxonomy entry #{i}: {exc}") from exc
    return specs


def load_taxonomy(path: str | Path) -> Taxonomy:
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise TaxonomyError(f"cannot read taxonomy file {p}: {exc}") from exc
    taxonomy = Taxonomy.from_specs(parse_specs(data))
    _log.debug("loaded taxonomy from %s (%d categories)", p, len(taxonomy))
    return taxonomy


@lru_cache(maxsize=1)
def default_taxonomy() -> Taxonomy:
    """The packaged bank-statement taxonomy (loaded once per process)."""

    return load_taxonomy(DEFAULT_TAXONOMY_FILE)


@lru_cache(maxsize=1)
def card_spend_taxonomy() -> Taxonomy:
    """The reduced spend taxonomy used by the credit-card parser."""

    return load_taxonomy(CARD_TAXONOMY_FILE)


def load_taxonomy_from_db(session: Session) -> Taxonomy:
    """Build a taxonomy from active ``st_categories`` rows in ``sort_order``.

    Rows without a sort order come last, ordered by name.
    """

    from db.models import StCategory

    rows = (
        session.execute(
            select(StCategory)
            .where(StCategory.is_active.is_(True))
            .order_by(StCategory.sort_order.is_(None), StCategory.sort_order, StCategory.name)
        )
        .scalars()
        .all()
    )
    if not rows:
        raise TaxonomyError("no active categories present in st_categories")

    specs: list[CategorySpec] = []
    for r in rows:
        try:
            specs.append(
                CategorySpec(
                    name=r.name,
                    code=r.code,
                    kind=r.kind,
                    keywords=list(r.keywords or []),
                    patterns=list(r.patterns or []),
                    icon=r.icon,
                    color=r.color,
                )
            )
        except ValidationError as exc:
            raise TaxonomyError(f"invalid category row {r.code!r}: {exc}") from exc
    return Taxonomy.from_specs(specs)


__all__ = [
    "CategoryKind",
    "CategorySpec",
    "CategoryRule",
    "Taxonomy",
    "DEFAULT_TAXONOMY_FILE",
    "CARD_TAXONOMY_FILE",
    "parse_specs",
    "load_taxonomy",
    "default_taxonomy",
    "card_spend_taxonomy",
    "load_taxonomy_from_db",
]
