"""Rule-based transaction categorization.

Two passes over an injected :class:`~statement_ingest.taxonomy.Taxonomy`:

1. keyword pass: the first category (in taxonomy order) with any keyword
   occurring as a substring of the lower-cased text;
2. pattern pass: the first category with any fallback regex matching the
   text (case-insensitive).

Otherwise the fallback category (``"Other"``) is returned. Order matters:
``"SPICE RESTAURANT DMART"`` resolves to *Food & Dining* because that entry
precedes *Groceries*.
"""

from __future__ import annotations

from collections.abc import Iterable

from .taxonomy import Taxonomy, default_taxonomy

FALLBACK_CATEGORY = "Other"

# Advisory suggestions only consider words longer than this.
_SUGGEST_MIN_WORD_LEN = 4


class Categorizer:
    __slots__ = ("taxonomy", "fallback")

    def __init__(self, taxonomy: Taxonomy, *, fallback: str = FALLBACK_CATEGORY) -> None:
        self.taxonomy = taxonomy
        self.fallback = fallback

    def categorize(self, description: str | None) -> str:
        if not description:
            return self.fallback

        lowered = description.lower()
        for rule in self.taxonomy:
            if rule.matches_keyword(lowered):
                return rule.name

        for rule in self.taxonomy:
            if rule.matches_pattern(description):
                return rule.name

        return self.fallback

    def suggest_categories(self, descriptions: Iterable[str]) -> dict[str, list[str]]:
        """Group uncategorized descriptions by their significant words.

        Every description that falls through to the fallback category is
        listed under each lower-cased word longer than four characters. A
        description appears once per distinct word.
        """

        suggestions: dict[str, list[str]] = {}
        for desc in descriptions:
            if self.categorize(desc) != self.fallback:
                continue
            seen: set[str] = set()
            for word in desc.lower().split():
                if len(word) <= _SUGGEST_MIN_WORD_LEN or word in seen:
                    continue
                seen.add(word)
                suggestions.setdefault(word, []).append(desc)
        return suggestions


def default_categorizer() -> Categorizer:
    return Categorizer(default_taxonomy())


def categorize(description: str | None) -> str:
    """Categorize with the packaged default taxonomy."""

    return default_categorizer().categorize(description)


__all__ = ["FALLBACK_CATEGORY", "Categorizer", "default_categorizer", "categorize"]
