"""Attach merchant and category to parsed transactions."""

from __future__ import annotations

from collections.abc import Iterable

from .categorization import Categorizer, default_categorizer
from .merchants import extract_merchant
from .models import EnrichedTransaction, RawTransaction


def enrich_transactions(
    raws: Iterable[RawTransaction], *, categorizer: Categorizer | None = None
) -> list[EnrichedTransaction]:
    """Return one :class:`EnrichedTransaction` per input row, order preserved.

    The category is derived from the description, or from the remarks when
    the description is empty.
    """

    cat = categorizer or default_categorizer()
    return [
        EnrichedTransaction.from_raw(
            raw,
            merchant=extract_merchant(raw.description),
            category=cat.categorize(raw.description or raw.remarks),
        )
        for raw in raws
    ]


__all__ = ["enrich_transactions"]
