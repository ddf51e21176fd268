"""Exception types raised by ``statement_ingest``.

Only file-level failures raise. Row-level problems (unmatched lines,
unparseable dates, non-positive amounts) are skipped and show up as a lower
``ParseResult.lines_extracted`` count instead.
"""

from __future__ import annotations


class StatementIngestError(Exception):
    """Base class for errors raised by this package."""


class StatementFormatError(StatementIngestError):
    """The statement as a whole cannot be parsed (e.g. no date column)."""


class TaxonomyError(StatementIngestError):
    """A taxonomy file or table is malformed."""


__all__ = ["StatementIngestError", "StatementFormatError", "TaxonomyError"]
