"""Public interface for the ``statement_ingest`` package.

This module exposes the package's parsing, enrichment and import functions and
its public models/types as the stable import surface. There is no runtime
logic here, only symbol re-exports.
"""

from .categorization import Categorizer, categorize
from .duplicates import TransactionStore, duplicate_key, find_duplicates, import_transactions
from .enrich import enrich_transactions
from .errors import StatementFormatError, StatementIngestError, TaxonomyError
from .ingest.credit_card import parse_card_statement_text, summarize_card_transactions
from .ingest.csv_statement import parse_csv_file, parse_csv_rows, parse_csv_text
from .ingest.pdf_statement import detect_issuer, parse_pdf_file, parse_statement_text
from .ingest.utils import load_statement
from .merchants import extract_merchant
from .models import (
    CardParseResult,
    CreditCardSummary,
    CreditCardTransaction,
    DuplicateMatch,
    EnrichedTransaction,
    ImportReport,
    ParseResult,
    RawTransaction,
)
from .modes import detect_mode
from .normalizers import parse_amount, parse_date
from .taxonomy import Taxonomy, default_taxonomy, load_taxonomy

__all__ = [
    # Parsing
    "load_statement",
    "parse_csv_rows",
    "parse_csv_text",
    "parse_csv_file",
    "detect_issuer",
    "parse_statement_text",
    "parse_pdf_file",
    "parse_card_statement_text",
    "summarize_card_transactions",
    # Normalization / enrichment
    "parse_amount",
    "parse_date",
    "detect_mode",
    "extract_merchant",
    "categorize",
    "Categorizer",
    "enrich_transactions",
    "Taxonomy",
    "default_taxonomy",
    "load_taxonomy",
    # Duplicates / import
    "TransactionStore",
    "duplicate_key",
    "find_duplicates",
    "import_transactions",
    # Models / types
    "RawTransaction",
    "EnrichedTransaction",
    "CreditCardTransaction",
    "ParseResult",
    "CardParseResult",
    "CreditCardSummary",
    "DuplicateMatch",
    "ImportReport",
    # Errors
    "StatementIngestError",
    "StatementFormatError",
    "TaxonomyError",
]
