"""Logging for statement parsing and import.

Every module logs under the ``statement_ingest`` namespace
(``statement_ingest.ingest.pdf_statement`` and so on). Parsers report the
detected issuer at INFO and per-line telemetry (lines seen vs. rows kept) at
DEBUG; rows that cannot be read are skipped silently, never logged one by one.

Nothing is printed unless an entrypoint calls :func:`configure_logging`. The
CLI does so on startup, writing to stderr so stdout stays a clean stream of
JSON records::

    STATEMENT_INGEST_LOG_LEVEL=DEBUG statement-ingest parse stmt.pdf > rows.jsonl

Library callers that embed the parsers get a ``NullHandler`` and keep full
control of their own logging tree.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

LOG_LEVEL_ENV = "STATEMENT_INGEST_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_ROOT = "statement_ingest"
_configured = False


def resolve_level(level: int | str | None = None) -> int:
    """Turn ``level`` (or ``$STATEMENT_INGEST_LOG_LEVEL``) into a logging level.

    Accepts ints, digit strings and level names in any case. Anything
    unrecognised falls back to INFO.
    """

    if level is None:
        level = os.getenv(LOG_LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelName(name)
    return numeric if isinstance(numeric, int) else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Attach one stderr handler to the ``statement_ingest`` logger.

    Repeated calls are no-ops, so the CLI callback can run once per
    invocation under a test runner without stacking handlers.
    """

    global _configured
    if _configured:
        return

    logger = logging.getLogger(_ROOT)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = resolve_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False
    _configured = True


def get_logger(name: str) -> logging.Logger:
    root = logging.getLogger(_ROOT)
    if not _configured and not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["LOG_LEVEL_ENV", "configure_logging", "get_logger", "resolve_level"]
