"""Pytest configuration for test isolation.

The database client keeps one process-wide engine bound to the first URL it
sees, and the CLI reads a few settings from the environment. Tests create a
fresh SQLite file each, so the engine must be disposed between tests and the
settings must not leak in from the developer's shell or ``.env``.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from db.client import reset_engine


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Clear env-driven settings and dispose the shared engine after each test."""

    for name in ("DATABASE_URL", "STATEMENT_INGEST_TAXONOMY", "STATEMENT_INGEST_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    yield
    reset_engine()
