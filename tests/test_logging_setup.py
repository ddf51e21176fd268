import logging

import pytest

from statement_ingest.logging_setup import LOG_LEVEL_ENV, get_logger, resolve_level


@pytest.mark.parametrize(
    ("level", "expected"),
    [
        (logging.WARNING, logging.WARNING),
        ("debug", logging.DEBUG),
        (" Error ", logging.ERROR),
        ("15", 15),
        ("chatty", logging.INFO),
    ],
)
def test_resolve_level(level: int | str, expected: int) -> None:
    assert resolve_level(level) == expected


def test_resolve_level_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    assert resolve_level() == logging.INFO
    monkeypatch.setenv(LOG_LEVEL_ENV, "DEBUG")
    assert resolve_level() == logging.DEBUG


def test_get_logger_lives_under_package_namespace() -> None:
    log = get_logger("statement_ingest.ingest.csv_statement")

    assert log.name == "statement_ingest.ingest.csv_statement"
    assert logging.getLogger("statement_ingest").handlers
