"""Tests for settings and logging setup."""

import io
import logging

import pytest

from pocketbook import logging_setup
from pocketbook.config import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_WARNING_THRESHOLD,
    load_settings,
    parse_threshold,
)


def test_load_settings_defaults():
    """Test settings with an empty environment."""
    settings = load_settings({})

    assert settings.database_path is None
    assert settings.warning_threshold == DEFAULT_WARNING_THRESHOLD
    assert settings.log_level == DEFAULT_LOG_LEVEL


def test_load_settings_from_environment():
    """Test reading every supported variable."""
    settings = load_settings(
        {
            "POCKETBOOK_DB_PATH": "/tmp/books.db",
            "POCKETBOOK_WARNING_THRESHOLD": "65.5",
            "POCKETBOOK_LOG_LEVEL": "debug",
        }
    )

    assert settings.database_path == "/tmp/books.db"
    assert settings.warning_threshold == 65.5
    assert settings.log_level == "debug"


@pytest.mark.parametrize("value", ["abc", "-1", "100.5"])
def test_parse_threshold_rejects_bad_values(value):
    """Test that thresholds must be numbers between 0 and 100."""
    with pytest.raises(ValueError):
        parse_threshold(value)


def test_parse_threshold_bounds():
    """Test that both bounds are accepted."""
    assert parse_threshold("0") == 0.0
    assert parse_threshold(100) == 100.0


def test_invalid_threshold_env_fails_cli(cli_runner, temp_db, monkeypatch):
    """Test that the CLI reports a bad threshold setting as a usage error."""
    from pocketbook.cli.main import cli

    monkeypatch.setenv("POCKETBOOK_WARNING_THRESHOLD", "lots")
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list"])

    assert result.exit_code == 2
    assert "Invalid warning threshold" in result.output


@pytest.fixture
def fresh_logging(monkeypatch):
    """Reset the package logger so configure_logging runs again."""
    logger = logging.getLogger("pocketbook")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    monkeypatch.setattr(logging_setup, "_CONFIGURED", False)
    logger.handlers = []
    yield logger
    logger.handlers = handlers
    logger.propagate = propagate
    logger.setLevel(level)


def test_configure_logging_writes_to_stream(fresh_logging):
    """Test that configured loggers emit through the package handler."""
    stream = io.StringIO()
    logging_setup.configure_logging("info", fmt="%(levelname)s %(message)s", stream=stream)

    logging_setup.get_logger("pocketbook.domain.test").info("hello")

    assert stream.getvalue() == "INFO hello\n"
    assert fresh_logging.propagate is False


def test_configure_logging_runs_once(fresh_logging):
    """Test that a second call does not add another handler."""
    logging_setup.configure_logging("warning", stream=io.StringIO())
    logging_setup.configure_logging("debug", stream=io.StringIO())

    assert len(fresh_logging.handlers) == 1
    assert fresh_logging.level == logging.WARNING


def test_get_logger_adds_null_handler(fresh_logging):
    """Test library-safe default before configuration."""
    logging_setup.get_logger("pocketbook.something")

    assert any(isinstance(h, logging.NullHandler) for h in fresh_logging.handlers)
