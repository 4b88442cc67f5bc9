"""Tests for logging configuration."""

import json
import logging

import pytest

from trace_agent.logging_config import (
    JSONFormatter,
    get_logger,
    level_from_numeric,
    setup_logging,
)


@pytest.fixture
def restore_root_logger():
    """Restore root logger handlers and level after the test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_format_basic_record(self):
        """Test that records become JSON objects."""
        record = logging.LogRecord(
            "trace_agent.test", logging.INFO, __file__, 10, "hello %s", ("world",), None
        )

        data = json.loads(JSONFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "trace_agent.test"
        assert data["message"] == "hello world"
        assert data["line"] == 10

    def test_format_includes_context(self):
        """Test that the context extra is kept."""
        record = logging.LogRecord(
            "trace_agent.test", logging.ERROR, __file__, 1, "failed", (), None
        )
        record.context = {"status_code": 503}

        data = json.loads(JSONFormatter().format(record))

        assert data["context"] == {"status_code": 503}

    def test_format_includes_exception(self):
        """Test that exception info is rendered."""
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            import sys

            record = logging.LogRecord(
                "trace_agent.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )

        data = json.loads(JSONFormatter().format(record))

        assert "RuntimeError: boom" in data["exception"]


class TestLevels:
    """Tests for numeric level mapping."""

    @pytest.mark.parametrize(
        "value, expected",
        [(0, "DISABLED"), (1, "ERROR"), (2, "WARNING"), (3, "INFO"), (4, "DEBUG"), (9, "DEBUG")],
    )
    def test_level_from_numeric(self, value, expected):
        assert level_from_numeric(value) == expected


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_explicit_level(self, restore_root_logger):
        """Test that an explicit level is applied to the root logger."""
        setup_logging(log_level="debug")

        assert restore_root_logger.level == logging.DEBUG

    def test_numeric_env_level(self, restore_root_logger, monkeypatch):
        """Test that GCLOUD_TRACE_LOGLEVEL is honoured."""
        monkeypatch.delenv("TRACE_AGENT_LOG_LEVEL", raising=False)
        monkeypatch.setenv("GCLOUD_TRACE_LOGLEVEL", "3")

        setup_logging()

        assert restore_root_logger.level == logging.INFO

    def test_numeric_level_zero_disables(self, restore_root_logger, monkeypatch):
        """Test that level 0 silences even critical records."""
        monkeypatch.delenv("TRACE_AGENT_LOG_LEVEL", raising=False)
        monkeypatch.setenv("GCLOUD_TRACE_LOGLEVEL", "0")

        setup_logging()

        assert restore_root_logger.level > logging.CRITICAL
        assert not get_logger("trace_agent.test").isEnabledFor(logging.CRITICAL)

    def test_log_file(self, restore_root_logger, tmp_path):
        """Test that a log file receives JSON lines."""
        log_file = tmp_path / "logs" / "agent.log"

        setup_logging(log_level="INFO", log_file=str(log_file))
        get_logger("trace_agent.test").info("written")
        for handler in restore_root_logger.handlers:
            handler.flush()

        line = log_file.read_text().strip().splitlines()[-1]
        assert json.loads(line)["message"] == "written"
