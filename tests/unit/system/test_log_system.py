"""Tests for centralized logging configuration."""

import json
import logging
from logging.handlers import RotatingFileHandler

import pytest

from vaultalloc.system import LoggerFactory, LoggingConfig
from vaultalloc.system.log_system import _SystemLogFormatters


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before and after each test."""
    LoggerFactory.reset()
    yield
    LoggerFactory.reset()


def test_default_configuration():
    """Test logger factory with default configuration."""
    logger = LoggerFactory.get_logger()

    assert LoggerFactory.is_configured()
    assert hasattr(logger, "info")
    assert hasattr(logger, "warning")

    config = LoggerFactory.get_config()
    assert config.level == "INFO"
    assert config.format == "console"
    assert config.enable_file is False
    assert config.file_level == "WARNING"


def test_explicit_configuration():
    """Test configuring logger factory explicitly."""
    config = LoggingConfig(level="DEBUG", format="json")

    LoggerFactory.configure(config)

    assert LoggerFactory.is_configured()
    assert LoggerFactory.get_config().level == "DEBUG"
    assert LoggerFactory.get_config().format == "json"


def test_console_handler_writes_to_stderr():
    """Test console logs never mix with command output on stdout."""
    import sys

    LoggerFactory.configure(LoggingConfig())

    stream_handlers = [h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler]
    assert stream_handlers
    assert all(h.stream is sys.stderr for h in stream_handlers)


def test_file_logging_writes_json_lines(tmp_path):
    """Test file output is machine-readable JSON."""
    log_file = tmp_path / "alloc.log"
    config = LoggingConfig(enable_file=True, file_path=log_file, file_level="DEBUG", file_rotation=False)

    LoggerFactory.configure(config)
    logger = LoggerFactory.get_logger()
    logger.warning("allocation.market.skipped", market="eth", reason="closed")

    record = json.loads(log_file.read_text().strip())
    assert record["event"] == "allocation.market.skipped"
    assert record["market"] == "eth"
    assert "log_timestamp" in record
    assert record["level"].upper() == "WARNING"


def test_file_logging_uses_default_path(tmp_path, monkeypatch):
    """Test enabling file logging without path falls back to the default."""
    monkeypatch.chdir(tmp_path)
    config = LoggingConfig(enable_file=True, file_path=None)

    LoggerFactory.configure(config)

    assert str(LoggerFactory.get_config().file_path) == "logs/vaultalloc.log"


def test_rotating_file_handler(tmp_path):
    """Test rotating file handler configuration."""
    log_file = tmp_path / "rotating.log"
    config = LoggingConfig(
        enable_file=True,
        file_path=log_file,
        file_rotation=True,
        max_file_size_mb=1,
        backup_count=3,
    )

    LoggerFactory.configure(config)

    handlers = [h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)]
    handler = next((h for h in handlers if str(log_file) in str(h.baseFilename)), None)
    assert handler is not None
    assert handler.maxBytes == 1024 * 1024
    assert handler.backupCount == 3


def test_file_level_independent_from_console_level(tmp_path):
    """Test file output can capture more than the console."""
    log_file = tmp_path / "debug.log"
    config = LoggingConfig(
        level="WARNING",
        enable_file=True,
        file_path=log_file,
        file_level="DEBUG",
        file_rotation=False,
    )

    LoggerFactory.configure(config)
    logger = LoggerFactory.get_logger()
    logger.debug("allocation.market.context_loaded", market="eth")

    events = [json.loads(line)["event"] for line in log_file.read_text().splitlines() if line.strip()]
    assert "allocation.market.context_loaded" in events


def test_reset_clears_configuration():
    """Test that reset clears configuration."""
    LoggerFactory.configure(LoggingConfig(level="DEBUG"))
    LoggerFactory.reset()

    assert not LoggerFactory.is_configured()
    assert LoggerFactory.get_config().level == "INFO"


class TestSystemLogFormatters:
    """Tests for console formatting of allocation events."""

    def test_market_event_puts_market_first(self):
        """Test per-market events name the market."""
        line = _SystemLogFormatters.format_system_log(
            "allocation.market.skipped", {"market": "eth", "reason": "closed"}, "WARNING", "ts"
        )

        assert line is not None
        assert "eth" in line
        assert "Skipped" in line
        assert "reason=" in line

    def test_allocation_event(self):
        """Test allocation-level events."""
        line = _SystemLogFormatters.format_system_log("allocation.completed", {"markets": 2}, "INFO", "ts")

        assert line is not None
        assert "Completed" in line
        assert "markets=" in line

    def test_other_events_fall_through(self):
        """Test unrelated events use the generic renderer."""
        assert _SystemLogFormatters.format_system_log("cli.start", {}, "INFO", "ts") is None
