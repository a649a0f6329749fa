"""Unit tests for logger configuration."""

import sys

import pytest
from loguru import logger as _logger

from feed_aggregator.config import LoggingConfig, load_config_from_yaml
from feed_aggregator.logger import (
    debug,
    error,
    exception,
    get_logger,
    info,
    setup_logger,
    warning,
)


@pytest.fixture(autouse=True)
def reset_handlers():
    """Leave loguru with its default stderr handler after each test."""
    yield
    _logger.remove()
    _logger.add(sys.stderr)


class TestSetupLogger:
    """Tests for setup_logger function."""

    def test_setup_logger_with_file(self, tmp_path):
        """Passing a log file enables the file sink."""
        log_file = tmp_path / "logs" / "test.log"
        log_config = LoggingConfig(console_enabled=False)

        setup_logger(level="DEBUG", log_file=str(log_file), log_config=log_config)
        _logger.debug("Debug to file")
        _logger.complete()
        _logger.remove()

        content = log_file.read_text()
        assert "Debug to file" in content
        assert "DEBUG" in content

    def test_level_filtering(self, tmp_path):
        log_file = tmp_path / "level.log"
        log_config = LoggingConfig(level="WARNING", console_enabled=False)

        setup_logger(log_file=str(log_file), log_config=log_config)
        info("Info message")
        warning("Warning message")
        _logger.complete()
        _logger.remove()

        content = log_file.read_text()
        assert "Info message" not in content
        assert "Warning message" in content

    def test_file_disabled_by_default(self, tmp_path):
        log_config = LoggingConfig(file_path=str(tmp_path / "never.log"))

        setup_logger(log_config=log_config)
        info("Console only")

        assert not (tmp_path / "never.log").exists()


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger_binds_name(self, tmp_path):
        log_file = tmp_path / "named.log"
        _logger.remove()
        _logger.add(str(log_file), format="{extra[name]} | {message}")

        get_logger("feed_aggregator.core.parser").info("Named message")
        _logger.remove()

        assert "feed_aggregator.core.parser | Named message" in log_file.read_text()

    def test_get_logger_without_name(self):
        assert get_logger() is _logger


class TestConvenienceFunctions:
    """Tests for convenience logging functions."""

    def test_all_levels(self, tmp_path):
        log_file = tmp_path / "levels.log"
        _logger.remove()
        _logger.add(str(log_file), format="{level} | {message}", level="DEBUG")

        debug("d")
        info("i")
        warning("w")
        error("e")
        try:
            raise ValueError("Test exception")
        except ValueError:
            exception("Exception occurred")
        _logger.remove()

        content = log_file.read_text()
        for line in ("DEBUG | d", "INFO | i", "WARNING | w", "ERROR | e", "ValueError: Test exception"):
            assert line in content


class TestLoggingConfig:
    """Tests for the logging configuration section."""

    def test_level_validation(self):
        assert LoggingConfig(level="debug").level == "DEBUG"

        with pytest.raises(ValueError):
            LoggingConfig(level="INVALID")

    def test_defaults(self):
        config = LoggingConfig()

        assert config.rotation == "100 MB"
        assert config.retention == "30 days"
        assert config.file_enabled is False

    def test_loaded_from_yaml(self, tmp_path):
        import yaml

        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            yaml.dump({"logging": {"level": "DEBUG", "console_enabled": False}, "cache": {"ttl_seconds": 30}})
        )

        config = load_config_from_yaml(str(config_file))

        assert config.logging.level == "DEBUG"
        assert config.logging.console_enabled is False
        assert config.cache.ttl_seconds == 30

    def test_missing_yaml(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config_from_yaml(str(tmp_path / "absent.yaml"))
