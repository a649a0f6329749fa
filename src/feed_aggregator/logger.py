"""
Loguru setup for the feed aggregator.

Every module logs through ``get_logger(__name__)``, which binds the module
name into ``extra["name"]``. Console and file sinks come from LoggingConfig.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger as _logger

from feed_aggregator.config import LoggingConfig, get_config


def _file_sink_options(rotation: str, retention: str) -> dict:
    return {
        "rotation": rotation,
        "retention": retention,
        "compression": "zip",
        "encoding": "utf-8",
        # Scheduler threads and the web worker share the file
        "enqueue": True,
    }


def setup_logger(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    rotation: Optional[str] = None,
    retention: Optional[str] = None,
    format: Optional[str] = None,
    log_config: Optional[LoggingConfig] = None,
) -> None:
    """Replace loguru's handlers with the configured console and file sinks.

    Args:
        level: Minimum level; defaults to ``LOG_LEVEL``
        log_file: Log file path; passing one turns the file sink on
        rotation: Rotation policy, e.g. "100 MB"
        retention: Retention policy, e.g. "30 days"
        format: Loguru format string
        log_config: Logging section (global config when omitted)
    """
    log_config = log_config or get_config().logging

    level = level or log_config.level
    format = format or log_config.format
    write_file = log_file is not None or log_config.file_enabled
    log_file = log_file or log_config.file_path

    _logger.remove()

    if log_config.console_enabled:
        _logger.add(sys.stderr, level=level, format=format, colorize=True, diagnose=False)

    if write_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        options = _file_sink_options(rotation or log_config.rotation, retention or log_config.retention)
        _logger.add(log_file, level=level, format=format, diagnose=False, **options)


def get_logger(name: Optional[str] = None):
    """Loguru logger, bound to ``name`` when given."""
    return _logger.bind(name=name) if name else _logger


debug = _logger.debug
info = _logger.info
warning = _logger.warning
error = _logger.error
exception = _logger.exception

logger = _logger

__all__ = [
    "setup_logger",
    "get_logger",
    "logger",
    "debug",
    "info",
    "warning",
    "error",
    "exception",
]
