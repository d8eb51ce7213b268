"""Package logger setup shared by the core and the window."""
from __future__ import annotations

import logging

LOGGER_NAME = "clarke_park_lab"

_logger = logging.getLogger(LOGGER_NAME)


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a console handler once and set the package level."""
    if not _logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[%(levelname)s][%(name)s] %(message)s"))
        _logger.addHandler(handler)
    set_log_level(level)
    return _logger


def set_log_level(level: str) -> None:
    """Set package log level (DEBUG/INFO/WARNING/ERROR)."""
    level_name = (level or "INFO").upper()
    _logger.setLevel(getattr(logging, level_name, logging.INFO))


def get_log_level() -> str:
    return logging.getLevelName(_logger.level)
