from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Application logger setup.

Lines look like ``LABEL message`` with LABEL one of DEBUG|INFO|WARN|ERROR|SUMMARY.
Reader modules log through ``logging.getLogger(__name__)``; they are children of
the ``xlsx_entities`` logger, so the single handler installed here prints for
the whole package. Until ``setup_logging`` runs, records propagate to whatever
the host application configured.
"""

__all__ = [
    "APP_LOGGER_NAME",
    "LabeledFormatter",
    "SUMMARY_LEVEL",
    "get_logger",
    "log_summary",
    "reset_logging",
    "setup_logging",
]

APP_LOGGER_NAME = "xlsx_entities"

# between INFO (20) and WARNING (30): shown at the default level, never filtered as a warning
SUMMARY_LEVEL = 25


class LabeledFormatter(logging.Formatter):
    LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def format(self, record: logging.LogRecord) -> str:
        label = self.LABELS.get(record.levelno, record.levelname)
        return f"{label} {record.getMessage()}"


def _app_handler(logger: logging.Logger) -> logging.Handler | None:
    for handler in logger.handlers:
        if isinstance(handler.formatter, LabeledFormatter):
            return handler
    return None


def setup_logging(debug: bool = False, stream: TextIO | None = None) -> logging.Logger:
    """Install the labeled handler on the application logger.

    Safe to call repeatedly: later calls keep the existing handler and only
    switch between INFO and DEBUG. ``stream`` defaults to stdout and is only
    used on the first call.
    """
    level = logging.DEBUG if debug else logging.INFO
    logger = logging.getLogger(APP_LOGGER_NAME)
    handler = _app_handler(logger)
    if handler is None:
        logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setFormatter(LabeledFormatter())
        logger.addHandler(handler)
        # the labeled handler is the only output; the root logger would print twice
        logger.propagate = False
    logger.setLevel(level)
    handler.setLevel(level)
    return logger


def get_logger() -> logging.Logger:
    """Application logger, configured at INFO on first use."""
    logger = logging.getLogger(APP_LOGGER_NAME)
    if _app_handler(logger) is None:
        return setup_logging()
    return logger


def log_summary(message: str) -> None:
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Remove the labeled handler and give records back to the root logger (tests)."""
    logger = logging.getLogger(APP_LOGGER_NAME)
    handler = _app_handler(logger)
    while handler is not None:
        logger.removeHandler(handler)
        handler = _app_handler(logger)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
