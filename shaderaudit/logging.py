"""Logging for shaderaudit runs.

Levels used across the package:

* INFO: run start and end, and how many patterns discovery found.
* WARNING: a pattern could not be classified, inspected or disposed; the run
  carries on and the report notes the failure.
* DEBUG: per-pattern classification, skipped types, unreadable files and
  failure tracebacks.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "shaderaudit"
_CONSOLE_FORMAT = "[shaderaudit] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``shaderaudit.<name>``, e.g. ``get_logger("resolver")``."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route audit logs to stderr, and to ``log_file`` when given.

    ``verbose`` lowers the threshold to DEBUG so per-pattern decisions show up.
    Calling this again replaces the previous handlers.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(sink)

    return logger


__all__ = ["configure_logging", "get_logger"]
