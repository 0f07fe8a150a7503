"""Logging setup for the fleettax command line.

Library modules only create loggers (``logging.getLogger(__name__)``) and
emit event-style messages with structured ``extra`` fields; the CLI calls
configure_logging() once to render them.
"""

import logging
import sys
from typing import Any

__all__ = ["KeyValueFormatter", "configure_logging", "reset_logging"]

ROOT_LOGGER = "fleettax"

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName", "asctime"}


class KeyValueFormatter(logging.Formatter):
    """Render a record as ``time level logger event key=value ...``."""

    def __init__(self) -> None:
        super().__init__(fmt="%(asctime)s %(levelname)s %(name)s %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = {
            key: value for key, value in vars(record).items() if key not in _STDLIB_KEYS
        }
        if fields:
            line += " " + " ".join(
                f"{key}={_render(value)}" for key, value in sorted(fields.items())
            )
        return line


def _render(value: Any) -> str:
    text = str(value)
    if " " in text:
        return repr(text)
    return text


def configure_logging(level: int | str = logging.WARNING, stream: Any = None) -> logging.Logger:
    """Attach a key=value handler to the package logger.

    Calling it again replaces the handler instead of stacking a second one.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    reset_logging()
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(KeyValueFormatter())
    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.propagate = False
    return logger


def reset_logging() -> None:
    """Remove handlers installed by configure_logging."""
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
