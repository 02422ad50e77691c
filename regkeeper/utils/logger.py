"""
Logging utilities for regkeeper.

Every module obtains its logger through :func:`get_logger`, which places
it under the ``regkeeper`` namespace. The CLI calls :func:`setup_logging`
once; library use without configuration stays silent.
"""

from __future__ import annotations

import os
import sys
import logging
import threading
from typing import IO, Optional

from regkeeper.constants import (
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

ROOT_LOGGER_NAME = "regkeeper"

_logging_configured: bool = False
_lock = threading.Lock()


class ColoredFormatter(logging.Formatter):
    """Logging formatter that colors the level name on a TTY."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str,
        *,
        datefmt: Optional[str] = None,
        use_color: bool = True,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if not (self.use_color and self._stream_supports_color()):
            return super().format(record)

        color = self.COLORS.get(record.levelname)
        if not color:
            return super().format(record)

        # Work on a copy so other handlers see the plain level name
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)

    @staticmethod
    def _stream_supports_color() -> bool:
        if os.environ.get("NO_COLOR") or os.environ.get("CI"):
            return False
        try:
            return sys.stderr.isatty()
        except (AttributeError, OSError):
            return False


def setup_logging(
    *,
    level: int = logging.INFO,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
) -> None:
    """Configure the ``regkeeper`` logger hierarchy.

    Safe to call repeatedly; each call replaces the previous handler.

    Args:
        level: Logging level (e.g. ``logging.INFO``).
        verbose: Include timestamps and logger names in each line.
        stream: Output stream; defaults to ``sys.stderr``.
    """
    global _logging_configured

    with _lock:
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.setLevel(level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(
            ColoredFormatter(
                LOG_VERBOSE_FORMAT if verbose else LOG_DEFAULT_FORMAT,
                datefmt=LOG_DATE_FORMAT,
                use_color=not os.environ.get("NO_COLOR"),
            )
        )

        root_logger.addHandler(handler)
        root_logger.propagate = False
        _logging_configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger within the ``regkeeper`` namespace.

    Args:
        name: Short name (``"github"``) or dotted name already under
            ``regkeeper``.

    Returns:
        A logger instance under the ``regkeeper`` hierarchy.
    """
    if not name or name == ROOT_LOGGER_NAME:
        logger = logging.getLogger(ROOT_LOGGER_NAME)
    elif name.startswith(f"{ROOT_LOGGER_NAME}."):
        logger = logging.getLogger(name)
    else:
        logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

    if not logger.handlers and (not logger.parent or not logger.parent.handlers):
        logger.addHandler(logging.NullHandler())

    return logger


def is_logging_configured() -> bool:
    """Return True once :func:`setup_logging` has run."""
    return _logging_configured


def disable_logging() -> None:
    """Silence all regkeeper logging output."""
    global _logging_configured

    with _lock:
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.addHandler(logging.NullHandler())
        root_logger.setLevel(logging.NOTSET)
        _logging_configured = False
