"""Logging helpers.

Library modules only call `get_logger(__name__)`; handlers are installed by
entry points (the CLI) through `configure_logging`, which routes records to a
`rich` console handler.

Usage:
    >>> from logquery.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("strategy=%s", "address")
"""

from __future__ import annotations

import logging
import threading

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(name)s - %(message)s"

_lock = threading.Lock()
_configured = False


def configure_logging(level: str | int = "INFO", *, console: Console | None = None) -> None:
    """Attach a RichHandler to the package logger (idempotent)."""
    global _configured
    with _lock:
        numeric_level = level if isinstance(level, int) else getattr(logging, str(level).upper(), logging.INFO)
        package_logger = logging.getLogger("logquery")
        package_logger.setLevel(numeric_level)
        if _configured:
            return

        handler = RichHandler(
            console=console or Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
        package_logger.addHandler(handler)
        _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return the standard logger for `name` (typically `__name__`)."""
    return logging.getLogger(name)
