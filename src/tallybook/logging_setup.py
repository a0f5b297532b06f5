"""Logging for the ``tallybook`` package.

Modules log through ``get_logger(__name__)`` and never attach handlers. The
CLI calls ``configure_logging`` once; until then the package is silent.
"""

from __future__ import annotations

import logging
import os

PACKAGE = "tallybook"
LEVEL_ENV_VAR = "TALLYBOOK_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_CONFIGURED = False


def parse_level(level: int | str | None) -> int:
    """Resolve ``level`` to a logging level number.

    Accepts a number, a numeric string or a level name in any case. ``None``
    reads ``$TALLYBOOK_LOG_LEVEL``, then defaults to ``WARNING``. Raises
    ``ValueError`` for an unknown name.
    """
    if level is None:
        level = os.getenv(LEVEL_ENV_VAR) or logging.WARNING
    if isinstance(level, int):
        return level

    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    number = logging.getLevelName(name)
    if not isinstance(number, int):
        raise ValueError(f"unknown log level: {name!r}")
    return number


def configure_logging(level: int | str | None = None, fmt: str = DEFAULT_FORMAT) -> None:
    """Send package logs at ``level`` and above to stderr. Later calls do nothing."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved = parse_level(level)
    logger = logging.getLogger(PACKAGE)
    logger.handlers = [h for h in logger.handlers if not isinstance(h, logging.NullHandler)]

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)
    logger.setLevel(resolved)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    root = logging.getLogger(PACKAGE)
    if not _CONFIGURED and not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)
