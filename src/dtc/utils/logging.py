"""Logging configuration for dtc.

Log records go to stderr so that standard output stays reserved for
usage text, diagnostics and the protocol streams of the REPL modes.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Final

ENV_LOG_LEVEL: Final[str] = "DTC_LOG_LEVEL"
_HANDLER_MARK: Final[str] = "_dtc_handler"

LOG_FORMAT = "[%(levelname)s] %(message)s"
DEBUG_LOG_FORMAT = "[%(levelname)s] [%(filename)s:%(lineno)d] [%(funcName)s] %(message)s"

_NAME_TO_LEVEL: Final[dict[str, int]] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
    "FATAL": logging.CRITICAL,
    "NOTSET": logging.NOTSET,
}


def resolve_env_log_level() -> int | None:
    """Return a logging level from the environment or None if unset.

    Honors ``DTC_LOG_LEVEL`` (e.g. ``"DEBUG"``, ``"INFO"``, numeric ``"10"``).
    """
    val = os.environ.get(ENV_LOG_LEVEL)
    if not val:
        return None
    v = val.strip().upper()
    if v.isdigit():
        return int(v)
    return _NAME_TO_LEVEL.get(v)


def level_for_verbosity(verbosity: int) -> int | None:
    """Map a ``-v`` count to a level; ``None`` when no ``-v`` was given."""
    if verbosity <= 0:
        return None
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(level: int | None = None) -> None:
    """Configure the root logger with a single stderr handler.

    If ``level`` is None, :func:`resolve_env_log_level` is consulted.
    Default is WARNING when unspecified.
    """
    if level is None:
        level = resolve_env_log_level()
    if level is None:
        level = logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Only replace the handler installed by a previous call
    for handler in root_logger.handlers[:]:
        if getattr(handler, _HANDLER_MARK, False):
            root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    setattr(handler, _HANDLER_MARK, True)
    handler.setFormatter(
        logging.Formatter(LOG_FORMAT if level >= logging.INFO else DEBUG_LOG_FORMAT)
    )
    root_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Retrieve the logger for *name*."""
    return logging.getLogger(name)
