"""Logging helpers for tiny-qstep.

Loggers live under the ``tiny_qstep`` namespace and write to stderr.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

_DEFAULT_LEVEL = logging.WARNING

_loggers: dict[str, logging.Logger] = {}


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get or create a logger for the given module name.

    Parameters
    ----------
    name : str, optional
        Usually ``__name__`` of the calling module. Defaults to the package
        logger.

    Returns
    -------
    logging.Logger
        Cached logger with a single stderr handler.
    """
    if name is None:
        name = "tiny_qstep"
    logger_name = name if name.startswith("tiny_qstep") else f"tiny_qstep.{name}"

    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)
    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(handler)
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the level of every tiny-qstep logger created so far and later.

    Parameters
    ----------
    level : int or str
        ``logging.DEBUG`` etc., or a level name such as ``"DEBUG"``.
    """
    global _DEFAULT_LEVEL

    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: '{level}'")
        level = resolved

    _DEFAULT_LEVEL = level
    for logger in _loggers.values():
        logger.setLevel(level)
