"""
Logging helpers for the local search library.

All library loggers live under the ``lsearch`` namespace, write to stderr
and do not propagate to the root logger.
"""

from __future__ import annotations

import logging
import sys
from typing import Dict, Optional, Union

_DEFAULT_LEVEL = logging.WARNING
_DEFAULT_FORMAT = '[%(levelname)s] %(name)s: %(message)s'
_ROOT_NAME = 'lsearch'

_loggers: Dict[str, logging.Logger] = {}


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get or create a logger for the given module name.

    Loggers are cached so that a module asking twice does not end up
    with duplicate handlers.

    Args:
        name: Logger name, typically ``__name__``. None gives the
            library root logger.

    Returns:
        Configured logger instance
    """
    if name is None:
        logger_name = _ROOT_NAME
    elif name.startswith(_ROOT_NAME + '.'):
        logger_name = name
    else:
        logger_name = f"{_ROOT_NAME}.{name}"

    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)
    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(_DEFAULT_LEVEL)
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def set_log_level(level: Union[int, str]) -> None:
    """Set the level of every library logger, including future ones."""
    global _DEFAULT_LEVEL
    level = _resolve_level(level)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

    _DEFAULT_LEVEL = level


def configure_logging(
    level: Union[int, str] = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[object] = None
) -> None:
    """
    Reconfigure handlers of all library loggers.

    Args:
        level: Logging level (default: WARNING)
        format_string: Custom format string, None keeps the default one
        stream: Output stream (default: sys.stderr)
    """
    global _DEFAULT_LEVEL
    level = _resolve_level(level)
    formatter = logging.Formatter(format_string or _DEFAULT_FORMAT)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    _DEFAULT_LEVEL = level
