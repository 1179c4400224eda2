"""Logging for optmodel.

Every logger lives under the ``optmodel`` namespace and reports through a
single handler on the package logger, so one call to :func:`set_log_level`
or :func:`configure_logging` governs the whole package. Model construction
logs at DEBUG, solves at INFO and abnormal solver terminations at WARNING.
The default level is WARNING.

Example:
    >>> from optmodel.logging import configure_logging
    >>> configure_logging(level="INFO")   # doctest: +SKIP
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional, Union

PACKAGE = "optmodel"
DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Handler attached to the package logger, created on first use
_handler: Optional[logging.Handler] = None


def _level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        key = level.strip().upper()
        if key not in _LEVEL_NAMES:
            raise ValueError(f"Unknown log level {level!r}. Use one of {list(_LEVEL_NAMES)}")
        return getattr(logging, key)
    return int(level)


def _make_handler(stream: Optional[IO[str]], format_string: Optional[str]) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr if stream is None else stream)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    return handler


def _package_logger() -> logging.Logger:
    global _handler
    package = logging.getLogger(PACKAGE)
    if _handler is None:
        _handler = _make_handler(None, None)
        package.addHandler(_handler)
        package.setLevel(logging.WARNING)
        package.propagate = False
    return package


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the logger for a module of the package.

    Args:
        name: Usually ``__name__``. Names outside the ``optmodel`` namespace
            are placed under it; None returns the package logger.

    Example:
        >>> from optmodel.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("registered variable %s", "x")
    """
    package = _package_logger()
    if name is None or name == PACKAGE:
        return package
    if not name.startswith(PACKAGE + "."):
        name = f"{PACKAGE}.{name}"
    return logging.getLogger(name)


def set_log_level(level: Union[int, str]) -> None:
    """Set the level of every optmodel logger.

    Args:
        level: A ``logging`` constant or one of ``'DEBUG'``, ``'INFO'``,
            ``'WARNING'``, ``'ERROR'``, ``'CRITICAL'``.

    Raises:
        ValueError: For an unknown level name.
    """
    _package_logger().setLevel(_level(level))


def configure_logging(
    level: Union[int, str] = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> None:
    """Replace the package handler and set the level.

    Args:
        level: Logging level (default: WARNING).
        format_string: Record format; defaults to ``[LEVEL] name: message``.
        stream: Output stream (default: sys.stderr).
    """
    global _handler
    package = _package_logger()
    new_level = _level(level)
    package.removeHandler(_handler)
    _handler = _make_handler(stream, format_string)
    package.addHandler(_handler)
    package.setLevel(new_level)


__all__ = ["get_logger", "set_log_level", "configure_logging"]
