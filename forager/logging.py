"""femtologging helpers for the command line and pipeline.

Library modules under ``forager.github``, ``forager.summary`` and
``forager.enrichment`` log through the standard :mod:`logging` module so they
stay quiet unless an application configures them. The entry points format
their own messages eagerly and hand them to femtologging through the helpers
below.

Example:
>>> from forager.logging import get_logger, log_info
>>> logger = get_logger(__name__)
>>> log_info(logger, "Grouped %d items", 3)

"""

from __future__ import annotations

import enum
import logging
import os
import typing as typ

from femtologging import basicConfig, get_logger

LOG_LEVEL_ENV = "FORAGER_LOG_LEVEL"
_DEFAULT_LEVEL = "INFO"


class LogLevel(enum.StrEnum):
    """Log levels accepted by ``FORAGER_LOG_LEVEL``."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# stdlib logging has no TRACE and spells WARN as WARNING.
_STDLIB_LEVELS = {
    "TRACE": logging.DEBUG,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def normalize_log_level(level: str | None) -> tuple[str, bool]:
    """Normalize a log level string and report invalid inputs.

    Returns the upper-cased level and ``False``, or ``("INFO", True)`` when
    the input is empty or unknown.

    Examples
    --------
    >>> normalize_log_level(" debug ")
    ('DEBUG', False)
    >>> normalize_log_level("verbose")
    ('INFO', True)

    """
    if not level:
        return (_DEFAULT_LEVEL, True)

    normalized = level.strip().upper()
    if normalized in LogLevel.__members__:
        return (normalized, False)

    return (_DEFAULT_LEVEL, True)


def level_from_env() -> str | None:
    """Return the raw ``FORAGER_LOG_LEVEL`` value, if set."""
    return os.environ.get(LOG_LEVEL_ENV)


def configure_logging(
    level: str | None = None, *, force: bool = False
) -> tuple[str, bool]:
    """Configure femtologging and stdlib logging at the same level.

    Parameters
    ----------
    level : str | None
        Raw level; ``FORAGER_LOG_LEVEL`` is consulted when omitted.
    force : bool, optional
        Whether to replace any existing handler configuration.

    Returns
    -------
    tuple[str, bool]
        The normalized log level and a flag indicating invalid input.

    """
    normalized, invalid = normalize_log_level(
        level if level is not None else level_from_env()
    )
    basicConfig(level=normalized, force=force)
    logging.basicConfig(level=_STDLIB_LEVELS[normalized], force=force)
    return (normalized, invalid)


class _SupportsLog(typ.Protocol):
    """Protocol for femtologging-compatible loggers."""

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str | None: ...


def format_log_message(template: str, *args: object) -> str:
    """Format a log message using percent-style interpolation.

    Templates without arguments are returned untouched so literal ``%``
    characters survive.
    """
    return template % args if args else template


def _emit(
    logger: _SupportsLog,
    level: str,
    message: str,
    *,
    exc_info: object | None = None,
) -> None:
    logger.log(level, message, exc_info=exc_info, stack_info=False)


def log_info(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log an INFO message with percent-style formatting."""
    _emit(logger, "INFO", format_log_message(template, *args), exc_info=exc_info)


def log_warning(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log a WARNING message with percent-style formatting."""
    _emit(logger, "WARNING", format_log_message(template, *args), exc_info=exc_info)


def log_error(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log an ERROR message with percent-style formatting."""
    _emit(logger, "ERROR", format_log_message(template, *args), exc_info=exc_info)


__all__ = [
    "LOG_LEVEL_ENV",
    "LogLevel",
    "configure_logging",
    "format_log_message",
    "get_logger",
    "level_from_env",
    "log_error",
    "log_info",
    "log_warning",
    "normalize_log_level",
]
