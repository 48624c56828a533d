"""Feedback sinks and logging setup.

Parsing and validation report problems through a `Feedback` object instead of
raising, so a caller sees every problem of a source in one run. The library
ships two sinks:

- `NoFeedback`: drops everything (the default)
- `LoggingFeedback`: forwards to structlog with structured fields

The CLI installs its own echo sink (see `pet4bnd.cli.common`).

This module must not import codecs/cli.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional, Protocol, TextIO

import structlog


class Feedback(Protocol):
    def fail(self, message: str, error: Optional[BaseException] = None) -> None:
        ...

    def warn(self, message: str, error: Optional[BaseException] = None) -> None:
        ...

    def info(self, message: str) -> None:
        ...


class NoFeedback:
    def fail(self, message: str, error: Optional[BaseException] = None) -> None:
        return None

    def warn(self, message: str, error: Optional[BaseException] = None) -> None:
        return None

    def info(self, message: str) -> None:
        return None


class LoggingFeedback:
    """Feedback sink writing to a structlog logger.

    `context` is bound to every event (eg the source path).
    """

    def __init__(self, logger: Any = None, **context: Any) -> None:
        base = logger if logger is not None else structlog.get_logger("pet4bnd.feedback")
        self._logger = base.bind(**context) if context else base

    def fail(self, message: str, error: Optional[BaseException] = None) -> None:
        self._logger.error("pet.feedback.error", message=message, **_error_fields(error))

    def warn(self, message: str, error: Optional[BaseException] = None) -> None:
        self._logger.warning("pet.feedback.warning", message=message, **_error_fields(error))

    def info(self, message: str) -> None:
        self._logger.info("pet.feedback.info", message=message)


def _error_fields(error: Optional[BaseException]) -> dict[str, Any]:
    if error is None:
        return {}
    return {"error_type": type(error).__name__}


def configure_logging(verbose: bool = False, *, stream: Optional[TextIO] = None) -> None:
    """Configure structlog for command line use.

    Events go to `stream` (stderr by default) through the console renderer;
    `verbose` lowers the threshold from WARNING to DEBUG.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=stream if stream is not None else sys.stderr),
        cache_logger_on_first_use=False,
    )
