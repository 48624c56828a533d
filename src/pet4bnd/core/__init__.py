"""pet4bnd core: version values, statement model, resolution.

This package is intentionally standalone and must not import CLI/codecs
to avoid circular dependencies.
"""

from __future__ import annotations

from .feedback import Feedback, LoggingFeedback, NoFeedback, configure_logging
from .model import MODULE_VERSION_NAME, Document, Role, Statement, StatementArena
from .resolve import ConstraintViolation, ConstraintViolationError, LoggingResolver, VersionResolver
from .version import InvalidVersion, UnknownVariance, Version, VersionVariance

__all__ = [
    "Feedback",
    "LoggingFeedback",
    "NoFeedback",
    "configure_logging",
    "MODULE_VERSION_NAME",
    "Document",
    "Role",
    "Statement",
    "StatementArena",
    "ConstraintViolation",
    "ConstraintViolationError",
    "LoggingResolver",
    "VersionResolver",
    "InvalidVersion",
    "UnknownVariance",
    "Version",
    "VersionVariance",
]
