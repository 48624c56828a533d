"""Version resolution and constraint validation for a parsed `Document`.

Resolution (`VersionResolver.resolve()`):

1. The module version is bumped by the largest variance found on the module
   itself, on any export and on any inheriting group; its variance is then
   cleared (set to NONE).
2. Export overrides are dropped, so every export derives its resolution on
   demand: its own variance applied to its own baseline, or the resolution of
   its inheritance source.
3. The variance of an inheriting export or group is not applied locally. It is
   carried over to the group at the root of its inheritance chain, which is
   bumped by the largest such variance; the inheriting statement's own
   variance is cleared.

Validation (`test()`) is read-only and works whether or not `resolve()` ran.
A statement passes if it has no constraint or `resolution < constraint`.

`resolve()` consumes variances, so calling it twice does not give the same
result as calling it once.

This module must not import codecs/cli.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import structlog

from pet4bnd.core.feedback import Feedback
from pet4bnd.core.model import Document, Role, Statement
from pet4bnd.core.version import Version, VersionVariance

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ConstraintViolation:
    name: str
    resolution: Version
    constraint: Version

    def __str__(self) -> str:
        return f"{self.name}: {self.resolution} violates constraint < {self.constraint}"


class ConstraintViolationError(ValueError):
    """Aggregates all constraint violations of a document.

    The message is stable and suitable for test assertions.
    """

    def __init__(self, violations: Iterable[ConstraintViolation]):
        v = list(violations)
        if not v:
            super().__init__("version constraints violated (no details)")
            self.violations = []
            return
        msg = "version constraints violated:\n" + "\n".join(f"  - {item}" for item in v)
        super().__init__(msg)
        self.violations = v


def _variance(statement: Statement) -> VersionVariance:
    return statement.variance if statement.variance is not None else VersionVariance.NONE


def _carriers(document: Document) -> list[Statement]:
    # Every export, plus the groups that inherit (their variance moves like an export's)
    groups = [g for g in document.groups.values() if g.inheriting]
    return list(document.exports.values()) + groups


def resolve_document(document: Document) -> None:
    module = document.module_version
    carriers = _carriers(document)

    variance = _variance(module)
    for statement in carriers:
        if variance is VersionVariance.MAJOR:
            break
        variance = max(variance, _variance(statement))

    module.resolve(variance.apply(module.baseline))
    if module.variance is not None:
        module.variance = VersionVariance.NONE

    for export in document.exports.values():
        export.resolve(None)

    # Inheritance roots (by handle) and the variance each must be bumped by
    sources: dict[int, VersionVariance] = {}
    for statement in carriers:
        if not statement.inheriting:
            continue

        root = statement.root()
        if root.role is not Role.MODULE:
            current = sources.setdefault(root.handle, _variance(root))
            sources[root.handle] = max(current, _variance(statement))
        if statement.variance is not None:
            statement.variance = VersionVariance.NONE

    for handle, v in sources.items():
        source = document.arena[handle]
        source.resolve(v.apply(source.baseline))

    logger.debug(
        "pet.resolve.done",
        module=str(module.resolution),
        variance=str(variance),
        exports=len(document.exports),
        sources=len(sources),
    )


class VersionResolver:
    """Resolves and validates the versions of one document.

    Subclasses customize reporting through `constraint_violated()` (an export
    failed; return True to stop checking) and `module_constraint_violated()`.
    The defaults are silent and stop at the first failing export.
    """

    def __init__(self, document: Document) -> None:
        if not isinstance(document, Document):
            raise TypeError(f"{type(self).__name__}: expected Document, got {type(document).__name__}")
        self._document = document

    @property
    def document(self) -> Document:
        return self._document

    def resolve(self) -> "VersionResolver":
        resolve_document(self._document)
        return self

    def test(self) -> bool:
        """Return True if every export and the module satisfy their constraints."""
        result = True
        for export in self._document.exports.values():
            if export.test():
                continue
            if self.constraint_violated(export):
                return False
            result = False

        if self._document.module_version.test():
            return result
        self.module_constraint_violated()
        return False

    def violations(self) -> list[ConstraintViolation]:
        """List every failing statement, exports first (by name), then the module."""
        statements = list(self._document.exports.values()) + [self._document.module_version]
        return [
            ConstraintViolation(s.name, s.resolution, s.constraint)
            for s in statements
            if s.constraint is not None and not s.test()
        ]

    def require(self) -> "VersionResolver":
        violations = self.violations()
        if violations:
            raise ConstraintViolationError(violations)
        return self

    # ---- hooks ----

    def constraint_violated(self, export: Statement) -> bool:
        return True

    def module_constraint_violated(self) -> None:
        return None


class LoggingResolver(VersionResolver):
    """Resolver reporting every violation through a feedback sink.

    With `fail_fast`, checking stops at the first failing export.
    """

    def __init__(self, document: Document, feedback: Feedback, *, fail_fast: bool = False) -> None:
        super().__init__(document)
        if feedback is None:
            raise TypeError("LoggingResolver: feedback must not be None")
        self.feedback = feedback
        self.fail_fast = fail_fast

    def constraint_violated(self, export: Statement) -> bool:
        message = (
            f"Package '{export.name}': target version {export.resolution} "
            f"violates version constraint {export.constraint}."
        )
        logger.info("pet.resolve.violation", name=export.name, resolution=str(export.resolution))
        self.feedback.fail(message)
        return self.fail_fast

    def module_constraint_violated(self) -> None:
        module = self.document.module_version
        message = (
            f"Target bundle version {module.resolution} "
            f"violates version restriction to {module.constraint}."
        )
        logger.info("pet.resolve.violation", name=module.name, resolution=str(module.resolution))
        self.feedback.fail(message)
