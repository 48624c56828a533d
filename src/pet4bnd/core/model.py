"""Statement model for `.pet` documents.

A document consists of version statements in three roles:

- the module ("bundle") version statement, exactly one per document
- export statements, one per exported package, keyed by package name
- group statements, named inheritance sources that are not exported

All statements of a document live in a `StatementArena`. A statement that
inherits its baseline stores the *handle* of its source in the same arena; the
baseline and the resolution are then read through the source on demand.

This module must not import codecs/cli.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Sequence

from pet4bnd.core.text import Field, TextLine
from pet4bnd.core.version import Version, VersionVariance

MODULE_VERSION_NAME = "$bundle-version"


class Role(str, Enum):
    MODULE = "module"
    EXPORT = "export"
    GROUP = "group"


class Statement:
    """One version statement: baseline, constraint, variance and resolution.

    Resolution is derived on demand unless explicitly set via `resolve()`:

    - inheriting statements take the resolution of their source
    - others apply their variance (NONE when absent) to their baseline
    """

    def __init__(self, arena: "StatementArena", handle: int, role: Role, name: str) -> None:
        self._arena = arena
        self.handle = handle
        self.role = Role(role)
        self.name = name

        self._baseline: Version = Version.ZERO
        self._resolved: Optional[Version] = None
        self.constraint: Optional[Version] = None
        self.variance: Optional[VersionVariance] = None
        self.inherits: Optional[int] = None
        # Text used for the inherited baseline in the source (eg `$core`, `inherit`)
        self.reference: Optional[str] = None
        self.attributes: Optional[str] = None
        # Field text as written in the source, kept while the value is unchanged
        self._source_text: dict[Field, tuple[object, str]] = {}

    def __repr__(self) -> str:
        parts = [f"{self.name}: {self.reference if self.inheriting else self.baseline}"]
        if self.constraint is not None:
            parts.append(f"< {self.constraint}")
        if self.variance is not None:
            parts.append(f"@ {self.variance}")
        return f"<Statement {self.role.value} {' '.join(parts)} # {self.resolution}>"

    # ---- inheritance ----

    @property
    def inheriting(self) -> bool:
        return self.inherits is not None

    @property
    def source(self) -> Optional["Statement"]:
        if self.inherits is None:
            return None
        return self._arena[self.inherits]

    def root(self) -> "Statement":
        """Return the first statement in the inheritance chain with its own baseline."""
        current = self
        while current.inherits is not None:
            current = self._arena[current.inherits]
        return current

    def inherit(self, source: "Statement", reference: Optional[str] = None) -> None:
        """Make the baseline and resolution follow `source`."""
        if self.role is Role.MODULE:
            raise ValueError(f"{self.name}: the module version statement can't inherit")
        if source._arena is not self._arena:
            raise ValueError(f"{self.name}: inheritance source belongs to another document")

        walk: Optional[Statement] = source
        while walk is not None:
            if walk is self:
                raise ValueError(f"{self.name}: inheritance from {source.name} would form a cycle")
            walk = walk.source

        self.inherits = source.handle
        self.reference = reference if reference is not None else source.name

    # ---- version fields ----

    @property
    def baseline(self) -> Version:
        source = self.source
        return source.baseline if source is not None else self._baseline

    @baseline.setter
    def baseline(self, value: Version) -> None:
        if not isinstance(value, Version):
            raise TypeError(f"{self.name}: baseline must be a Version, got {type(value).__name__}")
        self._baseline = value
        self.inherits = None
        self.reference = None

    @property
    def resolution(self) -> Version:
        if self._resolved is not None:
            return self._resolved
        return self.derived_resolution()

    def derived_resolution(self) -> Version:
        source = self.source
        if source is not None:
            return source.resolution
        variance = self.variance if self.variance is not None else VersionVariance.NONE
        return variance.apply(self._baseline)

    def resolve(self, value: Optional[Version]) -> None:
        """Override the resolution; None returns to the derived value."""
        self._resolved = value

    def test(self, version: Optional[Version] = None) -> bool:
        """Check `version` (default: the resolution) against the constraint."""
        if self.constraint is None:
            return True
        candidate = self.resolution if version is None else version
        return candidate < self.constraint

    def restore(self) -> None:
        """Make the resolution the new baseline and reset the variance.

        Inheriting statements keep their inheritance; only the variance is reset.
        """
        if not self.inheriting:
            self._baseline = self.resolution
            self._resolved = None
        if self.variance is not None:
            self.variance = VersionVariance.NONE

    # ---- representation ----

    def _field_value(self, field: Field) -> object:
        if field is Field.BASELINE:
            return None if self.inheriting else self._baseline
        if field is Field.CONSTRAINT:
            return self.constraint
        if field is Field.VARIANCE:
            return self.variance
        raise ValueError(f"unknown field: {field!r}")

    def keep_text(self, field: Field, text: str) -> None:
        """Remember how the current value of `field` was spelled in the source."""
        value = self._field_value(field)
        if value is not None:
            self._source_text[field] = (value, text)

    def field_text(self, field: Field) -> Optional[str]:
        if field is Field.BASELINE and self.inheriting:
            return self.reference
        value = self._field_value(field)
        if value is None:
            return None
        kept = self._source_text.get(field)
        if kept is not None and kept[0] == value:
            return kept[1]
        return str(value)


class StatementArena:
    """Owns every statement of one document; handles are list indices."""

    def __init__(self) -> None:
        self._statements: list[Statement] = []

    def new(self, role: Role, name: str) -> Statement:
        statement = Statement(self, len(self._statements), role, name)
        self._statements.append(statement)
        return statement

    def __getitem__(self, handle: int) -> Statement:
        return self._statements[handle]

    def __len__(self) -> int:
        return len(self._statements)

    def __iter__(self) -> Iterator[Statement]:
        return iter(self._statements)

    def field_text(self, handle: int, field: Field) -> Optional[str]:
        return self._statements[handle].field_text(field)


class Document:
    """A parsed `.pet` source: statements plus the text needed to write it back.

    The structure is fixed once built; only statement fields change (via the
    resolver or `restore()`).
    """

    def __init__(
        self,
        *,
        arena: StatementArena,
        module_version: Statement,
        exports: Mapping[str, Statement],
        groups: Mapping[str, Statement] | None = None,
        representation: Sequence[TextLine] = (),
        newline_at_eof: bool = True,
    ) -> None:
        if module_version.role is not Role.MODULE:
            raise ValueError("Document: module_version must have the module role")
        for name, statement in exports.items():
            if statement.role is not Role.EXPORT or statement.name != name:
                raise ValueError(f"Document: exports[{name!r}] is not the export statement for {name!r}")

        self._arena = arena
        self._module_version = module_version
        self._exports = MappingProxyType({k: exports[k] for k in sorted(exports)})
        self._groups = MappingProxyType(dict(groups or {}))
        self._representation = tuple(representation)
        self._newline_at_eof = newline_at_eof

    @property
    def arena(self) -> StatementArena:
        return self._arena

    @property
    def module_version(self) -> Statement:
        return self._module_version

    @property
    def exports(self) -> Mapping[str, Statement]:
        return self._exports

    @property
    def groups(self) -> Mapping[str, Statement]:
        return self._groups

    @property
    def representation(self) -> tuple[TextLine, ...]:
        return self._representation

    @property
    def newline_at_eof(self) -> bool:
        return self._newline_at_eof

    def lines(self) -> list[str]:
        """Render the representation with the current statement values."""
        return [line.render(self._arena) for line in self._representation]

    def to_text(self) -> str:
        text = "\n".join(self.lines())
        if self._newline_at_eof and self._representation:
            text += "\n"
        return text

    def restore(self) -> None:
        """Turn resolutions into baselines and reset variances.

        Groups go first so that inheriting exports keep following the restored
        group values.
        """
        for group in self._groups.values():
            group.restore()
        self._module_version.restore()
        for export in self._exports.values():
            export.restore()
