"""Version values and version variances.

A `Version` is the `major.minor.micro[.qualifier]` triple used for bundles and
package exports. A `VersionVariance` describes how big a change is and knows how
to bump a version accordingly.

This module must not import codecs/cli.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from functools import total_ordering
from typing import Any, ClassVar, Optional


class InvalidVersion(ValueError):
    """Raised for malformed version text or invalid version components."""


class UnknownVariance(ValueError):
    """Raised when a variance keyword is not one of none/micro/minor/major."""


_VERSION_RE = re.compile(r"(?P<major>\d+)(\.(?P<minor>\d+))?(\.(?P<micro>\d+))?(\.(?P<qualifier>\S+))?")


def _check_component(value: Any, *, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidVersion(f"{where}: expected int, got {type(value).__name__}")
    if value < 0:
        raise InvalidVersion(f"{where}: must not be negative, got {value}")
    return value


@total_ordering
@dataclass(frozen=True)
class Version:
    """Immutable `major.minor.micro[.qualifier]` version.

    Ordering compares the numbers first; a version without a qualifier sorts
    below the same numbers with any qualifier, and qualifiers compare as plain
    strings.
    """

    major: int
    minor: int = 0
    micro: int = 0
    qualifier: Optional[str] = None

    ZERO: ClassVar["Version"]

    def __post_init__(self) -> None:
        _check_component(self.major, where="major")
        _check_component(self.minor, where="minor")
        _check_component(self.micro, where="micro")

        if self.qualifier is not None:
            if not isinstance(self.qualifier, str):
                raise InvalidVersion(f"qualifier: expected str, got {type(self.qualifier).__name__}")
            if not self.qualifier:
                raise InvalidVersion("qualifier: may be missing, but not empty")
            if any(c.isspace() for c in self.qualifier):
                raise InvalidVersion(f"qualifier: must not contain whitespace, got {self.qualifier!r}")

    @classmethod
    def parse(cls, text: str) -> "Version":
        """Parse `major(.minor)?(.micro)?(.qualifier)?`; omitted numbers are 0."""
        if not isinstance(text, str):
            raise InvalidVersion(f"Version.parse: expected str, got {type(text).__name__}")

        m = _VERSION_RE.fullmatch(text)
        if m is None:
            raise InvalidVersion(f"Not a valid version: {text!r}")

        minor = m.group("minor")
        micro = m.group("micro")
        return cls(
            int(m.group("major")),
            int(minor) if minor is not None else 0,
            int(micro) if micro is not None else 0,
            m.group("qualifier"),
        )

    def __str__(self) -> str:
        result = f"{self.major}.{self.minor}.{self.micro}"
        if self.qualifier is not None:
            result += f".{self.qualifier}"
        return result

    def _sort_key(self) -> tuple[int, int, int, bool, str]:
        return (self.major, self.minor, self.micro, self.qualifier is not None, self.qualifier or "")

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def with_major(self, value: int) -> "Version":
        return Version(value, self.minor, self.micro, self.qualifier)

    def with_minor(self, value: int) -> "Version":
        return Version(self.major, value, self.micro, self.qualifier)

    def with_micro(self, value: int) -> "Version":
        return Version(self.major, self.minor, value, self.qualifier)

    def with_qualifier(self, value: Optional[str]) -> "Version":
        return Version(self.major, self.minor, self.micro, value)


Version.ZERO = Version(0, 0, 0)


class VersionVariance(IntEnum):
    """Size of a change, ordered NONE < MICRO < MINOR < MAJOR."""

    NONE = 0
    MICRO = 1
    MINOR = 2
    MAJOR = 3

    def apply(self, version: Version) -> Version:
        """Return `version` bumped by this variance (qualifier preserved)."""
        if not isinstance(version, Version):
            raise TypeError(f"VersionVariance.apply: expected Version, got {type(version).__name__}")

        if self is VersionVariance.NONE:
            return version
        if self is VersionVariance.MICRO:
            return version.with_micro(version.micro + 1)
        if self is VersionVariance.MINOR:
            return Version(version.major, version.minor + 1, 0, version.qualifier)
        return Version(version.major + 1, 0, 0, version.qualifier)

    @classmethod
    def parse(cls, text: str) -> "VersionVariance":
        """Parse a variance keyword, case-insensitively."""
        try:
            return cls[text.strip().upper()]
        except (KeyError, AttributeError):
            raise UnknownVariance(f"Unknown version variance: {text!r}") from None

    def __str__(self) -> str:
        return self.name.lower()
