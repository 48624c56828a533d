"""Line representation for lossless write-back of `.pet` sources.

A parsed source line is kept as an ordered sequence of fragments:

- `Literal`: fixed text copied from the input (identifiers, separators, comments)
- `Bound`: a placeholder for one field of a statement; it is rendered from the
  statement's *current* value every time, so mutating a statement (resolve,
  restore) is reflected in the output while everything around it stays verbatim

Bound fragments hold an arena handle and a field tag rather than a reference to
the statement itself; rendering looks the value up through a `FieldSource`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol, Union


class Field(str, Enum):
    BASELINE = "baseline"
    CONSTRAINT = "constraint"
    VARIANCE = "variance"


class FieldSource(Protocol):
    def field_text(self, handle: int, field: Field) -> Optional[str]:
        """Return the textual form of a statement field, or None when absent."""
        ...


@dataclass(frozen=True)
class Literal:
    text: str

    def render(self, source: FieldSource) -> str:
        return self.text


@dataclass(frozen=True)
class Bound:
    """Placeholder for a statement field.

    `prefix` is the separator captured from the input (eg `"  <  "`); it is
    emitted in front of the value only when the value is present.
    """

    handle: int
    field: Field
    prefix: str = ""

    def render(self, source: FieldSource) -> str:
        value = source.field_text(self.handle, self.field)
        if value is None:
            return ""
        return self.prefix + value


Fragment = Union[Literal, Bound]


@dataclass
class TextLine:
    fragments: list[Fragment] = field(default_factory=list)

    def append(self, fragment: Union[Fragment, str]) -> "TextLine":
        if isinstance(fragment, str):
            if not fragment:
                return self
            fragment = Literal(fragment)
        if not isinstance(fragment, (Literal, Bound)):
            raise TypeError(f"TextLine.append: expected fragment or str, got {type(fragment).__name__}")
        self.fragments.append(fragment)
        return self

    @classmethod
    def verbatim(cls, text: str) -> "TextLine":
        return cls([Literal(text)])

    def render(self, source: FieldSource) -> str:
        return "".join(f.render(source) for f in self.fragments)
