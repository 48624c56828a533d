"""Internal single-line recognizer for the `.pet` codec.

Private module for parsing logic; public API is in `pet.py`.

`LineParser` walks one input line left to right. Every recognizer matches only
*at the current position* (`Pattern.match(line, pos)`), so the parser never
revisits consumed text. Consumed text is recorded in a `TextLine`: literal parts
verbatim, statement fields as `Bound` placeholders, anything unrecognized at the
end of the line as a trailing literal.
"""

from __future__ import annotations

import re
from typing import Optional

from pet4bnd.core.text import Bound, Field, TextLine
from pet4bnd.core.version import InvalidVersion, UnknownVariance, Version, VersionVariance

INHERIT_DIRECTIVE = "inherit"

_NAME = r"[^\s$:=<@#]+"
_VERSION = r"\d+(?:\.\d+)?(?:\.\d+)?(?:\.[^\s:=<@#]+)?"

_IGNORABLE_RE = re.compile(r"\s*(?:#.*)?")
_ATTRIBUTES_RE = re.compile(r"\s*\+\s*(?P<value>.*?)\s*")
_EXPORT_DECLARATION_RE = re.compile(rf"\s*(?P<value>{_NAME})\s*:\s*")
_GROUP_DECLARATION_RE = re.compile(rf"\s*(?P<value>\${_NAME})\s*:\s*")
_REFERENCE_RE = re.compile(rf"(?P<value>\${_NAME}|{INHERIT_DIRECTIVE}(?![^\s:=<@#]))")
_BASELINE_RE = re.compile(rf"(?P<value>{_VERSION})")
_CONSTRAINT_RE = re.compile(rf"(?P<prefix>\s*<\s*)(?P<value>{_VERSION})")
_VARIANCE_RE = re.compile(r"(?P<prefix>\s*@\s*)(?P<value>[A-Za-z]+)")

DEFAULT_CONSTRAINT_PREFIX = " < "
DEFAULT_VARIANCE_PREFIX = " @ "


class ParseFailure(ValueError):
    """A line does not match the required grammar at `offset`."""

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"{message} (at offset {offset})")
        self.message = message
        self.offset = offset


class UndefinedReference(ParseFailure):
    """A baseline refers to a group that was not declared before."""

    def __init__(self, reference: str, offset: int) -> None:
        super().__init__(f"Reference to undefined group '{reference}'.", offset)
        self.reference = reference


class LineParser:
    def __init__(self, line: str, start: int = 0) -> None:
        if not isinstance(line, str):
            raise TypeError(f"LineParser: expected str, got {type(line).__name__}")
        self.line = line
        self.text = TextLine()
        # (handle, field, text) for every field value read from the line
        self.source_texts: list[tuple[int, Field, str]] = []
        self.position = min(max(0, start), len(line))

    def failure(self, message: str) -> ParseFailure:
        return ParseFailure(message, self.position)

    def _match(self, pattern: re.Pattern[str]) -> Optional[re.Match[str]]:
        return pattern.match(self.line, self.position)

    def _match_rest(self, pattern: re.Pattern[str]) -> Optional[re.Match[str]]:
        return pattern.fullmatch(self.line, self.position)

    def _consume_literal(self, pattern: re.Pattern[str]) -> Optional[str]:
        m = self._match(pattern)
        if m is None:
            return None
        self.text.append(m.group())
        self.position = m.end()
        return m.group("value")

    # ----------------------------
    # Whole-line constructs
    # ----------------------------

    def parse_ignorable(self) -> bool:
        """Consume a blank or comment-only line."""
        m = self._match_rest(_IGNORABLE_RE)
        if m is None:
            return False
        self.text.append(m.group())
        self.position = m.end()
        return True

    def parse_attributes(self) -> Optional[str]:
        """Consume a `+ attributes` continuation line and return the attribute text."""
        m = self._match_rest(_ATTRIBUTES_RE)
        if m is None:
            return None
        self.text.append(m.group())
        self.position = m.end()
        return m.group("value")

    # ----------------------------
    # Statement parts
    # ----------------------------

    def parse_group_declaration(self) -> Optional[str]:
        return self._consume_literal(_GROUP_DECLARATION_RE)

    def parse_export_declaration(self) -> Optional[str]:
        return self._consume_literal(_EXPORT_DECLARATION_RE)

    def parse_reference(self, handle: int) -> Optional[str]:
        """Consume a `$group` reference or the `inherit` directive."""
        m = self._match(_REFERENCE_RE)
        if m is None:
            return None
        self.text.append(Bound(handle, Field.BASELINE))
        self.position = m.end()
        return m.group("value")

    def require_baseline(self, handle: int) -> Version:
        if len(self.line) <= self.position:
            raise self.failure("Missing version baseline.")

        m = self._match(_BASELINE_RE)
        if m is None:
            raise self.failure("Version baseline invalid.")

        result = self._require_version(m.group("value"))
        self.text.append(Bound(handle, Field.BASELINE))
        self.source_texts.append((handle, Field.BASELINE, m.group("value")))
        self.position = m.end()
        return result

    def parse_constraint(self, handle: int) -> Optional[Version]:
        m = self._match(_CONSTRAINT_RE)
        if m is None:
            self.text.append(Bound(handle, Field.CONSTRAINT, DEFAULT_CONSTRAINT_PREFIX))
            return None

        result = self._require_version(m.group("value"))
        self.text.append(Bound(handle, Field.CONSTRAINT, m.group("prefix")))
        self.source_texts.append((handle, Field.CONSTRAINT, m.group("value")))
        self.position = m.end()
        return result

    def parse_variance(self, handle: int) -> Optional[VersionVariance]:
        m = self._match(_VARIANCE_RE)
        if m is None:
            self.text.append(Bound(handle, Field.VARIANCE, DEFAULT_VARIANCE_PREFIX))
            return None

        try:
            result = VersionVariance.parse(m.group("value"))
        except UnknownVariance as e:
            raise self.failure(str(e)) from e

        self.text.append(Bound(handle, Field.VARIANCE, m.group("prefix")))
        self.source_texts.append((handle, Field.VARIANCE, m.group("value")))
        self.position = m.end()
        return result

    def consume_trailing(self) -> bool:
        """Keep the rest of the line verbatim; True if it is only whitespace/comment."""
        trailing = self.line[self.position :]
        self.text.append(trailing)
        self.position = len(self.line)
        return _IGNORABLE_RE.fullmatch(trailing) is not None

    def _require_version(self, value: str) -> Version:
        try:
            return Version.parse(value)
        except InvalidVersion as e:
            raise self.failure(str(e)) from e
