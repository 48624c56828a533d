"""`.pet` codec: parse a package exports description and write it back.

Source format (one construct per physical line):

- blank lines and `#` comments
- `$bundle-version: <baseline> [< constraint] [@ variance]`: the module version
  (`$bundle` is accepted as an alias); exactly one is required
- `$group: <baseline> [< constraint] [@ variance]`: a named version group
- `package.name: <baseline> [< constraint] [@ variance]`: a package export
- `+ attributes`: attributes for the preceding export (blank and comment lines
  may come in between)

A baseline is a version literal, a `$group` reference, or `inherit` (follow the
module version).

Parsing never stops on bad input: problems are counted as errors or warnings,
reported through the feedback sink and recorded in `PetParser.diagnostics`, and
the offending line is preserved verbatim. Callers must check `error_count`
before trusting the result.

Write-back renders every line from its fragments, so an unmodified document is
reproduced byte for byte, and resolved/restored values appear in place with the
original spacing.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

import structlog

from pet4bnd.codecs._pet_lines import INHERIT_DIRECTIVE, LineParser, ParseFailure, UndefinedReference
from pet4bnd.core.feedback import Feedback, NoFeedback
from pet4bnd.core.model import MODULE_VERSION_NAME, Document, Role, Statement, StatementArena
from pet4bnd.core.text import TextLine
from pet4bnd.core.version import Version

logger = structlog.get_logger(__name__)

MODULE_VERSION_ALIASES = frozenset({MODULE_VERSION_NAME, "$bundle"})


class DuplicateDefinition(ValueError):
    """A name was declared more than once; the first declaration wins."""

    def __init__(self, name: str, message: str) -> None:
        super().__init__(message)
        self.name = name


class MissingModuleVersion(ValueError):
    """The source declares no module version statement."""


class ParserFinishedError(RuntimeError):
    """The parser received input after `finish()`."""


@dataclass(frozen=True)
class Diagnostic:
    severity: str  # "error" | "warning"
    error: Exception
    line_number: Optional[int] = None
    line: Optional[str] = None

    def __str__(self) -> str:
        if self.line_number is None:
            return f"{self.severity}: {self.error}"
        return f"{self.severity}: line {self.line_number}: {self.error}"


class PetParser:
    """Line-oriented parser building a `Document`.

    Feed lines (without line terminators) via `accept()`, then call `finish()`.
    An export stays *pending* after its line, because a following `+` line may
    carry its attributes; any statement line closes it.
    """

    def __init__(self, feedback: Optional[Feedback] = None) -> None:
        self.feedback: Feedback = feedback if feedback is not None else NoFeedback()

        self._arena = StatementArena()
        self._module_version = self._arena.new(Role.MODULE, MODULE_VERSION_NAME)
        self._module_declared = False
        self._groups: dict[str, Statement] = {}
        self._exports: dict[str, Statement] = {}
        self._representation: list[TextLine] = []

        self._pending: Optional[Statement] = None
        self._pending_location: Optional[tuple[int, str]] = None

        self._line_number = 0
        self._line: Optional[str] = None

        self.diagnostics: list[Diagnostic] = []
        self.warning_count = 0
        self.error_count = 0
        self.newline_at_eof = True
        self._result: Optional[Document] = None

    # ----------------------------
    # Public API
    # ----------------------------

    @property
    def finished(self) -> bool:
        return self._result is not None

    @property
    def result(self) -> Optional[Document]:
        return self._result

    def accept(self, line: str) -> None:
        """Parse the next line; `line` must not contain the line terminator."""
        self._check_not_finished()

        self._line_number += 1
        self._line = line

        parser = LineParser(line)
        try:
            self._accept(parser)
        except ParseFailure as e:
            self._save_line(line)
            self._error(e)

    def finish(self) -> "PetParser":
        """Close pending state and build the document.

        The document is built even when errors were found; the missing module
        version is then replaced by a ZERO baseline.
        """
        self._check_not_finished()

        self._line = None
        self._close_pending(None)

        if not self._module_declared:
            self._module_version.baseline = Version.ZERO
            self._module_version.constraint = None
            self._module_version.variance = None
            self._error(MissingModuleVersion(f"The {MODULE_VERSION_NAME} declaration required, but missing."))

        self._result = Document(
            arena=self._arena,
            module_version=self._module_version,
            exports=self._exports,
            groups=self._groups,
            representation=self._representation,
            newline_at_eof=self.newline_at_eof,
        )
        logger.debug(
            "pet.parse.finished",
            lines=self._line_number,
            exports=len(self._exports),
            groups=len(self._groups),
            errors=self.error_count,
            warnings=self.warning_count,
        )
        return self

    # ----------------------------
    # State machine
    # ----------------------------

    def _accept(self, parser: LineParser) -> None:
        if parser.parse_ignorable():
            self._representation.append(parser.text)
            return

        attributes = parser.parse_attributes()
        if attributes is not None:
            if self._close_pending(attributes):
                self._representation.append(parser.text)
                return
            raise ParseFailure("Export attribute definition missing preceding package export.", 0)

        self._close_pending(None)

        group = parser.parse_group_declaration()
        if group is not None:
            self._accept_group(parser, group)
            return

        export = parser.parse_export_declaration()
        if export is None:
            raise parser.failure("Unknown construct found.")

        statement = self._arena.new(Role.EXPORT, export)
        self._require_baseline(parser, statement)
        self._parse_details(parser, statement)
        self._pending = statement
        self._pending_location = (self._line_number, parser.line)
        self._representation.append(parser.text)

    def _accept_group(self, parser: LineParser, name: str) -> None:
        if name in MODULE_VERSION_ALIASES:
            if self._module_declared:
                self._save_line(parser.line)
                self._warn(DuplicateDefinition(name, f"Declaration of '{name}' duplicated. Using the first occurrence."))
                return
            statement = self._module_version
            statement.baseline = parser.require_baseline(statement.handle)
        else:
            if name in self._groups:
                self._save_line(parser.line)
                self._warn(DuplicateDefinition(name, f"Declaration of '{name}' duplicated. Using the first occurrence."))
                return
            statement = self._arena.new(Role.GROUP, name)
            self._require_baseline(parser, statement)

        self._parse_details(parser, statement)

        if statement.role is Role.MODULE:
            self._module_declared = True
        else:
            self._groups[name] = statement
        self._representation.append(parser.text)

    def _require_baseline(self, parser: LineParser, statement: Statement) -> None:
        offset = parser.position
        reference = parser.parse_reference(statement.handle)
        if reference is None:
            statement.baseline = parser.require_baseline(statement.handle)
            return

        source = self._lookup(reference)
        if source is None:
            raise UndefinedReference(reference, offset)
        statement.inherit(source, reference)

    def _lookup(self, reference: str) -> Optional[Statement]:
        if reference == INHERIT_DIRECTIVE or reference in MODULE_VERSION_ALIASES:
            return self._module_version
        return self._groups.get(reference)

    def _parse_details(self, parser: LineParser, statement: Statement) -> None:
        statement.constraint = parser.parse_constraint(statement.handle)
        statement.variance = parser.parse_variance(statement.handle)
        offset = parser.position
        if not parser.consume_trailing():
            self._warn(ParseFailure("Unknown construct found at the end of the line.", offset))

        for handle, field, text in parser.source_texts:
            self._arena[handle].keep_text(field, text)

    def _close_pending(self, attributes: Optional[str]) -> bool:
        statement = self._pending
        if statement is None:
            return False
        location = self._pending_location
        self._pending = None
        self._pending_location = None

        if statement.name in self._exports:
            self._warn(
                DuplicateDefinition(
                    statement.name,
                    f"Duplicated definition for '{statement.name}'. Using only the first occurrence.",
                ),
                location,
            )
            return True

        statement.attributes = attributes
        self._exports[statement.name] = statement
        return True

    # ----------------------------
    # Bookkeeping
    # ----------------------------

    def _check_not_finished(self) -> None:
        if self.finished:
            raise ParserFinishedError("PetParser: parsing already finished")

    def _save_line(self, line: str) -> None:
        self._representation.append(TextLine.verbatim(line))

    def _record(self, severity: str, error: Exception, location: Optional[tuple[int, str]]) -> Diagnostic:
        if location is None and self._line is not None:
            location = (self._line_number, self._line)
        if location is None:
            diagnostic = Diagnostic(severity, error)
        else:
            diagnostic = Diagnostic(severity, error, *location)
        self.diagnostics.append(diagnostic)
        return diagnostic

    def _reference(self, diagnostic: Diagnostic) -> Optional[str]:
        if diagnostic.line_number is None:
            return None
        return f"See line {diagnostic.line_number}: {diagnostic.line}"

    def _error(self, error: Exception) -> None:
        self.error_count += 1
        diagnostic = self._record("error", error, None)
        self.feedback.fail(str(error), error)
        reference = self._reference(diagnostic)
        if reference is not None:
            self.feedback.fail(reference)

    def _warn(self, error: Exception, location: Optional[tuple[int, str]] = None) -> None:
        """Count and report a warning; `location` defaults to the current line."""
        self.warning_count += 1
        diagnostic = self._record("warning", error, location)
        self.feedback.warn(str(error), error)
        reference = self._reference(diagnostic)
        if reference is not None:
            self.feedback.warn(reference)


# ----------------------------
# Public API
# ----------------------------


def parse_pet_lines(lines: Iterable[str], *, feedback: Optional[Feedback] = None) -> PetParser:
    """Parse lines (without terminators) and return the finished parser."""
    parser = PetParser(feedback)
    for line in lines:
        parser.accept(line)
    return parser.finish()


def parse_pet_text(text: str, *, feedback: Optional[Feedback] = None) -> PetParser:
    """Parse `.pet` text and return the finished parser.

    Lines are split on `\\n` only, so `\\r\\n` endings survive write-back; whether
    the text ended with a newline is recorded on the document.
    """
    if not isinstance(text, str):
        raise TypeError(f"parse_pet_text: expected str, got {type(text).__name__}")

    lines = text.split("\n")
    newline_at_eof = text.endswith("\n")
    if newline_at_eof or not text:
        lines.pop()

    parser = PetParser(feedback)
    parser.newline_at_eof = newline_at_eof
    for line in lines:
        parser.accept(line)
    return parser.finish()


def read_pet(path: str | Path, *, feedback: Optional[Feedback] = None) -> PetParser:
    """Read a `.pet` file (UTF-8) and parse it."""
    p = Path(path)
    with p.open("r", encoding="utf-8", newline="") as f:
        text = f.read()
    logger.info("pet.read", path=str(p))
    return parse_pet_text(text, feedback=feedback)


def write_pet(path: str | Path, document: Document) -> None:
    """Write the document representation back to disk (UTF-8, no newline translation)."""
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", encoding="utf-8", newline="") as f:
        f.write(document.to_text())
    logger.info("pet.write", path=str(out_path))
