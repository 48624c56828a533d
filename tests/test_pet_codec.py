from __future__ import annotations

from pathlib import Path

import pytest

from conftest import RecordingFeedback, sample_pet_text, write_source
from pet4bnd.codecs._pet_lines import ParseFailure, UndefinedReference
from pet4bnd.codecs.pet import (
    DuplicateDefinition,
    MissingModuleVersion,
    ParserFinishedError,
    PetParser,
    parse_pet_lines,
    parse_pet_text,
    read_pet,
    write_pet,
)
from pet4bnd.core.model import Role
from pet4bnd.core.version import Version, VersionVariance


def test_parse_sample_builds_statements() -> None:
    parser = parse_pet_text(sample_pet_text())
    assert parser.error_count == 0
    assert parser.warning_count == 0
    doc = parser.result
    assert doc is not None

    assert doc.module_version.role is Role.MODULE
    assert doc.module_version.baseline == Version(1, 0, 0)
    assert doc.module_version.constraint == Version(2, 0, 0)
    assert doc.module_version.variance is None

    assert list(doc.exports) == ["org.example.api", "org.example.core", "org.example.spi", "org.example.util"]
    api = doc.exports["org.example.api"]
    assert api.variance is VersionVariance.MINOR
    assert api.attributes == 'uses:="org.example.spi"'

    core = doc.exports["org.example.core"]
    assert core.inheriting
    assert core.source is doc.groups["$core"]
    assert core.baseline == Version(1, 5, 0)

    util = doc.exports["org.example.util"]
    assert util.source is doc.module_version
    assert util.reference == "inherit"


@pytest.mark.parametrize(
    "text",
    [
        "",
        "\n",
        "$bundle-version: 1.0\n",
        "$bundle-version: 1.0",
        "$bundle-version:1.0.0.q<2 @MAJOR # x\r\npkg.a : 01.2   \r\n+  a=b  \r\n",
        "# only comments\n\n   \n$bundle: 3\n",
    ],
)
def test_roundtrip_without_mutation_is_byte_exact(text: str) -> None:
    parser = parse_pet_text(text)
    assert parser.result is not None
    assert parser.result.to_text() == text


def test_roundtrip_sample_and_erroneous_lines_are_byte_exact() -> None:
    text = sample_pet_text() + "pkg.c: abc\nthis is : not ? valid\n"
    parser = parse_pet_text(text)
    assert parser.error_count == 2
    assert parser.result.to_text() == text


def test_duplicate_export_first_wins() -> None:
    feedback = RecordingFeedback()
    parser = parse_pet_text("$bundle-version: 1.0.0\npkg.a: 1.0.0\npkg.b: 1.0.0\npkg.a: 2.0.0\n", feedback=feedback)

    assert parser.error_count == 0
    assert parser.warning_count >= 1
    assert parser.result.exports["pkg.a"].baseline == Version(1, 0, 0)
    assert "Duplicated definition for 'pkg.a'. Using only the first occurrence." in feedback.warnings
    assert "See line 4: pkg.a: 2.0.0" in feedback.warnings
    assert isinstance(parser.diagnostics[0].error, DuplicateDefinition)
    assert parser.result.to_text().endswith("pkg.a: 2.0.0\n")


def test_duplicate_group_and_module_declarations_warn() -> None:
    text = "$bundle-version: 1.0.0\n$g: 1.0.0\n$g: 2.0.0\n$bundle: 5.0.0\n"
    parser = parse_pet_text(text)

    assert parser.error_count == 0
    assert parser.warning_count == 2
    assert parser.result.groups["$g"].baseline == Version(1, 0, 0)
    assert parser.result.module_version.baseline == Version(1, 0, 0)
    assert parser.result.to_text() == text


def test_missing_module_version_is_an_error_with_zero_baseline() -> None:
    feedback = RecordingFeedback()
    parser = parse_pet_text("pkg.a: 1.0.0\npkg.b: 2.0.0 @ micro\n", feedback=feedback)

    assert parser.error_count >= 1
    assert parser.result.module_version.baseline == Version.ZERO
    assert isinstance(parser.diagnostics[-1].error, MissingModuleVersion)
    assert parser.diagnostics[-1].line_number is None
    assert feedback.errors == ["The $bundle-version declaration required, but missing."]


def test_malformed_version_is_an_error_and_line_is_kept() -> None:
    feedback = RecordingFeedback()
    parser = parse_pet_text("$bundle-version: 1.0.0\npkg.c: abc\n", feedback=feedback)

    assert parser.error_count == 1
    assert "pkg.c" not in parser.result.exports
    assert parser.result.lines()[1] == "pkg.c: abc"

    diagnostic = parser.diagnostics[0]
    assert isinstance(diagnostic.error, ParseFailure)
    assert (diagnostic.line_number, diagnostic.line) == (2, "pkg.c: abc")
    assert str(diagnostic) == "error: line 2: Version baseline invalid. (at offset 7)"
    assert feedback.errors[1] == "See line 2: pkg.c: abc"


def test_attributes_without_preceding_export_is_an_error() -> None:
    parser = parse_pet_text("$bundle-version: 1.0.0\n+ a=b\n")
    assert parser.error_count == 1
    assert "missing preceding package export" in str(parser.diagnostics[0].error)


def test_attributes_may_follow_comments_but_not_statements() -> None:
    parser = parse_pet_text("$bundle-version: 1.0.0\npkg.a: 1.0.0\n# api\n\n+ a=b\n")
    assert parser.error_count == 0
    assert parser.result.exports["pkg.a"].attributes == "a=b"

    parser = parse_pet_text("$bundle-version: 1.0.0\npkg.a: 1.0.0\n$g: 1.0.0\n+ a=b\n")
    assert parser.error_count == 1
    assert parser.result.exports["pkg.a"].attributes is None


def test_undefined_reference_is_an_error() -> None:
    parser = parse_pet_text("$bundle-version: 1.0.0\npkg.a: $nope\n$nope: 1.0.0\n")
    assert parser.error_count == 1
    error = parser.diagnostics[0].error
    assert isinstance(error, UndefinedReference)
    assert error.reference == "$nope"
    assert "pkg.a" not in parser.result.exports


def test_reserved_module_names_resolve_to_the_module_statement() -> None:
    parser = parse_pet_text("$bundle: 2.0.0\npkg.a: $bundle-version\npkg.b: $bundle\n$g: inherit\npkg.c: $g\n")
    doc = parser.result
    assert parser.error_count == 0
    assert doc.exports["pkg.a"].source is doc.module_version
    assert doc.exports["pkg.b"].source is doc.module_version
    assert doc.exports["pkg.c"].root() is doc.module_version
    assert doc.exports["pkg.c"].baseline == Version(2)


def test_module_version_cannot_use_a_reference() -> None:
    parser = parse_pet_text("$bundle-version: inherit\n")
    assert parser.error_count == 2  # invalid baseline, then missing module version


def test_trailing_garbage_is_a_warning_and_preserved() -> None:
    text = "$bundle-version: 1.0.0\npkg.a: 1.0.0 @ minor what?\n"
    feedback = RecordingFeedback()
    parser = parse_pet_text(text, feedback=feedback)

    assert parser.error_count == 0
    assert parser.warning_count == 1
    assert parser.result.exports["pkg.a"].variance is VersionVariance.MINOR
    assert parser.result.to_text() == text
    assert feedback.warnings[0].startswith("Unknown construct found at the end of the line.")


def test_unknown_construct_is_an_error() -> None:
    parser = parse_pet_text("$bundle-version: 1.0.0\n= what\n")
    assert parser.error_count == 1
    assert "Unknown construct found." in str(parser.diagnostics[0].error)


def test_parser_rejects_input_after_finish() -> None:
    parser = PetParser()
    parser.accept("$bundle-version: 1.0.0")
    assert not parser.finished
    assert parser.finish() is parser
    assert parser.finished

    with pytest.raises(ParserFinishedError, match=r"already finished"):
        parser.accept("pkg.a: 1.0.0")
    with pytest.raises(ParserFinishedError):
        parser.finish()


def test_parse_pet_lines_defaults_to_trailing_newline() -> None:
    parser = parse_pet_lines(["$bundle-version: 1.0.0", "pkg.a: 1.0.0"])
    assert parser.result.to_text() == "$bundle-version: 1.0.0\npkg.a: 1.0.0\n"


def test_read_and_write_preserve_crlf(tmp_path: Path) -> None:
    text = "$bundle-version: 1.0.0 @ micro\r\npkg.a: 1.0.0\r\n"
    src = write_source(tmp_path, text)

    parser = read_pet(src)
    assert parser.error_count == 0

    out = tmp_path / "out" / "copy.pet"
    write_pet(out, parser.result)
    assert out.read_bytes() == text.encode("utf-8")
