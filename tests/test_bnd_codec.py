from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from conftest import sample_pet_text
from pet4bnd.codecs.bnd import format_bnd, format_export, write_bnd
from pet4bnd.codecs.pet import parse_pet_text
from pet4bnd.core.model import Document
from pet4bnd.core.resolve import VersionResolver
from pet4bnd.core.version import Version


def _resolved(text: str) -> Document:
    parser = parse_pet_text(text)
    assert parser.error_count == 0
    VersionResolver(parser.result).resolve()
    return parser.result


def test_format_export_entry() -> None:
    doc = _resolved(sample_pet_text())
    assert format_export(doc.exports["org.example.api"]) == 'org.example.api;version="1.1.0";uses:="org.example.spi"'
    assert format_export(doc.exports["org.example.core"]) == 'org.example.core;version="1.5.0"'


def test_format_bnd_layout_aligns_continuations() -> None:
    doc = _resolved("$bundle-version: 1.0.0\norg.example.api: 1.0.0 @ minor\norg.example.spi.impl: 2.0.0\n")
    lines = format_bnd(doc)

    assert lines == [
        "# Generated by the pet4bnd tool",
        "",
        "Bundle-Version: 1.1.0",
        "",
        "Export-Package:" + " " * 29 + "\\",
        '    org.example.api;version="1.1.0",' + " " * 8 + "\\",
        '    org.example.spi.impl;version="2.0.0"',
        "",
    ]
    # All continuation backslashes share one column
    assert len({line.index("\\") for line in lines if line.endswith("\\")}) == 1


def test_format_bnd_entry_on_the_grid_gets_no_padding() -> None:
    # Longest entry length is a multiple of 4: column = length + 4
    doc = _resolved('$bundle-version: 1.0.0\npkg.abcd: 1.0.0\n+ x=1\npkg.a: 1.0.0\n')
    entries = [format_export(s) for s in doc.exports.values()]
    assert [len(e) for e in entries] == [21, 28]

    lines = format_bnd(doc, bundle_version=False)
    assert lines[2] == "Export-Package:" + " " * 21 + "\\"
    assert lines[3] == '    pkg.a;version="1.0.0",' + " " * 10 + "\\"
    assert lines[4] == '    pkg.abcd;version="1.0.0";x=1'


def test_format_bnd_bundle_version_options() -> None:
    doc = _resolved("$bundle-version: 1.0.0 @ major\n")

    assert format_bnd(doc, bundle_version=False) == ["# Generated by the pet4bnd tool", ""]
    assert format_bnd(doc)[2] == "Bundle-Version: 2.0.0"
    assert format_bnd(doc, bundle_version=Version(9, 9, 9, "x"))[2] == "Bundle-Version: 9.9.9.x"

    with pytest.raises(TypeError, match=r"bundle_version must be bool or Version"):
        format_bnd(doc, bundle_version="1.0.0")  # type: ignore[arg-type]


def test_format_bnd_timestamp_is_utc() -> None:
    doc = _resolved("$bundle-version: 1.0.0\n")
    ts = datetime(2025, 12, 16, 1, 2, 3, 456, tzinfo=timezone(timedelta(hours=1)))
    assert format_bnd(doc, bundle_version=False, timestamp=ts)[1] == "# 2025-12-16T00:02:03Z"

    with pytest.raises(ValueError, match=r"timezone-aware"):
        format_bnd(doc, timestamp=datetime(2025, 1, 1))


def test_write_bnd(tmp_path: Path) -> None:
    doc = _resolved("$bundle-version: 1.0.0\npkg.a: 1.0.0\n")
    out = tmp_path / "gen" / "exports.bnd"
    write_bnd(out, doc, bundle_version=False)

    text = out.read_text(encoding="utf-8")
    assert text == (
        "# Generated by the pet4bnd tool\n"
        "\n"
        "Export-Package:" + " " * 13 + "\\\n"
        '    pkg.a;version="1.0.0"\n'
        "\n"
    )
