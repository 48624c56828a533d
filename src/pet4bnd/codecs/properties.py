"""Key/value dump of resolved versions (Java `.properties` syntax).

Keys:

- `bundle.version`: resolved module version
- `<package>.version`: resolved export version
- `<package>.attributes`: export attributes (only when non-empty)
"""

from __future__ import annotations

from pathlib import Path

import structlog

from pet4bnd.core.model import Document

logger = structlog.get_logger(__name__)

BUNDLE_VERSION_KEY = "bundle.version"

_ESCAPES = {
    "\\": "\\\\",
    "\t": "\\t",
    "\n": "\\n",
    "\r": "\\r",
    "\f": "\\f",
    "=": "\\=",
    ":": "\\:",
    "#": "\\#",
    "!": "\\!",
}


def format_properties(document: Document) -> dict[str, str]:
    """Return the properties as a dict sorted by key."""
    result: dict[str, str] = {BUNDLE_VERSION_KEY: str(document.module_version.resolution)}
    for name, statement in document.exports.items():
        result[f"{name}.version"] = str(statement.resolution)
        if statement.attributes:
            result[f"{name}.attributes"] = statement.attributes
    return dict(sorted(result.items()))


def _escape(text: str, *, key: bool) -> str:
    out: list[str] = []
    for i, c in enumerate(text):
        if c == " " and (key or i == 0):
            out.append("\\ ")
        else:
            out.append(_ESCAPES.get(c, c))
    return "".join(out)


def format_properties_lines(document: Document) -> list[str]:
    return [
        f"{_escape(k, key=True)}={_escape(v, key=False)}"
        for k, v in format_properties(document).items()
    ]


def write_properties(path: str | Path, document: Document) -> None:
    """Write sorted `key=value` lines (UTF-8, `\\n` line endings)."""
    lines = format_properties_lines(document)
    out_text = "".join(line + "\n" for line in lines)
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", encoding="utf-8", newline="") as f:
        f.write(out_text)
    logger.info("properties.write", path=str(out_path), keys=len(lines))
