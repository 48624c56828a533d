"""bnd instruction fragment generator.

Produces a fragment suitable for inclusion into a bnd file:

    # Generated by the pet4bnd tool
    # 2025-12-16T00:00:00Z

    Bundle-Version: 1.1.0

    Export-Package:                             \\
        org.example.api;version="1.1.0",        \\
        org.example.spi.impl;version="2.0.0"

Exports are listed in name order with their resolved versions and attributes.
The continuation backslashes are aligned on a column that is a multiple of the
indentation width and leaves at least one space after the longest entry.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

import structlog

from pet4bnd.core.model import Document, Statement
from pet4bnd.core.version import Version

logger = structlog.get_logger(__name__)

GENERATOR_COMMENT = "# Generated by the pet4bnd tool"
BUNDLE_VERSION_HEADER = "Bundle-Version:"
EXPORT_PACKAGE_HEADER = "Export-Package:"
INDENTATION = "    "


def _format_instant(timestamp: datetime) -> str:
    if timestamp.tzinfo is None:
        raise ValueError("format_bnd: timestamp must be timezone-aware")
    return timestamp.astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def format_export(statement: Statement) -> str:
    """Format one `Export-Package` entry: `name;version="x"[;attributes]`."""
    entry = f'{statement.name};version="{statement.resolution}"'
    if statement.attributes:
        entry += f";{statement.attributes}"
    return entry


def _bundle_version(document: Document, bundle_version: Union[bool, Version]) -> Optional[Version]:
    if isinstance(bundle_version, Version):
        return bundle_version
    if isinstance(bundle_version, bool):
        return document.module_version.resolution if bundle_version else None
    raise TypeError(f"format_bnd: bundle_version must be bool or Version, got {type(bundle_version).__name__}")


def format_bnd(
    document: Document,
    *,
    bundle_version: Union[bool, Version] = True,
    timestamp: Optional[datetime] = None,
) -> list[str]:
    """Return the bnd fragment as lines (without terminators).

    - `bundle_version`: True emits the resolved module version, False omits the
      header, a `Version` is emitted as given
    - `timestamp`: when given, emitted as a UTC comment below the generator line
    """
    lines: list[str] = [GENERATOR_COMMENT]
    if timestamp is not None:
        lines.append(f"# {_format_instant(timestamp)}")
    lines.append("")

    version = _bundle_version(document, bundle_version)
    if version is not None:
        lines.append(f"{BUNDLE_VERSION_HEADER} {version}")
        lines.append("")

    entries = [format_export(statement) for statement in document.exports.values()]
    if not entries:
        return lines

    width = max([len(EXPORT_PACKAGE_HEADER)] + [len(e) for e in entries])
    indent = len(INDENTATION)
    join_column = width + indent - width % indent

    lines.append(EXPORT_PACKAGE_HEADER + " " * (join_column - len(EXPORT_PACKAGE_HEADER) + indent) + "\\")
    for entry in entries[:-1]:
        # One column less for the comma
        padding = max(join_column - len(entry) - 1, 0)
        lines.append(f"{INDENTATION}{entry}," + " " * padding + "\\")
    lines.append(INDENTATION + entries[-1])
    lines.append("")
    return lines


def write_bnd(
    path: str | Path,
    document: Document,
    *,
    bundle_version: Union[bool, Version] = True,
    timestamp: Optional[datetime] = None,
) -> None:
    """Write the bnd fragment (UTF-8, `\\n` line endings)."""
    lines = format_bnd(document, bundle_version=bundle_version, timestamp=timestamp)
    out_text = "\n".join(lines) + "\n"
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", encoding="utf-8", newline="") as f:
        f.write(out_text)
    logger.info("bnd.write", path=str(out_path), exports=len(document.exports))
