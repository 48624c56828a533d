"""Tabular view of a document's exports (pandas).

One row per export, sorted by name, every column a pandas `string` dtype so
missing values stay `<NA>` and CSV output is deterministic.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from pet4bnd.core.model import Document, Statement

if TYPE_CHECKING:  # pragma: no cover
    import pandas as pd


EXPORT_COLUMNS: tuple[str, ...] = (
    "name",
    "baseline",
    "constraint",
    "variance",
    "resolution",
    "inherits",
    "attributes",
)


def _text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _row(statement: Statement) -> dict[str, Optional[str]]:
    source = statement.source
    return {
        "name": statement.name,
        "baseline": str(statement.baseline),
        "constraint": _text(statement.constraint),
        "variance": _text(statement.variance),
        "resolution": str(statement.resolution),
        "inherits": None if source is None else source.name,
        "attributes": statement.attributes or None,
    }


def exports_table(document: Document) -> "pd.DataFrame":
    import pandas as pd

    rows = [_row(statement) for statement in document.exports.values()]
    df = pd.DataFrame(rows, columns=list(EXPORT_COLUMNS))
    df = df.astype({c: "string" for c in EXPORT_COLUMNS})
    return df.sort_values("name", kind="mergesort").reset_index(drop=True)
