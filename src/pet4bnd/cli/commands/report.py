"""`pet4bnd report` command.

Prints the resolved bundle version; with `--csv` also writes the export table
(see `pet4bnd.core.tables.exports_table`).
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from pet4bnd.cli.common import feedback_from, load_document, output_failed, resolve_checked
from pet4bnd.core.tables import exports_table


def register(app: typer.Typer) -> None:
    @app.command("report")
    def report(
        ctx: typer.Context,
        source: Optional[Path] = typer.Argument(None, help="Source .pet file (default: exports.pet)."),
        csv: Optional[Path] = typer.Option(None, "--csv", help="Write the resolved export table as CSV."),
    ) -> None:
        """Print the resolved bundle version."""
        feedback = feedback_from(ctx)
        _, document = load_document(source, feedback)
        resolve_checked(document, feedback)

        if csv is not None:
            df = exports_table(document)
            try:
                csv.parent.mkdir(parents=True, exist_ok=True)
                df.to_csv(csv, index=False, lineterminator="\n")
            except OSError as e:
                raise output_failed(feedback, e) from e

        typer.echo(str(document.module_version.resolution))
