"""`pet4bnd restore` command.

Resolves the versions, makes them the new baselines and writes the source back
in place. Everything not touched by the update stays byte for byte.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from pet4bnd.cli.common import feedback_from, load_document, output_failed, resolve_checked
from pet4bnd.codecs.pet import write_pet


def register(app: typer.Typer) -> None:
    @app.command("restore")
    def restore(
        ctx: typer.Context,
        source: Optional[Path] = typer.Argument(None, help="Source .pet file (default: exports.pet)."),
    ) -> None:
        """Turn resolved versions into baselines and update the source file."""
        feedback = feedback_from(ctx)
        path, document = load_document(source, feedback)
        resolve_checked(document, feedback)

        feedback.info("Restoring baselines and updating the source file.")
        document.restore()
        try:
            write_pet(path, document)
        except OSError as e:
            raise output_failed(feedback, e) from e
        typer.echo(str(path))
