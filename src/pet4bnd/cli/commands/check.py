"""`pet4bnd check` command.

Parses the source, resolves the versions and validates the constraints
without writing anything.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from pet4bnd.cli.common import feedback_from, load_document, resolve_checked


def register(app: typer.Typer) -> None:
    @app.command("check")
    def check(
        ctx: typer.Context,
        source: Optional[Path] = typer.Argument(None, help="Source .pet file (default: exports.pet)."),
    ) -> None:
        """Validate a package exports description."""
        feedback = feedback_from(ctx)
        _, document = load_document(source, feedback)
        resolve_checked(document, feedback)
        typer.echo("OK")
