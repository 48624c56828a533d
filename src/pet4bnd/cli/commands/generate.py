"""`pet4bnd generate` command.

Resolves the source and generates the requested outputs:
- `--bnd PATH`: bnd fragment with the `Export-Package` instruction
- `--properties PATH`: Java properties with the resolved versions

Nothing is written when parsing or validation fails.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

import typer

from pet4bnd.cli.common import EXIT_SYNTAX, feedback_from, load_document, output_failed, resolve_checked
from pet4bnd.codecs.bnd import format_bnd, format_export, write_bnd
from pet4bnd.codecs.properties import format_properties, write_properties
from pet4bnd.core.version import InvalidVersion, Version


def register(app: typer.Typer) -> None:
    @app.command("generate")
    def generate(
        ctx: typer.Context,
        source: Optional[Path] = typer.Argument(None, help="Source .pet file (default: exports.pet)."),
        bnd: Optional[Path] = typer.Option(None, "--bnd", help="Output bnd fragment path."),
        properties: Optional[Path] = typer.Option(None, "--properties", help="Output properties file path."),
        bundle_version: bool = typer.Option(
            False,
            "--bundle-version",
            help="Include the Bundle-Version header in the bnd fragment.",
        ),
        bundle_version_override: Optional[str] = typer.Option(
            None,
            "--bundle-version-override",
            help="Bundle-Version value to emit instead of the resolved one (implies --bundle-version).",
        ),
        no_timestamp: bool = typer.Option(False, "--no-timestamp", help="Omit the generation timestamp comment."),
        verbose: bool = typer.Option(False, "--verbose", help="Print the generated exports and properties."),
    ) -> None:
        """Generate bnd and properties outputs from a package exports description."""
        feedback = feedback_from(ctx)

        header: Union[bool, Version] = bundle_version
        if bundle_version_override is not None:
            try:
                header = Version.parse(bundle_version_override)
            except InvalidVersion as e:
                feedback.fail(f"Invalid --bundle-version-override: {e}")
                raise typer.Exit(code=EXIT_SYNTAX) from e

        _, document = load_document(source, feedback)
        resolve_checked(document, feedback)

        try:
            if bnd is not None:
                feedback.info(f"Generating bnd file: {bnd}")
                timestamp = None if no_timestamp else datetime.now(timezone.utc)
                write_bnd(bnd, document, bundle_version=header, timestamp=timestamp)
                if verbose:
                    typer.echo("Package exports:")
                    for statement in document.exports.values():
                        typer.echo(format_export(statement))
                    typer.echo("")

            if properties is not None:
                feedback.info(f"Generating properties file: {properties}")
                write_properties(properties, document)
                if verbose:
                    typer.echo("Generated properties:")
                    for key, value in format_properties(document).items():
                        typer.echo(f"{key} = {value}")
                    typer.echo("")
        except OSError as e:
            raise output_failed(feedback, e) from e

        if bnd is None and properties is None:
            # Nothing requested: show the fragment instead
            for line in format_bnd(document, bundle_version=header):
                typer.echo(line)

        feedback.info("Done.")
