"""pet4bnd CLI entrypoint."""

from __future__ import annotations

import typer

from pet4bnd.core.feedback import configure_logging

app = typer.Typer(
    name="pet4bnd",
    add_completion=False,
    no_args_is_help=True,
    help="pet4bnd: package export version tracking for bnd.",
)


@app.callback()
def _callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show progress messages and debug logging."),
) -> None:
    """pet4bnd CLI."""
    configure_logging(verbose)
    ctx.obj = {"verbose": verbose}


@app.command("version")
def version() -> None:
    """Print the installed pet4bnd version."""
    from pet4bnd import __version__

    typer.echo(__version__)


def _register_commands() -> None:
    """Register CLI subcommands.

    Importing these modules must remain lightweight so `pet4bnd --help` is fast.
    """
    from pet4bnd.cli.commands import check as check_cmd
    from pet4bnd.cli.commands import generate as generate_cmd
    from pet4bnd.cli.commands import report as report_cmd
    from pet4bnd.cli.commands import restore as restore_cmd

    check_cmd.register(app)
    generate_cmd.register(app)
    restore_cmd.register(app)
    report_cmd.register(app)


_register_commands()
