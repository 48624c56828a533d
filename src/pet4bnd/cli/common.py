"""Helpers shared by the CLI commands: feedback echo, loading and resolving.

Exit codes:
- 0: success
- 1: syntax (bad option values)
- 2: input problem (missing source, parse errors, violated constraints)
- 3: output failure (writing a file failed)
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import structlog
import typer

from pet4bnd.codecs.pet import read_pet
from pet4bnd.core.model import Document
from pet4bnd.core.resolve import LoggingResolver

logger = structlog.get_logger(__name__)

EXIT_SUCCESS = 0
EXIT_SYNTAX = 1
EXIT_INPUT = 2
EXIT_OUTPUT = 3

DEFAULT_SOURCE = Path("exports.pet")


class EchoFeedback:
    """Feedback sink printing `[ERROR]`/`[WARNING]` lines to stderr.

    Info messages are shown only when `verbose` is set.
    """

    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose

    def fail(self, message: str, error: Optional[BaseException] = None) -> None:
        typer.echo(f"[ERROR] {message}", err=True)

    def warn(self, message: str, error: Optional[BaseException] = None) -> None:
        typer.echo(f"[WARNING] {message}", err=True)

    def info(self, message: str) -> None:
        if self.verbose:
            typer.echo(f"[INFO] {message}", err=True)


def feedback_from(ctx: typer.Context) -> EchoFeedback:
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    return EchoFeedback(verbose=bool(obj.get("verbose", False)))


def load_document(source: Optional[Path], feedback: EchoFeedback) -> tuple[Path, Document]:
    """Read and parse the source; exit with EXIT_INPUT on any problem."""
    if source is None:
        feedback.warn("No source file specified, trying to use the default.")
        source = DEFAULT_SOURCE

    feedback.info(f"Loading source file: {source}")
    if not source.is_file():
        feedback.fail("Missing source file.")
        raise typer.Exit(code=EXIT_INPUT)

    try:
        parser = read_pet(source, feedback=feedback)
    except (OSError, UnicodeDecodeError) as e:
        feedback.fail(str(e), e)
        raise typer.Exit(code=EXIT_INPUT) from e

    if parser.error_count > 0:
        feedback.fail("Errors encountered when parsing the definition file.")
        raise typer.Exit(code=EXIT_INPUT)
    if parser.warning_count > 0:
        feedback.warn("Warnings encountered when parsing the definition file.")

    document = parser.result
    if document is None:
        raise RuntimeError(f"{source}: parser finished without a document")
    return source, document


def resolve_checked(document: Document, feedback: EchoFeedback) -> None:
    """Resolve versions and exit with EXIT_INPUT if any constraint is violated."""
    resolver = LoggingResolver(document, feedback)
    if not resolver.resolve().test():
        feedback.fail("One or more version constraints were violated.")
        raise typer.Exit(code=EXIT_INPUT)
    logger.debug("cli.resolved", module=str(document.module_version.resolution))


def output_failed(feedback: EchoFeedback, error: OSError) -> typer.Exit:
    feedback.fail(str(error), error)
    return typer.Exit(code=EXIT_OUTPUT)
