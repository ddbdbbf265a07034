"""Restore command: move cached items back to where they came from."""

from typing import Annotated

import typer

from vanish.cli.runner import run_operation
from vanish.engine.pipeline import Operation


def restore(
    ctx: typer.Context,
    patterns: Annotated[
        list[str],
        typer.Argument(help="Substrings of the original paths to restore."),
    ],
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Restore cached items whose original path contains a pattern.

    Matching is case-insensitive. If the original location is occupied,
    the item is restored under a numbered name (notes.txt -> notes1.txt).

    Examples:
        vx restore notes.txt
        vx restore -y project/src
    """
    run_operation(ctx, Operation.RESTORE, patterns, yes=yes)
