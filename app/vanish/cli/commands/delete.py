"""Delete command: move paths into the cache."""

from typing import Annotated

import typer

from vanish.cli.runner import run_operation
from vanish.engine.pipeline import Operation


def delete(
    ctx: typer.Context,
    paths: Annotated[
        list[str],
        typer.Argument(help="Files, directories or symlinks to delete."),
    ],
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Move files and directories into the cache.

    Items stay restorable until the retention window expires. Paths that
    do not exist are reported and skipped.

    Examples:
        vx delete notes.txt build/      # Delete with confirmation
        vx delete -y old.log            # Skip confirmation
    """
    run_operation(ctx, Operation.DELETE, paths, yes=yes)
