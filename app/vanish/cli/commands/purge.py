"""Purge and clear commands: permanently remove cached items."""

from typing import Annotated

import typer

from vanish.cli.runner import get_config, is_quiet, run_operation
from vanish.engine.pipeline import Operation
from vanish.utils.formatting import print_info


def purge(
    ctx: typer.Context,
    days: Annotated[
        int,
        typer.Argument(help="Remove items deleted more than this many days ago."),
    ],
) -> None:
    """Permanently remove items older than DAYS days.

    Items whose cached copy cannot be removed stay in the cache and are
    reported.
    """
    run_operation(ctx, Operation.PURGE, purge_days=days)


def clear(
    ctx: typer.Context,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Permanently remove everything in the cache."""
    config = get_config(ctx)
    if not (yes or config.cache.no_confirm):
        confirmed = typer.confirm(
            f"Permanently delete everything in {config.cache_dir}?",
            default=False,
        )
        if not confirmed:
            if not is_quiet(ctx):
                print_info("Cancelled. Nothing was changed.")
            return

    run_operation(ctx, Operation.CLEAR)
