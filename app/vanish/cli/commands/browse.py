"""Read-only commands for looking into the cache."""

import json
from typing import Annotated

import typer

from vanish.cli.display import (
    create_entries_table,
    entries_to_json,
    print_entry_details,
    print_stats,
)
from vanish.cli.runner import get_config
from vanish.core.config import VanishConfig
from vanish.core.errors import IndexStoreError
from vanish.core.index import IndexStore
from vanish.engine.stats import compute_stats, newest_first
from vanish.models.entry import Index
from vanish.utils.formatting import console, print_error, print_info


def _load_index(config: VanishConfig) -> Index:
    try:
        return IndexStore(config.cache_dir).load()
    except IndexStoreError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def list_items(
    ctx: typer.Context,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON."),
    ] = False,
) -> None:
    """List cached items, newest first."""
    config = get_config(ctx)
    entries = newest_first(_load_index(config))

    if as_json:
        console.print_json(json.dumps(entries_to_json(entries, config.retention_days)))
        return

    if not entries:
        print_info("Cache is empty.")
        return

    console.print(create_entries_table(entries, config.retention_days))


def info(
    ctx: typer.Context,
    pattern: Annotated[
        str,
        typer.Argument(help="Substring of the original path."),
    ],
) -> None:
    """Show details of cached items matching PATTERN."""
    config = get_config(ctx)
    matches = _load_index(config).matching(pattern)

    if not matches:
        print_error(f"No cached item matches '{pattern}'")
        raise typer.Exit(code=1)

    for i, entry in enumerate(matches):
        if i:
            console.print()
        print_entry_details(entry, config.retention_days)


def stats(ctx: typer.Context) -> None:
    """Show cache statistics."""
    config = get_config(ctx)
    print_stats(compute_stats(_load_index(config), config.retention_days), config.retention_days)
