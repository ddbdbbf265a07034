"""Commands printing resolved locations."""

import typer

from vanish.cli.runner import get_config
from vanish.core.paths import get_config_path


def path(ctx: typer.Context) -> None:
    """Print the cache directory."""
    typer.echo(str(get_config(ctx).cache_dir))


def config_path(ctx: typer.Context) -> None:
    """Print the configuration file location."""
    override = ctx.ensure_object(dict).get("config_path")
    typer.echo(str(override or get_config_path()))
