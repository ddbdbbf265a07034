"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from vanish import __version__
from vanish.cli.commands import browse, delete, paths, purge, restore
from vanish.core.config import ensure_default_config, load_config
from vanish.core.errors import ConfigError
from vanish.utils.formatting import err_console, print_error, print_warning

# Create main Typer app
app = typer.Typer(
    name="vx",
    help="Reversible delete: move files into a cache instead of removing them.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"vanish version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route diagnostic logging to stderr through Rich.

    Args:
        verbose: Show DEBUG messages instead of only warnings and errors.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(console=err_console, show_path=False, show_time=verbose)
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Use this config file instead of the default.",
        ),
    ] = None,
) -> None:
    """vanish - reversible delete for the command line.

    Deleted items are kept in a cache and can be restored until the
    retention window expires.
    """
    configure_logging(verbose)

    try:
        config = load_config(config_file, required=config_file is not None)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    # First run: write a default config file next to where we looked
    if config_file is None:
        try:
            ensure_default_config()
        except ConfigError as e:
            print_warning(f"Could not write default config: {e}")

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config"] = config
    ctx.obj["config_path"] = config_file


# Register commands
app.command("delete")(delete.delete)
app.command("restore")(restore.restore)
app.command("purge")(purge.purge)
app.command("clear")(purge.clear)
app.command("list")(browse.list_items)
app.command("info")(browse.info)
app.command("stats")(browse.stats)
app.command("path")(paths.path)
app.command("config-path")(paths.config_path)


if __name__ == "__main__":
    app()
