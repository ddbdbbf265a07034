"""CLI package for vanish.

This package contains the Typer application and all subcommands.
"""

from vanish.cli.main import app

__all__ = ["app"]
