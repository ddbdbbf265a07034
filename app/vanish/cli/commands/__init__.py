"""CLI commands for vanish.

This package contains all subcommand implementations.
"""

from vanish.cli.commands import browse, delete, paths, purge, restore

__all__ = ["browse", "delete", "paths", "purge", "restore"]
