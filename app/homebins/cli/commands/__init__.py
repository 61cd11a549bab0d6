"""CLI commands for homebins.

This package contains all subcommand implementations.
"""

from homebins.cli.commands import apply, config, files, status

__all__ = ["apply", "config", "files", "status"]
