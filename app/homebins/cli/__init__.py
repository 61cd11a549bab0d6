"""CLI package for homebins.

This package contains the Typer application and all subcommands.
"""

from homebins.cli.main import app

__all__ = ["app"]
