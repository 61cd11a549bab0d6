"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from homebins import __version__
from homebins.cli.commands import apply, config, files, status
from homebins.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="homebins",
    help="Install binaries to $HOME.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"homebins version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route log records to the error console.

    Args:
        verbose: Log debug messages instead of warnings only.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


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
    manifest_dir: Annotated[
        Path | None,
        typer.Option(
            "--manifest-dir",
            "-m",
            help="Directory to load manifests from.",
            file_okay=False,
            show_default=False,
        ),
    ] = None,
) -> None:
    """homebins - Install binaries to $HOME.

    Installs precompiled binaries, manpages, completions and systemd user
    units from manifests, without root and without an installation database.
    """
    configure_logging(verbose)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["manifest_dir"] = manifest_dir


# Register commands
app.command("list")(status.list_manifests)
app.command("installed")(status.installed)
app.command("outdated")(status.outdated)
app.command("files")(files.files)
app.command("install")(apply.install)
app.command("update")(apply.update)
app.command("remove")(apply.remove)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
