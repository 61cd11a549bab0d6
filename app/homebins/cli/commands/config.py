"""Config command implementation.

Shows and initializes the user configuration file.
"""

from typing import Annotated

import tomli_w
import typer
from rich.markup import escape

from homebins.cli.types import get_config
from homebins.core.config import ConfigError, HomebinsConfig, config_to_dict, save_config
from homebins.core.paths import Shell, get_config_path
from homebins.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show and initialize the configuration.",
    no_args_is_help=True,
)


@app.command()
def show(ctx: typer.Context) -> None:
    """Show the effective configuration and install directories."""
    config = get_config(ctx)
    dirs = config.install_dirs()
    path = get_config_path()

    state = "" if path.exists() else " [muted](not present, using defaults)[/]"
    _print_setting("Config file", f"{escape(str(path))}{state}")
    _print_setting("Manifest directory", escape(str(config.effective_manifest_dir)))
    _print_setting("Download timeout", f"{config.download_timeout}s")
    console.print()
    _print_setting("Binaries", escape(str(dirs.bin_dir)))
    _print_setting("Manpages", escape(str(dirs.man_dir)))
    for shell in Shell:
        _print_setting(f"{shell.value} completions", escape(str(dirs.completion_dir(shell))))
    _print_setting("Systemd user units", escape(str(dirs.systemd_user_unit_dir)))


def _print_setting(label: str, value: str) -> None:
    """Print one labeled setting on a single line; value is Rich markup."""
    console.print(f"[header]{label}:[/] {value}", soft_wrap=True, highlight=False)


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with the default settings."""
    path = get_config_path()
    if path.exists() and not force:
        print_info(f"Config file already exists: {path} (use --force to overwrite)")
        raise typer.Exit(code=1)

    config = HomebinsConfig()
    try:
        save_config(config, path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {path}")
    console.print(tomli_w.dumps(config_to_dict(config)), markup=False, highlight=False)
