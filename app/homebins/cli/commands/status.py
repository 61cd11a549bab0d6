"""Listing commands: list, installed and outdated.

Statuses are never stored; installed and outdated probe every installed
binary on each run.
"""

import json
from typing import Annotated

import typer
from rich.table import Table

from homebins.cli.display import create_status_table, print_statuses_json
from homebins.cli.types import OutputFormat, get_engine, get_store, load_all_manifests
from homebins.models.action import ManifestStatus
from homebins.models.manifest import Manifest
from homebins.utils.formatting import console, print_info

FormatOption = Annotated[
    OutputFormat,
    typer.Option(
        "--format",
        "-f",
        help="Output format.",
        case_sensitive=False,
    ),
]


def list_manifests(
    ctx: typer.Context,
    output_format: FormatOption = OutputFormat.TABLE,
) -> None:
    """List available binaries."""
    store = get_store(ctx)
    manifests, failed = load_all_manifests(store)

    if output_format == OutputFormat.JSON:
        data = [
            {"name": m.name, "version": m.version, "url": m.info.url, "license": m.info.license}
            for m in manifests
        ]
        console.print_json(json.dumps(data))
    elif not manifests:
        print_info(f"No manifests found in {store.directory}")
    else:
        console.print(_create_manifest_table(manifests))

    if failed:
        raise typer.Exit(code=1)


def installed(
    ctx: typer.Context,
    output_format: FormatOption = OutputFormat.TABLE,
) -> None:
    """List installed binaries."""
    statuses, failed = _collect_statuses(ctx)
    _print_statuses(
        [s for s in statuses if s.is_installed],
        "Installed Binaries",
        "No binaries installed.",
        output_format,
    )
    if failed:
        raise typer.Exit(code=1)


def outdated(
    ctx: typer.Context,
    output_format: FormatOption = OutputFormat.TABLE,
) -> None:
    """List outdated binaries."""
    statuses, failed = _collect_statuses(ctx)
    _print_statuses(
        [s for s in statuses if s.is_outdated],
        "Outdated Binaries",
        "All installed binaries are up to date.",
        output_format,
    )
    if failed:
        raise typer.Exit(code=1)


def _collect_statuses(ctx: typer.Context) -> tuple[list[ManifestStatus], bool]:
    """Probe the status of every manifest in the store."""
    manifests, failed = load_all_manifests(get_store(ctx))
    engine = get_engine(ctx)
    return [engine.status(m) for m in manifests], failed


def _print_statuses(
    statuses: list[ManifestStatus],
    title: str,
    empty_message: str,
    output_format: OutputFormat,
) -> None:
    if output_format == OutputFormat.JSON:
        print_statuses_json(statuses)
    elif not statuses:
        print_info(empty_message)
    else:
        console.print(create_status_table(statuses, title))


def _create_manifest_table(manifests: list[Manifest]) -> Table:
    table = Table(
        title="Available Binaries",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Tool", no_wrap=True)
    table.add_column("Version", no_wrap=True)
    table.add_column("Homepage", style="muted", overflow="ellipsis")

    for manifest in manifests:
        table.add_row(
            f"[tool.name]{manifest.name}[/]",
            f"[tool.version]{manifest.version}[/]",
            manifest.info.url,
        )

    return table
