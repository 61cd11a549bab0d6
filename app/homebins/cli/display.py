"""Shared Rich display functions for statuses and results.

Provides reusable table builders and printers for displaying tool
statuses and operation results across CLI commands.
"""

import json
from pathlib import Path

from rich.markup import escape
from rich.table import Table

from homebins.models.action import ActionResult, ManifestStatus
from homebins.utils.formatting import console, format_status, format_version, print_success


def create_status_table(statuses: list[ManifestStatus], title: str) -> Table:
    """Create a Rich table displaying tool statuses.

    Args:
        statuses: Statuses to display.
        title: Table title.

    Returns:
        Rich Table configured for status display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Tool", no_wrap=True)
    table.add_column("Installed", no_wrap=True)
    table.add_column("Available", no_wrap=True)
    table.add_column("Status", no_wrap=True)

    for status in statuses:
        table.add_row(
            f"[tool.name]{status.name}[/]",
            format_version(status.installed_version),
            format_version(status.manifest_version),
            format_status(status.status),
        )

    return table


def print_statuses_json(statuses: list[ManifestStatus]) -> None:
    """Print tool statuses as JSON."""
    data = [
        {
            "name": s.name,
            "installed_version": s.installed_version,
            "manifest_version": s.manifest_version,
            "status": s.status.value,
        }
        for s in statuses
    ]
    console.print_json(json.dumps(data))


def print_result_line(result: ActionResult) -> None:
    """Print the outcome of one operation as it completes."""
    if result.success:
        icon, detail = "[success]✓[/]", escape(result.message or "done")
    else:
        icon, detail = "[error]✗[/]", escape(result.error or "Unknown error")
    console.print(f"{icon} [tool.name]{result.name}[/]: {detail}")


def print_results_summary(results: list[ActionResult]) -> None:
    """Print a summary of operation results.

    Shows a success message when all operations succeed, or a count of
    succeeded/failed operations when there are failures.

    Args:
        results: List of operation results.
    """
    success_count = sum(1 for r in results if r.success)
    fail_count = sum(1 for r in results if r.failed)

    if fail_count == 0:
        print_success(f"All {success_count} operation(s) completed successfully.")
    else:
        console.print(
            f"\n[success]{success_count} succeeded[/success], [error]{fail_count} failed[/error]"
        )


def print_paths(paths: list[Path]) -> None:
    """Print paths one per line, unstyled for use in scripts."""
    for path in paths:
        console.print(str(path), highlight=False, soft_wrap=True, markup=False)
