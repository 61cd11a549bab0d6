"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import sys

from rich.console import Console
from rich.markup import escape

from homebins.core.theme import get_theme
from homebins.models.action import ToolStatus


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())

_STATUS_LABELS: dict[ToolStatus, str] = {
    ToolStatus.UP_TO_DATE: "[status.up_to_date]● up to date[/]",
    ToolStatus.OUTDATED: "[status.outdated]▲ outdated[/]",
    ToolStatus.NOT_INSTALLED: "[status.not_installed]○ not installed[/]",
}


def format_status(status: ToolStatus) -> str:
    """Format a tool status with color markup.

    Args:
        status: The tool status.

    Returns:
        Rich markup string for status display.
    """
    return _STATUS_LABELS[status]


def format_version(version: str | None) -> str:
    """Format an optional version, with a dash for unknown versions."""
    if version is None:
        return "[muted]-[/]"
    return f"[tool.version]{version}[/]"


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{escape(message)}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {escape(message)}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {escape(message)}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{escape(message)}[/]")
