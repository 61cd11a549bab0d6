"""Install, update and remove commands.

Each command loads all requested manifests first, then processes them one
after another. A failing tool does not stop the others; the command exits
with code 1 if any of them failed.
"""

from pathlib import Path
from typing import Annotated

import typer

from homebins.cli.display import print_paths, print_result_line, print_results_summary
from homebins.cli.types import (
    get_engine,
    get_store,
    load_all_manifests,
    resolve_manifests,
)
from homebins.core.engine import ManifestEngine
from homebins.core.executor import execute_batch
from homebins.models.action import ActionType
from homebins.models.manifest import Manifest
from homebins.utils.formatting import console, print_error, print_info

NamesArgument = Annotated[
    list[str] | None,
    typer.Argument(help="Tools to operate on, by manifest name.", show_default=False),
]
FileOption = Annotated[
    list[Path] | None,
    typer.Option(
        "--file",
        "-f",
        help="Manifest file outside the manifest directory (repeatable).",
        exists=True,
        dir_okay=False,
        show_default=False,
    ),
]


def install(
    ctx: typer.Context,
    names: NamesArgument = None,
    files: FileOption = None,
) -> None:
    """Install binaries, overwriting existing files."""
    manifests = _require_manifests(ctx, names, files)
    _run(ctx, get_engine(ctx), ActionType.INSTALL, manifests)


def update(
    ctx: typer.Context,
    names: NamesArgument = None,
    files: FileOption = None,
) -> None:
    """Update binaries that are not up to date.

    Without arguments every installed binary is updated.
    """
    engine = get_engine(ctx)
    if names or files:
        manifests = resolve_manifests(get_store(ctx), names or [], files)
        load_failed = False
    else:
        available, load_failed = load_all_manifests(get_store(ctx))
        manifests = [m for m in available if engine.status(m).is_installed]
        if not manifests:
            print_info("No binaries installed.")
            if load_failed:
                raise typer.Exit(code=1)
            return

    _run(ctx, engine, ActionType.UPDATE, manifests, load_failed)


def remove(
    ctx: typer.Context,
    names: NamesArgument = None,
    files: FileOption = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be deleted."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Remove binaries and all their files."""
    manifests = _require_manifests(ctx, names, files)
    engine = get_engine(ctx)

    existing = [
        path for manifest in manifests for path in engine.removal_set(manifest) if path.exists()
    ]
    if not existing:
        print_info("Nothing to remove.")
        return

    if dry_run or not yes:
        console.print("[header]Files to delete:[/]")
        print_paths(existing)
    if dry_run:
        print_info(f"Dry-run: {len(existing)} file(s) would be deleted.")
        return
    if not yes:
        confirmed = typer.confirm(f"\nDelete {len(existing)} file(s)?", default=False)
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    _run(ctx, engine, ActionType.REMOVE, manifests)


def _require_manifests(
    ctx: typer.Context,
    names: list[str] | None,
    files: list[Path] | None,
) -> list[Manifest]:
    """Load the manifests named on the command line, requiring at least one."""
    if not names and not files:
        print_error("Name at least one tool or pass a manifest with --file.")
        raise typer.Exit(code=2)
    return resolve_manifests(get_store(ctx), names or [], files)


def _run(
    ctx: typer.Context,
    engine: ManifestEngine,
    action_type: ActionType,
    manifests: list[Manifest],
    load_failed: bool = False,
) -> None:
    """Execute an operation on all manifests and report the outcome."""
    quiet = ctx.ensure_object(dict).get("quiet", False)
    results = execute_batch(
        engine,
        action_type,
        manifests,
        on_result=None if quiet else print_result_line,
    )

    if not quiet:
        print_results_summary(results)
    else:
        for result in results:
            if result.failed:
                print_error(f"{result.name}: {result.error}")

    if load_failed or any(r.failed for r in results):
        raise typer.Exit(code=1)
