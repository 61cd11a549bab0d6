"""Files command implementation.

Previews every file belonging to a tool, without touching anything.
"""

from typing import Annotated

import typer

from homebins.cli.display import print_paths
from homebins.cli.types import get_engine, get_store, resolve_manifests


def files(
    ctx: typer.Context,
    names: Annotated[
        list[str],
        typer.Argument(help="Tools to list files of."),
    ],
    existing: Annotated[
        bool,
        typer.Option("--existing", "-e", help="Only list files that exist."),
    ] = False,
) -> None:
    """List files of binaries."""
    manifests = resolve_manifests(get_store(ctx), names)
    engine = get_engine(ctx)

    for manifest in manifests:
        paths = engine.removal_set(manifest)
        if existing:
            paths = [p for p in paths if p.exists() or p.is_symlink()]
        print_paths(paths)
