"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

from enum import Enum
from pathlib import Path

import typer

from homebins.core.config import ConfigError, HomebinsConfig, load_config
from homebins.core.download import HttpDownloader
from homebins.core.engine import ManifestEngine
from homebins.core.manifest import ManifestError, ManifestStore, load_manifest
from homebins.models.manifest import Manifest
from homebins.utils.formatting import print_error, print_warning


class OutputFormat(str, Enum):
    """Output format options for listing commands."""

    TABLE = "table"
    JSON = "json"


def get_config(ctx: typer.Context) -> HomebinsConfig:
    """Get the user configuration, loading it once per invocation.

    Args:
        ctx: Typer context carrying the global options.

    Returns:
        The loaded configuration.

    Raises:
        typer.Exit: If the configuration file is invalid.
    """
    obj = ctx.ensure_object(dict)
    config = obj.get("config")
    if config is None:
        try:
            config = load_config()
        except ConfigError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e
        obj["config"] = config
    return config


def get_store(ctx: typer.Context) -> ManifestStore:
    """Get the manifest store, honoring the global --manifest-dir option.

    Args:
        ctx: Typer context carrying the global options.

    Returns:
        ManifestStore over the effective manifest directory.
    """
    manifest_dir: Path | None = ctx.ensure_object(dict).get("manifest_dir")
    if manifest_dir is None:
        manifest_dir = get_config(ctx).effective_manifest_dir
    return ManifestStore(manifest_dir)


def build_engine(config: HomebinsConfig) -> ManifestEngine:
    """Build the engine for a configuration.

    Args:
        config: The user configuration.

    Returns:
        ManifestEngine installing into the configured directories.
    """
    return ManifestEngine(
        config.install_dirs(),
        HttpDownloader(timeout=config.download_timeout),
    )


def get_engine(ctx: typer.Context) -> ManifestEngine:
    """Get the engine for the current invocation."""
    return build_engine(get_config(ctx))


def resolve_manifests(
    store: ManifestStore,
    names: list[str],
    files: list[Path] | None = None,
) -> list[Manifest]:
    """Load manifests by tool name and from explicit files.

    Every manifest is loaded before anything is installed or removed, so an
    invalid manifest aborts the command without side effects.

    Args:
        store: Store to look names up in.
        names: Tool names.
        files: Paths of manifest files outside the store.

    Returns:
        Loaded manifests, names first, in the given order.

    Raises:
        typer.Exit: If any manifest cannot be loaded.
    """
    manifests: list[Manifest] = []
    try:
        for name in names:
            manifests.append(store.load(name))
        for path in files or []:
            manifests.append(load_manifest(path))
    except ManifestError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    return manifests


def load_all_manifests(store: ManifestStore) -> tuple[list[Manifest], bool]:
    """Load every manifest of a store, warning about invalid ones.

    Args:
        store: The manifest store.

    Returns:
        Tuple of (valid manifests, whether any manifest failed to load).
    """
    manifests: list[Manifest] = []
    failed = False
    for name, loaded in store.manifests():
        if isinstance(loaded, ManifestError):
            print_warning(f"Skipping {name}: {loaded}")
            failed = True
        else:
            manifests.append(loaded)
    return manifests, failed
