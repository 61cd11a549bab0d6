"""Manifest file loading.

This module provides functions for loading manifest files in TOML format
with proper validation using Pydantic models, and the ManifestStore which
resolves tool names to manifests in a manifest directory.
"""

import logging
import tomllib
from collections.abc import Iterator
from pathlib import Path

from pydantic import ValidationError

from homebins.core.errors import HomebinsError
from homebins.models.manifest import Manifest

logger = logging.getLogger(__name__)

MANIFEST_SUFFIX = ".toml"


class ManifestError(HomebinsError):
    """Base exception for manifest-related errors."""


class ManifestNotFoundError(ManifestError):
    """Raised when a manifest file is not found."""


class ManifestParseError(ManifestError):
    """Raised when a manifest file cannot be parsed."""


class ManifestValidationError(ManifestError):
    """Raised when manifest content is invalid."""


def load_manifest(path: Path) -> Manifest:
    """Load and validate a manifest from a TOML file.

    Args:
        path: Path to the manifest file.

    Returns:
        Validated Manifest object.

    Raises:
        ManifestNotFoundError: If the manifest file doesn't exist.
        ManifestParseError: If the TOML syntax is invalid.
        ManifestValidationError: If the content doesn't match the schema.
    """
    if not path.is_file():
        raise ManifestNotFoundError(f"Manifest not found: {path}")

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ManifestParseError(f"Invalid TOML syntax in {path}: {e}") from e
    except OSError as e:
        raise ManifestError(f"Failed to read manifest {path}: {e}") from e

    try:
        return Manifest.model_validate(data)
    except ValidationError as e:
        raise ManifestValidationError(f"Invalid manifest {path}: {e}") from e


class ManifestStore:
    """A directory of manifests, one <name>.toml per tool.

    Example:
        >>> store = ManifestStore(Path("~/homebin-manifests/manifests").expanduser())
        >>> manifest = store.load("ripgrep")
        >>> print(manifest.version)
    """

    def __init__(self, directory: Path) -> None:
        """Initialize the store.

        Args:
            directory: Directory containing manifest files.
        """
        self._directory = directory

    @property
    def directory(self) -> Path:
        """The manifest directory."""
        return self._directory

    def path_for(self, name: str) -> Path:
        """Get the manifest path for a tool name.

        Args:
            name: Tool name.

        Returns:
            Path of the manifest file for name.

        Raises:
            ManifestError: If name is empty or contains a path separator.
        """
        if not name or "/" in name or name in (".", ".."):
            raise ManifestError(f"Invalid manifest name: {name!r}")
        return self._directory / f"{name}{MANIFEST_SUFFIX}"

    def names(self) -> list[str]:
        """Names of all manifests in the store, sorted.

        Returns:
            Sorted tool names, empty if the directory doesn't exist.
        """
        if not self._directory.is_dir():
            logger.debug("Manifest directory %s does not exist", self._directory)
            return []
        return sorted(
            p.stem for p in self._directory.iterdir() if p.suffix == MANIFEST_SUFFIX and p.is_file()
        )

    def load(self, name: str) -> Manifest:
        """Load the manifest for a tool.

        Args:
            name: Tool name.

        Returns:
            Validated Manifest object.

        Raises:
            ManifestNotFoundError: If there is no manifest for name.
            ManifestError: If name is invalid or the manifest cannot be loaded.
        """
        path = self.path_for(name)
        if not path.is_file():
            raise ManifestNotFoundError(f"No manifest for {name} in {self._directory}")
        manifest = load_manifest(path)
        if manifest.name != name:
            logger.warning(
                "Manifest %s declares name %r, expected %r", path, manifest.name, name
            )
        return manifest

    def manifests(self) -> Iterator[tuple[str, Manifest | ManifestError]]:
        """Load every manifest in the store.

        Invalid manifests do not stop iteration; their error is yielded in
        place of the manifest so callers can report it and continue.

        Yields:
            Tuples of (name, Manifest or the ManifestError raised loading it).
        """
        for name in self.names():
            try:
                yield name, self.load(name)
            except ManifestError as e:
                yield name, e
