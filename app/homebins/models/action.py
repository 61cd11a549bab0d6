"""Action and status models for manifest operations.

This module defines data structures for the state of a tool relative to its
manifest, for the operations homebins performs on manifests, and for the
outcome of those operations.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class ToolStatus(Enum):
    """State of a tool relative to its manifest.

    Attributes:
        NOT_INSTALLED: Binary missing, or the version check did not match.
        UP_TO_DATE: Installed version equals the manifest version.
        OUTDATED: Installed version differs from the manifest version.
    """

    NOT_INSTALLED = "not-installed"
    UP_TO_DATE = "up-to-date"
    OUTDATED = "outdated"


@dataclass(frozen=True, slots=True)
class ManifestStatus:
    """Status of one manifest, recomputed on every invocation.

    Attributes:
        name: Tool name.
        manifest_version: Version declared by the manifest.
        status: Computed status.
        installed_version: Version reported by the installed binary, if any.
    """

    name: str
    manifest_version: str
    status: ToolStatus
    installed_version: str | None = None

    @property
    def is_installed(self) -> bool:
        """Check if the tool is installed in any version."""
        return self.status != ToolStatus.NOT_INSTALLED

    @property
    def is_outdated(self) -> bool:
        """Check if the installed version differs from the manifest."""
        return self.status == ToolStatus.OUTDATED


class ActionType(Enum):
    """Type of manifest operation.

    Attributes:
        INSTALL: Install the tool, overwriting any existing files.
        UPDATE: Install the tool unless it is already up to date.
        REMOVE: Delete all files belonging to the tool.
    """

    INSTALL = "install"
    UPDATE = "update"
    REMOVE = "remove"


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Result of executing an operation on one manifest.

    Attributes:
        action_type: The operation that was executed.
        name: Tool name the operation ran for.
        success: Whether the operation completed successfully.
        changed: Whether any file was written or deleted.
        paths: Files written or deleted.
        message: Optional success message or additional information.
        error: Optional error message if the operation failed.
    """

    action_type: ActionType
    name: str
    success: bool
    changed: bool = False
    paths: tuple[Path, ...] = field(default=())
    message: str | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        """Check if the operation failed."""
        return not self.success
