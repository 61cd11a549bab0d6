"""Data models for homebins.

This module exports the core data structures used throughout the application.
"""

from homebins.models.action import ActionResult, ActionType, ManifestStatus, ToolStatus
from homebins.models.manifest import (
    Discover,
    InstallFile,
    InstallStep,
    Manifest,
    ManifestInfo,
    RemoveFile,
    RemoveSection,
    VersionCheck,
)

__all__ = [
    "ActionResult",
    "ActionType",
    "Discover",
    "InstallFile",
    "InstallStep",
    "Manifest",
    "ManifestInfo",
    "ManifestStatus",
    "RemoveFile",
    "RemoveSection",
    "ToolStatus",
    "VersionCheck",
]
