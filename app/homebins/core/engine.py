"""Manifest resolution engine.

This module provides the ManifestEngine, which computes the status of a
tool from its manifest and live probes, and drives download, verification,
extraction and atomic installation for install, update and removal.

Nothing is cached between calls: status is recomputed from the filesystem
and the installed binary every time it is asked for.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from homebins.core.archive import ArchiveKind, detect_archive_kind, extract_many
from homebins.core.checksum import verify_checksums
from homebins.core.installer import (
    EXECUTABLE_MODE,
    REGULAR_MODE,
    install_file,
    install_hardlink,
    remove_file,
)
from homebins.core.probe import NotInstalled, VersionProber
from homebins.core.version import Version
from homebins.models.action import ManifestStatus, ToolStatus

if TYPE_CHECKING:
    from homebins.core.download import Downloader
    from homebins.core.paths import InstallDirs
    from homebins.models.manifest import InstallStep, Manifest, TargetSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlannedFile:
    """A file an install step will put in place.

    Attributes:
        source: Entry path inside the artifact, or for hard links the name
            of the linked binary.
        destination: Final path of the file.
        mode: Permission bits of the installed file.
        link_to: For hard links, the installed binary to link to.
    """

    source: str
    destination: Path
    mode: int
    link_to: Path | None = None

    @property
    def is_link(self) -> bool:
        """Check if this file is a hard link to another installed file."""
        return self.link_to is not None


@dataclass(frozen=True, slots=True)
class PreparedStep:
    """An install step whose artifact is downloaded, verified and extracted.

    Attributes:
        planned: Planned files of the step, in installation order.
        contents: Extracted content per artifact entry.
    """

    planned: list[PlannedFile]
    contents: dict[str, bytes]


@dataclass(frozen=True, slots=True)
class UpdateResult:
    """Outcome of an update.

    Attributes:
        status: Status before the update.
        paths: Files removed and installed by the update.
    """

    status: ManifestStatus
    paths: tuple[Path, ...] = ()

    @property
    def changed(self) -> bool:
        """Whether the update touched the filesystem."""
        return self.status.status != ToolStatus.UP_TO_DATE


def destination_for(dirs: InstallDirs, spec: TargetSpec, name: str) -> Path:
    """Resolve the installed path of a file by its type.

    Args:
        dirs: Install directory layout.
        spec: Type, section and shell of the file.
        name: Installed file name.

    Returns:
        Destination path of the file.

    Raises:
        ValueError: If a manpage lacks its section or a completion its shell.
    """
    if spec.type in ("bin", "hardlink"):
        return dirs.bin_dir / name
    if spec.type == "man":
        if spec.section is None:
            msg = f"Manpage {name} has no section"
            raise ValueError(msg)
        return dirs.man_section_dir(spec.section) / name
    if spec.type == "completion":
        if spec.shell is None:
            msg = f"Completion {name} has no shell"
            raise ValueError(msg)
        return dirs.completion_dir(spec.shell) / name
    # systemd-unit
    return dirs.systemd_user_unit_dir / name


class ManifestEngine:
    """Engine for resolving and applying manifests.

    Example:
        >>> engine = ManifestEngine(InstallDirs.from_home(), HttpDownloader())
        >>> status = engine.status(manifest)
        >>> if status.is_outdated:
        ...     engine.update(manifest)
    """

    def __init__(
        self,
        dirs: InstallDirs,
        downloader: Downloader,
        prober: VersionProber | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            dirs: Install directory layout.
            downloader: Fetches artifacts.
            prober: Detects installed versions. Defaults to running binaries
                as subprocesses.
        """
        self.dirs = dirs
        self._downloader = downloader
        self._prober = prober or VersionProber()

    def status(self, manifest: Manifest) -> ManifestStatus:
        """Compute the status of a tool against its manifest.

        Args:
            manifest: The manifest of the tool.

        Returns:
            ManifestStatus with the installed version, if any.
        """
        result = self._prober.probe(self.dirs.bin_dir, manifest.discover)
        if isinstance(result, NotInstalled):
            logger.debug("%s: %s", manifest.name, result.reason)
            return ManifestStatus(
                name=manifest.name,
                manifest_version=manifest.version,
                status=ToolStatus.NOT_INSTALLED,
            )

        if Version(result.version) == Version(manifest.version):
            status = ToolStatus.UP_TO_DATE
        else:
            status = ToolStatus.OUTDATED
        return ManifestStatus(
            name=manifest.name,
            manifest_version=manifest.version,
            status=status,
            installed_version=result.version,
        )

    def plan_step(self, step: InstallStep) -> list[PlannedFile]:
        """Resolve the files of one install step to destinations.

        Hard links requested via ``links`` follow right after their binary.

        Args:
            step: The install step.

        Returns:
            Planned files in installation order.
        """
        planned: list[PlannedFile] = []
        for entry in step.file_entries():
            destination = destination_for(self.dirs, entry, entry.target_name)
            if entry.type == "hardlink":
                planned.append(
                    PlannedFile(
                        source=entry.source,
                        destination=destination,
                        mode=EXECUTABLE_MODE,
                        link_to=self.dirs.bin_dir / entry.source,
                    )
                )
                continue

            mode = EXECUTABLE_MODE if entry.type == "bin" else REGULAR_MODE
            planned.append(PlannedFile(source=entry.source, destination=destination, mode=mode))
            for link in entry.links:
                planned.append(
                    PlannedFile(
                        source=entry.target_name,
                        destination=self.dirs.bin_dir / link,
                        mode=EXECUTABLE_MODE,
                        link_to=destination,
                    )
                )
        return planned

    def plan(self, manifest: Manifest) -> list[PlannedFile]:
        """Resolve all files of a manifest to destinations.

        Args:
            manifest: The manifest to plan.

        Returns:
            Planned files of all install steps, in installation order.
        """
        return [p for step in manifest.install for p in self.plan_step(step)]

    def install(self, manifest: Manifest) -> list[Path]:
        """Install a tool, overwriting whatever is installed.

        Steps run in declared order. A failing step raises and leaves the
        remaining steps undone; files of earlier steps stay installed.

        Args:
            manifest: The manifest to install.

        Returns:
            Installed paths, in installation order.

        Raises:
            DownloadError: If an artifact cannot be downloaded.
            ChecksumError: If an artifact fails verification.
            ArchiveError: If an archive is unreadable or lacks an entry.
            InstallIOError: If a file cannot be installed.
        """
        logger.info("Installing %s %s", manifest.name, manifest.version)
        installed: list[Path] = []
        for step in manifest.install:
            installed.extend(self._write_step(self._prepare_step(step)))
        return installed

    def _prepare_step(self, step: InstallStep) -> PreparedStep:
        """Download, verify and extract one step without writing anything.

        Every entry is extracted before the first file is written, so a
        missing entry never leaves a step half installed.
        """
        planned = self.plan_step(step)

        artifact = self._downloader.fetch(step.download)
        algorithm = verify_checksums(artifact, step.checksums)
        logger.debug("Verified %s with %s", step.filename, algorithm.value)

        if step.is_archive:
            kind = detect_archive_kind(step.filename, artifact)
        else:
            kind = ArchiveKind.PLAIN
        contents = extract_many(artifact, kind, [p.source for p in planned if not p.is_link])
        return PreparedStep(planned=planned, contents=contents)

    def _write_step(self, prepared: PreparedStep) -> list[Path]:
        """Atomically install the files of a prepared step, in order."""
        contents = prepared.contents
        installed: list[Path] = []
        for planned_file in prepared.planned:
            if planned_file.link_to is not None:
                install_hardlink(planned_file.link_to, planned_file.destination)
            else:
                install_file(
                    contents[planned_file.source], planned_file.destination, planned_file.mode
                )
            installed.append(planned_file.destination)
        return installed

    def update(self, manifest: Manifest) -> UpdateResult:
        """Update a tool unless it is up to date.

        An up-to-date tool is left alone without any filesystem writes.
        Otherwise every artifact is downloaded, verified and extracted first;
        only then are stale files listed in the manifest removed and the tool
        installed over the existing files. A failed download or verification
        leaves the installed files untouched.

        Args:
            manifest: The manifest to update to.

        Returns:
            UpdateResult with the status before the update.

        Raises:
            Same as install().
        """
        status = self.status(manifest)
        if status.status == ToolStatus.UP_TO_DATE:
            logger.info("%s %s is up to date", manifest.name, manifest.version)
            return UpdateResult(status=status)

        logger.info("Updating %s to %s", manifest.name, manifest.version)
        prepared = [self._prepare_step(step) for step in manifest.install]
        removed = [path for path in self.additional_files(manifest) if remove_file(path)]
        installed = [path for step in prepared for path in self._write_step(step)]
        return UpdateResult(status=status, paths=tuple(removed + installed))

    def additional_files(self, manifest: Manifest) -> list[Path]:
        """Paths of stale files the manifest asks to remove.

        Args:
            manifest: The manifest.

        Returns:
            Resolved paths of remove.additional_files.
        """
        return [
            destination_for(self.dirs, entry, entry.name)
            for entry in manifest.remove.additional_files
        ]

    def removal_set(self, manifest: Manifest) -> list[Path]:
        """Compute every path belonging to a tool, without touching anything.

        Args:
            manifest: The manifest.

        Returns:
            Declared destinations and additional files, duplicates dropped,
            in declaration order.
        """
        paths = [p.destination for p in self.plan(manifest)]
        paths.extend(self.additional_files(manifest))
        return list(dict.fromkeys(paths))

    def remove(self, manifest: Manifest) -> list[Path]:
        """Remove every file belonging to a tool.

        Absent files are skipped, so removing twice is not an error.

        Args:
            manifest: The manifest.

        Returns:
            Paths that existed and were deleted.

        Raises:
            InstallIOError: If an existing file cannot be deleted.
        """
        logger.info("Removing %s", manifest.name)
        return [path for path in self.removal_set(manifest) if remove_file(path)]
