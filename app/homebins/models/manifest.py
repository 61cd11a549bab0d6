"""Manifest models for declarative tool installation.

This module defines the Pydantic models representing a tool manifest, the
TOML document that describes where to download a tool, how to verify it,
which files to install, and how to detect an installed version.

Example manifest:

    [info]
    name = "ripgrep"
    version = "12.1.1"
    url = "https://github.com/BurntSushi/ripgrep"
    license = "MIT OR Unlicense"

    [discover]
    binary = "rg"
    version_check = { args = ["--version"], pattern = "ripgrep ([^ ]+)" }

    [[install]]
    download = "https://github.com/.../ripgrep-12.1.1-x86_64-unknown-linux-musl.tar.gz"
    checksums = { b2 = "1c97a37e..." }

    [[install.files]]
    source = "ripgrep-12.1.1-x86_64-unknown-linux-musl/rg"
    type = "bin"
"""

import posixpath
import re
from typing import Annotated, Literal
from urllib.parse import unquote, urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from homebins.core.archive import PLAIN_ENTRY
from homebins.core.checksum import SUPPORTED_ALGORITHMS
from homebins.core.paths import Shell

# Type alias for the kind of installed file
FileType = Literal["bin", "man", "completion", "hardlink", "systemd-unit"]


class ManifestInfo(BaseModel):
    """Information section of a manifest.

    Attributes:
        name: Tool name, the identity of the manifest.
        version: Version the manifest installs.
        url: Project homepage, informational only.
        license: SPDX license expression, informational only.
    """

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, description="Tool name")]
    version: Annotated[str, Field(min_length=1, description="Version to install")]
    url: Annotated[str, Field(description="Project homepage")]
    license: Annotated[str | None, Field(description="SPDX license expression")] = None


class VersionCheck(BaseModel):
    """How to ask an installed binary for its version.

    Attributes:
        args: Arguments to invoke the binary with.
        pattern: Regular expression with exactly one capturing group,
            which captures the version from the binary's output.
    """

    model_config = ConfigDict(extra="forbid")

    args: Annotated[list[str], Field(default_factory=list, description="Binary arguments")]
    pattern: Annotated[str, Field(description="Version pattern with one capture group")]

    @field_validator("pattern")
    @classmethod
    def validate_single_group(cls, v: str) -> str:
        """Validate that the pattern compiles and has exactly one group."""
        try:
            compiled = re.compile(v)
        except re.error as e:
            msg = f"invalid version pattern {v!r}: {e}"
            raise ValueError(msg) from e
        if compiled.groups != 1:
            msg = (
                f"version pattern {v!r} must have exactly one capturing group, "
                f"has {compiled.groups}"
            )
            raise ValueError(msg)
        return v

    def regex(self) -> re.Pattern[str]:
        """The compiled version pattern."""
        return re.compile(self.pattern)


class Discover(BaseModel):
    """Discovery rule for an installed tool.

    Attributes:
        binary: File name of the binary in the binaries directory.
        version_check: How to extract the installed version.
    """

    model_config = ConfigDict(extra="forbid")

    binary: Annotated[str, Field(min_length=1, description="Installed binary name")]
    version_check: Annotated[VersionCheck, Field(description="Version check")]

    @field_validator("binary")
    @classmethod
    def validate_plain_name(cls, v: str) -> str:
        """Validate that the binary is a bare file name."""
        return _plain_name(v, "binary")


def _plain_name(value: str, what: str) -> str:
    if "/" in value or value in (".", ".."):
        msg = f"{what} must be a plain file name, got {value!r}"
        raise ValueError(msg)
    return value


class TargetSpec(BaseModel):
    """Where a file goes, shared by install and remove entries.

    Attributes:
        type: Kind of file, which selects the destination directory.
        section: Manpage section, required for type "man".
        shell: Shell, required for type "completion".
    """

    model_config = ConfigDict(extra="forbid")

    type: Annotated[FileType, Field(description="Kind of installed file")]
    section: Annotated[int | None, Field(ge=1, le=9, description="Manpage section")] = None
    shell: Annotated[Shell | None, Field(description="Completion shell")] = None

    @model_validator(mode="after")
    def validate_type_fields(self) -> "TargetSpec":
        """Validate that section and shell accompany the types needing them."""
        if self.type == "man" and self.section is None:
            msg = "manpages require a section"
            raise ValueError(msg)
        if self.type == "completion" and self.shell is None:
            msg = "completions require a shell"
            raise ValueError(msg)
        if self.section is not None and self.type != "man":
            msg = f"section is only valid for manpages, not {self.type}"
            raise ValueError(msg)
        if self.shell is not None and self.type != "completion":
            msg = f"shell is only valid for completions, not {self.type}"
            raise ValueError(msg)
        return self


class InstallFile(TargetSpec):
    """A file to install from a downloaded artifact.

    For type "hardlink", source names the installed name of a binary
    installed earlier by the same manifest, and name is the link name.

    Attributes:
        source: Path inside the archive, exactly as stored there.
        name: Installed file name; defaults to the basename of source.
        links: Extra names in the binaries directory hard-linked to this
            binary (type "bin" only).
    """

    source: Annotated[str, Field(min_length=1, description="Path inside the archive")]
    name: Annotated[str | None, Field(description="Installed file name")] = None
    links: Annotated[
        list[str],
        Field(default_factory=list, description="Hard links to this binary"),
    ]

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        """Validate that an explicit name is a bare file name."""
        return v if v is None else _plain_name(v, "name")

    @field_validator("links")
    @classmethod
    def validate_links(cls, v: list[str]) -> list[str]:
        """Validate that link names are bare file names."""
        return [_plain_name(link, "link") for link in v]

    @model_validator(mode="after")
    def validate_links_and_hardlinks(self) -> "InstallFile":
        """Validate hardlink and links constraints."""
        if self.links and self.type != "bin":
            msg = f"links are only valid for binaries, not {self.type}"
            raise ValueError(msg)
        if self.type == "hardlink" and self.name is None:
            msg = f"hardlink to {self.source!r} requires a name"
            raise ValueError(msg)
        if not self.target_name:
            msg = f"cannot derive a file name from source {self.source!r}"
            raise ValueError(msg)
        return self

    @property
    def target_name(self) -> str:
        """The installed file name."""
        if self.name is not None:
            return self.name
        return posixpath.basename(self.source.rstrip("/"))


class InstallStep(BaseModel):
    """One download and the files installed from it.

    A step is either in single-file mode (``type = "bin"``, the download
    itself is the binary) or in archive mode (``files`` lists the entries
    to install from the downloaded archive).

    Attributes:
        download: URL of the artifact.
        checksums: Expected digests, keyed by algorithm name.
        name: Installed name in single-file mode.
        type: "bin" in single-file mode.
        links: Hard links to the binary in single-file mode.
        files: Files to install in archive mode.
    """

    model_config = ConfigDict(extra="forbid")

    download: Annotated[str, Field(min_length=1, description="Artifact URL")]
    checksums: Annotated[dict[str, str], Field(description="Expected digests")]
    name: Annotated[str | None, Field(description="Installed name (single file)")] = None
    type: Annotated[Literal["bin"] | None, Field(description="Single-file type")] = None
    links: Annotated[
        list[str],
        Field(default_factory=list, description="Hard links (single file)"),
    ]
    files: Annotated[
        list[InstallFile] | None,
        Field(description="Files to install from the archive"),
    ] = None

    @field_validator("checksums")
    @classmethod
    def validate_checksums(cls, v: dict[str, str]) -> dict[str, str]:
        """Validate that at least one supported digest is given."""
        if not any(v.get(algorithm, "").strip() for algorithm in SUPPORTED_ALGORITHMS):
            msg = (
                "at least one checksum is required, supported algorithms: "
                f"{', '.join(SUPPORTED_ALGORITHMS)}"
            )
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_mode(self) -> "InstallStep":
        """Validate that the step is either single-file or archive mode."""
        if self.files is not None:
            if self.type is not None or self.name is not None or self.links:
                msg = "archive steps take files only, not type, name or links"
                raise ValueError(msg)
            if not self.files:
                msg = "archive steps need at least one file"
                raise ValueError(msg)
        elif self.type is None:
            msg = "install steps need either files or type = 'bin'"
            raise ValueError(msg)
        if not self.filename:
            msg = f"cannot derive a file name from download {self.download!r}"
            raise ValueError(msg)
        return self

    @property
    def filename(self) -> str:
        """Basename of the download URL, without query or fragment."""
        path = unquote(urlsplit(self.download).path)
        return posixpath.basename(path.rstrip("/"))

    @property
    def is_archive(self) -> bool:
        """Whether files are installed from an archive."""
        return self.files is not None

    def file_entries(self) -> list[InstallFile]:
        """The files this step installs, in declared order.

        Single-file steps are represented as one binary entry whose source is
        the download itself.
        """
        if self.files is not None:
            return list(self.files)
        return [
            InstallFile(
                source=PLAIN_ENTRY,
                name=self.name or self.filename,
                type="bin",
                links=self.links,
            )
        ]


class RemoveFile(TargetSpec):
    """A file from an earlier manifest version to remove.

    Attributes:
        name: File name in the directory selected by type.
    """

    name: Annotated[str, Field(min_length=1, description="File name")]

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate that the name is a bare file name."""
        return _plain_name(v, "name")


class RemoveSection(BaseModel):
    """Remove section of a manifest.

    Attributes:
        additional_files: Stale files to remove on update and removal.
    """

    model_config = ConfigDict(extra="forbid")

    additional_files: Annotated[
        list[RemoveFile],
        Field(default_factory=list, description="Stale files to remove"),
    ]


class Manifest(BaseModel):
    """Complete manifest of one installable tool.

    Attributes:
        info: Name, version and informational metadata.
        discover: How to detect the installed version.
        install: Install steps, processed in order.
        remove: Additional files to remove.
    """

    model_config = ConfigDict(extra="forbid")

    info: Annotated[ManifestInfo, Field(description="Tool information")]
    discover: Annotated[Discover, Field(description="Discovery rule")]
    install: Annotated[
        list[InstallStep],
        Field(min_length=1, description="Install steps"),
    ]
    remove: Annotated[
        RemoveSection,
        Field(default_factory=RemoveSection, description="Removal configuration"),
    ]

    @model_validator(mode="after")
    def validate_hardlinks(self) -> "Manifest":
        """Validate that hardlinks point at binaries installed before them."""
        binaries: set[str] = set()
        for step in self.install:
            for entry in step.file_entries():
                if entry.type == "hardlink" and entry.source not in binaries:
                    msg = (
                        f"hardlink {entry.target_name!r} points to {entry.source!r}, "
                        "which is not a binary installed earlier by this manifest"
                    )
                    raise ValueError(msg)
                if entry.type == "bin":
                    binaries.add(entry.target_name)
                    binaries.update(entry.links)
        return self

    @property
    def name(self) -> str:
        """The tool name."""
        return self.info.name

    @property
    def version(self) -> str:
        """The version this manifest installs."""
        return self.info.version
