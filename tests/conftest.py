"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import hashlib
import io
import tarfile
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from homebins.core.download import DownloadError
from homebins.core.paths import InstallDirs
from homebins.utils.shell import CommandResult

JQ_URL = "https://github.com/stedolan/jq/releases/download/jq-1.6/jq-linux64"
RG_URL = (
    "https://github.com/BurntSushi/ripgrep/releases/download/12.1.1/"
    "ripgrep-12.1.1-x86_64-unknown-linux-musl.tar.gz"
)
RG_PREFIX = "ripgrep-12.1.1-x86_64-unknown-linux-musl"


def b2sum(data: bytes) -> str:
    """BLAKE2b-512 hex digest of data."""
    return hashlib.blake2b(data, digest_size=64).hexdigest()


def build_tar(entries: dict[str, bytes], compression: str = "gz") -> bytes:
    """Build a tarball in memory from a mapping of member name to content."""
    buffer = io.BytesIO()
    mode = f"w:{compression}" if compression else "w"
    with tarfile.open(fileobj=buffer, mode=mode) as tar:  # type: ignore[call-overload]
        for name, content in entries.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


def build_zip(entries: dict[str, bytes]) -> bytes:
    """Build a zip file in memory from a mapping of member name to content."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, content in entries.items():
            archive.writestr(name, content)
    return buffer.getvalue()


class FakeDownloader:
    """Downloader serving fixed content per URL and recording requests."""

    def __init__(self, artifacts: dict[str, bytes] | None = None) -> None:
        self.artifacts = dict(artifacts or {})
        self.fetched: list[str] = []

    def fetch(self, url: str) -> bytes:
        self.fetched.append(url)
        try:
            return self.artifacts[url]
        except KeyError:
            raise DownloadError(f"Failed to download {url}: HTTP 404") from None


class FakeRunner:
    """Command runner answering version checks from a table of outputs.

    Outputs are keyed by binary file name; a binary without an entry prints
    nothing. Every invocation is recorded.
    """

    def __init__(self, outputs: dict[str, str] | None = None) -> None:
        self.outputs = dict(outputs or {})
        self.calls: list[list[str]] = []

    def __call__(self, args: list[str]) -> CommandResult:
        self.calls.append(args)
        output = self.outputs.get(Path(args[0]).name, "")
        return CommandResult(stdout=output, stderr="", returncode=0)


@pytest.fixture
def install_dirs(tmp_path: Path) -> InstallDirs:
    """Install directory layout below a temporary home directory."""
    return InstallDirs.under(tmp_path / "home")


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Fake command runner without any known binaries."""
    return FakeRunner()


@pytest.fixture
def jq_binary() -> bytes:
    """Content of a single-file jq release."""
    return b"\x7fELF jq 1.6 binary"


@pytest.fixture
def jq_manifest_data(jq_binary: bytes) -> dict[str, Any]:
    """Manifest data for a single-file tool."""
    return {
        "info": {
            "name": "jq",
            "version": "1.6",
            "url": "https://stedolan.github.io/jq/",
            "license": "MIT",
        },
        "discover": {
            "binary": "jq",
            "version_check": {"args": ["--version"], "pattern": r"jq-(\d\S+)"},
        },
        "install": [
            {
                "download": JQ_URL,
                "checksums": {"b2": b2sum(jq_binary)},
                "name": "jq",
                "type": "bin",
            }
        ],
    }


@pytest.fixture
def rg_archive_entries() -> dict[str, bytes]:
    """Members of a ripgrep release tarball."""
    return {
        f"{RG_PREFIX}/rg": b"\x7fELF ripgrep 12.1.1",
        f"{RG_PREFIX}/doc/rg.1": b".TH RG 1\n",
        f"{RG_PREFIX}/complete/rg.bash": b"complete -F _rg rg\n",
        f"{RG_PREFIX}/complete/rg.fish": b"complete -c rg\n",
        f"{RG_PREFIX}/complete/_rg": b"#compdef rg\n",
        f"{RG_PREFIX}/README.md": b"# ripgrep\n",
    }


@pytest.fixture
def rg_archive(rg_archive_entries: dict[str, bytes]) -> bytes:
    """A ripgrep release tarball."""
    return build_tar(rg_archive_entries)


@pytest.fixture
def rg_manifest_data(rg_archive: bytes) -> dict[str, Any]:
    """Manifest data for an archive tool with manpage and completions."""
    return {
        "info": {
            "name": "ripgrep",
            "version": "12.1.1",
            "url": "https://github.com/BurntSushi/ripgrep",
            "license": "MIT OR Unlicense",
        },
        "discover": {
            "binary": "rg",
            "version_check": {"args": ["--version"], "pattern": r"ripgrep ([^ ]+)"},
        },
        "install": [
            {
                "download": RG_URL,
                "checksums": {"b2": b2sum(rg_archive), "sha256": "0" * 64},
                "files": [
                    {"source": f"{RG_PREFIX}/rg", "type": "bin"},
                    {"source": f"{RG_PREFIX}/doc/rg.1", "type": "man", "section": 1},
                    {
                        "source": f"{RG_PREFIX}/complete/rg.bash",
                        "name": "rg",
                        "type": "completion",
                        "shell": "bash",
                    },
                    {
                        "source": f"{RG_PREFIX}/complete/rg.fish",
                        "type": "completion",
                        "shell": "fish",
                    },
                    {"source": f"{RG_PREFIX}/complete/_rg", "type": "completion", "shell": "zsh"},
                ],
            }
        ],
        "remove": {
            "additional_files": [
                {"name": "rg.bash", "type": "completion", "shell": "bash"},
            ]
        },
    }


@pytest.fixture
def make_tar() -> Callable[..., bytes]:
    """Factory building tarballs in memory."""
    return build_tar


@pytest.fixture
def make_zip() -> Callable[[dict[str, bytes]], bytes]:
    """Factory building zip files in memory."""
    return build_zip


@pytest.fixture
def downloader(jq_binary: bytes, rg_archive: bytes) -> FakeDownloader:
    """Fake downloader serving the jq binary and the ripgrep tarball."""
    return FakeDownloader({JQ_URL: jq_binary, RG_URL: rg_archive})
