"""Fixtures for CLI command tests.

Commands run against a temporary manifest directory and an engine with
fake downloads and version checks, installing below a temporary home.
"""

from collections.abc import Iterator
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
import tomli_w
from homebins.core.engine import ManifestEngine
from homebins.core.paths import InstallDirs
from homebins.core.probe import VersionProber


@pytest.fixture
def manifest_dir(
    tmp_path: Path,
    jq_manifest_data: dict[str, Any],
    rg_manifest_data: dict[str, Any],
) -> Path:
    """Manifest directory holding jq and ripgrep."""
    directory = tmp_path / "manifests"
    directory.mkdir()
    (directory / "jq.toml").write_text(tomli_w.dumps(jq_manifest_data))
    (directory / "ripgrep.toml").write_text(tomli_w.dumps(rg_manifest_data))
    return directory


@pytest.fixture
def engine(
    install_dirs: InstallDirs,
    downloader: Any,
    fake_runner: Any,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> Iterator[ManifestEngine]:
    """Engine used by every command, with config isolated to tmp_path."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    engine = ManifestEngine(install_dirs, downloader, VersionProber(fake_runner))
    with patch("homebins.cli.types.build_engine", return_value=engine):
        yield engine
