"""Unit tests for the list, installed and outdated commands."""

import json
from pathlib import Path
from typing import Any

from homebins.cli.main import app
from homebins.core.engine import ManifestEngine
from homebins.core.paths import InstallDirs
from typer.testing import CliRunner

runner = CliRunner()


def _fake_install(dirs: InstallDirs, binary: str) -> None:
    path = dirs.bin_dir / binary
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"binary")


class TestListCommand:
    """Tests for the list command."""

    def test_table(self, manifest_dir: Path, engine: ManifestEngine) -> None:
        """Available manifests are listed with their versions."""
        result = runner.invoke(app, ["-m", str(manifest_dir), "list"])

        assert result.exit_code == 0
        assert "Available Binaries" in result.output
        assert "jq" in result.output
        assert "12.1.1" in result.output

    def test_json(self, manifest_dir: Path, engine: ManifestEngine) -> None:
        """JSON output carries name, version, url and license."""
        result = runner.invoke(app, ["-m", str(manifest_dir), "list", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [d["name"] for d in data] == ["jq", "ripgrep"]
        assert data[0]["license"] == "MIT"

    def test_empty(self, tmp_path: Path, engine: ManifestEngine) -> None:
        """An empty manifest directory is reported."""
        result = runner.invoke(app, ["-m", str(tmp_path / "none"), "list"])

        assert result.exit_code == 0
        assert "No manifests found" in result.output

    def test_invalid_manifest(self, manifest_dir: Path, engine: ManifestEngine) -> None:
        """Invalid manifests are skipped with a warning and exit code 1."""
        (manifest_dir / "bad.toml").write_text("[info\n")

        result = runner.invoke(app, ["-m", str(manifest_dir), "list"])

        assert result.exit_code == 1
        assert "Skipping bad" in result.output
        assert "jq" in result.output


class TestInstalledCommand:
    """Tests for the installed command."""

    def test_nothing_installed(self, manifest_dir: Path, engine: ManifestEngine) -> None:
        """A fresh home has nothing installed."""
        result = runner.invoke(app, ["-m", str(manifest_dir), "installed"])

        assert result.exit_code == 0
        assert "No binaries installed." in result.output

    def test_lists_installed(
        self,
        manifest_dir: Path,
        engine: ManifestEngine,
        install_dirs: InstallDirs,
        fake_runner: Any,
    ) -> None:
        """Installed tools are listed with both versions."""
        _fake_install(install_dirs, "jq")
        fake_runner.outputs["jq"] = "jq-1.5"

        result = runner.invoke(app, ["-m", str(manifest_dir), "installed", "-f", "json"])

        assert result.exit_code == 0
        assert json.loads(result.output) == [
            {
                "name": "jq",
                "installed_version": "1.5",
                "manifest_version": "1.6",
                "status": "outdated",
            }
        ]

    def test_unmatched_version_not_installed(
        self,
        manifest_dir: Path,
        engine: ManifestEngine,
        install_dirs: InstallDirs,
        fake_runner: Any,
    ) -> None:
        """A binary whose version check does not match is not listed."""
        _fake_install(install_dirs, "rg")
        fake_runner.outputs["rg"] = "something else"

        result = runner.invoke(app, ["-m", str(manifest_dir), "installed"])

        assert "No binaries installed." in result.output


class TestOutdatedCommand:
    """Tests for the outdated command."""

    def test_lists_only_outdated(
        self,
        manifest_dir: Path,
        engine: ManifestEngine,
        install_dirs: InstallDirs,
        fake_runner: Any,
    ) -> None:
        """Up-to-date tools are left out."""
        _fake_install(install_dirs, "jq")
        _fake_install(install_dirs, "rg")
        fake_runner.outputs["jq"] = "jq-1.6"
        fake_runner.outputs["rg"] = "ripgrep 11.0.2"

        result = runner.invoke(app, ["-m", str(manifest_dir), "outdated"])

        assert result.exit_code == 0
        assert "Outdated Binaries" in result.output
        assert "ripgrep" in result.output
        assert "11.0.2" in result.output
        assert "jq" not in result.output

    def test_all_up_to_date(
        self,
        manifest_dir: Path,
        engine: ManifestEngine,
        install_dirs: InstallDirs,
        fake_runner: Any,
    ) -> None:
        """A message is shown when nothing is outdated."""
        _fake_install(install_dirs, "jq")
        fake_runner.outputs["jq"] = "jq-1.6"

        result = runner.invoke(app, ["-m", str(manifest_dir), "outdated"])

        assert result.exit_code == 0
        assert "All installed binaries are up to date." in result.output
