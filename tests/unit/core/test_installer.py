"""Unit tests for atomic file installation."""

import errno
import os
import stat
import threading
from pathlib import Path
from unittest.mock import patch

import pytest
from homebins.core.installer import (
    EXECUTABLE_MODE,
    REGULAR_MODE,
    CrossDeviceLinkError,
    InstallIOError,
    install_file,
    install_hardlink,
    remove_file,
)


def _mode(path: Path) -> int:
    return stat.S_IMODE(path.stat().st_mode)


class TestInstallFile:
    """Tests for install_file function."""

    def test_creates_parents(self, tmp_path: Path) -> None:
        """Missing parent directories are created."""
        destination = tmp_path / "a" / "b" / "tool"

        assert install_file(b"content", destination, EXECUTABLE_MODE) == destination

        assert destination.read_bytes() == b"content"

    @pytest.mark.parametrize("mode", [EXECUTABLE_MODE, REGULAR_MODE])
    def test_sets_mode(self, tmp_path: Path, mode: int) -> None:
        """The installed file carries exactly the requested mode."""
        destination = tmp_path / "tool"
        install_file(b"content", destination, mode)
        assert _mode(destination) == mode

    def test_overwrites(self, tmp_path: Path) -> None:
        """An existing destination is replaced."""
        destination = tmp_path / "tool"
        destination.write_bytes(b"old")

        install_file(b"new", destination, EXECUTABLE_MODE)

        assert destination.read_bytes() == b"new"

    def test_replaces_inode(self, tmp_path: Path) -> None:
        """The old file is swapped, not rewritten, so running copies keep their inode."""
        destination = tmp_path / "tool"
        destination.write_bytes(b"old")
        with open(destination, "rb") as running:
            install_file(b"new", destination, EXECUTABLE_MODE)
            assert running.read() == b"old"
        assert destination.read_bytes() == b"new"

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        """Only the destination remains after installing."""
        install_file(b"content", tmp_path / "tool", EXECUTABLE_MODE)
        assert [p.name for p in tmp_path.iterdir()] == ["tool"]

    def test_failure_cleans_up(self, tmp_path: Path) -> None:
        """A failing rename leaves neither temp file nor destination."""
        destination = tmp_path / "tool"
        with (
            patch("homebins.core.installer.os.replace", side_effect=OSError("boom")),
            pytest.raises(InstallIOError, match="boom"),
        ):
            install_file(b"content", destination, EXECUTABLE_MODE)

        assert list(tmp_path.iterdir()) == []

    def test_unwritable_parent(self, tmp_path: Path) -> None:
        """A parent that cannot be created raises InstallIOError."""
        blocker = tmp_path / "file"
        blocker.write_bytes(b"")
        with pytest.raises(InstallIOError):
            install_file(b"content", blocker / "tool", EXECUTABLE_MODE)

    def test_concurrent_readers_see_whole_files(self, tmp_path: Path) -> None:
        """Readers racing with installs see either old or new content, never partial."""
        destination = tmp_path / "tool"
        old, new = b"a" * 256 * 1024, b"b" * 256 * 1024
        install_file(old, destination, EXECUTABLE_MODE)
        observed: set[bytes] = set()
        stop = threading.Event()

        def read() -> None:
            while not stop.is_set():
                observed.add(destination.read_bytes())

        reader = threading.Thread(target=read)
        reader.start()
        try:
            for i in range(20):
                install_file(new if i % 2 == 0 else old, destination, EXECUTABLE_MODE)
        finally:
            stop.set()
            reader.join()

        assert observed <= {old, new}


class TestInstallHardlink:
    """Tests for install_hardlink function."""

    def test_links_to_primary(self, tmp_path: Path) -> None:
        """The link shares the primary's inode."""
        primary = tmp_path / "bin" / "rg"
        install_file(b"binary", primary, EXECUTABLE_MODE)
        link = tmp_path / "bin" / "ripgrep"

        install_hardlink(primary, link)

        assert os.path.samefile(primary, link)
        assert link.read_bytes() == b"binary"

    def test_replaces_existing(self, tmp_path: Path) -> None:
        """An existing file at the link path is replaced."""
        primary = tmp_path / "rg"
        primary.write_bytes(b"new")
        link = tmp_path / "ripgrep"
        link.write_bytes(b"stale")

        install_hardlink(primary, link)

        assert os.path.samefile(primary, link)

    def test_missing_primary(self, tmp_path: Path) -> None:
        """Linking to a file that is not installed fails."""
        with pytest.raises(InstallIOError, match="not installed"):
            install_hardlink(tmp_path / "rg", tmp_path / "ripgrep")

    def test_cross_device(self, tmp_path: Path) -> None:
        """EXDEV raises CrossDeviceLinkError without copying."""
        primary = tmp_path / "rg"
        primary.write_bytes(b"binary")
        link = tmp_path / "ripgrep"
        error = OSError(errno.EXDEV, "Invalid cross-device link")

        with (
            patch("homebins.core.installer.os.link", side_effect=error),
            pytest.raises(CrossDeviceLinkError),
        ):
            install_hardlink(primary, link)

        assert not link.exists()
        assert [p.name for p in tmp_path.iterdir()] == ["rg"]


class TestRemoveFile:
    """Tests for remove_file function."""

    def test_removes(self, tmp_path: Path) -> None:
        """An existing file is removed."""
        path = tmp_path / "tool"
        path.write_bytes(b"")
        assert remove_file(path) is True
        assert not path.exists()

    def test_absent_is_not_an_error(self, tmp_path: Path) -> None:
        """Removing an absent file reports False."""
        assert remove_file(tmp_path / "tool") is False

    def test_failure(self, tmp_path: Path) -> None:
        """Other errors raise InstallIOError."""
        directory = tmp_path / "dir"
        directory.mkdir()
        with pytest.raises(InstallIOError):
            remove_file(directory)
