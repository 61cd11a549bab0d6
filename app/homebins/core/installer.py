"""Atomic file installation.

Files are written to a temporary file in the destination directory, given
their final mode, and renamed over the destination in one step. Readers see
either the old or the new file, never a partial one, and a process running
the old binary keeps its open file, which makes self-updates safe.
"""

import errno
import logging
import os
from pathlib import Path
from tempfile import NamedTemporaryFile

from homebins.core.errors import HomebinsError

logger = logging.getLogger(__name__)

EXECUTABLE_MODE = 0o755
REGULAR_MODE = 0o644


class InstallIOError(HomebinsError):
    """Raised when a file cannot be installed or removed."""


class CrossDeviceLinkError(InstallIOError):
    """Raised when a hard link would cross filesystems."""


def ensure_parent(path: Path) -> Path:
    """Create the parent directory of path if it doesn't exist.

    Args:
        path: File path whose parent should exist.

    Returns:
        The parent directory.

    Raises:
        InstallIOError: If the directory cannot be created.
    """
    parent = path.parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        msg = f"Cannot create directory {parent}: {e}"
        raise InstallIOError(msg) from e
    return parent


def install_file(content: bytes, destination: Path, mode: int) -> Path:
    """Atomically install content at destination.

    An existing destination is always replaced.

    Args:
        content: The complete file content.
        destination: Final path of the file.
        mode: Permission bits of the installed file.

    Returns:
        The destination path.

    Raises:
        InstallIOError: If the file cannot be written.
    """
    directory = ensure_parent(destination)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=directory,
            prefix=f".{destination.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_path = Path(f.name)
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, destination)
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        msg = f"Failed to install {destination}: {e}"
        raise InstallIOError(msg) from e

    logger.info("install -m%o %s", mode, destination)
    return destination


def install_hardlink(primary: Path, link: Path) -> Path:
    """Atomically make link a hard link to primary.

    The link is created under a temporary name next to its final path and
    renamed over it, so an existing file at link is replaced in one step.
    There is deliberately no fallback to copying.

    Args:
        primary: Existing installed file to link to.
        link: Path of the hard link.

    Returns:
        The link path.

    Raises:
        CrossDeviceLinkError: If primary and link are on different filesystems.
        InstallIOError: If primary is missing or the link cannot be created.
    """
    if not primary.is_file():
        msg = f"Cannot link {link} to {primary}: {primary} is not installed"
        raise InstallIOError(msg)

    directory = ensure_parent(link)
    tmp_path = directory / f".{link.name}.{os.getpid()}.link"
    try:
        if tmp_path.exists() or tmp_path.is_symlink():
            tmp_path.unlink()
        os.link(primary, tmp_path)
        os.replace(tmp_path, link)
    except OSError as e:
        if tmp_path.exists():
            tmp_path.unlink()
        if e.errno == errno.EXDEV:
            msg = f"Cannot link {link} to {primary}: not on the same filesystem"
            raise CrossDeviceLinkError(msg) from e
        msg = f"Failed to link {link} to {primary}: {e}"
        raise InstallIOError(msg) from e

    logger.info("ln -f %s %s", primary, link)
    return link


def remove_file(path: Path) -> bool:
    """Remove an installed file if it exists.

    Args:
        path: File to remove.

    Returns:
        True if the file was removed, False if it was already absent.

    Raises:
        InstallIOError: If the file exists but cannot be removed.
    """
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        msg = f"Failed to remove {path}: {e}"
        raise InstallIOError(msg) from e

    logger.info("rm -f %s", path)
    return True
