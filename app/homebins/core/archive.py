"""Archive extraction for downloaded artifacts.

Artifacts are held in memory after checksum verification; entries are read
straight out of the verified bytes and never touch an intermediate
directory. Supported kinds are tarballs (plain, gzip, bzip2, xz), zip files,
and plain files which form a single implicit entry.
"""

import io
import logging
import posixpath
import tarfile
import zipfile
from collections.abc import Iterable, Iterator
from enum import Enum

from homebins.core.errors import HomebinsError

logger = logging.getLogger(__name__)

# Entry path under which a plain (non-archive) artifact exposes itself.
PLAIN_ENTRY = "."


class ArchiveKind(Enum):
    """Closed set of artifact kinds."""

    TAR = "tar"
    ZIP = "zip"
    PLAIN = "plain"


# Checked in order, so compound suffixes must precede their tails.
_SUFFIXES: tuple[tuple[str, ArchiveKind], ...] = (
    (".tar.gz", ArchiveKind.TAR),
    (".tgz", ArchiveKind.TAR),
    (".tar.bz2", ArchiveKind.TAR),
    (".tbz2", ArchiveKind.TAR),
    (".tar.xz", ArchiveKind.TAR),
    (".txz", ArchiveKind.TAR),
    (".tar", ArchiveKind.TAR),
    (".zip", ArchiveKind.ZIP),
)


class ArchiveError(HomebinsError):
    """Raised when an artifact cannot be read as the expected archive kind."""


class ArchiveEntryNotFoundError(ArchiveError):
    """Raised when requested entries are missing from an archive.

    Attributes:
        missing: Entry paths that were not found.
    """

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Not found in archive: {', '.join(missing)}")


def detect_archive_kind(filename: str, data: bytes | None = None) -> ArchiveKind:
    """Determine the archive kind of an artifact.

    The file name suffix decides first. Without a known suffix the content
    is probed for zip and tar signatures when given.

    Args:
        filename: File name of the artifact, usually the download basename.
        data: Optional artifact content for magic-based detection.

    Returns:
        The detected ArchiveKind, PLAIN if nothing matches.
    """
    lowered = filename.lower()
    for suffix, kind in _SUFFIXES:
        if lowered.endswith(suffix):
            return kind

    if data is not None:
        if zipfile.is_zipfile(io.BytesIO(data)):
            return ArchiveKind.ZIP
        if _looks_like_tar(data):
            return ArchiveKind.TAR

    return ArchiveKind.PLAIN


def _looks_like_tar(data: bytes) -> bool:
    """Check whether data opens as a (possibly compressed) tarball."""
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:*") as tar:
            return tar.next() is not None
    except (tarfile.TarError, EOFError, OSError):
        return False


def normalize_entry_path(path: str) -> str:
    """Normalize an archive member name to a plain relative path.

    Strips leading ``./`` and slashes and collapses redundant separators,
    so ``./dist/rg`` and ``dist//rg`` both address ``dist/rg``.
    """
    stripped = path.lstrip("/")
    while stripped.startswith("./"):
        stripped = stripped[2:]
    if not stripped:
        return stripped
    return posixpath.normpath(stripped)


def list_entries(artifact: bytes, kind: ArchiveKind) -> Iterator[tuple[str, bytes]]:
    """Lazily yield the regular-file entries of an artifact.

    Directories, symlinks and other special members are skipped.

    Args:
        artifact: The verified artifact content.
        kind: Kind of the artifact.

    Yields:
        Tuples of (normalized entry path, entry content).

    Raises:
        ArchiveError: If the artifact is not a readable archive of that kind.
    """
    if kind is ArchiveKind.PLAIN:
        yield PLAIN_ENTRY, artifact
    elif kind is ArchiveKind.TAR:
        yield from _tar_entries(artifact)
    else:
        yield from _zip_entries(artifact)


def _tar_entries(artifact: bytes) -> Iterator[tuple[str, bytes]]:
    try:
        with tarfile.open(fileobj=io.BytesIO(artifact), mode="r:*") as tar:
            for member in tar:
                if not member.isfile():
                    continue
                fileobj = tar.extractfile(member)
                if fileobj is None:
                    continue
                yield normalize_entry_path(member.name), fileobj.read()
    except (tarfile.TarError, EOFError, OSError) as e:
        raise ArchiveError(f"Cannot read tar archive: {e}") from e


def _zip_entries(artifact: bytes) -> Iterator[tuple[str, bytes]]:
    try:
        with zipfile.ZipFile(io.BytesIO(artifact)) as archive:
            for info in archive.infolist():
                if info.is_dir():
                    continue
                yield normalize_entry_path(info.filename), archive.read(info)
    except (zipfile.BadZipFile, OSError) as e:
        raise ArchiveError(f"Cannot read zip archive: {e}") from e


def extract_many(
    artifact: bytes,
    kind: ArchiveKind,
    paths: Iterable[str],
) -> dict[str, bytes]:
    """Extract several entries in a single pass over the archive.

    Either every requested entry is returned or nothing is: missing entries
    are reported together before the caller writes anything.

    Args:
        artifact: The verified artifact content.
        kind: Kind of the artifact.
        paths: Entry paths exactly as declared in the manifest.

    Returns:
        Mapping of each requested path (as given) to its content.

    Raises:
        ArchiveEntryNotFoundError: If any requested entry is missing.
        ArchiveError: If the archive cannot be read.
    """
    wanted: dict[str, list[str]] = {}
    for path in paths:
        wanted.setdefault(normalize_entry_path(path) or PLAIN_ENTRY, []).append(path)

    found: dict[str, bytes] = {}
    for name, content in list_entries(artifact, kind):
        for requested in wanted.get(name, []):
            found[requested] = content
        if len(found) == sum(len(v) for v in wanted.values()):
            break

    missing = [p for requested in wanted.values() for p in requested if p not in found]
    if missing:
        raise ArchiveEntryNotFoundError(missing)

    logger.debug("Extracted %d entries from %s artifact", len(found), kind.value)
    return found


def extract_one(artifact: bytes, kind: ArchiveKind, path: str) -> bytes:
    """Extract a single entry addressed by its in-archive path.

    Raises:
        ArchiveEntryNotFoundError: If the entry does not exist.
        ArchiveError: If the archive cannot be read.
    """
    return extract_many(artifact, kind, [path])[path]
