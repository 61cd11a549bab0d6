"""Checksum verification for downloaded artifacts.

Vendors publish different digests: BLAKE2b is preferred, SHA-512, SHA-256
and SHA-1 are accepted for vendors that only publish those. The set of
algorithms is closed; manifest keys naming anything else are ignored.
"""

import hashlib
import logging
from collections.abc import Mapping
from enum import Enum

from homebins.core.errors import HomebinsError

logger = logging.getLogger(__name__)


class ChecksumAlgorithm(Enum):
    """Supported checksum algorithms, strongest first.

    The value is the key used in a manifest's ``checksums`` table.
    """

    B2 = "b2"
    SHA512 = "sha512"
    SHA256 = "sha256"
    SHA1 = "sha1"

    def digest(self, data: bytes) -> str:
        """Compute the hex digest of data with this algorithm."""
        if self is ChecksumAlgorithm.B2:
            return hashlib.blake2b(data, digest_size=64).hexdigest()
        return hashlib.new(self.value, data).hexdigest()


# Iteration order of the enum is the preference order.
SUPPORTED_ALGORITHMS: tuple[str, ...] = tuple(a.value for a in ChecksumAlgorithm)


class ChecksumError(HomebinsError):
    """Base exception for checksum verification failures."""


class ChecksumMissingError(ChecksumError):
    """Raised when no supported checksum is available to verify against."""


class ChecksumMismatchError(ChecksumError):
    """Raised when the computed digest differs from the expected one.

    Attributes:
        algorithm: Algorithm that was checked.
        expected: Digest declared in the manifest.
        actual: Digest computed over the downloaded bytes.
    """

    def __init__(self, algorithm: ChecksumAlgorithm, expected: str, actual: str) -> None:
        self.algorithm = algorithm
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{algorithm.value} checksum mismatch: expected {expected}, got {actual}"
        )


def preferred_algorithm(checksums: Mapping[str, str]) -> ChecksumAlgorithm | None:
    """Pick the strongest supported algorithm with a non-empty digest.

    Args:
        checksums: Mapping of algorithm name to expected hex digest.

    Returns:
        The algorithm to verify with, or None if none is usable.
    """
    for algorithm in ChecksumAlgorithm:
        if checksums.get(algorithm.value, "").strip():
            return algorithm
    return None


def verify_checksums(data: bytes, checksums: Mapping[str, str]) -> ChecksumAlgorithm:
    """Verify data against the strongest supplied digest.

    Passing the strongest supported digest is sufficient; weaker digests are
    not consulted afterwards, and a mismatch on the strongest one is final.

    Args:
        data: The complete downloaded artifact.
        checksums: Mapping of algorithm name to expected hex digest.

    Returns:
        The algorithm that verified the data.

    Raises:
        ChecksumMissingError: If no supported digest is supplied.
        ChecksumMismatchError: If the digest does not match.
    """
    unknown = sorted(set(checksums) - set(SUPPORTED_ALGORITHMS))
    if unknown:
        logger.debug("Ignoring unsupported checksum algorithms: %s", ", ".join(unknown))

    algorithm = preferred_algorithm(checksums)
    if algorithm is None:
        msg = (
            "No supported checksum given, refusing to trust the download "
            f"(supported: {', '.join(SUPPORTED_ALGORITHMS)})"
        )
        raise ChecksumMissingError(msg)

    expected = checksums[algorithm.value].strip().lower()
    actual = algorithm.digest(data)
    if actual != expected:
        raise ChecksumMismatchError(algorithm, expected, actual)

    logger.debug("Verified %d bytes with %s", len(data), algorithm.value)
    return algorithm
