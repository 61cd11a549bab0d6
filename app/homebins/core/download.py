"""Downloading artifacts.

Downloads produce the complete artifact in memory. Nothing is written to
disk here: an interrupted download leaves nothing behind, and bytes only
reach the filesystem after checksum verification.
"""

import logging
from typing import Protocol

import httpx

from homebins import __version__
from homebins.core.config import DEFAULT_DOWNLOAD_TIMEOUT
from homebins.core.errors import HomebinsError

logger = logging.getLogger(__name__)

USER_AGENT = f"homebins/{__version__}"


class DownloadError(HomebinsError):
    """Raised when an artifact cannot be downloaded."""


class Downloader(Protocol):
    """Capability to fetch the full content of a URL."""

    def fetch(self, url: str) -> bytes: ...


class HttpDownloader:
    """Downloads artifacts over HTTP(S) with httpx.

    Redirects are followed, since release assets are usually served from a
    CDN behind a redirect.

    Example:
        >>> downloader = HttpDownloader(timeout=60)
        >>> data = downloader.fetch("https://example.com/tool.tar.gz")
    """

    def __init__(self, timeout: float = DEFAULT_DOWNLOAD_TIMEOUT) -> None:
        """Initialize the downloader.

        Args:
            timeout: Timeout in seconds for connecting and for each read.
        """
        self._timeout = timeout

    def fetch(self, url: str) -> bytes:
        """Download the artifact at url.

        Args:
            url: URL of the artifact.

        Returns:
            The complete response body.

        Raises:
            DownloadError: On HTTP errors, timeouts and transport failures.
        """
        logger.info("Downloading %s", url)
        try:
            with httpx.Client(
                follow_redirects=True,
                timeout=self._timeout,
                headers={"User-Agent": USER_AGENT},
            ) as client:
                response = client.get(url)
                response.raise_for_status()
        except httpx.TimeoutException as e:
            raise DownloadError(f"Timeout downloading {url}") from e
        except httpx.HTTPStatusError as e:
            raise DownloadError(
                f"Failed to download {url}: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise DownloadError(f"Failed to download {url}: {e}") from e

        logger.debug("Downloaded %d bytes from %s", len(response.content), url)
        return response.content
