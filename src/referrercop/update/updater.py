"""Remote blacklist updates.

The update server publishes the standard blacklist as a gzip file next to a
file holding the SHA-1 of the uncompressed list. A new list is downloaded
only when that hash differs from the local blacklist's fingerprint.
"""

import gzip
import logging
import tempfile
from pathlib import Path
from typing import Optional

import httpx

from referrercop.core.exceptions import UpdateError


logger = logging.getLogger(__name__)


class BlacklistUpdater:
    """Check for and download blacklist updates."""

    def __init__(
        self,
        update_url: str,
        sha1_url: str,
        *,
        client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ):
        """Initialize updater.

        Args:
            update_url: URL of the gzip-compressed blacklist
            sha1_url: URL of the blacklist's SHA-1 hex digest
            client: HTTP client to use (creates one per request if None)
            timeout: Request timeout in seconds for created clients
        """
        self.update_url = update_url
        self.sha1_url = sha1_url
        self.client = client
        self.timeout = timeout

    def _get(self, url: str) -> httpx.Response:
        """GET a URL and fail on non-2xx responses.

        Raises:
            UpdateError: If the request fails
        """
        try:
            if self.client is not None:
                response = self.client.get(url, follow_redirects=True)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.get(url, follow_redirects=True)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            raise UpdateError(
                f"Update server error for {url}: {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise UpdateError(f"Unable to connect to update server: {e}") from e

    def fetch_remote_fingerprint(self) -> str:
        """Fetch the SHA-1 of the latest published blacklist."""
        fingerprint = self._get(self.sha1_url).text.strip()
        if not fingerprint:
            raise UpdateError(f"Empty checksum from {self.sha1_url}")
        # Some servers publish "<hash>  <filename>"
        return fingerprint.split()[0].lower()

    def is_update_available(self, local_fingerprint: Optional[str]) -> bool:
        """Compare the published hash with the local one.

        Args:
            local_fingerprint: SHA-1 of the local blacklist, or None if absent

        Returns:
            True if the remote list differs from the local one
        """
        if local_fingerprint is None:
            return True
        return self.fetch_remote_fingerprint() != local_fingerprint.strip().lower()

    def download(self, destination: Path) -> Path:
        """Download, decompress, and install the blacklist.

        The file is written next to the destination and renamed into place.

        Args:
            destination: Path of the local blacklist

        Returns:
            The destination path

        Raises:
            UpdateError: If download, decompression, or writing fails
        """
        payload = self._get(self.update_url).content

        try:
            data = gzip.decompress(payload)
        except (OSError, EOFError) as e:
            raise UpdateError(f"Downloaded blacklist is not valid gzip data: {e}") from e

        tmp_path: Optional[Path] = None
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "wb", delete=False, dir=destination.parent, prefix=f".{destination.name}-"
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(data)
            tmp_path.replace(destination)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise UpdateError(f"Failed to write blacklist {destination}: {e}") from e

        return destination

    def update(self, destination: Path, local_fingerprint: Optional[str]) -> bool:
        """Download a new blacklist if the published one differs.

        Args:
            destination: Path of the local blacklist
            local_fingerprint: SHA-1 of the local blacklist, or None if absent

        Returns:
            True if a new blacklist was written
        """
        if not self.is_update_available(local_fingerprint):
            logger.info("No update necessary.")
            return False

        logger.info(f"Downloading new blacklist to {destination}")
        self.download(destination)
        return True
