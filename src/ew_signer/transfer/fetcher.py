"""Download of the signed archive."""

from pathlib import Path
from typing import Optional

import httpx

from ew_signer.core.errors import FetchFailed
from ew_signer.utils.logging import get_logger

logger = get_logger(__name__)

UNSIGNED_MARKER = "_not_signed"
SIGNED_MARKER = "_signed"


def derive_output_path(archive_path: Path, output: Optional[Path] = None) -> Path:
    """
    Path of the signed archive for a given unsigned archive.

    A custom output is returned as is. Otherwise the unsigned marker of the
    file stem is swapped for the signed one, next to the archive:
    ``widget_not_signed.rbz`` gives ``widget_signed.rbz``. Applying it to its
    own result gives the same path.
    """
    if output is not None:
        return Path(output)

    archive_path = Path(archive_path)
    stem = archive_path.stem
    if stem.endswith(UNSIGNED_MARKER):
        stem = stem[: -len(UNSIGNED_MARKER)] + SIGNED_MARKER
    elif not stem.endswith(SIGNED_MARKER):
        stem = stem + SIGNED_MARKER

    return archive_path.with_name(f"{stem}{archive_path.suffix}")


class ResultFetcher:
    """Streams the signed archive from the portal's download link."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = 60.0):
        """
        Initialize the fetcher.

        Args:
            client: Client to use, a new one is opened per download otherwise
            timeout: HTTP timeout in seconds
        """
        self.client = client
        self.timeout = timeout
        self.logger = logger.bind(component="result_fetcher")

    async def fetch(self, url: str, destination: Path) -> Path:
        """
        Download ``url`` into ``destination``.

        Returns:
            The destination path

        Raises:
            FetchFailed: On any HTTP or filesystem error
        """
        destination = Path(destination)
        self.logger.info(f"Downloading {url}...", destination=str(destination))

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            if self.client is not None:
                size = await self._stream(self.client, url, destination)
            else:
                async with httpx.AsyncClient(follow_redirects=True, timeout=self.timeout) as client:
                    size = await self._stream(client, url, destination)
        except httpx.HTTPError as e:
            self.logger.error("Download failed", url=url, error=str(e))
            raise FetchFailed(url, str(e) or type(e).__name__) from e
        except OSError as e:
            self.logger.error("Cannot write download", path=str(destination), error=str(e))
            raise FetchFailed(url, str(e)) from e

        self.logger.info(f'Downloaded to "{destination}"', size=size)
        return destination

    async def _stream(self, client: httpx.AsyncClient, url: str, destination: Path) -> int:
        # Written beside the destination and moved over it once complete
        partial = destination.with_name(f"{destination.name}.part")
        size = 0
        try:
            async with client.stream("GET", url, follow_redirects=True) as response:
                response.raise_for_status()
                with partial.open("wb") as handle:
                    async for chunk in response.aiter_bytes():
                        handle.write(chunk)
                        size += len(chunk)
            partial.replace(destination)
        finally:
            partial.unlink(missing_ok=True)
        return size
