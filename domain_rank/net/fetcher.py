"""Ranking archive fetch with freshness gate, timeouts, and streaming."""
from __future__ import annotations
import httpx
import os
import time
import tempfile
import logging
from pathlib import Path
from typing import Optional, Tuple

from ..config import Settings, get_settings
from ..exceptions import FetchFailure

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def _timeout(seconds: float) -> httpx.Timeout:
    return httpx.Timeout(seconds, connect=min(seconds, 10.0))


class SourceFetcher:
    """
    Keeps a local copy of the remote ranking archive no older than the
    freshness window. The file's mtime is the only freshness signal.
    """

    def __init__(self, settings: Optional[Settings] = None,
                 client: Optional[httpx.Client] = None):
        """
        Args:
            settings: Source URL, cache location and timeouts (defaults to get_settings())
            client: HTTP client to use; one is created per download when omitted
        """
        self.settings = settings or get_settings()
        self.client = client
        self.url = self.settings.RANK_SOURCE_URL
        self.path = self.settings.cache_path
        self.max_age = self.settings.RANK_FRESHNESS_DAYS * SECONDS_PER_DAY

    def is_fresh(self, now: Optional[float] = None) -> bool:
        """Check whether the cached archive exists, is readable and within the window."""
        if not self.path.is_file() or not os.access(self.path, os.R_OK):
            return False
        if now is None:
            now = time.time()
        try:
            mtime = self.path.stat().st_mtime
        except OSError:
            return False
        return mtime >= now - self.max_age

    def ensure_local_copy(self) -> Tuple[Path, bool]:
        """Return the cached archive path, downloading it first when stale or missing.

        Returns:
            (path, downloaded) tuple

        Raises:
            FetchFailure: If the download or the local write fails
        """
        if self.is_fresh():
            logger.debug(f"Reusing cached ranking archive {self.path}")
            return self.path, False
        self.download()
        return self.path, True

    def download(self) -> Path:
        """Stream the remote archive into the cache path.

        The payload is written to a temporary file next to the target and
        moved into place only once complete; a failed transfer leaves no
        partial file behind.

        Raises:
            FetchFailure: If the remote resource cannot be read or the file cannot be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".tmp.")
        except OSError as e:
            raise FetchFailure(f"Cannot write cache directory {self.path.parent}: {e}", url=self.url) from e

        logger.info(f"Downloading ranking archive from {self.url}")
        client = self.client or httpx.Client(follow_redirects=True)
        size = 0
        try:
            with os.fdopen(fd, "wb") as f:
                with client.stream("GET", self.url,
                                   timeout=_timeout(self.settings.HTTP_TIMEOUT_SECONDS)) as r:
                    r.raise_for_status()
                    for chunk in r.iter_bytes(self.settings.DOWNLOAD_CHUNK_BYTES):
                        f.write(chunk)
                        size += len(chunk)
            os.replace(tmp, self.path)
        except httpx.HTTPStatusError as e:
            raise FetchFailure(f"HTTP {e.response.status_code} fetching {self.url}",
                               url=self.url, status_code=e.response.status_code) from e
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as e:
            raise FetchFailure(f"Failed to fetch {self.url}: {e}", url=self.url) from e
        except OSError as e:
            raise FetchFailure(f"Failed to write {self.path}: {e}", url=self.url) from e
        finally:
            if os.path.exists(tmp):
                os.remove(tmp)
            if self.client is None:
                client.close()

        logger.info(f"Saved ranking archive to {self.path} ({size} bytes)")
        return self.path
