"""Archive fetcher: downloads the packaged update for a version."""

import io
import logging
from typing import Callable
from urllib.error import URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from selfupdate.branding import AppBranding
from selfupdate.core.errors import DownloadError
from selfupdate.core.models import VersionRecord

logger = logging.getLogger(__name__)

# Buffer size for streaming downloads (80 KB)
DOWNLOAD_BUFFER = 81920


class ArchiveFetcher:
    """Downloads ``<base_url><identifier><extension>`` into memory."""

    def __init__(self, base_url: str, extension: str = '.zip', timeout: float = 120,
                 progress_callback: Callable[[int], None] | None = None):
        self.base_url = base_url
        self.extension = extension
        self.timeout = timeout
        self.progress_callback = progress_callback

    def archive_url(self, record: VersionRecord) -> str:
        """URL of the archive for ``record``; an explicit download_url wins."""
        if record.download_url:
            return record.download_url
        return f"{self.base_url}{quote(record.identifier, safe='')}{self.extension}"

    def download(self, record: VersionRecord) -> bytes:
        """Fetch the full archive body. Raises DownloadError on any failure."""
        url = self.archive_url(record)
        logger.info("Downloading %s %s from %s", record.identifier, record.version, url)

        req = Request(url, headers={'User-Agent': AppBranding.user_agent()})
        buf = io.BytesIO()
        try:
            with urlopen(req, timeout=self.timeout) as resp:
                status = getattr(resp, 'status', 200)
                if status != 200:
                    raise DownloadError(f"HTTP {status} from {url}")
                total = int(resp.headers.get('Content-Length') or 0)
                downloaded = 0
                while True:
                    chunk = resp.read(DOWNLOAD_BUFFER)
                    if not chunk:
                        break
                    buf.write(chunk)
                    downloaded += len(chunk)
                    if total > 0 and self.progress_callback:
                        self.progress_callback(min(int(downloaded * 100 / total), 100))
        except (URLError, OSError, ValueError) as e:
            raise DownloadError(f"Download failed: {e}") from e

        data = buf.getvalue()
        if not data:
            raise DownloadError(f"Empty archive from {url}")
        logger.info("Downloaded %d bytes", len(data))
        return data
