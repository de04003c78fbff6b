"""Remote version lookup: asks the registry for the latest published record."""

import json
import logging
from urllib.error import URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from selfupdate.branding import AppBranding
from selfupdate.core.models import VersionRecord

logger = logging.getLogger(__name__)


class RemoteVersionLookup:
    """Blocking HTTP client for ``GET <base_url>/<identifier>``."""

    def __init__(self, base_url: str, timeout: float = 30):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def url_for(self, identifier: str) -> str:
        return f"{self.base_url}/{quote(identifier, safe='')}"

    def fetch(self, identifier: str) -> VersionRecord | None:
        """Return the published record for ``identifier``, or None.

        Network errors, non-200 responses, undecodable bodies and schema
        mismatches all collapse into None; the reason is logged.
        """
        url = self.url_for(identifier)
        req = Request(url, headers={
            'User-Agent': AppBranding.user_agent(),
            'Accept': 'application/json',
        })

        try:
            with urlopen(req, timeout=self.timeout) as resp:
                status = getattr(resp, 'status', 200)
                if status != 200:
                    logger.warning("Version lookup %s returned HTTP %s", url, status)
                    return None
                payload = json.loads(resp.read().decode('utf-8'))
        except (URLError, OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Failed to fetch remote version from %s: %s", url, e)
            return None

        try:
            record = VersionRecord.from_dict(payload)
        except ValueError as e:
            logger.warning("Remote version payload from %s is invalid: %s", url, e)
            return None

        logger.info("Remote version for %s: %s (released %s)",
                    identifier, record.version, record.release_date)
        return record
