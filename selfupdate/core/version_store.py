"""Local record of the installed version: persistence via JSON."""

import json
import logging
import os

from selfupdate.core.errors import LocalLoadError, RecordWriteError
from selfupdate.core.models import VersionRecord

logger = logging.getLogger(__name__)

DEFAULT_VERSION_FILE = 'localVersion.json'


class LocalVersionStore:
    """Reads and overwrites the single JSON file describing what is installed."""

    def __init__(self, path: str = DEFAULT_VERSION_FILE):
        self.path = path

    def load(self, identifier: str = "") -> VersionRecord:
        """Load the installed version. Returns a default record if nothing is installed.

        The default record has an empty version, so any published version
        compares as different from it.
        """
        if not os.path.isfile(self.path):
            logger.info("No local version file at %s, treating %r as not installed",
                        self.path, identifier)
            return VersionRecord()

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            record = VersionRecord.from_dict(data)
        except (OSError, ValueError) as e:
            raise LocalLoadError(f"Cannot read {self.path}: {e}") from e

        if identifier and record.identifier and record.identifier != identifier:
            logger.warning("Local version file describes %r, expected %r",
                           record.identifier, identifier)
        logger.info("Loaded local version %s from %s", record.version, self.path)
        return record

    def save(self, record: VersionRecord):
        """Overwrite the local version file with ``record``.

        Writes to a sibling temp file first and swaps it in with os.replace,
        so a failed write leaves the previous record intact.
        """
        tmp_path = self.path + '.tmp'
        try:
            parent = os.path.dirname(self.path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(record.to_dict(), f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            try:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
            except OSError:
                pass
            raise RecordWriteError(f"Cannot write {self.path}: {e}") from e
        logger.info("Saved local version %s to %s", record.version, self.path)
