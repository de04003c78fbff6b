"""Updater settings: persistence via JSON."""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, asdict, fields

from selfupdate.core.policy import POLICIES

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = os.path.join(os.path.expanduser('~'), '.selfupdate')
DEFAULT_CONFIG_PATH = os.path.join(DEFAULT_DATA_DIR, 'settings.json')
CONFIG_ENV_VAR = 'SELFUPDATE_CONFIG'


@dataclass
class UpdaterSettings:
    """Everything the orchestrator needs to know about where to look and install."""
    # Identity
    identifier: str = "your_local_version_id_here"

    # Remote endpoints
    remote_base_url: str = "https://example.com/version-control-api"
    download_base_url: str = "https://example.com/download/"
    archive_extension: str = ".zip"
    request_timeout: float = 30         # seconds, version lookup
    download_timeout: float = 120       # seconds, archive download

    # Paths
    local_version_path: str = "localVersion.json"
    staging_dir: str = ""
    destination_dir: str = ""
    log_dir: str = ""

    # Behaviour
    comparison: str = "different"       # 'different' or 'newer'
    strict_install: bool = False        # Fail the run if any entry is not installed

    def __post_init__(self):
        if not self.staging_dir:
            self.staging_dir = os.path.join(tempfile.gettempdir(), 'update_temp')
        if not self.destination_dir:
            self.destination_dir = os.path.join(
                os.path.expanduser('~'), 'Desktop', 'NewVersion'
            )
        if not self.log_dir:
            self.log_dir = os.path.join(DEFAULT_DATA_DIR, 'logs')
        if self.comparison not in POLICIES:
            logger.warning("Unknown comparison %r, using 'different'", self.comparison)
            self.comparison = 'different'

    @staticmethod
    def default_path() -> str:
        return os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH

    @staticmethod
    def load(path: str | None = None) -> 'UpdaterSettings':
        """Load settings from JSON. Returns defaults if file doesn't exist."""
        if path is None:
            path = UpdaterSettings.default_path()

        if not os.path.isfile(path):
            logger.info("No settings file at %s, using defaults", path)
            return UpdaterSettings()

        known = {f.name for f in fields(UpdaterSettings)}
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            settings = UpdaterSettings(**{k: v for k, v in data.items() if k in known})
            logger.info("Loaded settings from %s", path)
            return settings
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning("Failed to load settings: %s", e)
            return UpdaterSettings()

    def save(self, path: str | None = None):
        """Save settings to JSON."""
        if path is None:
            path = UpdaterSettings.default_path()

        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(asdict(self), f, indent=2)
            logger.info("Saved settings to %s", path)
        except OSError as e:
            logger.warning("Failed to save settings: %s", e)

    def apply_overrides(self, **overrides) -> 'UpdaterSettings':
        """Set every field given a non-None value, e.g. from command-line flags."""
        known = {f.name for f in fields(self)}
        for key, value in overrides.items():
            if value is None:
                continue
            if key not in known:
                raise ValueError(f"Unknown setting: {key}")
            setattr(self, key, value)
        return self
