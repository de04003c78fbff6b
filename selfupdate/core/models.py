"""Update system data models."""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from selfupdate.core.errors import InstallWarning, UpdateError

DATE_FORMAT = "%Y-%m-%d"
_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
DEFAULT_RELEASE_DATE = date(1970, 1, 1)


@dataclass(frozen=True)
class VersionRecord:
    """One published release: identifier, version token and release date."""

    identifier: str = ""
    version: str = ""
    release_date: date = DEFAULT_RELEASE_DATE
    download_url: str = ""   # Optional explicit archive location from the registry

    def to_dict(self) -> dict:
        data = {
            'id': self.identifier,
            'version': self.version,
            'release_date': self.release_date.strftime(DATE_FORMAT),
        }
        if self.download_url:
            data['download_url'] = self.download_url
        return data

    @classmethod
    def from_dict(cls, data) -> 'VersionRecord':
        """Build a record from its JSON form.

        Raises ValueError when the payload does not match the schema:
        missing keys, non-string fields or a date not in YYYY-MM-DD form.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

        try:
            identifier = data['id']
            version = data['version']
            raw_date = data['release_date']
        except KeyError as e:
            raise ValueError(f"Missing field {e.args[0]!r}") from e

        download_url = data.get('download_url') or ""
        for name, value in (('id', identifier), ('version', version),
                            ('release_date', raw_date),
                            ('download_url', download_url)):
            if not isinstance(value, str):
                raise ValueError(f"Field {name!r} must be a string")

        # strptime alone would also take '2024-1-1'
        if not _DATE_RE.fullmatch(raw_date):
            raise ValueError(f"release_date {raw_date!r} is not in YYYY-MM-DD form")
        release_date = datetime.strptime(raw_date, DATE_FORMAT).date()
        return cls(identifier=identifier, version=version,
                   release_date=release_date, download_url=download_url)


class UpdateState(Enum):
    IDLE = "idle"
    LOCAL_LOADED = "local_loaded"
    REMOTE_CHECKED = "remote_checked"
    UP_TO_DATE = "up_to_date"
    DOWNLOADING = "downloading"
    EXTRACTED = "extracted"
    INSTALLED = "installed"
    RECORDED = "recorded"
    NOTIFIED = "notified"
    DONE = "done"
    FAILED = "failed"


class FailureStage(Enum):
    LOCAL_LOAD = "local_load"
    REMOTE_FETCH = "remote_fetch"
    COMPARE = "compare"
    DOWNLOAD_OR_EXTRACT = "download_or_extract"
    INSTALL = "install"
    RECORD_WRITE = "record_write"


@dataclass
class InstallReport:
    """Outcome of moving staged entries into the destination."""

    moved: list[str] = field(default_factory=list)
    failures: list[InstallWarning] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failures


@dataclass
class UpdateResult:
    """Final outcome of one orchestrator run."""

    state: UpdateState
    local: VersionRecord | None = None
    remote: VersionRecord | None = None
    failed_stage: FailureStage | None = None
    error: UpdateError | None = None
    install_report: InstallReport | None = None

    @property
    def ok(self) -> bool:
        return self.state is UpdateState.DONE

    @property
    def updated(self) -> bool:
        """True when a new version was installed and recorded."""
        return self.ok and self.install_report is not None

    def message(self) -> str:
        if self.state is UpdateState.FAILED:
            stage = self.failed_stage.value if self.failed_stage else "unknown"
            detail = self.error.message if self.error else "no details"
            return f"Update failed at {stage}: {detail}"
        if not self.updated:
            return "Application is up to date."
        text = f"Update completed: {self.local.version or '(none)'} -> {self.remote.version}"
        if self.install_report.failures:
            text += f" ({len(self.install_report.failures)} entries could not be installed)"
        return text
