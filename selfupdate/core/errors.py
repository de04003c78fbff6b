"""Update error kinds, one per orchestrator stage."""

from dataclasses import dataclass


class UpdateError(Exception):
    """Base class for errors that end an update run at a given stage."""

    stage = "update"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"[{self.stage}] {self.message}"


class LocalLoadError(UpdateError):
    """Local version file exists but cannot be read or parsed."""
    stage = "local_load"


class RemoteUnavailable(UpdateError):
    """Remote version lookup returned nothing usable."""
    stage = "remote_fetch"


class VersionParseError(UpdateError):
    """A version token cannot be ordered by the active comparison policy."""
    stage = "compare"


class DownloadError(UpdateError):
    stage = "download_or_extract"


class ExtractError(UpdateError):
    stage = "download_or_extract"


class InstallError(UpdateError):
    """Raised only in strict mode, when some staged entries were not installed."""
    stage = "install"


class RecordWriteError(UpdateError):
    """Local version file cannot be written after a successful install."""
    stage = "record_write"


@dataclass(frozen=True)
class InstallWarning:
    """A single staged entry that could not be moved into place."""

    entry: str
    reason: str

    def __str__(self) -> str:
        return f"{self.entry}: {self.reason}"
