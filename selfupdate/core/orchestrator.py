"""Update orchestrator: one linear check → download → extract → install pass.

Architecture:
  Each collaborator (store, lookup, fetcher, extractor, installer) is a
  blocking step with explicit inputs and outputs. The orchestrator owns
  the staging directory and converts stage errors into an UpdateResult
  instead of raising, so a host can decide what to do with a failure.
"""

import logging
import os
import shutil
from typing import Callable

from selfupdate.core.errors import (
    LocalLoadError, RemoteUnavailable, UpdateError, VersionParseError,
    DownloadError, ExtractError, InstallError, RecordWriteError,
)
from selfupdate.core.extractor import ArchiveExtractor
from selfupdate.core.fetcher import ArchiveFetcher
from selfupdate.core.installer import Installer
from selfupdate.core.models import (
    FailureStage, InstallReport, UpdateResult, UpdateState, VersionRecord,
)
from selfupdate.core.policy import ComparisonPolicy, get_policy, is_newer
from selfupdate.core.remote import RemoteVersionLookup
from selfupdate.core.version_store import LocalVersionStore

logger = logging.getLogger(__name__)


class UpdateOrchestrator:
    """Drives a single update attempt for one identifier."""

    def __init__(self, identifier: str,
                 store: LocalVersionStore,
                 lookup: RemoteVersionLookup,
                 fetcher: ArchiveFetcher,
                 staging_dir: str,
                 destination_dir: str,
                 extractor: ArchiveExtractor | None = None,
                 installer: Installer | None = None,
                 policy: ComparisonPolicy = is_newer,
                 strict_install: bool = False,
                 notify: Callable[[str], None] | None = None,
                 status_callback: Callable[[str], None] | None = None):
        self.identifier = identifier
        self.store = store
        self.lookup = lookup
        self.fetcher = fetcher
        self.extractor = extractor or ArchiveExtractor()
        self.installer = installer or Installer()
        self.staging_dir = staging_dir
        self.destination_dir = destination_dir
        self.policy = policy
        self.strict_install = strict_install
        self.notify = notify or print
        self.status_callback = status_callback
        self.state = UpdateState.IDLE

    @classmethod
    def from_settings(cls, settings, **kwargs) -> 'UpdateOrchestrator':
        """Wire the real HTTP and filesystem collaborators from UpdaterSettings."""
        return cls(
            identifier=settings.identifier,
            store=LocalVersionStore(settings.local_version_path),
            lookup=RemoteVersionLookup(settings.remote_base_url,
                                       timeout=settings.request_timeout),
            fetcher=ArchiveFetcher(settings.download_base_url,
                                   extension=settings.archive_extension,
                                   timeout=settings.download_timeout),
            staging_dir=settings.staging_dir,
            destination_dir=settings.destination_dir,
            policy=get_policy(settings.comparison),
            strict_install=settings.strict_install,
            **kwargs,
        )

    # ── Run ──────────────────────────────────────────────────────────

    def run(self) -> UpdateResult:
        """Perform one update check. Never raises for stage errors."""
        self.state = UpdateState.IDLE

        try:
            local = self.store.load(self.identifier)
        except LocalLoadError as e:
            return self._fail(FailureStage.LOCAL_LOAD, e)
        self._advance(UpdateState.LOCAL_LOADED, "Checking for updates...")

        remote = self.lookup.fetch(self.identifier)
        if remote is None:
            return self._fail(
                FailureStage.REMOTE_FETCH,
                RemoteUnavailable(f"No version information for {self.identifier!r}"),
                local,
            )
        self._advance(UpdateState.REMOTE_CHECKED)

        try:
            update_available = self.policy(local, remote)
        except VersionParseError as e:
            return self._fail(FailureStage.COMPARE, e, local, remote)

        if not update_available:
            logger.info("Installed version %s is current", local.version)
            self._advance(UpdateState.UP_TO_DATE, "Application is up to date.")
            self._advance(UpdateState.DONE)
            return UpdateResult(UpdateState.DONE, local=local, remote=remote)

        logger.info("Update available: %r -> %r", local.version, remote.version)
        try:
            return self._apply(local, remote)
        finally:
            self._cleanup_staging()

    # ── Steps ────────────────────────────────────────────────────────

    def _apply(self, local: VersionRecord, remote: VersionRecord) -> UpdateResult:
        self._advance(UpdateState.DOWNLOADING, f"Downloading version {remote.version}...")
        try:
            archive = self.fetcher.download(remote)
            self._prepare_staging()
            self.extractor.extract(archive, self.staging_dir,
                                   archive_name=f"{remote.identifier or 'update'}.zip")
        except (DownloadError, ExtractError) as e:
            return self._fail(FailureStage.DOWNLOAD_OR_EXTRACT, e, local, remote)
        self._advance(UpdateState.EXTRACTED, "Installing update...")

        try:
            report = self.installer.install(self.staging_dir, self.destination_dir)
        except OSError as e:
            return self._fail(FailureStage.INSTALL,
                              InstallError(f"Cannot read staging dir: {e}"), local, remote)
        if not report.complete:
            for warning in report.failures:
                logger.warning("Not installed: %s", warning)
            # Best effort still needs at least one entry in place
            if self.strict_install or not report.moved:
                return self._fail(
                    FailureStage.INSTALL,
                    InstallError(f"{len(report.failures)} entries could not be installed"),
                    local, remote, report,
                )
        self._advance(UpdateState.INSTALLED)

        try:
            self.store.save(remote)
        except RecordWriteError as e:
            return self._fail(FailureStage.RECORD_WRITE, e, local, remote, report)
        self._advance(UpdateState.RECORDED)

        result = UpdateResult(UpdateState.DONE, local=local, remote=remote,
                              install_report=report)
        self.notify(result.message())
        self._advance(UpdateState.NOTIFIED)
        self._advance(UpdateState.DONE)
        return result

    def _prepare_staging(self):
        """Create an empty staging directory, discarding leftovers."""
        try:
            if os.path.exists(self.staging_dir):
                shutil.rmtree(self.staging_dir)
            os.makedirs(self.staging_dir)
        except OSError as e:
            raise ExtractError(f"Cannot prepare staging dir {self.staging_dir}: {e}") from e

    def _cleanup_staging(self):
        if os.path.exists(self.staging_dir):
            shutil.rmtree(self.staging_dir, ignore_errors=True)
            logger.debug("Removed staging dir %s", self.staging_dir)

    # ── State helpers ────────────────────────────────────────────────

    def _advance(self, state: UpdateState, status: str | None = None):
        logger.debug("State %s -> %s", self.state.value, state.value)
        self.state = state
        if status and self.status_callback:
            self.status_callback(status)

    def _fail(self, stage: FailureStage, error: UpdateError,
              local: VersionRecord | None = None,
              remote: VersionRecord | None = None,
              report: InstallReport | None = None) -> UpdateResult:
        self.state = UpdateState.FAILED
        result = UpdateResult(UpdateState.FAILED, local=local, remote=remote,
                              failed_stage=stage, error=error, install_report=report)
        logger.error(result.message())
        return result
