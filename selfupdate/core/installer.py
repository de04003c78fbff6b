"""Installer: moves staged entries into the destination directory."""

import errno
import logging
import os
import shutil

from selfupdate.core.errors import InstallWarning
from selfupdate.core.models import InstallReport

logger = logging.getLogger(__name__)


class Installer:
    """Best-effort mover: one rename per top-level staged entry.

    A failed entry is logged and recorded in the report; the remaining
    entries are still moved, so the destination can end up mixing old
    and new files.
    """

    def install(self, staging_dir: str, destination_dir: str) -> InstallReport:
        report = InstallReport()
        names = sorted(os.listdir(staging_dir))

        try:
            os.makedirs(destination_dir, exist_ok=True)
        except OSError as e:
            logger.error("Cannot create destination %s: %s", destination_dir, e)
            report.failures.extend(InstallWarning(name, str(e)) for name in names)
            return report

        for name in names:
            src = os.path.join(staging_dir, name)
            dest = os.path.join(destination_dir, name)
            try:
                self._move(src, dest)
                report.moved.append(name)
            except OSError as e:
                logger.warning("Failed to install %s: %s", name, e)
                report.failures.append(InstallWarning(name, str(e)))

        logger.info("Installed %d entries into %s, %d failed",
                    len(report.moved), destination_dir, len(report.failures))
        return report

    @staticmethod
    def _move(src: str, dest: str):
        # os.replace overwrites files atomically but cannot replace a
        # non-empty directory or swap a file for a directory
        if os.path.lexists(dest):
            if os.path.isdir(dest) and not os.path.islink(dest):
                shutil.rmtree(dest)
            elif os.path.isdir(src):
                os.remove(dest)

        try:
            os.replace(src, dest)
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise
            # Staging and destination on different filesystems
            shutil.move(src, dest)
