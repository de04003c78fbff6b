"""Archive extractor: unpacks a downloaded zip into the staging directory."""

import logging
import os
import re
import shutil
import tempfile
import zipfile
import zlib

import psutil

from selfupdate.core.errors import ExtractError

logger = logging.getLogger(__name__)

COPY_BUFFER = 81920

_DRIVE_RE = re.compile(r'^[A-Za-z]:')

_ARCHIVE_ERRORS = (
    zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error,
    EOFError, NotImplementedError, RuntimeError, OSError,
)


def sanitize_entry_name(name: str) -> str:
    """Turn an archive entry name into a safe relative POSIX path.

    Backslashes count as separators. A leading drive letter or root is
    dropped, and '.', '..' and empty components are removed, so the
    result can never point above the extraction root. Returns '' when
    nothing is left.
    """
    normalized = _DRIVE_RE.sub('', name.replace('\\', '/'))
    parts = [p for p in normalized.split('/') if p not in ('', '.', '..')]
    return '/'.join(parts)


def _is_within(root: str, path: str) -> bool:
    return os.path.commonpath([root, path]) == root


class ArchiveExtractor:
    """Writes archive bytes to disk and unpacks every entry under a root directory."""

    def __init__(self, check_free_space: bool = True):
        self.check_free_space = check_free_space

    def extract(self, archive_bytes: bytes, destination_dir: str,
                archive_name: str = 'update.zip') -> list[str]:
        """Unpack ``archive_bytes`` into ``destination_dir``.

        The archive is first written to a temporary file inside the
        destination and removed once extraction finishes. Returns the
        sanitized relative paths of the files written. Raises ExtractError
        for malformed archives, insufficient space or write failures;
        entries already written stay on disk.
        """
        try:
            os.makedirs(destination_dir, exist_ok=True)
            fd, archive_path = tempfile.mkstemp(
                prefix='.', suffix='-' + os.path.basename(archive_name),
                dir=destination_dir,
            )
            with os.fdopen(fd, 'wb') as f:
                f.write(archive_bytes)
        except OSError as e:
            raise ExtractError(f"Cannot stage archive in {destination_dir}: {e}") from e

        try:
            return self._unpack(archive_path, destination_dir)
        finally:
            try:
                os.remove(archive_path)
            except OSError as e:
                logger.warning("Could not remove staged archive %s: %s", archive_path, e)

    def _unpack(self, archive_path: str, destination_dir: str) -> list[str]:
        root = os.path.realpath(destination_dir)
        written = []

        try:
            with zipfile.ZipFile(archive_path, 'r') as zf:
                infos = zf.infolist()
                if self.check_free_space:
                    self._ensure_space(infos, root)

                for info in infos:
                    rel_path = sanitize_entry_name(info.filename)
                    if not rel_path:
                        logger.warning("Skipping archive entry with empty path: %r", info.filename)
                        continue
                    if rel_path != info.filename.rstrip('/'):
                        logger.warning("Archive entry %r sanitized to %r", info.filename, rel_path)

                    target = os.path.realpath(os.path.join(root, *rel_path.split('/')))
                    if not _is_within(root, target):
                        logger.warning("Skipping archive entry outside destination: %r",
                                       info.filename)
                        continue

                    if info.is_dir() or info.filename.endswith('\\'):
                        os.makedirs(target, exist_ok=True)
                        continue

                    os.makedirs(os.path.dirname(target), exist_ok=True)
                    with zf.open(info) as src, open(target, 'wb') as dst:
                        shutil.copyfileobj(src, dst, COPY_BUFFER)
                    written.append(rel_path)
        except _ARCHIVE_ERRORS as e:
            raise ExtractError(f"Cannot extract archive: {e}") from e

        logger.info("Extracted %d files into %s", len(written), destination_dir)
        return written

    @staticmethod
    def _ensure_space(infos: list[zipfile.ZipInfo], root: str):
        needed = sum(info.file_size for info in infos)
        free = psutil.disk_usage(root).free
        if needed > free:
            raise ExtractError(
                f"Not enough disk space in {root}: "
                f"need {needed // 1024} KB, {free // 1024} KB free"
            )
