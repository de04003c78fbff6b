"""
Pytest fixtures for selfupdate tests.

Network collaborators are replaced by in-memory fakes; archives are built
on the fly with zipfile.
"""

import io
import json
import zipfile
from datetime import date
from unittest.mock import MagicMock

import pytest

from selfupdate.core.errors import DownloadError
from selfupdate.core.models import VersionRecord


# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def make_zip(entries: dict) -> bytes:
    """Build a zip archive in memory.

    Keys are entry names; a value of None makes a directory entry.
    """
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, 'w', zipfile.ZIP_DEFLATED) as zf:
        for name, content in entries.items():
            if content is None:
                zf.writestr(zipfile.ZipInfo(name), b'')
            else:
                zf.writestr(name, content)
    return buf.getvalue()


def tree(root) -> dict:
    """Map of relative POSIX path -> file bytes (directories map to None)."""
    result = {}
    for path in sorted(root.rglob('*')):
        rel = path.relative_to(root).as_posix()
        result[rel] = None if path.is_dir() else path.read_bytes()
    return result


def http_response(body: bytes, status: int = 200):
    """A MagicMock usable as the context manager urlopen() returns."""
    resp = MagicMock()
    resp.status = status
    resp.headers = {'Content-Length': str(len(body))}
    resp.read.side_effect = [body, b''] if body else [b'']
    resp.__enter__ = MagicMock(return_value=resp)
    resp.__exit__ = MagicMock(return_value=False)
    return resp


class FakeLookup:
    """Stands in for RemoteVersionLookup."""

    def __init__(self, record: VersionRecord | None):
        self.record = record
        self.calls = []

    def fetch(self, identifier):
        self.calls.append(identifier)
        return self.record


class FakeFetcher:
    """Stands in for ArchiveFetcher; raises DownloadError when fail=True."""

    def __init__(self, archive: bytes = b'', fail: bool = False):
        self.archive = archive
        self.fail = fail
        self.calls = []

    def download(self, record):
        self.calls.append(record)
        if self.fail:
            raise DownloadError("connection reset")
        return self.archive


# ═══════════════════════════════════════════════════════════════════════════════
# Record Fixtures
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def local_record():
    return VersionRecord('app', '1.0.0', date(2023, 7, 15))


@pytest.fixture
def remote_record():
    return VersionRecord('app', '1.1.0', date(2024, 1, 1))


@pytest.fixture
def version_file(tmp_path, local_record):
    """Local version file already holding 1.0.0."""
    path = tmp_path / 'localVersion.json'
    path.write_text(json.dumps(local_record.to_dict()), encoding='utf-8')
    return path
