"""
Tests for the version record and run result models.
"""

import dataclasses
from datetime import date

import pytest

from selfupdate.core.errors import InstallWarning, RemoteUnavailable
from selfupdate.core.models import (
    FailureStage, InstallReport, UpdateResult, UpdateState, VersionRecord,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Test VersionRecord
# ═══════════════════════════════════════════════════════════════════════════════


class TestVersionRecord:
    """Tests for VersionRecord (de)serialization."""

    def test_default_record_is_empty(self):
        record = VersionRecord()
        assert record.identifier == ""
        assert record.version == ""
        assert record.release_date == date(1970, 1, 1)

    def test_to_dict_uses_wire_keys(self):
        record = VersionRecord('app', '1.1.0', date(2024, 1, 1))
        assert record.to_dict() == {
            'id': 'app', 'version': '1.1.0', 'release_date': '2024-01-01',
        }

    def test_to_dict_includes_download_url_when_set(self):
        record = VersionRecord('app', '2.0', date(2024, 3, 9), 'https://cdn/app.zip')
        assert record.to_dict()['download_url'] == 'https://cdn/app.zip'

    @pytest.mark.parametrize('record', [
        VersionRecord('app', '1.0.0', date(2023, 7, 15)),
        VersionRecord('', '', date(1970, 1, 1)),
        VersionRecord('tools/cli', 'build-4711', date(2000, 2, 29), 'https://x/y.zip'),
    ])
    def test_round_trip(self, record):
        assert VersionRecord.from_dict(record.to_dict()) == record

    def test_from_dict_ignores_unknown_keys(self):
        record = VersionRecord.from_dict({
            'id': 'app', 'version': '1', 'release_date': '2024-01-01', 'extra': 1,
        })
        assert record == VersionRecord('app', '1', date(2024, 1, 1))

    @pytest.mark.parametrize('payload', [
        {'version': '1', 'release_date': '2024-01-01'},
        {'id': 'app', 'release_date': '2024-01-01'},
        {'id': 'app', 'version': '1'},
        {'id': 'app', 'version': 1, 'release_date': '2024-01-01'},
        {'id': 'app', 'version': '1', 'release_date': '01/01/2024'},
        {'id': 'app', 'version': '1', 'release_date': '2024-13-01'},
        {'id': 'app', 'version': '1', 'release_date': '2024-1-1'},
        {'id': 'app', 'version': '1', 'release_date': '20240101'},
        {'id': 'app', 'version': '1', 'release_date': '2024-01-01T00:00:00'},
        ['app', '1', '2024-01-01'],
        None,
    ])
    def test_from_dict_rejects_schema_mismatch(self, payload):
        with pytest.raises(ValueError):
            VersionRecord.from_dict(payload)

    def test_record_is_immutable(self):
        record = VersionRecord('app', '1.0.0')
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.version = '2.0.0'


# ═══════════════════════════════════════════════════════════════════════════════
# Test InstallReport / UpdateResult
# ═══════════════════════════════════════════════════════════════════════════════


class TestUpdateResult:
    """Tests for result flags and messages."""

    def test_install_report_complete(self):
        assert InstallReport(moved=['a']).complete
        assert not InstallReport(failures=[InstallWarning('a', 'busy')]).complete

    def test_up_to_date_result(self):
        record = VersionRecord('app', '1.0.0')
        result = UpdateResult(UpdateState.DONE, local=record, remote=record)
        assert result.ok
        assert not result.updated
        assert result.message() == "Application is up to date."

    def test_updated_result_message(self):
        result = UpdateResult(
            UpdateState.DONE,
            local=VersionRecord('app', '1.0.0'),
            remote=VersionRecord('app', '1.1.0'),
            install_report=InstallReport(moved=['readme.txt']),
        )
        assert result.updated
        assert result.message() == "Update completed: 1.0.0 -> 1.1.0"

    def test_updated_result_mentions_install_failures(self):
        result = UpdateResult(
            UpdateState.DONE,
            local=VersionRecord(),
            remote=VersionRecord('app', '1.1.0'),
            install_report=InstallReport(failures=[InstallWarning('bin', 'busy')]),
        )
        assert "(none) -> 1.1.0" in result.message()
        assert "1 entries could not be installed" in result.message()

    def test_failed_result_message_is_stage_tagged(self):
        result = UpdateResult(
            UpdateState.FAILED,
            failed_stage=FailureStage.REMOTE_FETCH,
            error=RemoteUnavailable("No version information for 'app'"),
        )
        assert not result.ok
        assert result.message().startswith("Update failed at remote_fetch:")
