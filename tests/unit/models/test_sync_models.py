"""Unit tests for models.sync_models module."""

import pytest

from src.models.sync_models import (
    Conflict,
    Resolution,
    SyncAPIResponse,
    SyncHistory,
    SyncResult,
    SyncStats,
    SyncStatus,
    SyncType,
    TrackedField,
    TriggerSource,
    utc_now_iso,
)
from src.models.resource import ResourceStatus


class TestResolutionParse:
    """Test cases for Resolution.parse."""

    @pytest.mark.parametrize("value,expected", [
        ("use-live", Resolution.USE_LIVE),
        ("use-azure", Resolution.USE_LIVE),
        ("USE-DATABASE", Resolution.USE_STORED),
        (" manual ", Resolution.MANUAL),
        (Resolution.USE_STORED, Resolution.USE_STORED),
    ])
    def test_known_values(self, value, expected):
        """parse accepts values, aliases and members."""
        assert Resolution.parse(value) is expected

    def test_unknown_value(self):
        """parse rejects unknown values."""
        with pytest.raises(ValueError, match="Unknown resolution"):
            Resolution.parse("merge")


class TestTrackedFieldParse:
    """Test cases for TrackedField.parse."""

    def test_value_and_name(self):
        """Fields parse from camelCase values and enum names."""
        assert TrackedField.parse("resourceGroup") is TrackedField.RESOURCE_GROUP
        assert TrackedField.parse("git_repository") is TrackedField.GIT_REPOSITORY

    def test_store_metadata_not_tracked(self):
        """Persistence metadata is not a tracked field."""
        with pytest.raises(ValueError):
            TrackedField.parse("updatedInStoreAt")


class TestRecords:
    """Test cases for record serialization."""

    def test_conflict_to_dict_plain_values(self):
        """Enum values are rendered as plain strings."""
        conflict = Conflict("vm1", TrackedField.STATUS, ResourceStatus.RUNNING, ResourceStatus.STOPPED)

        assert conflict.to_dict() == {
            'resourceName': "vm1",
            'field': "status",
            'liveValue': "running",
            'storedValue': "stopped",
        }

    def test_history_round_trip(self):
        """SyncHistory survives to_dict/from_dict."""
        record = SyncHistory(
            id="sync-1",
            date="2024-03-01",
            timestamp="2024-03-01T12:00:00.000Z",
            sync_type=SyncType.CONFLICT_RESOLUTION,
            source=TriggerSource.UI_BUTTON,
            status=SyncStatus.PARTIAL,
            stats=SyncStats(resources_processed=2, resources_created=1),
            user_id="ops",
            errors=["create vm2: disk full"],
        )

        assert SyncHistory.from_dict(record.to_dict()) == record

    def test_api_response_from_result(self):
        """The response envelope summarizes a run."""
        result = SyncResult(
            success=False,
            status=SyncStatus.PARTIAL,
            stats=SyncStats(resources_processed=3, resources_created=1, resources_skipped=1),
            history_id="sync-1",
            errors=["a", "b"],
        )

        data = SyncAPIResponse.from_result(result).to_dict()

        assert data['success'] is False
        assert data['data']['summary']['totalResources'] == 3
        assert data['data']['historyId'] == "sync-1"
        assert data['error'] == "a; b"

    def test_api_response_from_error(self):
        """Errors produce a failed envelope without data."""
        data = SyncAPIResponse.from_error("provider unavailable").to_dict()

        assert data['success'] is False
        assert 'data' not in data
        assert data['error'] == "provider unavailable"

    def test_utc_now_iso_format(self):
        """Timestamps are ISO 8601 with millisecond precision and a Z suffix."""
        value = utc_now_iso()

        assert len(value) == len("2024-03-01T12:00:00.000Z")
        assert value.endswith('Z')
