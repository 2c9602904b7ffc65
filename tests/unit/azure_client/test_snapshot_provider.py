"""Unit tests for azure_client.snapshot_provider module."""

import pytest

from src.azure_client.errors import ErrorKind, ProviderError, ResponseValidationError
from src.azure_client.snapshot_provider import SnapshotFileProvider
from tests.fixtures.resource_fixtures import raw_vm, snapshot_document


class TestSnapshotFileProvider:
    """Test cases for SnapshotFileProvider class."""

    def test_fetch_reads_snapshot(self, tmp_path):
        """fetch loads subscription and resources from the file."""
        # Arrange
        path = tmp_path / "snapshot.json"
        path.write_text(snapshot_document([raw_vm("vm1")]), encoding='utf-8')
        provider = SnapshotFileProvider(path)

        # Act
        snapshot = provider.fetch()

        # Assert
        assert snapshot.subscription.subscription_name == "cl-azure-prd-main"
        assert provider.get_resources()[0]['name'] == "vm1"
        assert provider.get_subscription() is snapshot.subscription

    def test_file_read_once(self, tmp_path):
        """The snapshot is cached after the first read."""
        path = tmp_path / "snapshot.json"
        path.write_text(snapshot_document([raw_vm("vm1")]), encoding='utf-8')
        provider = SnapshotFileProvider(path)

        first = provider.fetch()
        path.unlink()

        assert provider.fetch() is first

    def test_missing_file(self, tmp_path):
        """A missing snapshot raises ProviderError."""
        provider = SnapshotFileProvider(tmp_path / "missing.json")

        with pytest.raises(ProviderError) as exc_info:
            provider.fetch()

        assert exc_info.value.kind is ErrorKind.NOT_FOUND

    def test_malformed_file(self, tmp_path):
        """A malformed snapshot raises ResponseValidationError."""
        path = tmp_path / "snapshot.json"
        path.write_text("[]", encoding='utf-8')

        with pytest.raises(ResponseValidationError):
            SnapshotFileProvider(path).fetch()
