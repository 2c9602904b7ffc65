"""Pytest configuration and fixtures for integration tests.

Provides a connected file-backed store in a temporary directory and a
snapshot file of raw provider records.
"""

from pathlib import Path
from typing import Generator

import pytest

from src.store.yaml_store import FileResourceStore
from tests.fixtures.resource_fixtures import raw_vm, raw_webapp, snapshot_document


@pytest.fixture
def store_dir(tmp_path: Path) -> Path:
    return tmp_path / "store"


@pytest.fixture
def file_store(store_dir: Path) -> Generator[FileResourceStore, None, None]:
    """Connected FileResourceStore, closed after the test."""
    with FileResourceStore(store_dir) as store:
        yield store


@pytest.fixture
def snapshot_file(tmp_path: Path) -> Path:
    """Snapshot with two VMs and a web app."""
    path = tmp_path / "azure-raw.json"
    path.write_text(
        snapshot_document([
            raw_vm("vm-web-01"),
            raw_vm("vm-web-02", power_state="VM deallocated"),
            raw_webapp("app-portal"),
        ]),
        encoding='utf-8',
    )
    return path
