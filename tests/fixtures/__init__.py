"""Test fixtures for resource reconciliation tests.

Provides:
- Builders for live and stored resources
- Raw provider records and snapshot documents
"""

from .resource_fixtures import (
    SAMPLE_SUBSCRIPTION,
    STORED_AT,
    make_resource,
    make_stored,
    raw_account,
    raw_vm,
    raw_webapp,
    sample_repository,
    snapshot_document,
)

__all__ = [
    "SAMPLE_SUBSCRIPTION",
    "STORED_AT",
    "make_resource",
    "make_stored",
    "raw_account",
    "raw_vm",
    "raw_webapp",
    "sample_repository",
    "snapshot_document",
]
