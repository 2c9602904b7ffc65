"""Data models for cloud resources and reconciliation runs."""

from src.models.resource import (
    Environment,
    GitRepository,
    Resource,
    ResourceStatus,
    ResourceType,
    Sku,
    StoredResource,
    SyncSource,
)
from src.models.sync_models import (
    ComparisonResult,
    Conflict,
    FieldDifference,
    PlanStats,
    ProgressEvent,
    Resolution,
    ResolutionMap,
    SyncAction,
    SyncAPIResponse,
    SyncHistory,
    SyncOperation,
    SyncOptions,
    SyncPreview,
    SyncResult,
    SyncStats,
    SyncStatus,
    SyncType,
    TrackedField,
    TriggerSource,
)

__all__ = [
    'Environment', 'GitRepository', 'Resource', 'ResourceStatus', 'ResourceType',
    'Sku', 'StoredResource', 'SyncSource',
    'ComparisonResult', 'Conflict', 'FieldDifference', 'PlanStats', 'ProgressEvent',
    'Resolution', 'ResolutionMap', 'SyncAction', 'SyncAPIResponse', 'SyncHistory',
    'SyncOperation', 'SyncOptions', 'SyncPreview', 'SyncResult', 'SyncStats',
    'SyncStatus', 'SyncType', 'TrackedField', 'TriggerSource',
]
