"""Data models for reconciliation runs.

This module defines the records exchanged between the comparator, the
planner, the resolver and the orchestrator, plus the run record appended
to the sync history. All models use dataclasses, following the patterns
established in src/models/resource.py.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from src.models.resource import SyncSource


class SyncOperation(Enum):
    """Action planned for one resource in one run."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    SKIP = "skip"


class Resolution(Enum):
    """Authority chosen for a conflicting field.

    ``use-azure`` and ``use-database`` are accepted as aliases of
    ``use-live`` and ``use-stored`` when parsing user input.
    """

    USE_LIVE = "use-live"
    USE_STORED = "use-stored"
    MANUAL = "manual"

    @classmethod
    def parse(cls, value: Any) -> 'Resolution':
        """Parse a resolution from user input.

        Raises:
            ValueError: If the value is not a known resolution or alias
        """
        if isinstance(value, Resolution):
            return value
        normalized = str(value).strip().lower()
        normalized = _RESOLUTION_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown resolution '{value}'")


_RESOLUTION_ALIASES = {
    'use-azure': 'use-live',
    'use-database': 'use-stored',
}


class TrackedField(Enum):
    """Closed set of business fields compared between live and stored.

    Order of declaration is the order differences are reported in.
    Store-only metadata (timestamps, sync source) is never tracked.
    """

    NAME = "name"
    TYPE = "type"
    RESOURCE_GROUP = "resourceGroup"
    LOCATION = "location"
    SUBSCRIPTION = "subscription"
    STATUS = "status"
    ENVIRONMENT = "environment"
    CREATED_DATE = "createdDate"
    GIT_REPOSITORY = "gitRepository"

    @classmethod
    def parse(cls, value: Any) -> 'TrackedField':
        """Parse a field identifier (camelCase value or enum name).

        Raises:
            ValueError: If the value does not name a tracked field
        """
        if isinstance(value, TrackedField):
            return value
        text = str(value).strip()
        for member in cls:
            if text == member.value or text.upper() == member.name:
                return member
        raise ValueError(f"Unknown tracked field '{value}'")


# resource name -> field -> chosen resolution
ResolutionMap = Dict[str, Dict[TrackedField, Resolution]]


class SyncStatus(Enum):
    """Overall outcome of a run."""

    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


class SyncType(Enum):
    """Kind of run recorded in the history."""

    FULL = "full"
    CONFLICT_RESOLUTION = "conflict-resolution"


class TriggerSource(Enum):
    """Surface that triggered a run."""

    UI_BUTTON = "ui-button"
    API = "api"
    CLI = "cli"
    SCRIPT = "script"
    SCHEDULED = "scheduled"


@dataclass
class FieldDifference:
    """A single tracked field that differs between live and stored."""
    field: TrackedField
    live_value: Any
    stored_value: Any


@dataclass
class ComparisonResult:
    """Outcome of comparing one live resource with its stored record.

    Attributes:
        is_equal: True when no tracked field differs
        differences: Differing fields, in TrackedField declaration order
    """
    is_equal: bool
    differences: List[FieldDifference] = field(default_factory=list)


@dataclass
class Conflict:
    """A tracked field that differs for a resource present on both sides.

    Ephemeral: computed per run and never persisted on its own.

    Attributes:
        resource_name: Natural key of the resource
        field: Differing field
        live_value: Value reported by the provider
        stored_value: Value currently persisted
        resolution: Chosen resolution (None until resolved)
    """
    resource_name: str
    field: TrackedField
    live_value: Any
    stored_value: Any
    resolution: Optional[Resolution] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'resourceName': self.resource_name,
            'field': self.field.value,
            'liveValue': _plain(self.live_value),
            'storedValue': _plain(self.stored_value),
        }
        if self.resolution is not None:
            data['resolution'] = self.resolution.value
        return data


@dataclass
class SyncAction:
    """Planned operation for exactly one resource in one run.

    Attributes:
        operation: create, update, delete or skip
        resource_name: Natural key of the resource
        resource_type: Category of the resource
        reason: Human-readable reason for the operation
        conflicts: Field conflicts behind an update or a blocked skip
    """
    operation: SyncOperation
    resource_name: str
    resource_type: str
    reason: str
    conflicts: Optional[List[Conflict]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'operation': self.operation.value,
            'resourceName': self.resource_name,
            'resourceType': self.resource_type,
            'reason': self.reason,
        }
        if self.conflicts:
            data['conflicts'] = [c.to_dict() for c in self.conflicts]
        return data


@dataclass
class PlanStats:
    """Counts derived from a planned action list.

    Attributes:
        total_resources: Number of actions (one per distinct name)
        new_resources: create actions
        updated_resources: update actions
        deleted_resources: delete actions
        unchanged_resources: skip actions without conflicts
        conflicts: Conflicting fields across update and skip actions
        conflicts_resolved: Conflicts carrying a resolution on update actions
        conflicts_pending: Conflicts without a resolution on skip actions
    """
    total_resources: int = 0
    new_resources: int = 0
    updated_resources: int = 0
    deleted_resources: int = 0
    unchanged_resources: int = 0
    conflicts: int = 0
    conflicts_resolved: int = 0
    conflicts_pending: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            'totalResources': self.total_resources,
            'newResources': self.new_resources,
            'updatedResources': self.updated_resources,
            'deletedResources': self.deleted_resources,
            'unchangedResources': self.unchanged_resources,
            'conflicts': self.conflicts,
            'conflictsResolved': self.conflicts_resolved,
            'conflictsPending': self.conflicts_pending,
        }


@dataclass
class SyncStats:
    """Counters accumulated while executing one run."""
    resources_processed: int = 0
    resources_created: int = 0
    resources_updated: int = 0
    resources_deleted: int = 0
    resources_skipped: int = 0
    conflicts_detected: int = 0
    conflicts_resolved: int = 0
    duration_ms: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            'resourcesProcessed': self.resources_processed,
            'resourcesCreated': self.resources_created,
            'resourcesUpdated': self.resources_updated,
            'resourcesDeleted': self.resources_deleted,
            'resourcesSkipped': self.resources_skipped,
            'conflictsDetected': self.conflicts_detected,
            'conflictsResolved': self.conflicts_resolved,
            'durationMs': self.duration_ms,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SyncStats':
        return cls(
            resources_processed=int(data.get('resourcesProcessed', 0)),
            resources_created=int(data.get('resourcesCreated', 0)),
            resources_updated=int(data.get('resourcesUpdated', 0)),
            resources_deleted=int(data.get('resourcesDeleted', 0)),
            resources_skipped=int(data.get('resourcesSkipped', 0)),
            conflicts_detected=int(data.get('conflictsDetected', 0)),
            conflicts_resolved=int(data.get('conflictsResolved', 0)),
            duration_ms=int(data.get('durationMs', 0)),
        )


@dataclass(frozen=True)
class SyncHistory:
    """Immutable run record appended to the sync history.

    Attributes:
        id: Run identifier ("sync-<epoch ms>")
        date: Run date (YYYY-MM-DD), the history partition
        timestamp: ISO 8601 completion timestamp
        sync_type: full or conflict-resolution
        source: Surface that triggered the run
        status: success, partial or failed
        stats: Run counters
        user_id: Operator who triggered the run, if known
        errors: Formatted per-action errors, if any
        details: One-line human summary
    """
    id: str
    date: str
    timestamp: str
    sync_type: SyncType
    source: TriggerSource
    status: SyncStatus
    stats: SyncStats
    user_id: Optional[str] = None
    errors: Optional[List[str]] = None
    details: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'id': self.id,
            'date': self.date,
            'timestamp': self.timestamp,
            'syncType': self.sync_type.value,
            'source': self.source.value,
            'status': self.status.value,
            'stats': self.stats.to_dict(),
        }
        if self.user_id is not None:
            data['userId'] = self.user_id
        if self.errors:
            data['errors'] = list(self.errors)
        if self.details is not None:
            data['details'] = self.details
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SyncHistory':
        return cls(
            id=data['id'],
            date=data['date'],
            timestamp=data['timestamp'],
            sync_type=SyncType(data['syncType']),
            source=TriggerSource(data['source']),
            status=SyncStatus(data['status']),
            stats=SyncStats.from_dict(data.get('stats') or {}),
            user_id=data.get('userId'),
            errors=list(data['errors']) if data.get('errors') else None,
            details=data.get('details'),
        )


@dataclass
class SyncOptions:
    """Caller options for one orchestrated run.

    Attributes:
        resolutions: Per-resource, per-field resolutions. None means a full
            sync where every difference updates from live.
        sync_source: Recorded on every stored record written by the run
        trigger: Surface that triggered the run (recorded in history)
        user_id: Operator who triggered the run
    """
    resolutions: Optional[ResolutionMap] = None
    sync_source: SyncSource = SyncSource.MANUAL
    trigger: TriggerSource = TriggerSource.API
    user_id: Optional[str] = None


@dataclass
class ProgressEvent:
    """Progress notification for one successfully processed action."""
    operation: SyncOperation
    resource_name: str
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'operation': self.operation.value,
            'resourceName': self.resource_name,
        }
        if self.reason is not None:
            data['reason'] = self.reason
        return data


@dataclass
class SyncResult:
    """Summary returned to the caller of a run.

    Attributes:
        success: True when no action errored
        status: success, partial or failed
        stats: Run counters
        history_id: Identifier of the persisted run record
        errors: Formatted per-action errors
        actions: The executed plan, in execution order
    """
    success: bool
    status: SyncStatus
    stats: SyncStats
    history_id: str
    errors: List[str] = field(default_factory=list)
    actions: List[SyncAction] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'success': self.success,
            'status': self.status.value,
            'stats': self.stats.to_dict(),
            'historyId': self.history_id,
        }
        if self.errors:
            data['errors'] = list(self.errors)
        return data


@dataclass
class SyncPreview:
    """Dry-run view of what a full sync would do.

    Attributes:
        has_changes: True when any create, update or delete is planned
        summary: Plan statistics
        conflicts: All detected field conflicts
        changes: Resource names by operation ("new", "updated", "deleted")
        actions: The full planned action list
    """
    has_changes: bool
    summary: PlanStats
    conflicts: List[Conflict] = field(default_factory=list)
    changes: Dict[str, List[str]] = field(default_factory=dict)
    actions: List[SyncAction] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'hasChanges': self.has_changes,
            'summary': self.summary.to_dict(),
            'conflicts': [c.to_dict() for c in self.conflicts],
            'changes': {key: list(names) for key, names in self.changes.items()},
        }


@dataclass
class SyncAPIResponse:
    """Response envelope returned by the sync trigger surface."""
    success: bool
    timestamp: str
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @classmethod
    def from_result(cls, result: SyncResult) -> 'SyncAPIResponse':
        stats = result.stats
        return cls(
            success=result.success,
            timestamp=utc_now_iso(),
            data={
                'summary': {
                    'totalResources': stats.resources_processed,
                    'newResources': stats.resources_created,
                    'updatedResources': stats.resources_updated,
                    'deletedResources': stats.resources_deleted,
                    'unchangedResources': stats.resources_skipped,
                    'durationMs': stats.duration_ms,
                },
                'historyId': result.history_id,
            },
            error='; '.join(result.errors) if result.errors else None,
        )

    @classmethod
    def from_error(cls, message: str) -> 'SyncAPIResponse':
        return cls(success=False, timestamp=utc_now_iso(), error=message)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'success': self.success, 'timestamp': self.timestamp}
        if self.data is not None:
            data['data'] = self.data
        if self.error is not None:
            data['error'] = self.error
        return data


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string with a Z suffix."""
    return datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z'


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    return value
