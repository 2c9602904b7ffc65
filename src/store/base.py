"""Collaborator contract for resource stores."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from src.models.resource import StoredResource
from src.models.sync_models import SyncHistory


class ResourceStore(Protocol):
    """What the orchestrator needs from a store.

    Records are keyed by resource name; upsert is idempotent and each
    upsert or delete is atomic on its own.
    """

    def get_all(self) -> List[StoredResource]:
        ...

    def upsert(self, record: StoredResource) -> StoredResource:
        ...

    def delete_by_name(self, name: str) -> None:
        ...

    def save_history(self, record: SyncHistory) -> None:
        ...


@dataclass
class StoreStats:
    """Inventory summary for dashboards and the CLI.

    Attributes:
        total_resources: Number of stored records
        by_type: Record count per resource category
        by_environment: Record count per environment
        with_git_repository: Records linked to a repository
        without_git_repository: Records without one
        last_sync: Timestamp of the newest run record, if any
        last_sync_status: Status of the newest run record, if any
    """
    total_resources: int = 0
    by_type: Dict[str, int] = field(default_factory=dict)
    by_environment: Dict[str, int] = field(default_factory=dict)
    with_git_repository: int = 0
    without_git_repository: int = 0
    last_sync: Optional[str] = None
    last_sync_status: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalResources': self.total_resources,
            'byType': dict(self.by_type),
            'byEnvironment': dict(self.by_environment),
            'withGitRepository': self.with_git_repository,
            'withoutGitRepository': self.without_git_repository,
            'lastSync': self.last_sync,
            'lastSyncStatus': self.last_sync_status,
        }
