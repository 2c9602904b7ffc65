"""Cloud resource data models.

This module defines the normalized resource record produced by the
normalizer on every fetch cycle, and the stored record persisted by the
resource store. All models use dataclasses; the persisted form of each
record is a camelCase dictionary produced by ``to_dict()``.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional


class ResourceType(Enum):
    """Enumerated resource categories shown on the dashboard."""

    VIRTUAL_MACHINE = "Virtual Machine"
    SQL_DATABASE = "SQL Database"
    STORAGE_ACCOUNT = "Storage Account"
    VIRTUAL_NETWORK = "Virtual Network"
    KEY_VAULT = "Key Vault"
    APP_SERVICE = "App Service"
    COSMOS_DB = "Cosmos DB"
    CDN_PROFILE = "CDN Profile"
    LOAD_BALANCER = "Load Balancer"
    OTHER = "Other"


class ResourceStatus(Enum):
    """Normalized lifecycle status of a resource."""

    RUNNING = "running"
    STOPPED = "stopped"
    AVAILABLE = "available"
    CREATING = "creating"
    FAILED = "failed"
    UNKNOWN = "unknown"


class Environment(Enum):
    """Deployment environment derived from the subscription name."""

    PRODUCTION = "production"
    DEVELOPMENT = "development"
    UNKNOWN = "unknown"


class SyncSource(Enum):
    """What triggered the sync that last wrote a stored record."""

    MANUAL = "manual"
    AUTOMATIC = "automatic"
    SCRIPT = "script"


@dataclass(frozen=True)
class Sku:
    """Pricing tier of a resource.

    Attributes:
        name: SKU name (e.g., "Standard_B2s")
        tier: Optional tier (e.g., "Standard")
    """
    name: str
    tier: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'name': self.name}
        if self.tier is not None:
            data['tier'] = self.tier
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Sku':
        return cls(name=data['name'], tier=data.get('tier'))


@dataclass(frozen=True)
class GitRepository:
    """Source repository linked to a resource.

    Attributes:
        url: Repository URL
        branch: Deployed branch, if known
        provider: One of github, gitlab, azuredevops, other
    """
    url: str
    branch: Optional[str] = None
    provider: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'url': self.url}
        if self.branch is not None:
            data['branch'] = self.branch
        if self.provider is not None:
            data['provider'] = self.provider
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GitRepository':
        return cls(
            url=data['url'],
            branch=data.get('branch'),
            provider=data.get('provider'),
        )


@dataclass(frozen=True)
class Resource:
    """Normalized cloud resource.

    Produced fresh on every fetch cycle and never mutated in place; a
    changed resource is replaced wholesale. ``name`` is the natural key and
    is unique within one sync universe.

    Attributes:
        name: Resource name (natural key)
        type: Resource category
        resource_group: Owning resource group
        location: Region (e.g., "westeurope")
        subscription: Subscription display name
        status: Normalized status
        environment: Environment derived from the subscription name
        portal_url: Deep link into the Azure portal
        tags: Tags rendered as "key:value" strings, in provider order
        sku: Optional pricing tier
        created_date: Optional creation timestamp as reported upstream
        git_repository: Optional linked source repository
        provisioning_state: Raw provisioning state, if reported
        power_state: Raw power/run state, if reported
        kind: Provider "kind" qualifier, if any
        managed_by: Managing resource id, if any
        raw_tags: Original tag mapping
    """
    name: str
    type: ResourceType
    resource_group: str
    location: str
    subscription: str
    status: ResourceStatus
    environment: Environment
    portal_url: str
    tags: List[str] = field(default_factory=list)
    sku: Optional[Sku] = None
    created_date: Optional[str] = None
    git_repository: Optional[GitRepository] = None
    provisioning_state: Optional[str] = None
    power_state: Optional[str] = None
    kind: Optional[str] = None
    managed_by: Optional[str] = None
    raw_tags: Optional[Dict[str, str]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase document shape used by the store."""
        data: Dict[str, Any] = {
            'name': self.name,
            'type': self.type.value,
            'resourceGroup': self.resource_group,
            'location': self.location,
            'subscription': self.subscription,
            'status': self.status.value,
            'environment': self.environment.value,
            'portalUrl': self.portal_url,
            'tags': list(self.tags),
        }
        optional = {
            'sku': self.sku.to_dict() if self.sku else None,
            'createdDate': self.created_date,
            'gitRepository': self.git_repository.to_dict() if self.git_repository else None,
            'provisioningState': self.provisioning_state,
            'powerState': self.power_state,
            'kind': self.kind,
            'managedBy': self.managed_by,
            'rawTags': dict(self.raw_tags) if self.raw_tags is not None else None,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Resource':
        return cls(**_resource_kwargs(data))


@dataclass(frozen=True)
class StoredResource(Resource):
    """A resource as persisted in the store, plus persistence metadata.

    Identity is ``name``, used directly as the store's primary key.

    Attributes:
        created_in_store_at: ISO 8601 timestamp of first persistence
        updated_in_store_at: ISO 8601 timestamp of last write
        last_synced_at: ISO 8601 timestamp of last sync touching the record
        sync_source: What triggered the last write
    """
    created_in_store_at: str = ""
    updated_in_store_at: str = ""
    last_synced_at: str = ""
    sync_source: SyncSource = SyncSource.MANUAL

    @classmethod
    def from_resource(
        cls,
        resource: Resource,
        timestamp: str,
        sync_source: SyncSource = SyncSource.MANUAL,
    ) -> 'StoredResource':
        """Build a fresh stored record from a live resource.

        All three persistence timestamps are set to ``timestamp``.
        """
        return cls(
            **{f: getattr(resource, f) for f in _RESOURCE_FIELDS},
            created_in_store_at=timestamp,
            updated_in_store_at=timestamp,
            last_synced_at=timestamp,
            sync_source=sync_source,
        )

    def with_changes(self, **changes: Any) -> 'StoredResource':
        """Return a copy with the given attributes replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            'id': self.name,
            'createdInStoreAt': self.created_in_store_at,
            'updatedInStoreAt': self.updated_in_store_at,
            'lastSyncedAt': self.last_synced_at,
            'syncSource': self.sync_source.value,
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StoredResource':
        return cls(
            **_resource_kwargs(data),
            created_in_store_at=data.get('createdInStoreAt', ''),
            updated_in_store_at=data.get('updatedInStoreAt', ''),
            last_synced_at=data.get('lastSyncedAt', ''),
            sync_source=SyncSource(data.get('syncSource', SyncSource.MANUAL.value)),
        )


_RESOURCE_FIELDS = (
    'name', 'type', 'resource_group', 'location', 'subscription', 'status',
    'environment', 'portal_url', 'tags', 'sku', 'created_date',
    'git_repository', 'provisioning_state', 'power_state', 'kind',
    'managed_by', 'raw_tags',
)


def _resource_kwargs(data: Dict[str, Any]) -> Dict[str, Any]:
    sku = data.get('sku')
    git_repository = data.get('gitRepository')
    raw_tags = data.get('rawTags')
    return {
        'name': data['name'],
        'type': ResourceType(data.get('type', ResourceType.OTHER.value)),
        'resource_group': data.get('resourceGroup', 'unknown'),
        'location': data.get('location', ''),
        'subscription': data.get('subscription', ''),
        'status': ResourceStatus(data.get('status', ResourceStatus.UNKNOWN.value)),
        'environment': Environment(data.get('environment', Environment.UNKNOWN.value)),
        'portal_url': data.get('portalUrl', ''),
        'tags': list(data.get('tags') or []),
        'sku': Sku.from_dict(sku) if sku else None,
        'created_date': data.get('createdDate'),
        'git_repository': GitRepository.from_dict(git_repository) if git_repository else None,
        'provisioning_state': data.get('provisioningState'),
        'power_state': data.get('powerState'),
        'kind': data.get('kind'),
        'managed_by': data.get('managedBy'),
        'raw_tags': dict(raw_tags) if raw_tags is not None else None,
    }
