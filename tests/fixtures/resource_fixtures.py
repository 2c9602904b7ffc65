"""Test fixtures for resource models.

Provides builders for live and stored resources plus sample raw provider
records, shared by unit and integration tests.
"""

import json
from typing import Any, Dict, List

from src.azure_client.models import Subscription
from src.models.resource import (
    Environment,
    GitRepository,
    Resource,
    ResourceStatus,
    ResourceType,
    StoredResource,
    SyncSource,
)

STORED_AT = "2024-01-10T08:00:00.000Z"

SAMPLE_SUBSCRIPTION = Subscription(
    subscription_id="00000000-0000-0000-0000-000000000001",
    subscription_name="cl-azure-prd-main",
    tenant_id="tenant-123",
)


def make_resource(name: str = "vm1", **overrides: Any) -> Resource:
    """Build a live Resource with sensible defaults.

    Example:
        >>> make_resource("vm1", status=ResourceStatus.STOPPED)
    """
    values: Dict[str, Any] = {
        'name': name,
        'type': ResourceType.VIRTUAL_MACHINE,
        'resource_group': 'rg-prod',
        'location': 'westeurope',
        'subscription': 'cl-azure-prd-main',
        'status': ResourceStatus.RUNNING,
        'environment': Environment.PRODUCTION,
        'portal_url': f"https://portal.azure.com/#@tenant-123/resource/{name}",
        'tags': ['owner:ops'],
    }
    values.update(overrides)
    return Resource(**values)


def make_stored(name: str = "vm1", **overrides: Any) -> StoredResource:
    """Build a StoredResource matching make_resource() unless overridden."""
    metadata = {
        'created_in_store_at': overrides.pop('created_in_store_at', STORED_AT),
        'updated_in_store_at': overrides.pop('updated_in_store_at', STORED_AT),
        'last_synced_at': overrides.pop('last_synced_at', STORED_AT),
        'sync_source': overrides.pop('sync_source', SyncSource.MANUAL),
    }
    live = make_resource(name, **overrides)
    return StoredResource.from_resource(live, STORED_AT).with_changes(**metadata)


def sample_repository() -> GitRepository:
    return GitRepository(url="https://github.com/acme/web", branch="main", provider="github")


def raw_vm(name: str = "vm-web-01", power_state: str = "VM running") -> Dict[str, Any]:
    """Raw ``az resource list`` record for a virtual machine."""
    return {
        'id': f"/subscriptions/sub/resourceGroups/rg-web/providers/Microsoft.Compute/virtualMachines/{name}",
        'name': name,
        'type': 'Microsoft.Compute/virtualMachines',
        'location': 'westeurope',
        'resourceGroup': 'rg-web',
        'tags': {'owner': 'ops', 'created': '2023-05-01'},
        'kind': None,
        'managedBy': None,
        'createdTime': None,
        'sku': None,
        'properties': {
            'provisioningState': 'Succeeded',
            'powerState': power_state,
            'hardwareProfile': {'vmSize': 'Standard_B2s'},
        },
    }


def raw_webapp(name: str = "app-portal") -> Dict[str, Any]:
    """Raw record for an App Service with a linked repository."""
    return {
        'id': f"/subscriptions/sub/resourceGroups/rg-apps/providers/Microsoft.Web/sites/{name}",
        'name': name,
        'type': 'Microsoft.Web/sites',
        'location': 'eastus',
        'tags': None,
        'kind': 'app,linux',
        'createdTime': '2024-02-01T10:00:00Z',
        'sku': {'name': 'P1v3', 'tier': 'PremiumV3'},
        'properties': {
            'state': 'Running',
            'provisioningState': 'Succeeded',
            'repositorySiteConfig': {'repoUrl': 'https://dev.azure.com/acme/_git/portal', 'branch': 'release'},
        },
    }


def raw_account() -> Dict[str, Any]:
    """``az account show`` document."""
    return {
        'id': SAMPLE_SUBSCRIPTION.subscription_id,
        'name': SAMPLE_SUBSCRIPTION.subscription_name,
        'tenantId': SAMPLE_SUBSCRIPTION.tenant_id,
        'state': 'Enabled',
        'isDefault': True,
    }


def snapshot_document(resources: List[Dict[str, Any]]) -> str:
    """Serialized raw snapshot file content."""
    return json.dumps({
        'subscription': {
            'subscriptionId': SAMPLE_SUBSCRIPTION.subscription_id,
            'subscriptionName': SAMPLE_SUBSCRIPTION.subscription_name,
            'tenantId': SAMPLE_SUBSCRIPTION.tenant_id,
        },
        'resources': resources,
        'timestamp': '2024-03-01T12:00:00Z',
    })
