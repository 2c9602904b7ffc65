"""Normalization of raw provider records into Resource objects.

normalize() is a pure, deterministic function of the raw record and the
subscription context. It derives the environment from the subscription
name, the status from a priority-ordered set of raw state fields and the
category from a lookup table of provider type strings.
"""

import re
from typing import Any, Dict, List, Optional

from src.models.resource import (
    Environment,
    GitRepository,
    Resource,
    ResourceStatus,
    ResourceType,
    Sku,
)
from .models import Subscription

PORTAL_URL_TEMPLATE = "https://portal.azure.com/#@{tenant}/resource{resource_id}"

TYPE_MAP = {
    'Microsoft.Compute/virtualMachines': ResourceType.VIRTUAL_MACHINE,
    'Microsoft.Sql/servers/databases': ResourceType.SQL_DATABASE,
    'Microsoft.Storage/storageAccounts': ResourceType.STORAGE_ACCOUNT,
    'Microsoft.Network/virtualNetworks': ResourceType.VIRTUAL_NETWORK,
    'Microsoft.KeyVault/vaults': ResourceType.KEY_VAULT,
    'Microsoft.Web/sites': ResourceType.APP_SERVICE,
    'Microsoft.DocumentDB/databaseAccounts': ResourceType.COSMOS_DB,
    'Microsoft.Cdn/profiles': ResourceType.CDN_PROFILE,
    'Microsoft.Network/loadBalancers': ResourceType.LOAD_BALANCER,
}

CREATED_DATE_TAGS = ('created', 'createdDate', 'dateCreated', 'Created', 'CreatedDate', 'DateCreated')
REPOSITORY_TAGS = ('repository', 'git', 'gitRepository', 'Repository', 'Git', 'repo')
BRANCH_TAGS = ('branch', 'gitBranch', 'Branch')

_RESOURCE_GROUP_RE = re.compile(r'/resourceGroups/([^/]+)', re.IGNORECASE)


def normalize(raw: Dict[str, Any], subscription: Subscription) -> Resource:
    """Turn one raw provider record into a normalized Resource.

    Args:
        raw: Record as returned by the provider (already validated)
        subscription: Subscription context of the listing

    Returns:
        Normalized Resource
    """
    properties = raw.get('properties') or {}
    tags = raw.get('tags') or None
    sku_name = _extract_sku_name(raw)

    return Resource(
        name=raw['name'],
        type=map_resource_type(raw.get('type', '')),
        resource_group=raw.get('resourceGroup') or extract_resource_group(raw.get('id', '')),
        location=raw.get('location', ''),
        subscription=subscription.subscription_name,
        status=normalize_status(raw),
        environment=determine_environment(subscription.subscription_name),
        portal_url=generate_portal_url(raw.get('id', ''), subscription.tenant_id),
        tags=tags_to_list(tags),
        sku=Sku(name=sku_name, tier=(raw.get('sku') or {}).get('tier')) if sku_name else None,
        created_date=_extract_created_date(raw),
        git_repository=_extract_git_repository(raw),
        provisioning_state=properties.get('provisioningState'),
        power_state=properties.get('powerState') or properties.get('state'),
        kind=raw.get('kind') or None,
        managed_by=raw.get('managedBy') or None,
        raw_tags=dict(tags) if tags else None,
    )


def normalize_all(raws: List[Dict[str, Any]], subscription: Subscription) -> List[Resource]:
    return [normalize(raw, subscription) for raw in raws]


def determine_environment(subscription_name: str) -> Environment:
    """Derive the environment from the subscription display name."""
    name = subscription_name.lower()
    if 'cl-azure-prd' in name or 'prd' in name or 'prod' in name:
        return Environment.PRODUCTION
    if 'dev' in name:
        return Environment.DEVELOPMENT
    return Environment.UNKNOWN


def normalize_status(raw: Dict[str, Any]) -> ResourceStatus:
    """Derive the status: powerState, then state, then provisioningState."""
    properties = raw.get('properties') or {}

    power_state = properties.get('powerState')
    if power_state:
        value = power_state.lower()
        if 'running' in value:
            return ResourceStatus.RUNNING
        if 'stopped' in value or 'deallocat' in value:
            return ResourceStatus.STOPPED

    state = properties.get('state')
    if state:
        value = state.lower()
        if value == 'running':
            return ResourceStatus.RUNNING
        if value == 'stopped':
            return ResourceStatus.STOPPED

    provisioning_state = properties.get('provisioningState')
    if provisioning_state:
        value = provisioning_state.lower()
        if value == 'succeeded':
            return ResourceStatus.AVAILABLE
        if value == 'failed':
            return ResourceStatus.FAILED
        if value in ('creating', 'updating'):
            return ResourceStatus.CREATING

    return ResourceStatus.UNKNOWN


def map_resource_type(provider_type: str) -> ResourceType:
    return TYPE_MAP.get(provider_type, ResourceType.OTHER)


def generate_portal_url(resource_id: str, tenant_id: str) -> str:
    return PORTAL_URL_TEMPLATE.format(tenant=tenant_id, resource_id=resource_id)


def extract_resource_group(resource_id: str) -> str:
    match = _RESOURCE_GROUP_RE.search(resource_id)
    return match.group(1) if match else 'unknown'


def tags_to_list(tags: Optional[Dict[str, str]]) -> List[str]:
    """Render tags as "key:value" strings, preserving provider order."""
    if not tags:
        return []
    return [f"{key}:{value}" for key, value in tags.items()]


def _extract_sku_name(raw: Dict[str, Any]) -> Optional[str]:
    sku = raw.get('sku') or {}
    if sku.get('name'):
        return sku['name']
    hardware = (raw.get('properties') or {}).get('hardwareProfile') or {}
    return hardware.get('vmSize') or None


def _extract_created_date(raw: Dict[str, Any]) -> Optional[str]:
    properties = raw.get('properties') or {}
    if properties.get('creationDate'):
        return properties['creationDate']
    if raw.get('createdTime'):
        return raw['createdTime']
    return _first_tag(raw.get('tags'), CREATED_DATE_TAGS)


def _extract_git_repository(raw: Dict[str, Any]) -> Optional[GitRepository]:
    url = None
    branch = None
    provider = None

    devops = raw.get('devopsRepository') or {}
    if devops.get('url'):
        url = devops['url']
        branch = devops.get('branch')
        provider = {'TfsGit': 'azuredevops', 'GitHub': 'github'}.get(devops.get('provider'), 'other')

    deployment = raw.get('deploymentSource') or {}
    if not url and deployment.get('repoUrl') and deployment['repoUrl'] != 'VSTSRM':
        # VSTSRM is a placeholder, not a real repository
        url = deployment['repoUrl']
        branch = deployment.get('branch')

    site_config = (raw.get('properties') or {}).get('repositorySiteConfig') or {}
    if not url and raw.get('type') == 'Microsoft.Web/sites' and site_config:
        url = site_config.get('repoUrl')
        branch = branch or site_config.get('branch')

    tags = raw.get('tags')
    if not url and tags:
        url = _first_tag(tags, REPOSITORY_TAGS)
        branch = branch or _first_tag(tags, BRANCH_TAGS)

    if not url:
        return None

    return GitRepository(url=url, branch=branch, provider=provider or _infer_git_provider(url))


def _infer_git_provider(url: str) -> str:
    lowered = url.lower()
    if 'github.com' in lowered:
        return 'github'
    if 'gitlab.com' in lowered:
        return 'gitlab'
    if 'dev.azure.com' in lowered or 'visualstudio.com' in lowered or '_git' in lowered:
        return 'azuredevops'
    return 'other'


def _first_tag(tags: Optional[Dict[str, str]], keys) -> Optional[str]:
    if not tags:
        return None
    for key in keys:
        if tags.get(key):
            return tags[key]
    return None
