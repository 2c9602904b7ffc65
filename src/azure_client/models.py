"""Data models for provider responses."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Subscription:
    """Subscription context a resource listing was taken under.

    Attributes:
        subscription_id: Subscription GUID
        subscription_name: Display name (drives environment derivation)
        tenant_id: Tenant GUID (used in portal links)
        state: Subscription state, if reported
    """
    subscription_id: str
    subscription_name: str
    tenant_id: str
    state: Optional[str] = None

    @classmethod
    def from_account(cls, account: Dict[str, Any]) -> 'Subscription':
        """Build from an ``az account show`` document."""
        return cls(
            subscription_id=account['id'],
            subscription_name=account['name'],
            tenant_id=account['tenantId'],
            state=account.get('state'),
        )


@dataclass
class ProviderSnapshot:
    """One fetch cycle: subscription context plus raw resource records."""
    subscription: Subscription
    resources: List[Dict[str, Any]] = field(default_factory=list)
    timestamp: Optional[str] = None
