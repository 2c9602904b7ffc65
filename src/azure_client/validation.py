"""Validation of raw provider payloads.

Provider output is decoded and checked before anything downstream sees it.
A malformed payload raises ResponseValidationError, which is fatal for the
fetch step and never retried.
"""

import json
from typing import Any, Dict, List

from .errors import ResponseValidationError
from .models import ProviderSnapshot, Subscription

ACCOUNT_REQUIRED_FIELDS = ('id', 'name', 'tenantId')
RESOURCE_REQUIRED_FIELDS = ('id', 'name', 'type', 'location')
RESOURCE_OPTIONAL_STRING_FIELDS = ('resourceGroup', 'kind', 'managedBy', 'createdTime')
SKU_STRING_FIELDS = ('name', 'tier', 'size', 'family')
SUBSCRIPTION_REQUIRED_FIELDS = ('subscriptionId', 'subscriptionName', 'tenantId')


def parse_account(text: str) -> Dict[str, Any]:
    """Decode and validate ``az account show`` output."""
    data = _decode(text, 'account')
    return validate_account(data)


def parse_resources(text: str) -> List[Dict[str, Any]]:
    """Decode and validate ``az resource list`` output."""
    data = _decode(text, 'resource list')
    return validate_resources(data)


def validate_account(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ResponseValidationError('account', 'expected a JSON object')
    _require_strings(data, ACCOUNT_REQUIRED_FIELDS, 'account', allow_empty=False)
    return data


def validate_resources(data: Any) -> List[Dict[str, Any]]:
    if not isinstance(data, list):
        raise ResponseValidationError('resource list', 'expected a JSON array')
    for index, item in enumerate(data):
        validate_resource(item, f"resource list[{index}]")
    return data


def validate_resource(data: Any, source: str = 'resource') -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ResponseValidationError(source, 'expected a JSON object')
    _require_strings(data, RESOURCE_REQUIRED_FIELDS, source, allow_empty=True)

    tags = data.get('tags')
    if tags is not None:
        if not isinstance(tags, dict):
            raise ResponseValidationError(source, 'tags: expected a mapping')
        for key, value in tags.items():
            if not isinstance(value, str):
                raise ResponseValidationError(source, f"tags.{key}: expected a string")

    for name in RESOURCE_OPTIONAL_STRING_FIELDS:
        value = data.get(name)
        if value is not None and not isinstance(value, str):
            raise ResponseValidationError(source, f"{name}: expected a string or null")

    sku = data.get('sku')
    if sku is not None:
        if not isinstance(sku, dict):
            raise ResponseValidationError(source, 'sku: expected an object or null')
        for name in SKU_STRING_FIELDS:
            value = sku.get(name)
            if value is not None and not isinstance(value, str):
                raise ResponseValidationError(source, f"sku.{name}: expected a string")
        capacity = sku.get('capacity')
        if capacity is not None and (isinstance(capacity, bool) or not isinstance(capacity, (int, float))):
            raise ResponseValidationError(source, 'sku.capacity: expected a number')

    properties = data.get('properties')
    if properties is not None and not isinstance(properties, dict):
        raise ResponseValidationError(source, 'properties: expected an object or null')
    return data


def parse_snapshot(text: str) -> ProviderSnapshot:
    """Decode and validate a stored raw snapshot document.

    Expected shape: ``{"subscription": {...}, "resources": [...], "timestamp": "..."}``.
    """
    data = _decode(text, 'snapshot')
    if not isinstance(data, dict):
        raise ResponseValidationError('snapshot', 'expected a JSON object')

    subscription = data.get('subscription')
    if not isinstance(subscription, dict):
        raise ResponseValidationError('snapshot', 'subscription: expected an object')
    _require_strings(subscription, SUBSCRIPTION_REQUIRED_FIELDS, 'snapshot subscription', allow_empty=False)

    timestamp = data.get('timestamp')
    if not isinstance(timestamp, str):
        raise ResponseValidationError('snapshot', 'timestamp: expected a string')

    resources = validate_resources(data.get('resources'))

    return ProviderSnapshot(
        subscription=Subscription(
            subscription_id=subscription['subscriptionId'],
            subscription_name=subscription['subscriptionName'],
            tenant_id=subscription['tenantId'],
            state=subscription.get('state'),
        ),
        resources=resources,
        timestamp=timestamp,
    )


def _decode(text: str, source: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        raise ResponseValidationError(source, f"not valid JSON ({e})")


def _require_strings(data: Dict[str, Any], fields, source: str, allow_empty: bool) -> None:
    for name in fields:
        value = data.get(name)
        if not isinstance(value, str):
            raise ResponseValidationError(source, f"{name}: required string")
        if not allow_empty and not value:
            raise ResponseValidationError(source, f"{name}: must not be empty")
