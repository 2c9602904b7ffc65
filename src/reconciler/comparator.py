"""Field-by-field comparison of a live resource with its stored record.

Only the closed set of TrackedField values is compared. Each field is read
and written through an explicit accessor table, so there is no dynamic
attribute lookup by name anywhere in the reconciler.
"""

from dataclasses import replace
from typing import Any, Callable, Dict, NamedTuple

from src.models.resource import Resource, StoredResource
from src.models.sync_models import ComparisonResult, FieldDifference, TrackedField


class FieldAccessor(NamedTuple):
    """Read and copy-with-write functions for one tracked field."""
    get: Callable[[Resource], Any]
    set: Callable[[StoredResource, Any], StoredResource]


FIELD_ACCESSORS: Dict[TrackedField, FieldAccessor] = {
    TrackedField.NAME: FieldAccessor(
        lambda r: r.name, lambda s, v: replace(s, name=v)),
    TrackedField.TYPE: FieldAccessor(
        lambda r: r.type, lambda s, v: replace(s, type=v)),
    TrackedField.RESOURCE_GROUP: FieldAccessor(
        lambda r: r.resource_group, lambda s, v: replace(s, resource_group=v)),
    TrackedField.LOCATION: FieldAccessor(
        lambda r: r.location, lambda s, v: replace(s, location=v)),
    TrackedField.SUBSCRIPTION: FieldAccessor(
        lambda r: r.subscription, lambda s, v: replace(s, subscription=v)),
    TrackedField.STATUS: FieldAccessor(
        lambda r: r.status, lambda s, v: replace(s, status=v)),
    TrackedField.ENVIRONMENT: FieldAccessor(
        lambda r: r.environment, lambda s, v: replace(s, environment=v)),
    TrackedField.CREATED_DATE: FieldAccessor(
        lambda r: r.created_date, lambda s, v: replace(s, created_date=v)),
    TrackedField.GIT_REPOSITORY: FieldAccessor(
        lambda r: r.git_repository, lambda s, v: replace(s, git_repository=v)),
}


def compare(live: Resource, stored: StoredResource) -> ComparisonResult:
    """Compare the tracked fields of a live resource and a stored record.

    Composite values (git repository) are frozen dataclasses, so ``==`` is
    structural. Differences are reported in TrackedField declaration order.

    Args:
        live: Resource reported by the provider
        stored: Record currently persisted under the same name

    Returns:
        ComparisonResult with ``is_equal`` and the list of differences
    """
    differences = []
    for tracked_field in TrackedField:
        accessor = FIELD_ACCESSORS[tracked_field]
        live_value = accessor.get(live)
        stored_value = accessor.get(stored)
        if live_value != stored_value:
            differences.append(FieldDifference(
                field=tracked_field,
                live_value=live_value,
                stored_value=stored_value,
            ))

    return ComparisonResult(is_equal=not differences, differences=differences)
