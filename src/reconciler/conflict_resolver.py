"""Application of per-field conflict resolutions to a stored record."""

from typing import Any, Dict, Mapping, Optional

from src.models.resource import Resource, StoredResource
from src.models.sync_models import Resolution, ResolutionMap, TrackedField, utc_now_iso
from .comparator import FIELD_ACCESSORS
from .errors import InvalidResolutionError


def apply_resolutions(
    live: Resource,
    stored: StoredResource,
    resolutions: Mapping[TrackedField, Resolution],
    timestamp: Optional[str] = None,
) -> StoredResource:
    """Build the record to persist from a stored record and resolutions.

    ``use-live`` copies the field from the live resource. ``use-stored`` and
    ``manual`` leave the stored value in place (manual conflicts are settled
    by the operator, not here). Keys that are not tracked fields are
    ignored. ``updated_in_store_at`` and ``last_synced_at`` are always
    refreshed, even when no field changes.

    Args:
        live: Resource reported by the provider
        stored: Record currently persisted
        resolutions: Chosen resolution per field
        timestamp: ISO 8601 time to stamp; defaults to now

    Returns:
        A new StoredResource; ``stored`` is not modified
    """
    now = timestamp or utc_now_iso()
    result = stored

    for tracked_field, resolution in resolutions.items():
        accessor = FIELD_ACCESSORS.get(tracked_field)
        if accessor is None:
            continue
        if resolution is Resolution.USE_LIVE:
            result = accessor.set(result, accessor.get(live))

    return result.with_changes(updated_in_store_at=now, last_synced_at=now)


def parse_resolutions(data: Mapping[str, Any]) -> ResolutionMap:
    """Build a typed resolution map from plain ``name -> field -> choice`` data.

    Field identifiers may be the camelCase value ("resourceGroup") or the
    enum name; choices accept the ``use-azure``/``use-database`` aliases.

    Raises:
        InvalidResolutionError: If an entry names an unknown field or choice
    """
    resolutions: ResolutionMap = {}
    for resource_name, fields in data.items():
        name = str(resource_name)
        if not isinstance(fields, Mapping):
            raise InvalidResolutionError(name, str(fields), "expected a mapping of field to resolution")
        parsed: Dict[TrackedField, Resolution] = {}
        for raw_field, raw_choice in fields.items():
            try:
                tracked_field = TrackedField.parse(raw_field)
            except ValueError as e:
                raise InvalidResolutionError(name, str(raw_field), str(e))
            try:
                parsed[tracked_field] = Resolution.parse(raw_choice)
            except ValueError as e:
                raise InvalidResolutionError(name, str(raw_choice), str(e))
        resolutions[name] = parsed
    return resolutions
