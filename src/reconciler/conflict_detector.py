"""Detection of field-level conflicts between live and stored sets."""

import logging
from typing import Iterable, List

from src.models.resource import Resource, StoredResource
from src.models.sync_models import Conflict
from .comparator import compare

logger = logging.getLogger(__name__)


def detect_conflicts(
    live_set: Iterable[Resource],
    stored_set: Iterable[StoredResource],
) -> List[Conflict]:
    """Find every tracked field that differs for resources on both sides.

    Resources present on only one side produce no conflicts. Output follows
    the live set's iteration order, then field order within a resource.

    Args:
        live_set: Resources reported by the provider
        stored_set: Records currently persisted

    Returns:
        One unresolved Conflict per differing field
    """
    stored_by_name = {record.name: record for record in stored_set}
    conflicts: List[Conflict] = []
    seen = set()

    for live in live_set:
        if live.name in seen:
            continue
        seen.add(live.name)

        stored = stored_by_name.get(live.name)
        if stored is None:
            continue

        comparison = compare(live, stored)
        for difference in comparison.differences:
            conflicts.append(Conflict(
                resource_name=live.name,
                field=difference.field,
                live_value=difference.live_value,
                stored_value=difference.stored_value,
            ))

    logger.debug(f"Detected {len(conflicts)} field conflicts")
    return conflicts
