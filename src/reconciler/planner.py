"""Sync planning: classify every resource into one action per run.

The planner indexes both sides by name and emits exactly one SyncAction per
distinct name in ``live | stored``: creates and updates/skips in live-set
order, then deletes in stored-set order. It never raises and never touches
the store.

Default policy: when no resolutions map is passed at all, any difference
on a matched pair is an update from live. Conflict blocking only applies
once the caller passes a resolutions map (even an empty one).
"""

import logging
from typing import Iterable, List, Optional

from src.models.resource import Resource, StoredResource
from src.models.sync_models import (
    Conflict,
    PlanStats,
    Resolution,
    ResolutionMap,
    SyncAction,
    SyncOperation,
    SyncPreview,
)
from .comparator import compare
from .conflict_detector import detect_conflicts

logger = logging.getLogger(__name__)

REASON_NEW = "new resource"
REASON_UNCHANGED = "no changes"
REASON_UPDATED = "resource updated"
REASON_MANUAL = "manual resolution required"
REASON_UNRESOLVED = "unresolved conflicts"
REASON_DELETED = "no longer present upstream"


def plan(
    live_set: Iterable[Resource],
    stored_set: Iterable[StoredResource],
    resolutions: Optional[ResolutionMap] = None,
) -> List[SyncAction]:
    """Plan the actions of one run.

    Args:
        live_set: Resources reported by the provider
        stored_set: Records currently persisted
        resolutions: Per-resource, per-field resolutions, or None for a
            full sync that favors live on every difference

    Returns:
        Ordered list of actions, one per distinct resource name
    """
    live_list = list(live_set)
    stored_list = list(stored_set)
    stored_by_name = {record.name: record for record in stored_list}
    live_names = set()
    actions: List[SyncAction] = []

    for live in live_list:
        if live.name in live_names:
            logger.warning(f"Duplicate live resource '{live.name}' ignored")
            continue
        live_names.add(live.name)

        stored = stored_by_name.get(live.name)
        if stored is None:
            actions.append(_action(SyncOperation.CREATE, live, REASON_NEW))
        else:
            actions.append(_plan_matched(live, stored, resolutions))

    deleted = set()
    for stored in stored_list:
        if stored.name in live_names or stored.name in deleted:
            continue
        deleted.add(stored.name)
        actions.append(_action(SyncOperation.DELETE, stored, REASON_DELETED))

    logger.info(f"Planned {len(actions)} actions")
    return actions


def _plan_matched(
    live: Resource,
    stored: StoredResource,
    resolutions: Optional[ResolutionMap],
) -> SyncAction:
    comparison = compare(live, stored)
    if comparison.is_equal:
        return _action(SyncOperation.SKIP, live, REASON_UNCHANGED)

    chosen = (resolutions or {}).get(live.name) or {}
    conflicts = [
        Conflict(
            resource_name=live.name,
            field=difference.field,
            live_value=difference.live_value,
            stored_value=difference.stored_value,
            resolution=chosen.get(difference.field),
        )
        for difference in comparison.differences
    ]

    if any(c.resolution is Resolution.MANUAL for c in conflicts):
        return _action(SyncOperation.SKIP, live, REASON_MANUAL, conflicts)

    if resolutions is None or all(c.resolution is Resolution.USE_LIVE for c in conflicts):
        return _action(SyncOperation.UPDATE, live, REASON_UPDATED, conflicts)

    return _action(SyncOperation.SKIP, live, REASON_UNRESOLVED, conflicts)


def _action(
    operation: SyncOperation,
    resource: Resource,
    reason: str,
    conflicts: Optional[List[Conflict]] = None,
) -> SyncAction:
    return SyncAction(
        operation=operation,
        resource_name=resource.name,
        resource_type=resource.type.value,
        reason=reason,
        conflicts=conflicts,
    )


def calculate_sync_stats(actions: Iterable[SyncAction]) -> PlanStats:
    """Summarize a planned action list.

    Conflicts on update actions count as resolved when they carry a
    resolution. Conflicts on skip actions count as pending when they do
    not. A skip without conflicts is an unchanged resource.
    """
    stats = PlanStats()
    for action in actions:
        stats.total_resources += 1
        conflicts = action.conflicts or []
        if action.operation is SyncOperation.CREATE:
            stats.new_resources += 1
        elif action.operation is SyncOperation.UPDATE:
            stats.updated_resources += 1
            stats.conflicts += len(conflicts)
            stats.conflicts_resolved += sum(1 for c in conflicts if c.resolution is not None)
        elif action.operation is SyncOperation.DELETE:
            stats.deleted_resources += 1
        elif conflicts:
            stats.conflicts += len(conflicts)
            stats.conflicts_pending += sum(1 for c in conflicts if c.resolution is None)
        else:
            stats.unchanged_resources += 1
    return stats


def preview(
    live_set: Iterable[Resource],
    stored_set: Iterable[StoredResource],
) -> SyncPreview:
    """Describe what a full sync would do, without touching the store."""
    live_list = list(live_set)
    stored_list = list(stored_set)

    conflicts = detect_conflicts(live_list, stored_list)
    actions = plan(live_list, stored_list)
    summary = calculate_sync_stats(actions)

    changes = {
        'new': [a.resource_name for a in actions if a.operation is SyncOperation.CREATE],
        'updated': [a.resource_name for a in actions if a.operation is SyncOperation.UPDATE],
        'deleted': [a.resource_name for a in actions if a.operation is SyncOperation.DELETE],
    }
    has_changes = bool(changes['new'] or changes['updated'] or changes['deleted'])

    return SyncPreview(
        has_changes=has_changes,
        summary=summary,
        conflicts=conflicts,
        changes=changes,
        actions=actions,
    )
