"""Execution of a planned sync against the resource store.

The orchestrator reads the stored set once, plans once, then executes the
actions strictly in plan order. A failing action is recorded and the run
moves on; the run record is always written at the end and a failure to
write it propagates to the caller.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from src.models.resource import Resource, StoredResource
from src.models.sync_models import (
    ProgressEvent,
    SyncAction,
    SyncHistory,
    SyncOperation,
    SyncOptions,
    SyncResult,
    SyncStats,
    SyncStatus,
    SyncType,
)
from src.store.base import ResourceStore
from .conflict_resolver import apply_resolutions
from .planner import calculate_sync_stats, plan

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]


class SyncOrchestrator:
    """Runs one reconciliation between a live set and the store.

    The store handle is passed in and must already be connected; the
    orchestrator never opens or closes it.

    Example:
        >>> with FileResourceStore(store_dir) as store:
        ...     result = SyncOrchestrator(store).sync(live_resources)
        >>> print(result.status.value, result.stats.resources_created)
    """

    def __init__(
        self,
        store: ResourceStore,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the orchestrator.

        Args:
            store: Connected resource store
            clock: Returns the current UTC time (injectable for tests)
        """
        self._store = store
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def sync(
        self,
        live_set: Iterable[Resource],
        options: Optional[SyncOptions] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SyncResult:
        """Reconcile the store with the live set.

        Args:
            live_set: Normalized resources from the provider
            options: Resolutions, sync source, trigger and user
            on_progress: Called once per successfully processed action.
                Exceptions raised by the callback are not caught.

        Returns:
            SyncResult with status, counters, history id and errors

        Raises:
            StoreError: If the stored set cannot be read or the run record
                cannot be written
        """
        options = options or SyncOptions()
        started = time.monotonic()
        live_list = list(live_set)
        logger.info(f"Starting sync of {len(live_list)} live resources")

        stored_list = self._store.get_all()
        logger.info(f"Loaded {len(stored_list)} stored resources")

        actions = plan(live_list, stored_list, options.resolutions)
        plan_stats = calculate_sync_stats(actions)

        stats = SyncStats(
            resources_processed=len(actions),
            conflicts_detected=plan_stats.conflicts,
            conflicts_resolved=plan_stats.conflicts_resolved,
        )
        errors = self._execute(actions, live_list, stored_list, options, stats, on_progress)
        stats.duration_ms = int((time.monotonic() - started) * 1000)

        status = _classify(errors, actions)
        history = self._build_history(options, status, stats, errors)
        self._store.save_history(history)

        logger.info(
            f"Sync {history.id} finished: {status.value} "
            f"({stats.resources_created} created, {stats.resources_updated} updated, "
            f"{stats.resources_deleted} deleted, {stats.resources_skipped} skipped, "
            f"{len(errors)} errors) in {stats.duration_ms}ms"
        )

        return SyncResult(
            success=not errors,
            status=status,
            stats=stats,
            history_id=history.id,
            errors=errors,
            actions=actions,
        )

    def _execute(
        self,
        actions: List[SyncAction],
        live_list: List[Resource],
        stored_list: List[StoredResource],
        options: SyncOptions,
        stats: SyncStats,
        on_progress: Optional[ProgressCallback],
    ) -> List[str]:
        live_by_name: Dict[str, Resource] = {}
        for live in live_list:
            live_by_name.setdefault(live.name, live)
        stored_by_name = {record.name: record for record in stored_list}
        errors: List[str] = []

        for action in actions:
            try:
                applied = self._apply(action, live_by_name, stored_by_name, options)
            except Exception as e:
                message = f"{action.operation.value} {action.resource_name}: {e}"
                errors.append(message)
                logger.error(f"Sync action failed: {message}")
                continue

            if applied is SyncOperation.CREATE:
                stats.resources_created += 1
            elif applied is SyncOperation.UPDATE:
                stats.resources_updated += 1
            elif applied is SyncOperation.DELETE:
                stats.resources_deleted += 1
            else:
                stats.resources_skipped += 1

            if on_progress is not None:
                on_progress(ProgressEvent(
                    operation=applied,
                    resource_name=action.resource_name,
                    reason=action.reason if applied is SyncOperation.SKIP else None,
                ))

        return errors

    def _apply(
        self,
        action: SyncAction,
        live_by_name: Dict[str, Resource],
        stored_by_name: Dict[str, StoredResource],
        options: SyncOptions,
    ) -> SyncOperation:
        """Perform one action and return the operation actually carried out.

        A create or update whose live (or stored) counterpart is missing is
        downgraded to a skip instead of failing the run.
        """
        name = action.resource_name
        now = _iso(self._clock())

        if action.operation is SyncOperation.CREATE:
            live = live_by_name.get(name)
            if live is None:
                logger.warning(f"No live record for create of '{name}', skipping")
                return SyncOperation.SKIP
            self._store.upsert(StoredResource.from_resource(live, now, options.sync_source))
            logger.debug(f"Created {name}")
            return SyncOperation.CREATE

        if action.operation is SyncOperation.UPDATE:
            live = live_by_name.get(name)
            stored = stored_by_name.get(name)
            if live is None or stored is None:
                logger.warning(f"Missing counterpart for update of '{name}', skipping")
                return SyncOperation.SKIP

            chosen = (options.resolutions or {}).get(name)
            if chosen:
                record = apply_resolutions(live, stored, chosen, timestamp=now)
            else:
                record = StoredResource.from_resource(live, now, options.sync_source).with_changes(
                    created_in_store_at=stored.created_in_store_at,
                )
            self._store.upsert(record)
            logger.debug(f"Updated {name}")
            return SyncOperation.UPDATE

        if action.operation is SyncOperation.DELETE:
            self._store.delete_by_name(name)
            logger.debug(f"Deleted {name}")
            return SyncOperation.DELETE

        logger.debug(f"Skipped {name}: {action.reason}")
        return SyncOperation.SKIP

    def _build_history(
        self,
        options: SyncOptions,
        status: SyncStatus,
        stats: SyncStats,
        errors: List[str],
    ) -> SyncHistory:
        finished = self._clock()
        return SyncHistory(
            id=f"sync-{int(finished.timestamp() * 1000)}",
            date=finished.strftime('%Y-%m-%d'),
            timestamp=_iso(finished),
            sync_type=SyncType.CONFLICT_RESOLUTION if options.resolutions is not None else SyncType.FULL,
            source=options.trigger,
            status=status,
            stats=stats,
            user_id=options.user_id,
            errors=list(errors) if errors else None,
            details=(
                f"Synced {stats.resources_created} new, {stats.resources_updated} updated, "
                f"{stats.resources_deleted} deleted"
            ),
        )


def _classify(errors: List[str], actions: List[SyncAction]) -> SyncStatus:
    if not errors:
        return SyncStatus.SUCCESS
    if len(errors) < len(actions):
        return SyncStatus.PARTIAL
    return SyncStatus.FAILED


def _iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z'
