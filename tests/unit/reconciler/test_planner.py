"""Unit tests for reconciler.planner module."""

import pytest

from src.models.resource import ResourceStatus, ResourceType
from src.models.sync_models import Resolution, SyncOperation, TrackedField
from src.reconciler.planner import (
    REASON_DELETED,
    REASON_MANUAL,
    REASON_NEW,
    REASON_UNCHANGED,
    REASON_UNRESOLVED,
    REASON_UPDATED,
    calculate_sync_stats,
    plan,
    preview,
)
from tests.fixtures.resource_fixtures import make_resource, make_stored


class TestPlanScenarios:
    """Test cases for the canonical planning scenarios."""

    def test_live_only_resource_is_created(self):
        """A resource with no stored counterpart is planned as create."""
        actions = plan([make_resource("vm1", status=ResourceStatus.RUNNING)], [])

        assert len(actions) == 1
        assert actions[0].operation is SyncOperation.CREATE
        assert actions[0].resource_name == "vm1"
        assert actions[0].reason == REASON_NEW

    def test_difference_without_resolutions_updates(self):
        """Any difference updates from live when no resolutions are given."""
        live = [make_resource("vm1", status=ResourceStatus.RUNNING)]
        stored = [make_stored("vm1", status=ResourceStatus.STOPPED)]

        actions = plan(live, stored)

        assert len(actions) == 1
        assert actions[0].operation is SyncOperation.UPDATE
        assert actions[0].reason == REASON_UPDATED
        assert [c.field for c in actions[0].conflicts] == [TrackedField.STATUS]

    def test_manual_resolution_skips(self):
        """A manual resolution on any field blocks the update."""
        live = [make_resource("vm1", status=ResourceStatus.RUNNING)]
        stored = [make_stored("vm1", status=ResourceStatus.STOPPED)]
        resolutions = {"vm1": {TrackedField.STATUS: Resolution.MANUAL}}

        actions = plan(live, stored, resolutions)

        assert len(actions) == 1
        assert actions[0].operation is SyncOperation.SKIP
        assert actions[0].reason == REASON_MANUAL
        assert actions[0].conflicts[0].resolution is Resolution.MANUAL

    def test_stored_only_resource_is_deleted(self):
        """A stored resource absent from live is planned as delete."""
        actions = plan([], [make_stored("vm1")])

        assert len(actions) == 1
        assert actions[0].operation is SyncOperation.DELETE
        assert actions[0].resource_name == "vm1"
        assert actions[0].reason == REASON_DELETED


class TestPlanClassification:
    """Test cases for per-resource classification rules."""

    def test_identical_pair_is_skipped_without_conflicts(self):
        """Equal tracked fields produce a no-changes skip."""
        actions = plan([make_resource("vm1")], [make_stored("vm1")])

        assert actions[0].operation is SyncOperation.SKIP
        assert actions[0].reason == REASON_UNCHANGED
        assert actions[0].conflicts is None

    def test_all_fields_use_live_updates(self):
        """Every differing field resolved to use-live produces an update."""
        live = [make_resource("vm1", status=ResourceStatus.RUNNING, location="eastus")]
        stored = [make_stored("vm1", status=ResourceStatus.STOPPED)]
        resolutions = {"vm1": {
            TrackedField.STATUS: Resolution.USE_LIVE,
            TrackedField.LOCATION: Resolution.USE_LIVE,
        }}

        actions = plan(live, stored, resolutions)

        assert actions[0].operation is SyncOperation.UPDATE
        assert all(c.resolution is Resolution.USE_LIVE for c in actions[0].conflicts)

    def test_partially_resolved_fields_skip_as_unresolved(self):
        """A field left without a resolution blocks the update."""
        live = [make_resource("vm1", status=ResourceStatus.RUNNING, location="eastus")]
        stored = [make_stored("vm1", status=ResourceStatus.STOPPED)]
        resolutions = {"vm1": {TrackedField.STATUS: Resolution.USE_LIVE}}

        actions = plan(live, stored, resolutions)

        assert actions[0].operation is SyncOperation.SKIP
        assert actions[0].reason == REASON_UNRESOLVED

    def test_use_stored_counts_as_unresolved(self):
        """A use-stored choice keeps the resource out of the update set."""
        live = [make_resource("vm1", status=ResourceStatus.RUNNING)]
        stored = [make_stored("vm1", status=ResourceStatus.STOPPED)]
        resolutions = {"vm1": {TrackedField.STATUS: Resolution.USE_STORED}}

        actions = plan(live, stored, resolutions)

        assert actions[0].operation is SyncOperation.SKIP
        assert actions[0].reason == REASON_UNRESOLVED

    def test_empty_resolution_map_still_blocks(self):
        """Passing an empty map opts in to conflict blocking."""
        live = [make_resource("vm1", status=ResourceStatus.RUNNING)]
        stored = [make_stored("vm1", status=ResourceStatus.STOPPED)]

        actions = plan(live, stored, {})

        assert actions[0].operation is SyncOperation.SKIP
        assert actions[0].reason == REASON_UNRESOLVED

    def test_manual_wins_over_use_live(self):
        """Manual on one field skips even when other fields use live."""
        live = [make_resource("vm1", status=ResourceStatus.RUNNING, location="eastus")]
        stored = [make_stored("vm1", status=ResourceStatus.STOPPED)]
        resolutions = {"vm1": {
            TrackedField.STATUS: Resolution.USE_LIVE,
            TrackedField.LOCATION: Resolution.MANUAL,
        }}

        actions = plan(live, stored, resolutions)

        assert actions[0].reason == REASON_MANUAL

    def test_resource_type_is_category_value(self):
        """Actions carry the category display value as resource type."""
        actions = plan([make_resource("db", type=ResourceType.SQL_DATABASE)], [])

        assert actions[0].resource_type == "SQL Database"


class TestPlanProperties:
    """Test cases for coverage, default policy and idempotence."""

    @pytest.fixture
    def mixed_sets(self):
        live = [
            make_resource("a"),
            make_resource("b", status=ResourceStatus.STOPPED),
            make_resource("c"),
        ]
        stored = [make_stored("b"), make_stored("c"), make_stored("d"), make_stored("e")]
        return live, stored

    def test_one_action_per_distinct_name(self, mixed_sets):
        """plan should return exactly one action per name in live or stored."""
        live, stored = mixed_sets

        actions = plan(live, stored)

        names = [a.resource_name for a in actions]
        assert sorted(names) == ["a", "b", "c", "d", "e"]
        assert len(names) == len(set(names))

    def test_creates_and_updates_precede_deletes(self, mixed_sets):
        """Live-set actions come first, in live order, then deletes."""
        live, stored = mixed_sets

        actions = plan(live, stored)

        assert [(a.operation, a.resource_name) for a in actions] == [
            (SyncOperation.CREATE, "a"),
            (SyncOperation.UPDATE, "b"),
            (SyncOperation.SKIP, "c"),
            (SyncOperation.DELETE, "d"),
            (SyncOperation.DELETE, "e"),
        ]

    def test_no_resolutions_never_blocks(self, mixed_sets):
        """Without resolutions no skip is ever caused by conflicts."""
        live, stored = mixed_sets

        actions = plan(live, stored)

        assert all(
            a.reason not in (REASON_MANUAL, REASON_UNRESOLVED) for a in actions
        )

    def test_plan_is_idempotent(self, mixed_sets):
        """Planning twice against the same snapshot yields the same plan."""
        live, stored = mixed_sets

        assert plan(live, stored) == plan(live, stored)

    def test_duplicate_live_names_yield_single_action(self):
        """A duplicated live name still gets exactly one action."""
        live = [make_resource("vm1"), make_resource("vm1", location="eastus")]

        actions = plan(live, [])

        assert len(actions) == 1


class TestCalculateSyncStats:
    """Test cases for calculate_sync_stats function."""

    def test_counts_by_operation(self):
        """calculate_sync_stats should count each operation kind."""
        live = [make_resource("a"), make_resource("b", location="eastus"), make_resource("c")]
        stored = [make_stored("b"), make_stored("c"), make_stored("d")]

        stats = calculate_sync_stats(plan(live, stored))

        assert stats.total_resources == 4
        assert stats.new_resources == 1
        assert stats.updated_resources == 1
        assert stats.deleted_resources == 1
        assert stats.unchanged_resources == 1
        assert stats.conflicts == 1
        assert stats.conflicts_resolved == 0
        assert stats.conflicts_pending == 0

    def test_blocked_skips_count_pending_not_unchanged(self):
        """Conflict-blocked skips count as pending conflicts."""
        live = [make_resource("a", location="eastus", status=ResourceStatus.STOPPED)]
        stored = [make_stored("a")]
        resolutions = {"a": {TrackedField.LOCATION: Resolution.USE_LIVE}}

        stats = calculate_sync_stats(plan(live, stored, resolutions))

        assert stats.unchanged_resources == 0
        assert stats.conflicts == 2
        assert stats.conflicts_pending == 1

    def test_resolved_updates_count_resolved(self):
        """Resolved conflicts on updates count as resolved."""
        live = [make_resource("a", location="eastus")]
        stored = [make_stored("a")]
        resolutions = {"a": {TrackedField.LOCATION: Resolution.USE_LIVE}}

        stats = calculate_sync_stats(plan(live, stored, resolutions))

        assert stats.conflicts_resolved == 1


class TestPreview:
    """Test cases for preview function."""

    def test_preview_lists_changes_and_conflicts(self):
        """preview should summarize changes by operation."""
        live = [make_resource("new"), make_resource("changed", status=ResourceStatus.STOPPED)]
        stored = [make_stored("changed"), make_stored("gone")]

        result = preview(live, stored)

        assert result.has_changes is True
        assert result.changes == {'new': ["new"], 'updated': ["changed"], 'deleted': ["gone"]}
        assert [c.field for c in result.conflicts] == [TrackedField.STATUS]
        assert result.summary.total_resources == 3

    def test_preview_without_changes(self):
        """preview should report no changes for matching sets."""
        result = preview([make_resource("vm1")], [make_stored("vm1")])

        assert result.has_changes is False
        assert result.summary.unchanged_resources == 1
        assert result.to_dict()['hasChanges'] is False
