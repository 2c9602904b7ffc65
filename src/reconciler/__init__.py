"""Reconciliation engine.

This package compares the live resource set with the stored set, plans one
action per resource, applies conflict resolutions and executes the plan
against the resource store.
"""

from .comparator import compare
from .conflict_detector import detect_conflicts
from .conflict_resolver import apply_resolutions, parse_resolutions
from .errors import ReconcilerError, InvalidResolutionError
from .planner import plan, calculate_sync_stats, preview

__all__ = [
    "compare",
    "detect_conflicts",
    "apply_resolutions",
    "parse_resolutions",
    "plan",
    "calculate_sync_stats",
    "preview",
    "ReconcilerError",
    "InvalidResolutionError",
]
