"""Typed exception hierarchy for reconciliation errors.

Planning and comparison never raise; these errors cover caller input that
cannot be turned into a valid resolution map.
"""

from src.azure_client.errors import SyncError


class ReconcilerError(SyncError):
    """Base exception for all reconciliation errors."""
    pass


class InvalidResolutionError(ReconcilerError):
    """Raised when a resolution entry names an unknown field or choice.

    Attributes:
        resource_name: Resource the entry belongs to
        value: Offending field or resolution value
    """

    def __init__(self, resource_name: str, value: str, message: str):
        super().__init__(f"Invalid resolution for '{resource_name}': {message}")
        self.resource_name = resource_name
        self.value = value
