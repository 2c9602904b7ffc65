"""Data models for CLI operations.

This module defines all data models used by the CLI module.
All models use dataclasses for clean, type-safe data structures,
following the patterns established in src/models/sync_models.py.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

from src.azure_client.retry_logic import RetryPolicy
from src.models.resource import SyncSource


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    These exit codes provide meaningful feedback about the operation result:
    - SUCCESS (0): Run completed without errors or blocked resources
    - GENERAL_ERROR (1): General error (config issues, invalid resolutions)
    - CONFLICTS (2): Run left resources skipped on unresolved conflicts
    - PROVIDER_ERROR (3): Fetching from the cloud provider failed
    - STORE_ERROR (4): Reading or writing the resource store failed
    - PARTIAL (5): Run finished with status partial or failed

    Example:
        >>> exit_code = ExitCode.SUCCESS
        >>> sys.exit(exit_code)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    CONFLICTS = 2
    PROVIDER_ERROR = 3
    STORE_ERROR = 4
    PARTIAL = 5


PROVIDER_AZURE_CLI = 'azure-cli'
PROVIDER_SNAPSHOT = 'snapshot'


@dataclass
class AppConfig:
    """Tool configuration loaded from .resource-sync/config.yaml.

    Attributes:
        store_dir: Directory of the file-backed resource store
        provider: "azure-cli" or "snapshot"
        snapshot_path: Snapshot file read by the snapshot provider
        command_timeout: Per-command provider timeout (seconds)
        retry: Retry policy for provider calls
        sync_source: Recorded on every stored record written by a run
        lock_timeout: Seconds to wait for the store run lock

    Example:
        >>> config = AppConfig(store_dir=".resource-sync/store")
    """
    store_dir: str = '.resource-sync/store'
    provider: str = PROVIDER_AZURE_CLI
    snapshot_path: Optional[str] = None
    command_timeout: float = 120
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    sync_source: SyncSource = SyncSource.MANUAL
    lock_timeout: float = 30.0
