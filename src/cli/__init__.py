"""Command-line interface for Azure resource reconciliation.

This package provides the `resource-sync` CLI tool that fetches the live
resource inventory, reconciles it with the local resource store and
reports the outcome with progress indication and error handling.
"""

from .sync_command import SyncCommand
from .models import ExitCode, AppConfig
from .errors import (
    CLIError,
    ConfigNotFoundError,
    ConfigError,
    ResolutionFileError,
)

__all__ = [
    'SyncCommand',
    'ExitCode',
    'AppConfig',
    'CLIError',
    'ConfigNotFoundError',
    'ConfigError',
    'ResolutionFileError',
]
