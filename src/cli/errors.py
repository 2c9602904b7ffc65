"""Typed exception hierarchy for CLI-related errors.

This module defines all custom exceptions used by the CLI.
All exceptions inherit from CLIError base class for easy catching and
include descriptive messages with context to help with debugging.
"""

from typing import Optional

from src.azure_client.errors import SyncError


class CLIError(SyncError):
    """Base exception for all CLI-related errors."""
    pass


class ConfigNotFoundError(CLIError):
    """Raised when an explicitly requested configuration file is missing."""

    def __init__(self, config_path: str):
        super().__init__(
            f"Configuration file not found at {config_path}"
        )
        self.config_path = config_path


class ConfigError(CLIError):
    """Raised when the configuration file is invalid."""

    def __init__(self, message: str, config_field: Optional[str] = None):
        if config_field:
            full_message = f"Config error in field '{config_field}': {message}"
        else:
            full_message = f"Config error: {message}"
        super().__init__(full_message)
        self.config_field = config_field
        self.original_message = message


class ResolutionFileError(CLIError):
    """Raised when a resolutions file cannot be read or parsed."""

    def __init__(self, file_path: str, reason: str):
        super().__init__(f"Cannot load resolutions from {file_path}: {reason}")
        self.file_path = file_path
        self.reason = reason
