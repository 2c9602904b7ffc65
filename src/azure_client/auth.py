"""Environment settings for the Azure CLI provider.

This module loads provider settings from environment variables using
python-dotenv. Authentication itself is delegated to the ``az`` CLI
session; nothing here holds or logs credentials.
"""

import os
from typing import NamedTuple, Optional

from dotenv import load_dotenv


class AzureSettings(NamedTuple):
    """Provider settings resolved from the environment."""
    cli_path: str
    subscription_id: Optional[str]


class SettingsLoader:
    """Loads provider settings from environment variables.

    Optional environment variables:
        AZ_CLI_PATH: Path to the az executable (default: "az")
        AZURE_SUBSCRIPTION_ID: Pin commands to one subscription

    Example:
        >>> settings = SettingsLoader().get_settings()
        >>> print(f"Using {settings.cli_path}")
    """

    def __init__(self):
        """Initialize the loader by reading a .env file, if present."""
        load_dotenv()

    def get_settings(self) -> AzureSettings:
        """Get provider settings from environment variables."""
        cli_path = os.getenv('AZ_CLI_PATH') or 'az'
        subscription_id = os.getenv('AZURE_SUBSCRIPTION_ID') or None
        return AzureSettings(cli_path=cli_path, subscription_id=subscription_id)
