"""YAML configuration and resolution file loading.

This module loads the tool configuration from .resource-sync/config.yaml
and operator-supplied conflict resolutions from a YAML file. A missing
default configuration file is treated as "use defaults".
"""

import os
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from src.azure_client.retry_logic import RetryPolicy
from src.models.resource import SyncSource
from src.models.sync_models import ResolutionMap
from src.reconciler.conflict_resolver import parse_resolutions
from .errors import ConfigError, ConfigNotFoundError, ResolutionFileError
from .models import AppConfig, PROVIDER_AZURE_CLI, PROVIDER_SNAPSHOT


class ConfigLoader:
    """Handles configuration file loading and validation.

    Configuration file structure:
        store_dir: ".resource-sync/store"
        provider: "azure-cli"            # or "snapshot"
        snapshot_path: "azure-raw.json"  # required for provider: snapshot
        command_timeout: 120
        retry:
          max_retries: 3
          initial_delay: 1.0
          backoff_multiplier: 2
          max_delay: 30.0
        sync_source: "manual"            # manual | automatic | script
        lock_timeout: 30

    The RESOURCE_SYNC_STORE_DIR environment variable overrides store_dir.
    """

    DEFAULT_CONFIG_PATH = '.resource-sync/config.yaml'

    KNOWN_FIELDS = {
        'store_dir', 'provider', 'snapshot_path', 'command_timeout',
        'retry', 'sync_source', 'lock_timeout',
    }
    RETRY_FIELDS = {'max_retries', 'initial_delay', 'backoff_multiplier', 'max_delay'}
    PROVIDERS = {PROVIDER_AZURE_CLI, PROVIDER_SNAPSHOT}

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> AppConfig:
        """Load and parse configuration.

        Args:
            config_path: Explicit config file; when None the default path is
                used and a missing file yields the defaults

        Returns:
            AppConfig with parsed configuration

        Raises:
            ConfigNotFoundError: If an explicit config file does not exist
            ConfigError: If configuration is invalid or malformed
        """
        load_dotenv()
        path = config_path or cls.DEFAULT_CONFIG_PATH

        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            if config_path is not None:
                raise ConfigNotFoundError(config_path)
            content = ''
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}")

        try:
            config_dict = yaml.safe_load(content) if content.strip() else {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {str(e)}")

        if config_dict is None:
            config_dict = {}

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a YAML dictionary, got {type(config_dict).__name__}"
            )

        config = cls._parse_config(config_dict)

        store_dir_override = os.getenv('RESOURCE_SYNC_STORE_DIR')
        if store_dir_override:
            config.store_dir = store_dir_override

        return config

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> AppConfig:
        unknown = set(config_dict.keys()) - cls.KNOWN_FIELDS
        if unknown:
            raise ConfigError(f"Unknown fields: {', '.join(sorted(unknown))}")

        config = AppConfig()

        if 'store_dir' in config_dict:
            config.store_dir = cls._require_str(config_dict['store_dir'], 'store_dir')

        if 'provider' in config_dict:
            provider = cls._require_str(config_dict['provider'], 'provider')
            if provider not in cls.PROVIDERS:
                raise ConfigError(
                    f"must be one of {', '.join(sorted(cls.PROVIDERS))}, got '{provider}'",
                    config_field='provider',
                )
            config.provider = provider

        if config_dict.get('snapshot_path') is not None:
            config.snapshot_path = cls._require_str(config_dict['snapshot_path'], 'snapshot_path')

        if config.provider == PROVIDER_SNAPSHOT and not config.snapshot_path:
            raise ConfigError("required when provider is 'snapshot'", config_field='snapshot_path')

        if 'command_timeout' in config_dict:
            config.command_timeout = cls._require_positive(config_dict['command_timeout'], 'command_timeout')

        if 'lock_timeout' in config_dict:
            config.lock_timeout = cls._require_positive(config_dict['lock_timeout'], 'lock_timeout')

        if 'sync_source' in config_dict:
            value = config_dict['sync_source']
            try:
                config.sync_source = SyncSource(value)
            except ValueError:
                raise ConfigError(
                    f"must be one of manual, automatic, script, got '{value}'",
                    config_field='sync_source',
                )

        if 'retry' in config_dict:
            config.retry = cls._parse_retry(config_dict['retry'])

        return config

    @classmethod
    def _parse_retry(cls, retry_dict: Any) -> RetryPolicy:
        if not isinstance(retry_dict, dict):
            raise ConfigError("must be a dictionary", config_field='retry')

        unknown = set(retry_dict.keys()) - cls.RETRY_FIELDS
        if unknown:
            raise ConfigError(f"unknown fields: {', '.join(sorted(unknown))}", config_field='retry')

        defaults = RetryPolicy()
        max_retries = retry_dict.get('max_retries', defaults.max_retries)
        if not isinstance(max_retries, int) or isinstance(max_retries, bool) or max_retries < 0:
            raise ConfigError("must be a non-negative integer", config_field='retry.max_retries')

        return RetryPolicy(
            max_retries=max_retries,
            initial_delay=cls._require_positive(
                retry_dict.get('initial_delay', defaults.initial_delay), 'retry.initial_delay'),
            backoff_multiplier=cls._require_positive(
                retry_dict.get('backoff_multiplier', defaults.backoff_multiplier), 'retry.backoff_multiplier'),
            max_delay=cls._require_positive(
                retry_dict.get('max_delay', defaults.max_delay), 'retry.max_delay'),
        )

    @staticmethod
    def _require_str(value: Any, field_name: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ConfigError("must be a non-empty string", config_field=field_name)
        return value

    @staticmethod
    def _require_positive(value: Any, field_name: str) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ConfigError("must be a positive number", config_field=field_name)
        return value


class ResolutionLoader:
    """Loads operator conflict resolutions from a YAML file.

    File structure (resource name -> field -> resolution):
        vm-web-01:
          status: use-live
          location: use-stored
        sql-main:
          environment: manual
    """

    @classmethod
    def load(cls, file_path: str) -> ResolutionMap:
        """Load a resolution map.

        Raises:
            ResolutionFileError: If the file is missing or not a YAML mapping
            InvalidResolutionError: If an entry names an unknown field or choice
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise ResolutionFileError(file_path, 'file not found')
        except OSError as e:
            raise ResolutionFileError(file_path, str(e))

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ResolutionFileError(file_path, f"invalid YAML syntax: {e}")

        if data is None:
            return {}

        if not isinstance(data, dict):
            raise ResolutionFileError(
                file_path, f"expected a YAML dictionary, got {type(data).__name__}"
            )

        return parse_resolutions(data)
