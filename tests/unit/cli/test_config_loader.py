"""Unit tests for cli.config module."""

import pytest

from src.azure_client.retry_logic import RetryPolicy
from src.cli.config import ConfigLoader, ResolutionLoader
from src.cli.errors import ConfigError, ConfigNotFoundError, ResolutionFileError
from src.cli.models import AppConfig, PROVIDER_SNAPSHOT
from src.models.resource import SyncSource
from src.models.sync_models import Resolution, TrackedField
from src.reconciler.errors import InvalidResolutionError


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep .env files and the store override out of these tests."""
    monkeypatch.setattr('src.cli.config.load_dotenv', lambda: None)
    monkeypatch.delenv('RESOURCE_SYNC_STORE_DIR', raising=False)


def _write(tmp_path, content, name="config.yaml"):
    path = tmp_path / name
    path.write_text(content, encoding='utf-8')
    return str(path)


class TestConfigLoader:
    """Test cases for ConfigLoader class."""

    def test_missing_default_config_uses_defaults(self, tmp_path, monkeypatch):
        """Without .resource-sync/config.yaml the defaults apply."""
        monkeypatch.chdir(tmp_path)

        config = ConfigLoader.load()

        assert config == AppConfig()

    def test_missing_explicit_config_raises(self, tmp_path):
        """An explicit config path must exist."""
        with pytest.raises(ConfigNotFoundError) as exc_info:
            ConfigLoader.load(str(tmp_path / "nope.yaml"))

        assert exc_info.value.config_path.endswith("nope.yaml")

    def test_full_config(self, tmp_path):
        """Every field is parsed."""
        # Arrange
        path = _write(tmp_path, """
store_dir: /var/lib/resource-sync
provider: snapshot
snapshot_path: azure-raw.json
command_timeout: 60
lock_timeout: 5
sync_source: script
retry:
  max_retries: 5
  initial_delay: 0.5
  max_delay: 10
""")

        # Act
        config = ConfigLoader.load(path)

        # Assert
        assert config.store_dir == "/var/lib/resource-sync"
        assert config.provider == PROVIDER_SNAPSHOT
        assert config.snapshot_path == "azure-raw.json"
        assert config.command_timeout == 60
        assert config.lock_timeout == 5
        assert config.sync_source is SyncSource.SCRIPT
        assert config.retry == RetryPolicy(max_retries=5, initial_delay=0.5, backoff_multiplier=2, max_delay=10)

    def test_empty_file_uses_defaults(self, tmp_path):
        """An empty config file is valid."""
        assert ConfigLoader.load(_write(tmp_path, "")) == AppConfig()

    def test_unknown_field_rejected(self, tmp_path):
        """Typos in field names are reported."""
        with pytest.raises(ConfigError, match="Unknown fields: stor_dir"):
            ConfigLoader.load(_write(tmp_path, "stor_dir: x\n"))

    def test_snapshot_provider_requires_path(self, tmp_path):
        """provider: snapshot needs snapshot_path."""
        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader.load(_write(tmp_path, "provider: snapshot\n"))

        assert exc_info.value.config_field == 'snapshot_path'

    def test_unknown_provider_rejected(self, tmp_path):
        """Only known providers are accepted."""
        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader.load(_write(tmp_path, "provider: aws\n"))

        assert exc_info.value.config_field == 'provider'

    @pytest.mark.parametrize("content,field", [
        ("command_timeout: 0\n", 'command_timeout'),
        ("lock_timeout: fast\n", 'lock_timeout'),
        ("sync_source: cron\n", 'sync_source'),
        ("retry: 3\n", 'retry'),
        ("retry:\n  max_retries: -1\n", 'retry.max_retries'),
        ("retry:\n  initial_delay: 0\n", 'retry.initial_delay'),
    ])
    def test_invalid_values(self, tmp_path, content, field):
        """Invalid values name the offending field."""
        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader.load(_write(tmp_path, content))

        assert exc_info.value.config_field == field

    def test_invalid_yaml(self, tmp_path):
        """Malformed YAML raises ConfigError."""
        with pytest.raises(ConfigError, match="Invalid YAML syntax"):
            ConfigLoader.load(_write(tmp_path, "store_dir: [unclosed\n"))

    def test_non_mapping_config(self, tmp_path):
        """The config document must be a mapping."""
        with pytest.raises(ConfigError, match="YAML dictionary"):
            ConfigLoader.load(_write(tmp_path, "- a\n- b\n"))

    def test_store_dir_environment_override(self, tmp_path, monkeypatch):
        """RESOURCE_SYNC_STORE_DIR overrides store_dir."""
        monkeypatch.setenv('RESOURCE_SYNC_STORE_DIR', '/tmp/override')

        config = ConfigLoader.load(_write(tmp_path, "store_dir: /var/lib/x\n"))

        assert config.store_dir == '/tmp/override'


class TestResolutionLoader:
    """Test cases for ResolutionLoader class."""

    def test_loads_resolution_map(self, tmp_path):
        """A resolutions file parses into a typed map."""
        path = _write(tmp_path, """
vm-web-01:
  status: use-live
  location: use-azure
sql-main:
  environment: manual
""", name="resolutions.yaml")

        resolutions = ResolutionLoader.load(path)

        assert resolutions == {
            'vm-web-01': {TrackedField.STATUS: Resolution.USE_LIVE, TrackedField.LOCATION: Resolution.USE_LIVE},
            'sql-main': {TrackedField.ENVIRONMENT: Resolution.MANUAL},
        }

    def test_missing_file(self, tmp_path):
        """A missing resolutions file raises ResolutionFileError."""
        with pytest.raises(ResolutionFileError, match="file not found"):
            ResolutionLoader.load(str(tmp_path / "missing.yaml"))

    def test_empty_file(self, tmp_path):
        """An empty file yields an empty map."""
        assert ResolutionLoader.load(_write(tmp_path, "", name="r.yaml")) == {}

    def test_non_mapping_file(self, tmp_path):
        """The document must be a mapping."""
        with pytest.raises(ResolutionFileError, match="expected a YAML dictionary"):
            ResolutionLoader.load(_write(tmp_path, "- use-live\n", name="r.yaml"))

    def test_unknown_choice(self, tmp_path):
        """Unknown resolution values are rejected."""
        with pytest.raises(InvalidResolutionError):
            ResolutionLoader.load(_write(tmp_path, "vm1:\n  status: merge\n", name="r.yaml"))
