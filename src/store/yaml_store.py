"""File-backed resource store using YAML documents.

Layout under the store directory:

    resources.yaml                  mapping of resource name -> record
    history/<YYYY-MM-DD>/<id>.yaml  one immutable run record per file
    .run.lock                       advisory lock held for a whole run

resources.yaml is rewritten atomically (temp file + os.replace) on every
upsert or delete, so each single-record operation is atomic. History files
are created exclusively and never rewritten.
"""

import logging
import os
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import yaml

# Import fcntl for POSIX file locking (not available on Windows)
try:
    import fcntl
    HAS_FCNTL = True
except ImportError:
    HAS_FCNTL = False

from src.models.resource import StoredResource
from src.models.sync_models import SyncHistory, SyncStatus
from .base import StoreStats
from .errors import (
    HistoryWriteError,
    StoreError,
    StoreLockError,
    StoreNotConnectedError,
    StoreOperationError,
)

logger = logging.getLogger(__name__)

RESOURCES_FILE = 'resources.yaml'
HISTORY_DIR = 'history'
LOCK_FILE = '.run.lock'


class FileResourceStore:
    """Resource store persisted as YAML files in one directory.

    The store is constructed explicitly and has an explicit lifecycle:
    call connect() (or use it as a context manager) before any operation.

    Example:
        >>> with FileResourceStore(Path('.resource-sync/store')) as store:
        ...     with store.run_lock(timeout=30):
        ...         records = store.get_all()
    """

    def __init__(self, store_dir: Path):
        self.store_dir = Path(store_dir)
        self._resources: Optional[Dict[str, Dict[str, Any]]] = None

    @property
    def resources_path(self) -> Path:
        return self.store_dir / RESOURCES_FILE

    @property
    def history_dir(self) -> Path:
        return self.store_dir / HISTORY_DIR

    @property
    def is_connected(self) -> bool:
        return self._resources is not None

    def connect(self) -> None:
        """Create the store directory if needed and load resources.yaml.

        Raises:
            StoreError: If the directory cannot be created or the resource
                document is unreadable
        """
        try:
            self.history_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Cannot create store directory {self.store_dir}: {e}")

        self._resources = self._load_resources()
        logger.info(f"Connected to store {self.store_dir} ({len(self._resources)} resources)")

    def close(self) -> None:
        self._resources = None
        logger.debug(f"Closed store {self.store_dir}")

    def __enter__(self) -> 'FileResourceStore':
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def get_all(self) -> List[StoredResource]:
        resources = self._require_connection('get_all')
        return [StoredResource.from_dict(data) for data in resources.values()]

    def get_by_name(self, name: str) -> Optional[StoredResource]:
        resources = self._require_connection('get_by_name')
        data = resources.get(name)
        return StoredResource.from_dict(data) if data is not None else None

    def upsert(self, record: StoredResource) -> StoredResource:
        """Insert or replace the record stored under ``record.name``."""
        resources = self._require_connection('upsert')
        previous = resources.get(record.name)
        resources[record.name] = record.to_dict()
        try:
            self._write_resources(resources)
        except OSError as e:
            _restore(resources, record.name, previous)
            raise StoreOperationError('upsert', record.name, str(e))
        logger.debug(f"Upserted {record.name}")
        return record

    def delete_by_name(self, name: str) -> None:
        """Remove the record stored under ``name``.

        Raises:
            StoreOperationError: If no such record exists or the write fails
        """
        resources = self._require_connection('delete')
        if name not in resources:
            raise StoreOperationError('delete', name, 'resource not found')
        previous = resources.pop(name)
        try:
            self._write_resources(resources)
        except OSError as e:
            resources[name] = previous
            raise StoreOperationError('delete', name, str(e))
        logger.debug(f"Deleted {name}")

    def save_history(self, record: SyncHistory) -> None:
        """Append a run record. Existing records are never overwritten.

        Raises:
            HistoryWriteError: If the record exists already or cannot be written
        """
        self._require_connection('save_history')
        day_dir = self.history_dir / record.date
        path = day_dir / f"{record.id}.yaml"
        try:
            day_dir.mkdir(parents=True, exist_ok=True)
            with open(path, 'x', encoding='utf-8') as f:
                yaml.safe_dump(record.to_dict(), f, default_flow_style=False, sort_keys=False)
        except FileExistsError:
            raise HistoryWriteError(record.id, 'record already exists')
        except OSError as e:
            raise HistoryWriteError(record.id, str(e))
        logger.info(f"Saved sync history {record.id}")

    def get_history(self, limit: Optional[int] = 20) -> List[SyncHistory]:
        """Return up to ``limit`` run records, newest first."""
        self._require_connection('get_history')
        records = []
        for path in self.history_dir.glob('*/*.yaml'):
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f)
                records.append(SyncHistory.from_dict(data))
            except (OSError, yaml.YAMLError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping unreadable history record {path}: {e}")
        records.sort(key=lambda r: r.timestamp, reverse=True)
        return records[:limit]

    def get_last_successful_sync(self) -> Optional[SyncHistory]:
        for record in self.get_history(limit=None):
            if record.status is SyncStatus.SUCCESS:
                return record
        return None

    def get_stats(self) -> StoreStats:
        """Summarize stored resources and the latest run."""
        records = self.get_all()
        stats = StoreStats(total_resources=len(records))
        for record in records:
            type_key = record.type.value
            env_key = record.environment.value
            stats.by_type[type_key] = stats.by_type.get(type_key, 0) + 1
            stats.by_environment[env_key] = stats.by_environment.get(env_key, 0) + 1
            if record.git_repository is not None:
                stats.with_git_repository += 1
            else:
                stats.without_git_repository += 1

        latest = self.get_history(limit=1)
        if latest:
            stats.last_sync = latest[0].timestamp
            stats.last_sync_status = latest[0].status.value
        return stats

    @contextmanager
    def run_lock(self, timeout: float = 30.0) -> Iterator[None]:
        """Hold an exclusive advisory lock on the store for a whole run.

        Raises:
            StoreLockError: If the lock cannot be acquired within timeout
        """
        self.store_dir.mkdir(parents=True, exist_ok=True)
        lock_path = self.store_dir / LOCK_FILE
        lock_acquired = False

        with open(lock_path, 'w') as lock_file:
            try:
                if HAS_FCNTL:
                    logger.debug(f"Acquiring store lock {lock_path}")
                    start_time = time.time()
                    while True:
                        try:
                            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                            lock_acquired = True
                            logger.debug("Store lock acquired")
                            break
                        except OSError:
                            if time.time() - start_time > timeout:
                                raise StoreLockError(str(lock_path), timeout)
                            time.sleep(0.1)
                else:
                    logger.warning(
                        "File locking not available on this platform. "
                        "Concurrent runs may overwrite each other."
                    )

                yield

            finally:
                if HAS_FCNTL and lock_acquired:
                    try:
                        fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
                        logger.debug("Store lock released")
                    except OSError as e:
                        logger.warning(f"Failed to release store lock: {e}")

    def _require_connection(self, operation: str) -> Dict[str, Dict[str, Any]]:
        if self._resources is None:
            raise StoreNotConnectedError(operation)
        return self._resources

    def _load_resources(self) -> Dict[str, Dict[str, Any]]:
        try:
            with open(self.resources_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StoreError(f"Cannot read {self.resources_path}: {e}")

        if not content.strip():
            return {}

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise StoreError(f"Invalid YAML in {self.resources_path}: {e}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise StoreError(
                f"{self.resources_path} must be a YAML mapping, got {type(data).__name__}"
            )
        return data

    def _write_resources(self, resources: Dict[str, Dict[str, Any]]) -> None:
        content = yaml.safe_dump(resources, default_flow_style=False, allow_unicode=True, sort_keys=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.store_dir), prefix='.resources-', suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(content)
            os.replace(tmp_path, self.resources_path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


def _restore(resources: Dict[str, Dict[str, Any]], name: str, previous: Optional[Dict[str, Any]]) -> None:
    if previous is None:
        resources.pop(name, None)
    else:
        resources[name] = previous
