"""Fetch provider that reads a raw snapshot file.

The snapshot is the JSON document a previous fetch cycle saved:
``{"subscription": {...}, "resources": [...], "timestamp": "..."}``.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ErrorKind, ProviderError
from .models import ProviderSnapshot, Subscription
from .validation import parse_snapshot

logger = logging.getLogger(__name__)


class SnapshotFileProvider:
    """Serves subscription and resources from a snapshot file.

    The file is read and validated once, on first use.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._snapshot: Optional[ProviderSnapshot] = None

    def get_subscription(self) -> Subscription:
        return self.fetch().subscription

    def get_resources(self) -> List[Dict[str, Any]]:
        return self.fetch().resources

    def fetch(self) -> ProviderSnapshot:
        """Load the snapshot.

        Raises:
            ProviderError: If the file cannot be read
            ResponseValidationError: If the document is malformed
        """
        if self._snapshot is None:
            try:
                text = self._path.read_text(encoding='utf-8')
            except FileNotFoundError:
                raise ProviderError(f"Snapshot file not found: {self._path}", kind=ErrorKind.NOT_FOUND)
            except OSError as e:
                raise ProviderError(f"Cannot read snapshot file {self._path}: {e}")
            self._snapshot = parse_snapshot(text)
            logger.info(
                f"Loaded snapshot {self._path} ({len(self._snapshot.resources)} resources, "
                f"taken {self._snapshot.timestamp})"
            )
        return self._snapshot
