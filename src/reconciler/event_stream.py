"""Push-based progress events for a live log consumer.

SyncEventStream forwards ``log``, ``complete`` and ``error`` events to a
sink callable, one event per step. When the sink raises (the consumer went
away), the stream marks itself disconnected and drops every later event,
so a vanished consumer never aborts the run.
"""

import logging
from typing import Any, Callable, Dict, Optional

from src.models.sync_models import (
    ProgressEvent,
    SyncAPIResponse,
    SyncOperation,
    SyncResult,
    utc_now_iso,
)

logger = logging.getLogger(__name__)

EventSink = Callable[[Dict[str, Any]], None]

LOG_LEVELS = ('info', 'success', 'warning', 'error', 'debug')

_PROGRESS_VERBS = {
    SyncOperation.CREATE: 'Created',
    SyncOperation.UPDATE: 'Updated',
    SyncOperation.DELETE: 'Deleted',
    SyncOperation.SKIP: 'Skipped',
}


class SyncEventStream:
    """Emits sync events to a consumer until it disconnects."""

    def __init__(self, sink: EventSink):
        self._sink = sink
        self._connected = True

    @property
    def connected(self) -> bool:
        return self._connected

    def emit(self, event: str, data: Dict[str, Any]) -> None:
        """Send one event; swallowed once the consumer is gone."""
        if not self._connected:
            logger.debug(f"Consumer disconnected, dropping '{event}' event")
            return
        try:
            self._sink({'event': event, 'data': data})
        except Exception as e:
            self._connected = False
            logger.warning(f"Event consumer disconnected, cannot send '{event}': {e}")

    def log(
        self,
        level: str,
        message: str,
        resource: Optional[str] = None,
        operation: Optional[str] = None,
    ) -> None:
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level '{level}'")
        data: Dict[str, Any] = {'level': level, 'message': message, 'timestamp': utc_now_iso()}
        if resource is not None:
            data['resource'] = resource
        if operation is not None:
            data['operation'] = operation
        self.emit('log', data)

    def complete(self, result: SyncResult) -> None:
        response = SyncAPIResponse.from_result(result)
        data: Dict[str, Any] = {
            'success': result.success,
            'summary': response.data['summary'],
            'historyId': result.history_id,
        }
        if result.errors:
            data['errors'] = list(result.errors)
        self.emit('complete', data)

    def error(self, message: str) -> None:
        self.emit('error', {'error': message})

    def progress_callback(self) -> Callable[[ProgressEvent], None]:
        """Adapt this stream into an orchestrator ``on_progress`` callback."""
        def on_progress(event: ProgressEvent) -> None:
            message = f"{_PROGRESS_VERBS[event.operation]} {event.resource_name}"
            level = 'success'
            if event.operation is SyncOperation.SKIP:
                level = 'info'
                if event.reason:
                    message += f" ({event.reason})"
            self.log(level, message, resource=event.resource_name, operation=event.operation.value)

        return on_progress
