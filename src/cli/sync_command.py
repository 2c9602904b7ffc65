"""Sync command orchestration for CLI.

This module provides the SyncCommand class that runs the whole
fetch -> normalize -> plan -> execute -> record-history workflow for the
CLI. It wires the configured fetch provider, the file-backed store and the
SyncOrchestrator together and translates failures into exit codes.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import typer

from src.azure_client.auth import SettingsLoader
from src.azure_client.cli_provider import AzureCliProvider
from src.azure_client.errors import ProviderError, ResponseValidationError
from src.azure_client.models import ProviderSnapshot
from src.azure_client.normalizer import normalize_all
from src.azure_client.snapshot_provider import SnapshotFileProvider
from src.models.resource import Resource
from src.models.sync_models import (
    ProgressEvent,
    SyncAPIResponse,
    SyncOperation,
    SyncOptions,
    SyncResult,
    SyncStatus,
    TriggerSource,
)
from src.reconciler.errors import ReconcilerError
from src.reconciler.event_stream import SyncEventStream
from src.reconciler.orchestrator import SyncOrchestrator
from src.reconciler.planner import preview
from src.store.errors import StoreError
from src.store.yaml_store import FileResourceStore
from .config import ConfigLoader, ResolutionLoader
from .errors import CLIError
from .models import AppConfig, ExitCode, PROVIDER_SNAPSHOT
from .output import OutputHandler

logger = logging.getLogger(__name__)


class SyncCommand:
    """Runs one reconciliation from the command line.

    The workflow:
        1. Load configuration (and resolutions, if given)
        2. Fetch subscription and raw resources from the provider
        3. Normalize the raw records into the live set
        4. Under the store run lock, preview (dry run) or sync
        5. Report the outcome and return an exit code

    Example:
        >>> output = OutputHandler(verbosity=1)
        >>> exit_code = SyncCommand(output_handler=output).run(dry_run=True)
        >>> sys.exit(exit_code)
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        output_handler: Optional[OutputHandler] = None,
        provider: Optional[Any] = None,
        store: Optional[FileResourceStore] = None,
    ):
        """Initialize sync command with dependencies.

        Args:
            config_path: Explicit config file (default: .resource-sync/config.yaml)
            output_handler: OutputHandler for terminal output (optional)
            provider: Fetch provider exposing fetch() (optional)
            store: Resource store (optional, built from config)
        """
        self.config_path = config_path
        self.output_handler = output_handler or OutputHandler()
        self.provider = provider
        self.store = store

    def run(
        self,
        dry_run: bool = False,
        resolutions_path: Optional[str] = None,
        user_id: Optional[str] = None,
        snapshot_path: Optional[str] = None,
        history_limit: Optional[int] = None,
        stream: bool = False,
    ) -> ExitCode:
        """Execute the command and translate the outcome to an exit code.

        Args:
            dry_run: Preview changes without touching the store
            resolutions_path: YAML file of conflict resolutions
            user_id: Operator recorded in the run history
            snapshot_path: Read provider data from this snapshot file
            history_limit: Print the last N runs and exit
            stream: Emit JSON-line log/complete/error events to stdout

        Returns:
            ExitCode indicating success or specific failure type
        """
        events = SyncEventStream(_echo_event) if stream else None

        try:
            logger.info("Loading configuration")
            config = ConfigLoader.load(self.config_path)
            store = self.store or FileResourceStore(Path(config.store_dir))

            if history_limit is not None:
                return self._show_history(store, history_limit)

            resolutions = None
            if resolutions_path:
                resolutions = ResolutionLoader.load(resolutions_path)
                logger.info(f"Loaded resolutions for {len(resolutions)} resource(s)")

            live = self._fetch_live(config, snapshot_path, events)

            with store:
                with store.run_lock(timeout=config.lock_timeout):
                    if dry_run:
                        return self._run_preview(store, live)

                    options = SyncOptions(
                        resolutions=resolutions,
                        sync_source=config.sync_source,
                        trigger=TriggerSource.CLI,
                        user_id=user_id,
                    )
                    return self._run_sync(store, live, options, events)

        except (ProviderError, ResponseValidationError) as e:
            return self._fail(ExitCode.PROVIDER_ERROR, f"Provider error: {e}", events)

        except StoreError as e:
            return self._fail(ExitCode.STORE_ERROR, f"Store error: {e}", events)

        except (CLIError, ReconcilerError) as e:
            return self._fail(ExitCode.GENERAL_ERROR, f"Error: {e}", events)

        except Exception as e:
            logger.exception("Unexpected error during sync")
            return self._fail(ExitCode.GENERAL_ERROR, f"Unexpected error: {e}", events)

    def _fetch_live(
        self,
        config: AppConfig,
        snapshot_path: Optional[str],
        events: Optional[SyncEventStream],
    ) -> List[Resource]:
        provider = self.provider or self._build_provider(config, snapshot_path)

        if events:
            events.log('info', 'Fetching resources from provider')
        with self.output_handler.spinner("Fetching resources..."):
            snapshot: ProviderSnapshot = provider.fetch()

        live = normalize_all(snapshot.resources, snapshot.subscription)
        message = f"Fetched {len(live)} resources from {snapshot.subscription.subscription_name}"
        logger.info(message)
        self.output_handler.info(message)
        if events:
            events.log('success', message)
        return live

    @staticmethod
    def _build_provider(
        config: AppConfig,
        snapshot_path: Optional[str],
    ) -> Union[AzureCliProvider, SnapshotFileProvider]:
        if snapshot_path:
            return SnapshotFileProvider(Path(snapshot_path))
        if config.provider == PROVIDER_SNAPSHOT:
            return SnapshotFileProvider(Path(config.snapshot_path))
        settings = SettingsLoader().get_settings()
        return AzureCliProvider(settings, timeout=config.command_timeout, retry=config.retry)

    def _run_preview(self, store: FileResourceStore, live: List[Resource]) -> ExitCode:
        result = preview(live, store.get_all())
        self.output_handler.print_preview(result)
        return ExitCode.SUCCESS

    def _run_sync(
        self,
        store: FileResourceStore,
        live: List[Resource],
        options: SyncOptions,
        events: Optional[SyncEventStream],
    ) -> ExitCode:
        orchestrator = SyncOrchestrator(store)
        stream_progress = events.progress_callback() if events else None

        def on_progress(event: ProgressEvent) -> None:
            self.output_handler.print_progress(event)
            if stream_progress:
                stream_progress(event)

        result = orchestrator.sync(live, options, on_progress=on_progress)

        if events:
            events.complete(result)
        self.output_handler.print_sync_summary(result)
        logger.debug(f"API response: {json.dumps(SyncAPIResponse.from_result(result).to_dict())}")

        return _exit_code_for(result)

    def _show_history(self, store: FileResourceStore, limit: int) -> ExitCode:
        with store:
            records = store.get_history(limit=limit)
        self.output_handler.print_history(records)
        return ExitCode.SUCCESS

    def _fail(self, code: ExitCode, message: str, events: Optional[SyncEventStream]) -> ExitCode:
        logger.error(message)
        self.output_handler.error(message)
        if events:
            events.error(message)
        return code


def _exit_code_for(result: SyncResult) -> ExitCode:
    if result.status is not SyncStatus.SUCCESS:
        return ExitCode.PARTIAL
    blocked = any(
        action.operation is SyncOperation.SKIP and action.conflicts
        for action in result.actions
    )
    return ExitCode.CONFLICTS if blocked else ExitCode.SUCCESS


def _echo_event(event: Dict[str, Any]) -> None:
    typer.echo(json.dumps(event))
