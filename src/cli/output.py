"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output.
Uses Rich for spinners, colored output, tables and run summaries.
Supports verbosity levels and the --no-color flag.
"""

from contextlib import contextmanager
from typing import Iterator, List

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner
from rich.table import Table

from src.models.sync_models import (
    ProgressEvent,
    SyncHistory,
    SyncOperation,
    SyncPreview,
    SyncResult,
    SyncStatus,
)

_PROGRESS_MARKERS = {
    SyncOperation.CREATE: "[green]+[/green]",
    SyncOperation.UPDATE: "[blue]~[/blue]",
    SyncOperation.DELETE: "[red]-[/red]",
    SyncOperation.SKIP: "[dim]=[/dim]",
}

_STATUS_STYLES = {
    SyncStatus.SUCCESS: "green",
    SyncStatus.PARTIAL: "yellow",
    SyncStatus.FAILED: "red",
}


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Sync completed")
        >>> with handler.spinner("Fetching resources..."):
        ...     pass
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False, stderr: bool = False):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
            stderr: Write to stderr, keeping stdout free for event streams
        """
        self.verbosity = verbosity
        self.console = Console(
            force_terminal=not no_color,
            no_color=no_color,
            highlight=False,
            stderr=stderr,
        )

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}", style="red")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(message)

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2)."""
        if self.verbosity >= 2:
            self.console.print(f"[dim]{message}[/dim]")

    def print(self, message: str) -> None:
        self.console.print(message)

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display spinner for single operations.

        Example:
            >>> with handler.spinner("Fetching resources..."):
            ...     snapshot = provider.fetch()
        """
        spinner = Spinner("dots", text=message)
        with Live(spinner, console=self.console, refresh_per_second=10):
            yield

    def print_progress(self, event: ProgressEvent) -> None:
        """Display one processed action (only if verbosity >= 1)."""
        if self.verbosity < 1:
            return
        marker = _PROGRESS_MARKERS[event.operation]
        line = f"  {marker} {event.operation.value} {event.resource_name}"
        if event.reason:
            line += f" [dim]({event.reason})[/dim]"
        self.console.print(line)

    def print_sync_summary(self, result: SyncResult) -> None:
        """Display run summary with color coding."""
        stats = result.stats
        self.console.print("\n[bold]Sync Summary:[/bold]")

        if stats.resources_created > 0:
            self.console.print(f"  [green]+[/green] Created: {stats.resources_created} resource(s)")

        if stats.resources_updated > 0:
            self.console.print(f"  [blue]~[/blue] Updated: {stats.resources_updated} resource(s)")

        if stats.resources_deleted > 0:
            self.console.print(f"  [red]-[/red] Deleted: {stats.resources_deleted} resource(s)")

        if stats.resources_skipped > 0:
            self.console.print(f"  [dim]=[/dim] Skipped: {stats.resources_skipped} resource(s)")

        blocked = [
            action for action in result.actions
            if action.operation is SyncOperation.SKIP and action.conflicts
        ]
        for action in blocked:
            fields = ", ".join(c.field.value for c in action.conflicts)
            self.console.print(f"  [red]⚡[/red] {action.resource_name}: {action.reason} ({fields})")

        for message in result.errors:
            self.console.print(f"  [red]✗[/red] {message}")

        style = _STATUS_STYLES[result.status]
        self.console.print(
            f"\n[{style}]Sync {result.status.value}[/{style}] "
            f"({stats.resources_processed} processed in {stats.duration_ms}ms, run {result.history_id})"
        )

    def print_preview(self, preview: SyncPreview) -> None:
        """Display dry run preview of changes."""
        self.console.print("\n[bold]Dry Run - Changes Preview:[/bold]")

        sections = (
            ('new', "green", "Would create"),
            ('updated', "blue", "Would update"),
            ('deleted', "red", "Would delete"),
        )
        for key, style, title in sections:
            names = preview.changes.get(key, [])
            if names:
                self.console.print(f"\n[{style}]{title} ({len(names)} resource(s)):[/{style}]")
                for name in names:
                    self.console.print(f"  • {name}")

        if preview.conflicts:
            self.console.print(f"\n[yellow]Field differences ({len(preview.conflicts)}):[/yellow]")
            for conflict in preview.conflicts:
                data = conflict.to_dict()
                self.console.print(
                    f"  • {conflict.resource_name}.{conflict.field.value}: "
                    f"{data['storedValue']!r} -> {data['liveValue']!r}"
                )

        if not preview.has_changes:
            self.console.print("\n[green]Already in sync. No changes to apply.[/green]")

    def print_history(self, records: List[SyncHistory]) -> None:
        """Display recent run records as a table."""
        if not records:
            self.console.print("[yellow]No sync history recorded[/yellow]")
            return

        table = Table(title="Sync History")
        table.add_column("Run")
        table.add_column("Timestamp")
        table.add_column("Type")
        table.add_column("Source")
        table.add_column("Status")
        table.add_column("Details")

        for record in records:
            style = _STATUS_STYLES[record.status]
            table.add_row(
                record.id,
                record.timestamp,
                record.sync_type.value,
                record.source.value,
                f"[{style}]{record.status.value}[/{style}]",
                record.details or "",
            )

        self.console.print(table)
