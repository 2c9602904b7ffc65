"""Main CLI entry point for the resource-sync command.

This module provides the Typer application that serves as the entry point
for the resource-sync command-line tool. It uses options on the main command
rather than subcommands for a simpler user experience.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.cli.sync_command import SyncCommand

__version__ = "0.1.0"

# Create Typer app - no_args_is_help=False so a bare invocation runs a sync
app = typer.Typer(
    name="resource-sync",
    help="""Reconcile the live Azure resource inventory with the local resource store.

QUICK START:
  resource-sync                               # Run a full sync (live wins on differences)
  resource-sync --dry-run                     # Preview changes
  resource-sync --resolutions conflicts.yaml  # Sync honoring per-field resolutions
  resource-sync --history 10                  # Show the last 10 runs""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=False,
)

# Module logger
logger = logging.getLogger(__name__)


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'src' namespace logger to avoid affecting third-party
    libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:  # verbosity >= 2
        level = logging.DEBUG

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)

    log_format = "%(asctime)s [%(levelname)8s] %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(log_format, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        # Timestamped filename in local time
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"resource-sync_{timestamp}.log"

        file_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        file_formatter = logging.Formatter(file_format, datefmt=date_format)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


@app.command()
def main_command(
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "--dryrun",
        help="Preview changes without touching the store",
    ),
    resolutions: Optional[str] = typer.Option(
        None,
        "--resolutions",
        help="YAML file of per-resource, per-field conflict resolutions",
        metavar="FILE",
    ),
    user_id: Optional[str] = typer.Option(
        None,
        "--user-id",
        help="Operator recorded in the sync history",
    ),
    snapshot: Optional[str] = typer.Option(
        None,
        "--snapshot",
        help="Read provider data from a saved JSON snapshot instead of the az CLI",
        metavar="FILE",
    ),
    history: Optional[int] = typer.Option(
        None,
        "--history",
        help="Show the last N sync runs and exit",
        metavar="N",
        min=1,
    ),
    stream: bool = typer.Option(
        False,
        "--stream",
        help="Emit JSON-line log/complete/error events on stdout",
    ),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        help="Configuration file (default: .resource-sync/config.yaml)",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """Reconcile the live Azure resource inventory with the local resource store.

    \b
    Without --resolutions every difference is updated from live. With
    --resolutions, differing resources are only updated when every
    differing field resolves to use-live; any manual field skips the
    resource.

    \b
    EXIT CODES:
      0 success, 1 general error, 2 conflicts left unresolved,
      3 provider error, 4 store error, 5 partial or failed run
    """
    if version:
        typer.echo(f"resource-sync version {__version__}")
        raise typer.Exit()

    _configure_logging(verbosity, logdir)

    # Keep stdout clean for the event stream
    output = OutputHandler(verbosity=verbosity, no_color=no_color, stderr=stream)

    sync_cmd = SyncCommand(config_path=config, output_handler=output)
    exit_code = sync_cmd.run(
        dry_run=dry_run,
        resolutions_path=resolutions,
        user_id=user_id,
        snapshot_path=snapshot,
        history_limit=history,
        stream=stream,
    )

    raise typer.Exit(int(exit_code))


def main() -> None:
    """Main entry point for the CLI application.

    This function is called when the module is executed directly or
    when the console script is invoked.
    """
    app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
