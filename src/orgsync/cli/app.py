"""
CLI App - Main entry point for the orgsync command line tool.
"""

import argparse
import logging
import signal
import threading
from pathlib import Path
from typing import Any

from orgsync import __version__
from orgsync.adapters import (
    EnvironmentConfigProvider,
    OrgTaskStore,
    TodoistAdapter,
    TodoistApiClient,
)
from orgsync.application import SyncOrchestrator, SyncReport
from orgsync.core.domain.enums import SyncDirection, SyncState
from orgsync.core.exceptions import ConfigurationError, OrgSyncError, TransportError
from orgsync.core.ports.config_provider import AppConfig

from .exit_codes import ExitCode
from .logging import get_logger, setup_logging
from .output import Console


def create_parser() -> argparse.ArgumentParser:
    """
    Create the command-line argument parser for orgsync.

    Returns:
        Configured ArgumentParser instance.
    """
    common = argparse.ArgumentParser(add_help=False)
    common_group = common.add_argument_group("Configuration")
    common_group.add_argument(
        "--config", "-c", type=str, help="Path to config file (.orgsync.yaml, .orgsync.toml)"
    )
    common_group.add_argument(
        "--timeout", type=float, default=None, help="Request timeout in seconds"
    )

    output_group = common.add_argument_group("Output")
    output_group.add_argument(
        "--verbose", "-v", action="store_true", default=None, help="Verbose output"
    )
    output_group.add_argument(
        "--quiet", "-q", action="store_true", help="Only print errors and a summary line"
    )
    output_group.add_argument("--no-color", action="store_true", help="Disable colored output")
    output_group.add_argument(
        "--output", "-o", choices=["text", "json"], default="text", help="Report format"
    )
    output_group.add_argument(
        "--log-format", choices=["text", "json"], default="text", help="Log format"
    )
    output_group.add_argument("--log-file", type=str, help="Also write logs to this file")

    sync_options = argparse.ArgumentParser(add_help=False)
    sync_group = sync_options.add_argument_group("Sync")
    sync_group.add_argument(
        "--dry-run",
        "-n",
        action="store_true",
        default=None,
        help="Compute and report changes without writing",
    )
    sync_group.add_argument(
        "--project",
        "-p",
        action="append",
        dest="projects",
        metavar="NAME",
        help="Only sync this project (repeatable)",
    )
    sync_group.add_argument(
        "--scope",
        "-s",
        action="append",
        dest="search_scope",
        metavar="PATH",
        help="Search scope entry, directory or file (repeatable, replaces the configured scope)",
    )
    sync_group.add_argument(
        "--workers", type=int, dest="max_workers", help="Projects reconciled in parallel"
    )

    parser = argparse.ArgumentParser(
        prog="orgsync",
        description="Reconcile Todoist projects with Org-mode files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Bring local files in line with Todoist
  orgsync pull

  # Preview what a push would change
  orgsync push --dry-run

  # Only one project, JSON report
  orgsync pull -p Work -o json

  # List remote projects
  orgsync projects
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True
    subparsers.add_parser(
        "pull",
        parents=[common, sync_options],
        help="Apply remote changes to local files",
    )
    subparsers.add_parser(
        "push",
        parents=[common, sync_options],
        help="Apply local changes to the remote service",
    )
    subparsers.add_parser("projects", parents=[common], help="List remote projects")

    return parser


def cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Config overrides from parsed arguments; options not given are None."""
    return {
        "request_timeout_seconds": getattr(args, "timeout", None),
        "verbose": getattr(args, "verbose", None),
        "dry_run": getattr(args, "dry_run", None),
        "projects": getattr(args, "projects", None),
        "search_scope": getattr(args, "search_scope", None),
        "max_workers": getattr(args, "max_workers", None),
    }


def load_config(args: argparse.Namespace, console: Console) -> AppConfig | None:
    """Load and validate configuration; prints errors and returns None on failure."""
    config_file = Path(args.config) if getattr(args, "config", None) else None
    provider = EnvironmentConfigProvider(config_file=config_file, cli_overrides=cli_overrides(args))

    errors = provider.validate()
    if errors:
        console.config_errors(errors)
        return None

    config = provider.load()
    console.debug(f"Configuration: {provider.name}")
    return config


def create_client(config: AppConfig) -> TodoistApiClient:
    return TodoistApiClient(
        token=config.todoist.api_token,
        base_url=config.todoist.base_url,
        timeout=config.sync.request_timeout_seconds,
    )


def exit_code_for(report: SyncReport) -> ExitCode:
    if report.error:
        return ExitCode.CONNECTION_ERROR
    if any(r.state == SyncState.CANCELLED for r in report.results):
        return ExitCode.CANCELLED
    if not report.success:
        return ExitCode.PARTIAL_FAILURE
    return ExitCode.SUCCESS


def run_sync(console: Console, args: argparse.Namespace, direction: SyncDirection) -> int:
    """
    Run a pull or push.

    Args:
        console: Console for output.
        args: Parsed command-line arguments.
        direction: Which side is the source of truth.

    Returns:
        Exit code.
    """
    config = load_config(args, console)
    if config is None:
        return ExitCode.CONFIG_ERROR

    console.header(f"orgsync {direction.value}")
    if config.sync.dry_run:
        console.dry_run_banner()

    with create_client(config) as client:
        orchestrator = SyncOrchestrator(
            service=TodoistAdapter(client),
            store=OrgTaskStore(),
            config=config.sync,
            progress_callback=console.project_progress,
        )

        # Ctrl+C lets in-flight projects stop after their current stage
        previous_handler = None
        if threading.current_thread() is threading.main_thread():
            previous_handler = signal.signal(signal.SIGINT, lambda *_: orchestrator.cancel())
        try:
            report = orchestrator.run(direction=direction)
        except ConfigurationError as e:
            console.config_errors([str(e)])
            return ExitCode.CONFIG_ERROR
        finally:
            if previous_handler is not None:
                signal.signal(signal.SIGINT, previous_handler)

    console.sync_report(report)
    return exit_code_for(report)


def run_projects(console: Console, args: argparse.Namespace) -> int:
    """List remote projects."""
    config = load_config(args, console)
    if config is None:
        return ExitCode.CONFIG_ERROR

    with create_client(config) as client:
        orchestrator = SyncOrchestrator(
            service=TodoistAdapter(client), store=OrgTaskStore(), config=config.sync
        )
        try:
            projects = orchestrator.list_projects()
        except TransportError as e:
            console.error(f"Could not list projects: {e}")
            return ExitCode.CONNECTION_ERROR

    console.project_list(projects)
    return ExitCode.SUCCESS


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the orgsync CLI.

    Parses arguments, sets up logging, and runs the selected command.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    setup_logging(
        level=log_level,
        log_format=args.log_format,
        log_file=args.log_file,
        static_fields={"service": "orgsync", "version": __version__},
    )
    logger = get_logger("CLI", command=args.command)
    logger.debug(f"orgsync {__version__} started")

    console = Console(
        color=not args.no_color,
        verbose=bool(args.verbose),
        quiet=args.quiet,
        json_mode=args.output == "json",
    )

    try:
        if args.command == "projects":
            return run_projects(console, args)
        return run_sync(console, args, SyncDirection.from_string(args.command))

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        console.print()
        console.warning("Interrupted by user")
        return ExitCode.CANCELLED

    except OrgSyncError as e:
        logger.debug(f"{e.kind}: {e}", exc_info=True)
        console.error(str(e))
        return ExitCode.ERROR


if __name__ == "__main__":
    raise SystemExit(main())
