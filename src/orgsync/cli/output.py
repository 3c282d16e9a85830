"""
Output - Console output for sync reports and project listings.

Three modes: colored text, a quiet single summary line for scripts, and
JSON for programmatic use.
"""

import json
import sys

from orgsync.application.sync import ProjectSyncResult, SyncReport
from orgsync.core.domain.entities import Project
from orgsync.core.domain.enums import SyncState


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"

    BG_YELLOW = "\033[43m"


class Symbols:
    """Unicode symbols for terminal output."""

    CHECK = "✓"
    CROSS = "✗"
    ARROW = "→"
    DOT = "•"
    WARN = "⚠"
    INFO = "ℹ"
    GEAR = "⚙"


# Marker and color per terminal project state
_STATE_MARKERS = {
    SyncState.DONE: (Symbols.CHECK, Colors.GREEN),
    SyncState.FAILED: (Symbols.CROSS, Colors.RED),
    SyncState.CANCELLED: ("SKIP", Colors.YELLOW),
}


class Console:
    """
    Console output helper.

    Errors are printed in every mode; everything else is suppressed in quiet
    and JSON mode.
    """

    def __init__(
        self,
        color: bool = True,
        verbose: bool = False,
        quiet: bool = False,
        json_mode: bool = False,
    ):
        """
        Initialize the console output helper.

        Args:
            color: Enable colored output. Automatically disabled if stdout is not a TTY.
            verbose: Print progress and debug lines.
            quiet: Only print errors and the final summary line.
            json_mode: Print JSON documents instead of text.
        """
        self.json_mode = json_mode
        self.color = color and sys.stdout.isatty() and not json_mode
        self.verbose = verbose
        self.quiet = quiet or json_mode

        # Quiet mode overrides verbose
        if self.quiet:
            self.verbose = False

    def _c(self, text: str, *codes: str) -> str:
        if not self.color:
            return text
        return "".join(codes) + text + Colors.RESET

    def print(self, text: str = "", force: bool = False) -> None:
        """Print text to stdout unless quiet (``force`` prints anyway)."""
        if self.quiet and not force:
            return
        print(text)

    def header(self, text: str) -> None:
        """Title line of a command run."""
        self.print()
        self.print(self._c(f"{Symbols.ARROW} {text}", Colors.BOLD, Colors.CYAN))
        self.print()

    def success(self, text: str) -> None:
        self.print(self._c(f"  {Symbols.CHECK} {text}", Colors.GREEN))

    def error(self, text: str) -> None:
        """
        Print an error message with cross symbol.

        Always prints, even in quiet mode. A JSON error object in JSON mode.
        """
        if self.json_mode:
            print(json.dumps({"success": False, "errors": [text]}, indent=2))
            return
        print(self._c(f"  {Symbols.CROSS} {text}", Colors.RED))

    def warning(self, text: str) -> None:
        self.print(self._c(f"  {Symbols.WARN} {text}", Colors.YELLOW))

    def info(self, text: str) -> None:
        self.print(self._c(f"  {Symbols.INFO} {text}", Colors.CYAN))

    def debug(self, text: str) -> None:
        """Print debug message (only visible in verbose mode)."""
        if self.verbose:
            self.print(self._c(f"  [DEBUG] {text}", Colors.DIM))

    def table(self, headers: list[str], rows: list[list[str]]) -> None:
        """Print a table; column widths follow the content."""
        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row):
                widths[i] = max(widths[i], len(cell))

        self.print(
            "  " + "  ".join(self._c(h.ljust(widths[i]), Colors.BOLD) for i, h in enumerate(headers))
        )
        self.print("  " + "  ".join("-" * w for w in widths))
        for row in rows:
            self.print("  " + "  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)))

    def dry_run_banner(self) -> None:
        banner = f"  {Symbols.GEAR} DRY-RUN MODE - No changes will be made"
        if self.color:
            self.print(f"{Colors.BG_YELLOW}{Colors.BOLD}{banner}{Colors.RESET}")
        else:
            self.print(f"*** {banner} ***")
        self.print()

    def config_errors(self, errors: list[str]) -> None:
        """Print configuration errors. Always prints, even in quiet mode."""
        if self.json_mode:
            print(json.dumps({"success": False, "errors": errors}, indent=2))
            return
        print(self._c(f"  {Symbols.CROSS} Configuration errors:", Colors.RED, Colors.BOLD))
        for error in errors:
            print(f"    {Symbols.DOT} {error}")

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def project_list(self, projects: list[Project]) -> None:
        """Print remote projects as a table (or JSON)."""
        if self.json_mode:
            print(json.dumps([{"id": p.id, "name": p.name} for p in projects], indent=2))
            return
        self.table(["ID", "Name"], [[p.id, p.name] for p in projects])
        self.print()
        self.info(f"{len(projects)} project(s)")

    def project_progress(self, project: Project, state: SyncState) -> None:
        """Progress callback: one line per state change, verbose mode only."""
        self.debug(f"{project.name}: {state.value}")

    def sync_report(self, report: SyncReport) -> None:
        """
        Print a sync report.

        JSON mode prints one structured object, quiet mode a single summary
        line plus errors, and the default mode a table per run.
        """
        if self.json_mode:
            print(json.dumps(self._report_dict(report), indent=2))
            return

        totals = report.totals
        if self.quiet:
            status = "OK" if report.success else "FAILED"
            mode = "dry-run" if report.dry_run else "executed"
            print(
                f"status={status} mode={mode} direction={report.direction.value} "
                f"created={totals['created']} updated={totals['updated']} "
                f"deleted={totals['deleted']} failures={totals['failures']}"
            )
            if report.error:
                print(f"ERROR: {report.error}")
            for result in report.failed_projects:
                print(f"ERROR: {result.project.name}: {result.error}")
            return

        self.print()
        title = f"{report.direction.value.capitalize()} Complete"
        self.print(self._c(f"{Symbols.ARROW} {title}", Colors.BOLD))
        if report.dry_run:
            self.warning("Mode: DRY-RUN (no changes made)")

        if report.error:
            self.error(f"Sync aborted: {report.error}")
            return

        self.print()
        self.table(
            ["Project", "State", "Created", "Updated", "Deleted", "Unchanged"],
            [
                [
                    r.project.name,
                    r.state.value,
                    str(r.created),
                    str(r.updated),
                    str(r.deleted),
                    str(r.unchanged),
                ]
                for r in report.results
            ],
        )

        for result in report.results:
            self._project_details(result)

        self.print()
        if report.success:
            self.success("Sync completed successfully!")
        else:
            self.error(f"Sync completed with errors ({totals['failures']} failure(s))")

    def _project_details(self, result: ProjectSyncResult) -> None:
        failures = result.all_failures
        if result.state == SyncState.DONE and not failures and not result.warnings:
            return

        self.print()
        marker, color = _STATE_MARKERS.get(result.state, (result.state.value, Colors.DIM))
        self.print(
            f"    {Symbols.DOT} {result.project.name} -> {result.target or '?'} "
            + self._c(f"[{marker}]", color)
        )
        if result.error:
            self.error(f"{result.error_kind}: {result.error}")
        for failure in failures[:5]:
            self.print(self._c(f"      {failure}", Colors.DIM))
        if len(failures) > 5:
            self.print(self._c(f"      ... and {len(failures) - 5} more", Colors.DIM))
        for warning in result.warnings:
            self.warning(warning)

    @staticmethod
    def _report_dict(report: SyncReport) -> dict:
        return {
            "success": report.success,
            "dry_run": report.dry_run,
            "direction": report.direction.value,
            "error": report.error,
            "totals": report.totals,
            "projects": [
                {
                    "name": r.project.name,
                    "id": r.project.id,
                    "state": r.state.value,
                    "target": str(r.target) if r.target else None,
                    "target_created": r.target_created,
                    "created": r.created,
                    "updated": r.updated,
                    "deleted": r.deleted,
                    "unchanged": r.unchanged,
                    "error": r.error,
                    "error_kind": r.error_kind,
                    "warnings": r.warnings,
                    "failures": [
                        {
                            "operation": f.operation,
                            "task_id": f.task_id,
                            "content": f.content,
                            "kind": f.kind,
                            "error": f.error,
                        }
                        for f in r.all_failures
                    ],
                }
                for r in report.results
            ],
        }
