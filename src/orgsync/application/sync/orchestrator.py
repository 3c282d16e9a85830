"""
Sync Orchestrator - Coordinates per-project reconciliation.

This is the main entry point for sync operations.

Each project runs through FETCHING -> RESOLVING -> DIFFING -> APPLYING and
ends in DONE, FAILED or CANCELLED. Projects are independent and run
concurrently; the stages of one project run sequentially. The direction (pull
or push) only decides which snapshot is the source of truth and which applier
is the sink.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from orgsync.core.domain.entities import Delta, Project, Task
from orgsync.core.domain.enums import SyncDirection, SyncState
from orgsync.core.exceptions import (
    ConfigurationError,
    OrgSyncError,
    ParseError,
    ReconciliationConflict,
)
from orgsync.core.ports.config_provider import SyncConfig
from orgsync.core.ports.task_service import TaskServicePort
from orgsync.core.ports.task_store import TaskStorePort

from .apply import ApplyResult, FailedOperation, LocalApplier, RemoteApplier
from .cache import ProjectCache
from .diff import diff, index_by_id
from .extraction import extract_projects, extract_tasks
from .resolver import ProjectResolver


@dataclass
class ProjectSyncResult:
    """
    Outcome of one project's pipeline.

    A project that reached DONE may still carry per-task failures.
    """

    project: Project
    direction: SyncDirection
    state: SyncState = SyncState.FETCHING
    target: Path | None = None
    target_created: bool = False
    delta: Delta | None = None
    apply: ApplyResult | None = None
    failures: list[FailedOperation] = field(default_factory=list)
    error: str | None = None
    error_kind: str | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.state == SyncState.DONE and not self.all_failures

    @property
    def all_failures(self) -> list[FailedOperation]:
        """Per-task failures from extraction and apply."""
        applied = self.apply.failures if self.apply else []
        return self.failures + applied

    @property
    def created(self) -> int:
        return self.apply.created if self.apply else 0

    @property
    def updated(self) -> int:
        return self.apply.updated if self.apply else 0

    @property
    def deleted(self) -> int:
        return self.apply.deleted if self.apply else 0

    @property
    def unchanged(self) -> int:
        return self.apply.unchanged if self.apply else 0

    def fail(self, error: OrgSyncError) -> None:
        self.state = SyncState.FAILED
        self.error = str(error)
        self.error_kind = error.kind

    def add_parse_errors(self, errors: Sequence[ParseError]) -> None:
        for error in errors:
            self.failures.append(
                FailedOperation(
                    operation="extract",
                    task_id=None,
                    content="",
                    kind=error.kind,
                    error=str(error),
                )
            )


@dataclass
class SyncReport:
    """
    Final report of a sync run.

    Enumerates, per project, the counts of applied changes and the per-task
    failures with their taxonomy kind.
    """

    direction: SyncDirection
    dry_run: bool = False
    results: list[ProjectSyncResult] = field(default_factory=list)
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None and all(r.success for r in self.results)

    @property
    def failed_projects(self) -> list[ProjectSyncResult]:
        return [r for r in self.results if r.state == SyncState.FAILED]

    @property
    def totals(self) -> dict[str, int]:
        """Counts summed over all projects."""
        return {
            "created": sum(r.created for r in self.results),
            "updated": sum(r.updated for r in self.results),
            "deleted": sum(r.deleted for r in self.results),
            "unchanged": sum(r.unchanged for r in self.results),
            "failures": sum(len(r.all_failures) for r in self.results),
        }

    def result_for(self, project_name: str) -> ProjectSyncResult | None:
        for result in self.results:
            if result.project.name == project_name:
                return result
        return None

    def summary(self) -> str:
        """
        Generate a human-readable summary of the run.

        Returns:
            Multi-line summary string.
        """
        lines = []

        if self.dry_run:
            lines.append("DRY RUN - No changes made")

        if self.error:
            lines.append(f"✗ Sync aborted: {self.error}")
        elif self.success:
            lines.append(f"✓ {self.direction.value} completed successfully")
        else:
            lines.append(f"⚠ {self.direction.value} completed with errors")

        for result in self.results:
            target = f" -> {result.target}" if result.target else ""
            lines.append(f"  {result.project.name}{target} [{result.state.value}]")
            if result.state == SyncState.FAILED:
                lines.append(f"    {result.error_kind}: {result.error}")
                continue
            lines.append(
                f"    created {result.created}, updated {result.updated}, "
                f"deleted {result.deleted}, unchanged {result.unchanged}"
            )
            for failure in result.all_failures[:10]:
                lines.append(f"    • {failure}")
            if len(result.all_failures) > 10:
                lines.append(f"    ... and {len(result.all_failures) - 10} more")
            for warning in result.warnings:
                lines.append(f"    ! {warning}")

        totals = self.totals
        lines.append(
            f"Total: {totals['created']} created, {totals['updated']} updated, "
            f"{totals['deleted']} deleted, {totals['failures']} failures"
        )
        return "\n".join(lines)


class SyncOrchestrator:
    """
    Orchestrates reconciliation between the remote service and local files.

    Phases per project:
    1. Fetch the remote snapshot
    2. Resolve the local target and read the local snapshot
    3. Diff the two snapshots
    4. Apply the delta to the destination side
    """

    def __init__(
        self,
        service: TaskServicePort,
        store: TaskStorePort,
        config: SyncConfig,
        resolver: ProjectResolver | None = None,
        project_cache: ProjectCache | None = None,
        progress_callback: Callable[[Project, SyncState], None] | None = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            service: Remote task service port
            store: Local task store port
            config: Sync configuration
            resolver: Project resolver (defaults to the store's extension)
            project_cache: Caller-owned project list cache; used when
                ``config.cached_projects`` is set
            progress_callback: Called on every state transition
        """
        self.service = service
        self.store = store
        self.config = config
        self.resolver = resolver or ProjectResolver(extension=store.extension)
        self.project_cache = project_cache
        self.progress_callback = progress_callback
        self.logger = logging.getLogger("SyncOrchestrator")

        self._cancelled = threading.Event()
        self._claims_lock = threading.Lock()
        self._claims: dict[str, str] = {}

        if self.config.cached_projects and self.project_cache is None:
            self.project_cache = ProjectCache(service)

    # -------------------------------------------------------------------------
    # Main Entry Points
    # -------------------------------------------------------------------------

    def run(
        self,
        direction: SyncDirection | str | None = None,
        project_names: Sequence[str] | None = None,
    ) -> SyncReport:
        """
        Reconcile every project (or the named ones).

        Args:
            direction: Overrides ``config.direction``
            project_names: Overrides ``config.projects``

        Returns:
            SyncReport with one result per project

        Raises:
            ConfigurationError: If no project can be synced with this config
        """
        direction = self._resolve_direction(direction)
        if not self.config.search_scope:
            raise ConfigurationError("No search scope configured (searchScope is empty)")

        report = SyncReport(direction=direction, dry_run=self.config.dry_run)
        self._cancelled.clear()
        with self._claims_lock:
            self._claims.clear()

        try:
            projects = self.list_projects()
        except OrgSyncError as e:
            self.logger.error(f"Could not list projects: {e}")
            report.error = str(e)
            return report

        wanted = list(project_names or self.config.projects)
        if wanted:
            by_name = {p.name: p for p in projects}
            missing = [name for name in wanted if name not in by_name]
            for name in missing:
                self.logger.warning(f"Project '{name}' not found on {self.service.name}")
            projects = [by_name[name] for name in wanted if name in by_name]

        self.logger.info(f"Starting {direction.value} of {len(projects)} project(s)")

        workers = max(1, min(self.config.max_workers, len(projects) or 1))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="orgsync") as pool:
            futures = [pool.submit(self.sync_project, p, direction) for p in projects]
            # Results keep project order regardless of completion order
            report.results.extend(future.result() for future in futures)

        self.logger.info(f"Finished {direction.value}: {report.totals}")
        return report

    def sync_project(self, project: Project, direction: SyncDirection) -> ProjectSyncResult:
        """
        Run the pipeline for one project.

        Failures of this project never propagate; they end in FAILED.
        """
        result = ProjectSyncResult(project=project, direction=direction)
        try:
            self._pipeline(result)
        except OrgSyncError as e:
            self.logger.error(f"Project '{project.name}' failed in {result.state.value}: {e}")
            result.fail(e)
        except OSError as e:
            self.logger.error(f"Project '{project.name}' failed in {result.state.value}: {e}")
            result.fail(
                ReconciliationConflict(f"I/O error during {result.state.value}", cause=e)
            )
        self._notify(result)
        return result

    def cancel(self) -> None:
        """Stop in-flight pipelines after their current stage."""
        self.logger.info("Cancellation requested")
        self._cancelled.set()

    def list_projects(self) -> list[Project]:
        """Project list, served from the cache when enabled."""
        if self.config.cached_projects and self.project_cache is not None:
            return self.project_cache.get_projects()
        return extract_projects(self.service.list_projects())

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    def _pipeline(self, result: ProjectSyncResult) -> None:
        project = result.project

        # FETCHING
        self._enter(result, SyncState.FETCHING)
        remote_tasks, errors = extract_tasks(
            self.service.list_tasks(project.id),
            project_id=project.id,
            source=self.service.name,
        )
        result.add_parse_errors(errors)
        if self._halted(result):
            return

        # RESOLVING
        self._enter(result, SyncState.RESOLVING)
        resolution = self.resolver.locate(
            project, self.config.search_paths, self.store.default_location
        )
        result.target = resolution.path
        self._claim(resolution.path, project)

        local_tasks: list[Task] = []
        if resolution.exists:
            local_tasks, errors = extract_tasks(
                self.store.read_tasks(resolution.path),
                project_id=project.id,
                source=str(resolution.path),
            )
            result.add_parse_errors(errors)
        if self._halted(result):
            return

        # DIFFING
        self._enter(result, SyncState.DIFFING)
        if result.direction == SyncDirection.PULL:
            delta = diff(local_tasks, remote_tasks)
        else:
            if not resolution.exists:
                result.warnings.append(f"No local target for '{project.name}', nothing to push")
                self._enter(result, SyncState.DONE)
                return
            delta = diff(remote_tasks, local_tasks)
        result.delta = delta
        self.logger.debug(f"'{project.name}': {delta}")
        if self._halted(result):
            return

        # APPLYING
        self._enter(result, SyncState.APPLYING)
        if result.direction == SyncDirection.PULL:
            if not resolution.exists and not self.config.dry_run:
                self.store.create_target(resolution.path, project)
                result.target_created = True
            result.apply = LocalApplier(self.store, dry_run=self.config.dry_run).apply(
                resolution.path, delta
            )
        else:
            result.apply = RemoteApplier(self.service, dry_run=self.config.dry_run).apply(
                delta, baseline=index_by_id(remote_tasks)
            )
            self._persist_ids(resolution.path, result.apply)

        self._enter(result, SyncState.DONE)

    def _persist_ids(self, target: Path, apply: ApplyResult) -> None:
        """Write ids assigned by the service back into the local target."""
        for task, new_id in apply.created_ids:
            try:
                self.store.bind_id(target, task, new_id)
            except OrgSyncError as e:
                self.logger.warning(f"Could not record id {new_id} for {task}: {e}")
                apply.add_failure("bind_id", task, e)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _resolve_direction(self, direction: SyncDirection | str | None) -> SyncDirection:
        try:
            return SyncDirection.from_string(direction or self.config.direction)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    def _claim(self, target: Path, project: Project) -> None:
        """
        Reserve a target for one project.

        Two projects never share a target; if they would, the later one fails
        instead of writing concurrently.
        """
        key = os.path.realpath(target)
        with self._claims_lock:
            owner = self._claims.setdefault(key, project.id)
        if owner != project.id:
            raise ReconciliationConflict(
                f"Target {target} is already used by project {owner}"
            )

    def _enter(self, result: ProjectSyncResult, state: SyncState) -> None:
        result.state = state
        self.logger.debug(f"'{result.project.name}' -> {state.value}")
        if not state.is_terminal():
            self._notify(result)

    def _halted(self, result: ProjectSyncResult) -> bool:
        if self._cancelled.is_set():
            self.logger.info(f"'{result.project.name}' cancelled after {result.state.value}")
            result.state = SyncState.CANCELLED
            return True
        return False

    def _notify(self, result: ProjectSyncResult) -> None:
        if self.progress_callback is not None:
            self.progress_callback(result.project, result.state)
