"""
Apply Phases - Commit a Delta to the local store or to the remote service.

Both appliers process every task independently: a failure on one task is
recorded in the ApplyResult and the batch continues. Writes are skipped when
the destination already holds the same field values, so re-applying a delta
is a no-op.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from orgsync.core.domain.entities import Delta, Task
from orgsync.core.exceptions import OrgSyncError, ReconciliationConflict
from orgsync.core.ports.task_service import TaskServicePort
from orgsync.core.ports.task_store import TaskStorePort

from .diff import index_by_id
from .extraction import extract_tasks


@dataclass
class FailedOperation:
    """
    Details of a failed per-task operation.

    Attributes:
        operation: 'create', 'update' or 'delete'
        task_id: Id of the task (None for tasks not created remotely yet)
        content: Task title, for readable reports
        kind: Taxonomy name, e.g. 'TransportError'
        error: Error message
    """

    operation: str
    task_id: str | None
    content: str
    kind: str
    error: str

    def __str__(self) -> str:
        return f"[{self.operation}] {self.task_id or '<new>'} '{self.content}' {self.kind}: {self.error}"


@dataclass
class ApplyResult:
    """
    Result of applying a delta, with graceful degradation support.

    Counts only include operations that actually succeeded (or would have,
    in dry-run mode).
    """

    dry_run: bool = False
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    deleted: int = 0

    # (task as sent, id assigned by the remote service)
    created_ids: list[tuple[Task, str]] = field(default_factory=list)
    failures: list[FailedOperation] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failures

    @property
    def changes(self) -> int:
        """Number of writes performed."""
        return self.created + self.updated + self.deleted

    def add_failure(self, operation: str, task: Task, error: OrgSyncError) -> None:
        """Record a failed operation."""
        self.failures.append(
            FailedOperation(
                operation=operation,
                task_id=task.id,
                content=task.content,
                kind=error.kind,
                error=str(error),
            )
        )

    def merge(self, other: ApplyResult) -> ApplyResult:
        """Combine two results into a new one."""
        return ApplyResult(
            dry_run=self.dry_run or other.dry_run,
            created=self.created + other.created,
            updated=self.updated + other.updated,
            unchanged=self.unchanged + other.unchanged,
            deleted=self.deleted + other.deleted,
            created_ids=self.created_ids + other.created_ids,
            failures=self.failures + other.failures,
        )

    def __str__(self) -> str:
        return (
            f"created={self.created} updated={self.updated} unchanged={self.unchanged} "
            f"deleted={self.deleted} failures={len(self.failures)}"
        )


class LocalApplier:
    """
    Apply a delta to one local storage target.

    The target is re-read before writing; every update and delete is located
    by id and compared before it is written.
    """

    def __init__(self, store: TaskStorePort, dry_run: bool = False):
        self.store = store
        self.dry_run = dry_run
        self.logger = logging.getLogger("LocalApplier")

    def apply(self, target: Path, delta: Delta) -> ApplyResult:
        """
        Commit ``delta`` to ``target``.

        Raises:
            ParseError: If the target exists but cannot be read
        """
        result = ApplyResult(dry_run=self.dry_run)
        current = self._read_current(target)

        for task in delta.created:
            existing = current.get(task.id) if task.id else None
            if existing is not None:
                # Already appended by an earlier pass
                self._rewrite(target, task, existing, result)
                continue
            try:
                if self.dry_run:
                    self.logger.info(f"[DRY-RUN] Would append {task} to {target.name}")
                else:
                    self.store.append_task(target, task)
                result.created += 1
                if task.id:
                    current[task.id] = task
            except (OrgSyncError, OSError) as e:
                self._fail(result, "create", task, e)

        for task in delta.updated:
            existing = current.get(task.id) if task.id else None
            if existing is None:
                self._fail(
                    result,
                    "update",
                    task,
                    ReconciliationConflict(
                        f"Task {task.id} not found in {target.name}", task_id=task.id
                    ),
                )
                continue
            self._rewrite(target, task, existing, result)

        for task in delta.deleted:
            if not task.id or task.id not in current:
                self._fail(
                    result,
                    "delete",
                    task,
                    ReconciliationConflict(
                        f"Task {task.id} not found in {target.name}", task_id=task.id
                    ),
                )
                continue
            try:
                if self.dry_run:
                    self.logger.info(f"[DRY-RUN] Would remove {task} from {target.name}")
                else:
                    self.store.remove_task(target, task.id)
                result.deleted += 1
                del current[task.id]
            except (OrgSyncError, OSError) as e:
                self._fail(result, "delete", task, e)

        self.logger.debug(f"Applied to {target}: {result}")
        return result

    apply_local = apply

    def _read_current(self, target: Path) -> dict[str, Task]:
        if not target.exists():
            return {}
        tasks, _ = extract_tasks(self.store.read_tasks(target), source=str(target))
        return index_by_id(tasks)

    def _rewrite(self, target: Path, task: Task, existing: Task, result: ApplyResult) -> None:
        if existing.same_fields(task):
            result.unchanged += 1
            return
        try:
            if self.dry_run:
                self.logger.info(f"[DRY-RUN] Would rewrite {task} in {target.name}")
            else:
                self.store.rewrite_task(target, task.id, task)
            result.updated += 1
        except (OrgSyncError, OSError) as e:
            self._fail(result, "update", task, e)

    def _fail(
        self, result: ApplyResult, operation: str, task: Task, error: OrgSyncError | OSError
    ) -> None:
        if isinstance(error, OSError):
            error = ReconciliationConflict(
                f"Local {operation} of {task} failed",
                task_id=task.id,
                cause=error,
            )
        self.logger.warning(f"Skipping {operation} of {task}: {error}")
        result.add_failure(operation, task, error)


class RemoteApplier:
    """
    Apply a delta to the remote task service.

    Each call is independent and never retried here; failures are collected
    per task.
    """

    def __init__(self, service: TaskServicePort, dry_run: bool = False):
        self.service = service
        self.dry_run = dry_run
        self.logger = logging.getLogger("RemoteApplier")

    def apply(self, delta: Delta, baseline: dict[str, Task] | None = None) -> ApplyResult:
        """
        Commit ``delta`` to the remote service.

        Args:
            delta: Changes to apply
            baseline: Remote snapshot by id; updates whose fields already
                match it are skipped

        Returns:
            ApplyResult; ``created_ids`` holds the ids assigned to created
            tasks, which the caller must persist locally
        """
        result = ApplyResult(dry_run=self.dry_run)
        baseline = baseline or {}

        for task in delta.created:
            raw = task.to_raw()
            raw.pop("id", None)
            try:
                if self.dry_run:
                    self.logger.info(f"[DRY-RUN] Would create {task}")
                    result.created += 1
                    continue
                response = self.service.create_task(raw)
                result.created += 1
                new_id = response.get("id") if isinstance(response, dict) else None
                if new_id is None or new_id == "":
                    self.logger.warning(f"Service returned no id for created task {task}")
                    continue
                result.created_ids.append((task, str(new_id)))
            except OrgSyncError as e:
                self._fail(result, "create", task, e)

        for task in delta.updated:
            remote = baseline.get(task.id) if task.id else None
            if remote is not None and remote.same_fields(task):
                result.unchanged += 1
                continue
            raw = task.to_raw()
            raw.pop("id", None)
            try:
                if self.dry_run:
                    self.logger.info(f"[DRY-RUN] Would update {task}")
                else:
                    self.service.update_task(task.id, raw)
                result.updated += 1
            except OrgSyncError as e:
                self._fail(result, "update", task, e)

        for task in delta.deleted:
            try:
                if self.dry_run:
                    self.logger.info(f"[DRY-RUN] Would delete {task}")
                else:
                    self.service.delete_task(task.id)
                result.deleted += 1
            except OrgSyncError as e:
                self._fail(result, "delete", task, e)

        self.logger.debug(f"Applied to {self.service.name}: {result}")
        return result

    apply_remote = apply

    def _fail(self, result: ApplyResult, operation: str, task: Task, error: OrgSyncError) -> None:
        self.logger.warning(f"Remote {operation} of {task} failed: {error}")
        result.add_failure(operation, task, error)
