"""
Task Store Port - Abstract interface for local task storage.

Implementations:
- OrgTaskStore: one Org-mode file per project, one heading per task

A "location" is a path to one storage target (file). Entries are addressed by
the remote task id they carry.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from orgsync.core.domain.entities import Project, Task
from orgsync.core.exceptions import ParseError, ReconciliationConflict

from .task_service import RawRecord


__all__ = ["ParseError", "ReconciliationConflict", "TaskStorePort"]


class TaskStorePort(ABC):
    """
    Abstract interface for local task stores.

    Mutating methods raise ReconciliationConflict when the addressed entry
    cannot be located or the target cannot be written.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the store name (e.g., 'Org-mode')."""
        ...

    @property
    @abstractmethod
    def extension(self) -> str:
        """File extension of storage targets, including the dot."""
        ...

    @property
    @abstractmethod
    def default_location(self) -> Path:
        """Directory used for new targets when no search scope directory is given."""
        ...

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    @abstractmethod
    def read_tasks(self, location: Path) -> list[RawRecord]:
        """
        Read every task entry of a target.

        Args:
            location: Path to the target

        Returns:
            Raw task records ('id' is absent for entries never pushed)

        Raises:
            ParseError: If the target cannot be read
        """
        ...

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    @abstractmethod
    def create_target(self, location: Path, project: Project) -> None:
        """Create an empty target for a project."""
        ...

    @abstractmethod
    def append_task(self, location: Path, task: Task) -> None:
        """Append a new actionable entry under the target's top-level heading."""
        ...

    @abstractmethod
    def rewrite_task(self, location: Path, task_id: str, task: Task) -> None:
        """
        Rewrite title, body and due date of the entry carrying ``task_id``.

        Local-only annotations (tags, keyword, extra properties) are kept.
        """
        ...

    @abstractmethod
    def remove_task(self, location: Path, task_id: str) -> None:
        """Remove the entry carrying ``task_id``."""
        ...

    @abstractmethod
    def bind_id(self, location: Path, task: Task, new_id: str) -> None:
        """
        Record the remote id assigned to a task after it was created remotely.

        The entry is located by ``task.id`` when set, otherwise by the first
        entry without an id whose title equals ``task.content``.
        """
        ...
