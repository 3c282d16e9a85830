"""
Org Task Store - Implements TaskStorePort on Org-mode files.

One file per project. Tasks are level-2 headings below the file's top-level
heading; the remote id lives in the heading's property drawer:

    ** TODO Write report
    DEADLINE: <2024-05-01 Wed>
    :PROPERTIES:
    :TODOIST_ID: 7025348542
    :END:

Every mutation re-reads the file and replaces it atomically, so a crash
never leaves a half-written target behind.
"""

import logging
import os
import tempfile
from pathlib import Path

from orgsync.core.domain.entities import Project, Task
from orgsync.core.exceptions import ParseError, ReconciliationConflict
from orgsync.core.ports.task_service import RawRecord
from orgsync.core.ports.task_store import TaskStorePort

from .document import OrgDocument, OrgEntry


class OrgTaskStore(TaskStorePort):
    """
    Org-mode implementation of the TaskStorePort.

    Example:
        >>> store = OrgTaskStore()
        >>> store.read_tasks(Path("~/org/Work.org").expanduser())
        [{'id': '7025348542', 'content': 'Write report', ...}]
    """

    EXTENSION = ".org"
    DEFAULT_DIRECTORY = "~/org"
    ENCODING = "utf-8"

    def __init__(self, default_directory: str | Path = DEFAULT_DIRECTORY):
        """
        Initialize the store.

        Args:
            default_directory: Where new project files go when the search
                scope names no directory
        """
        self._default_directory = Path(default_directory).expanduser()
        self.logger = logging.getLogger("OrgTaskStore")

    @property
    def name(self) -> str:
        return "Org-mode"

    @property
    def extension(self) -> str:
        return self.EXTENSION

    @property
    def default_location(self) -> Path:
        return self._default_directory

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    def read_tasks(self, location: Path) -> list[RawRecord]:
        document = self._load(location)
        records = [self._to_raw(entry) for entry in document.tasks()]
        self.logger.debug(f"Read {len(records)} tasks from {location}")
        return records

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    def create_target(self, location: Path, project: Project) -> None:
        if location.exists():
            self.logger.debug(f"Target {location} already exists")
            return
        try:
            location.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ReconciliationConflict(
                f"Cannot create directory for {location}: {e}", cause=e
            ) from e
        self._save(location, OrgDocument.new(project.name))
        self.logger.info(f"Created {location} for project {project.name}")

    def append_task(self, location: Path, task: Task) -> None:
        document = self._load(location)
        entry = OrgEntry(title=task.content, body=task.description, deadline=task.due_date)
        if task.id:
            entry.set_id(task.id)
        document.append(entry)
        self._save(location, document)
        self.logger.debug(f"Appended {task} to {location}")

    def rewrite_task(self, location: Path, task_id: str, task: Task) -> None:
        document = self._load(location)
        entry = self._require(document, location, task_id)
        entry.update(task.content, task.description, task.due_date)
        self._save(location, document)
        self.logger.debug(f"Rewrote {task_id} in {location}")

    def remove_task(self, location: Path, task_id: str) -> None:
        document = self._load(location)
        entry = self._require(document, location, task_id)
        document.remove(entry)
        self._save(location, document)
        self.logger.debug(f"Removed {task_id} from {location}")

    def bind_id(self, location: Path, task: Task, new_id: str) -> None:
        document = self._load(location)
        entry = document.find(task.id) if task.id else document.find_unbound(task.content)
        if entry is None:
            raise ReconciliationConflict(
                f"No entry for {task.content!r} in {location} to bind id {new_id} to",
                task_id=new_id,
            )
        entry.set_id(new_id)
        self._save(location, document)
        self.logger.debug(f"Bound id {new_id} to {task.content!r} in {location}")

    # -------------------------------------------------------------------------
    # File Handling
    # -------------------------------------------------------------------------

    def _load(self, location: Path) -> OrgDocument:
        try:
            text = location.read_text(encoding=self.ENCODING)
        except FileNotFoundError as e:
            raise ParseError("Target does not exist", source=str(location), cause=e) from e
        except (OSError, UnicodeDecodeError) as e:
            raise ParseError(f"Cannot read target: {e}", source=str(location), cause=e) from e
        return OrgDocument.parse(text)

    def _save(self, location: Path, document: OrgDocument) -> None:
        """
        Write atomically: temp file in the same directory, then rename.

        Raises:
            ReconciliationConflict: If the target cannot be written; the
                original file is left untouched
        """
        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                dir=location.parent,
                prefix=f".{location.name}.",
                suffix=".tmp",
                delete=False,
                encoding=self.ENCODING,
            ) as tmp:
                tmp_path = tmp.name
                tmp.write(document.render())
            os.replace(tmp_path, location)
        except OSError as e:
            self.logger.error(f"Failed to write {location}: {e}")
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise ReconciliationConflict(f"Cannot write {location}: {e}", cause=e) from e

    @staticmethod
    def _require(document: OrgDocument, location: Path, task_id: str) -> OrgEntry:
        entry = document.find(task_id)
        if entry is None:
            raise ReconciliationConflict(f"No entry with id {task_id} in {location}", task_id=task_id)
        return entry

    @staticmethod
    def _to_raw(entry: OrgEntry) -> RawRecord:
        raw: RawRecord = {
            "content": entry.title,
            "description": entry.body,
            "due_date": entry.deadline,
        }
        if entry.task_id:
            raw["id"] = entry.task_id
        return raw
