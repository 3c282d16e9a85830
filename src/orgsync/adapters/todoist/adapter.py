"""
Todoist Adapter - Implements TaskServicePort for Todoist.

Translates between the raw record shape used by the engine
(``due_date`` as a plain string) and Todoist's task representation
(``due: {"date": ...}``).
"""

import logging
from typing import Any

from orgsync.core.ports.task_service import RawRecord, TaskServicePort

from .client import TodoistApiClient


# Fields the engine writes; anything else in a raw record is ignored
WRITABLE_FIELDS = ("content", "description", "project_id", "due_date")


class TodoistAdapter(TaskServicePort):
    """
    Todoist implementation of the TaskServicePort.

    Example:
        >>> client = TodoistApiClient(token="...", timeout=10)
        >>> service = TodoistAdapter(client)
        >>> service.list_tasks(project_id="2203306141")
    """

    def __init__(self, client: TodoistApiClient):
        self.client = client
        self.logger = logging.getLogger("TodoistAdapter")

    @property
    def name(self) -> str:
        return "Todoist"

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    def list_projects(self) -> list[RawRecord]:
        projects = self.client.get_projects()
        self.logger.debug(f"Fetched {len(projects)} projects")
        return [{"id": p.get("id"), "name": p.get("name")} for p in projects]

    def list_tasks(self, project_id: str | None = None) -> list[RawRecord]:
        tasks = self.client.get_tasks(project_id=project_id)
        self.logger.debug(f"Fetched {len(tasks)} tasks for project {project_id or '*'}")
        return [self._from_todoist(task) for task in tasks]

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    def create_task(self, raw: RawRecord) -> RawRecord:
        payload = self._to_todoist(raw, full_update=False)
        created = self.client.create_task(payload)
        self.logger.info(f"Created task {created.get('id')}: {raw.get('content')}")
        return self._from_todoist(created) if created else {}

    def update_task(self, task_id: str, raw: RawRecord) -> RawRecord:
        payload = self._to_todoist(raw, full_update=True)
        # Tasks cannot be moved between projects through this endpoint
        payload.pop("project_id", None)
        updated = self.client.update_task(task_id, payload)
        self.logger.info(f"Updated task {task_id}")
        return self._from_todoist(updated) if updated else {}

    def delete_task(self, task_id: str) -> None:
        self.client.delete_task(task_id)
        self.logger.info(f"Deleted task {task_id}")

    # -------------------------------------------------------------------------
    # Mapping
    # -------------------------------------------------------------------------

    @staticmethod
    def _from_todoist(task: dict[str, Any]) -> RawRecord:
        due = task.get("due")
        return {
            "id": task.get("id"),
            "project_id": task.get("project_id"),
            "content": task.get("content"),
            "description": task.get("description") or None,
            "due_date": (due.get("datetime") or due.get("date")) if isinstance(due, dict) else None,
        }

    @staticmethod
    def _to_todoist(raw: RawRecord, full_update: bool) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for key in WRITABLE_FIELDS:
            value = raw.get(key)
            if value is None:
                continue
            if key == "due_date":
                text = str(value)
                if "T" in text:
                    # Todoist expects RFC3339 with seconds
                    payload["due_datetime"] = text if len(text) > 16 else f"{text}:00"
                else:
                    payload["due_date"] = text
            else:
                payload[key] = value

        # A full update clears fields the record leaves out
        if "description" not in payload and full_update:
            payload["description"] = ""
        if raw.get("due_date") is None and full_update:
            payload["due_string"] = "no date"
        return payload
