"""
Task Service Port - Abstract interface for the remote task service.

Implementations:
- TodoistAdapter: Todoist REST API v2

Raw records are plain dictionaries; the engine normalizes them with the
extraction helpers before diffing. Any non-success response must surface as
a TransportError (or subclass). Implementations never retry on their own.
"""

from abc import ABC, abstractmethod
from typing import Any

from orgsync.core.exceptions import (
    AccessDeniedError,
    AuthenticationError,
    RateLimitError,
    ResourceNotFoundError,
    TransportError,
)


__all__ = [
    "AccessDeniedError",
    "AuthenticationError",
    "RateLimitError",
    "RawRecord",
    "ResourceNotFoundError",
    "TaskServicePort",
    "TransportError",
]

RawRecord = dict[str, Any]


class TaskServicePort(ABC):
    """
    Abstract interface for remote task services.

    All remote service adapters must implement this interface.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the service name (e.g., 'Todoist')."""
        ...

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    @abstractmethod
    def list_projects(self) -> list[RawRecord]:
        """
        Fetch every project visible to the authenticated user.

        Returns:
            Raw project records with at least 'id' and 'name'

        Raises:
            TransportError: If the call fails
        """
        ...

    @abstractmethod
    def list_tasks(self, project_id: str | None = None) -> list[RawRecord]:
        """
        Fetch active tasks, optionally restricted to one project.

        Args:
            project_id: Only return tasks of this project

        Returns:
            Raw task records

        Raises:
            TransportError: If the call fails
        """
        ...

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    @abstractmethod
    def create_task(self, raw: RawRecord) -> RawRecord:
        """
        Create a task.

        Args:
            raw: Raw task record without an id

        Returns:
            The created record, including the id assigned by the service
        """
        ...

    @abstractmethod
    def update_task(self, task_id: str, raw: RawRecord) -> RawRecord:
        """
        Update the fields of an existing task.

        Raises:
            ResourceNotFoundError: If the task no longer exists
        """
        ...

    @abstractmethod
    def delete_task(self, task_id: str) -> None:
        """
        Delete a task.

        Raises:
            ResourceNotFoundError: If the task no longer exists
        """
        ...
