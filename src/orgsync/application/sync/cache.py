"""
Project Cache - Caller-owned read-through cache of the remote project list.

There is no expiry: the list is kept until ``invalidate()`` is called.
"""

from __future__ import annotations

import logging
import threading

from orgsync.core.domain.entities import Project
from orgsync.core.ports.task_service import TaskServicePort

from .extraction import extract_projects


class ProjectCache:
    """
    Read-through cache for ``TaskServicePort.list_projects``.

    Example:
        >>> cache = ProjectCache(service)
        >>> projects = cache.get_projects()   # hits the service
        >>> projects = cache.get_projects()   # served from memory
        >>> cache.invalidate()
    """

    def __init__(self, service: TaskServicePort):
        self.service = service
        self.logger = logging.getLogger("ProjectCache")
        self._lock = threading.Lock()
        self._projects: list[Project] | None = None
        self._hits = 0
        self._misses = 0

    def get_projects(self) -> list[Project]:
        """
        Return the project list, loading it on first use.

        Raises:
            TransportError: If loading fails (nothing is cached then)
        """
        with self._lock:
            if self._projects is not None:
                self._hits += 1
                return list(self._projects)

            self._misses += 1
            self.logger.debug(f"Loading project list from {self.service.name}")
            self._projects = extract_projects(self.service.list_projects())
            return list(self._projects)

    def invalidate(self) -> None:
        """Drop the cached list; the next read hits the service."""
        with self._lock:
            self._projects = None
        self.logger.debug("Project list invalidated")

    @property
    def is_loaded(self) -> bool:
        return self._projects is not None

    @property
    def stats(self) -> dict[str, int]:
        """Hit/miss counters."""
        return {"hits": self._hits, "misses": self._misses}
