"""
Domain Layer - Entities and enums of the reconciliation engine.
"""

from .entities import Delta, Project, Task
from .enums import SyncDirection, SyncState


__all__ = [
    "Delta",
    "Project",
    "SyncDirection",
    "SyncState",
    "Task",
]
