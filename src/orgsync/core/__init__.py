"""
Core Layer - Domain model, exceptions and ports.

Nothing in this package performs I/O; adapters implement the ports.
"""

from .domain import Delta, Project, SyncDirection, SyncState, Task
from .exceptions import (
    ConfigurationError,
    OrgSyncError,
    ParseError,
    ReconciliationConflict,
    TransportError,
)


__all__ = [
    "ConfigurationError",
    "Delta",
    "OrgSyncError",
    "ParseError",
    "Project",
    "ReconciliationConflict",
    "SyncDirection",
    "SyncState",
    "Task",
    "TransportError",
]
