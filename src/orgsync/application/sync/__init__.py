"""
Sync Module - Reconciliation between the remote task service and local files.
"""

from .apply import ApplyResult, FailedOperation, LocalApplier, RemoteApplier
from .cache import ProjectCache
from .diff import diff, index_by_id
from .extraction import (
    extract_projects,
    extract_tasks,
    normalize_description,
    normalize_due_date,
    project_from_raw,
    task_from_raw,
)
from .orchestrator import ProjectSyncResult, SyncOrchestrator, SyncReport
from .resolver import ProjectResolver, Resolution


__all__ = [
    "ApplyResult",
    "FailedOperation",
    "LocalApplier",
    "ProjectCache",
    "ProjectResolver",
    "ProjectSyncResult",
    "RemoteApplier",
    "Resolution",
    "SyncOrchestrator",
    "SyncReport",
    "diff",
    "extract_projects",
    "extract_tasks",
    "index_by_id",
    "normalize_description",
    "normalize_due_date",
    "project_from_raw",
    "task_from_raw",
]
