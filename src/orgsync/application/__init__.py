"""
Application Layer - The reconciliation engine.

This layer contains:
- sync/: extraction, diff, project resolution, apply phases and orchestration
"""

from .sync import (
    ApplyResult,
    LocalApplier,
    ProjectCache,
    ProjectResolver,
    RemoteApplier,
    SyncOrchestrator,
    SyncReport,
    diff,
)


__all__ = [
    "ApplyResult",
    "LocalApplier",
    "ProjectCache",
    "ProjectResolver",
    "RemoteApplier",
    "SyncOrchestrator",
    "SyncReport",
    "diff",
]
