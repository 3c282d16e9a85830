"""
Ports - Abstract interfaces for external dependencies.

Ports define the contracts that adapters must implement.
This enables dependency inversion and easy testing.
"""

from .config_provider import AppConfig, ConfigProviderPort, SyncConfig, TodoistConfig
from .task_service import (
    AccessDeniedError,
    AuthenticationError,
    RateLimitError,
    RawRecord,
    ResourceNotFoundError,
    TaskServicePort,
    TransportError,
)
from .task_store import ParseError, ReconciliationConflict, TaskStorePort


__all__ = [
    # Ports
    "ConfigProviderPort",
    "TaskServicePort",
    "TaskStorePort",
    # Config
    "AppConfig",
    "SyncConfig",
    "TodoistConfig",
    # Types
    "RawRecord",
    # Exceptions
    "AccessDeniedError",
    "AuthenticationError",
    "ParseError",
    "RateLimitError",
    "ReconciliationConflict",
    "ResourceNotFoundError",
    "TransportError",
]
