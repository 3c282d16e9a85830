"""
Adapters - Concrete implementations of the core ports.

- todoist: TaskServicePort over the Todoist REST API
- orgmode: TaskStorePort over Org-mode files
- config: ConfigProviderPort over files and the environment
"""

from .config import EnvironmentConfigProvider, FileConfigProvider
from .orgmode import OrgTaskStore
from .todoist import TodoistAdapter, TodoistApiClient


__all__ = [
    "EnvironmentConfigProvider",
    "FileConfigProvider",
    "OrgTaskStore",
    "TodoistAdapter",
    "TodoistApiClient",
]
