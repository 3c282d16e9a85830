"""
Configuration Provider Port - Abstract interface for configuration.

Implementations:
- FileConfigProvider: Load from YAML/TOML config files
- EnvironmentConfigProvider: Layer env vars and CLI overrides over a file
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from orgsync.core.domain.enums import SyncDirection


@dataclass
class TodoistConfig:
    """Configuration for the Todoist service."""

    api_token: str = ""
    base_url: str = "https://api.todoist.com/rest/v2"

    def is_valid(self) -> bool:
        """Check if configuration is valid."""
        return bool(self.api_token and self.base_url)


@dataclass
class SyncConfig:
    """Configuration for sync operations."""

    # Ordered list of directories and/or files searched for project targets
    search_scope: list[str] = field(default_factory=list)

    # None means "use the client default"
    request_timeout_seconds: float | None = None

    # Keep the project list between runs until explicitly invalidated
    cached_projects: bool = False

    direction: SyncDirection = SyncDirection.PULL
    dry_run: bool = False
    verbose: bool = False
    max_workers: int = 4

    # Only sync projects with these names (empty = all)
    projects: list[str] = field(default_factory=list)

    @property
    def search_paths(self) -> list[Path]:
        """Search scope as expanded paths, order preserved."""
        return [Path(entry).expanduser() for entry in self.search_scope]


@dataclass
class AppConfig:
    """Complete application configuration."""

    todoist: TodoistConfig
    sync: SyncConfig

    def validate(self) -> list[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not self.todoist.api_token:
            errors.append("Missing Todoist API token (TODOIST_API_TOKEN)")
        if not self.sync.search_scope:
            errors.append("Missing search scope (searchScope)")
        timeout = self.sync.request_timeout_seconds
        if timeout is not None and timeout <= 0:
            errors.append(f"requestTimeoutSeconds must be positive, got {timeout}")
        if self.sync.max_workers < 1:
            errors.append(f"maxWorkers must be at least 1, got {self.sync.max_workers}")

        return errors


class ConfigProviderPort(ABC):
    """
    Abstract interface for configuration providers.

    Configuration can come from various sources:
    - YAML/TOML config files
    - Environment variables
    - Command line arguments
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the provider name."""
        ...

    @abstractmethod
    def load(self) -> AppConfig:
        """
        Load configuration from source.

        Raises:
            ConfigurationError: If the source is malformed
        """
        ...

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a specific configuration value.

        Args:
            key: Configuration key (dot notation supported)
            default: Default value if not found
        """
        ...

    @abstractmethod
    def validate(self) -> list[str]:
        """
        Validate loaded configuration.

        Returns:
            List of validation errors
        """
        ...
