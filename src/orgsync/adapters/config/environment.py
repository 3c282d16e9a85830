"""
Environment Config Provider - Layer environment variables over a config file.

Precedence, highest first: CLI overrides, environment, config file, defaults.

Environment variables:
    TODOIST_API_TOKEN           Todoist personal API token
    ORGSYNC_API_TOKEN           Same, takes precedence over TODOIST_API_TOKEN
    ORGSYNC_BASE_URL            REST API base URL
    ORGSYNC_SEARCH_SCOPE        Search scope, entries separated by os.pathsep
    ORGSYNC_REQUEST_TIMEOUT     Request timeout in seconds
    ORGSYNC_CACHED_PROJECTS     Keep the project list between runs
    ORGSYNC_DIRECTION           pull or push
    ORGSYNC_DRY_RUN             Compute deltas without writing
    ORGSYNC_VERBOSE             Verbose output
    ORGSYNC_MAX_WORKERS         Projects reconciled in parallel
    ORGSYNC_PROJECTS            Comma-separated project names to sync
"""

import logging
import os
from pathlib import Path
from typing import Any

from orgsync.core.exceptions import ConfigurationError
from orgsync.core.ports.config_provider import AppConfig, ConfigProviderPort

from .file_provider import (
    FileConfigProvider,
    apply_overrides,
    build_app_config,
    lookup,
    set_value,
)


ENV_KEYS = {
    "TODOIST_API_TOKEN": "todoist.api_token",
    "ORGSYNC_API_TOKEN": "todoist.api_token",
    "ORGSYNC_BASE_URL": "todoist.base_url",
    "ORGSYNC_SEARCH_SCOPE": "sync.search_scope",
    "ORGSYNC_REQUEST_TIMEOUT": "sync.request_timeout_seconds",
    "ORGSYNC_CACHED_PROJECTS": "sync.cached_projects",
    "ORGSYNC_DIRECTION": "sync.direction",
    "ORGSYNC_DRY_RUN": "sync.dry_run",
    "ORGSYNC_VERBOSE": "sync.verbose",
    "ORGSYNC_MAX_WORKERS": "sync.max_workers",
    "ORGSYNC_PROJECTS": "sync.projects",
}

# List-valued variables and their separators
LIST_SEPARATORS = {
    "ORGSYNC_SEARCH_SCOPE": os.pathsep,
    "ORGSYNC_PROJECTS": ",",
}


class EnvironmentConfigProvider(ConfigProviderPort):
    """
    Configuration provider combining a config file, the environment and
    command line overrides.
    """

    def __init__(
        self,
        config_file: Path | None = None,
        cli_overrides: dict[str, Any] | None = None,
        environ: dict[str, str] | None = None,
    ):
        """
        Initialize the provider.

        Args:
            config_file: Explicit config file (auto-detected when None)
            cli_overrides: Flat overrides such as ``{"dry_run": True}``
            environ: Environment mapping (defaults to os.environ)
        """
        self.file_provider = FileConfigProvider(config_path=config_file)
        self.cli_overrides = cli_overrides or {}
        self.environ = environ if environ is not None else os.environ
        self.logger = logging.getLogger("EnvironmentConfigProvider")

    @property
    def name(self) -> str:
        path = self.file_provider.config_file_path
        if path:
            return f"Environment + {path.name}"
        return "Environment"

    # -------------------------------------------------------------------------
    # ConfigProviderPort
    # -------------------------------------------------------------------------

    def load(self) -> AppConfig:
        return build_app_config(self._merged())

    def get(self, key: str, default: Any = None) -> Any:
        return lookup(self._merged(), key, default)

    def validate(self) -> list[str]:
        try:
            config = self.load()
        except ConfigurationError as e:
            return [str(e)]

        errors = config.validate()
        if errors:
            source = self.file_provider.config_file_path or "a config file (.orgsync.yaml)"
            errors.append(f"Set values in {source} or via environment variables (ORGSYNC_*)")
        return errors

    # -------------------------------------------------------------------------
    # Layering
    # -------------------------------------------------------------------------

    def _merged(self) -> dict[str, dict[str, Any]]:
        data = self.file_provider.file_data()

        for variable, dotted_key in ENV_KEYS.items():
            value = self.environ.get(variable)
            if value is None:
                continue
            separator = LIST_SEPARATORS.get(variable)
            if separator:
                parts = [part.strip() for part in value.split(separator)]
                set_value(data, dotted_key, [part for part in parts if part])
            else:
                set_value(data, dotted_key, value)
            self.logger.debug(f"Using {variable} from environment")

        apply_overrides(data, self.cli_overrides)
        return data
