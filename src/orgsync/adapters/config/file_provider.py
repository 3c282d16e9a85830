"""
File Config Provider - Load configuration from YAML or TOML files.

Looked up in the working directory, then in the home directory:

- .orgsync.yaml / .orgsync.yml
- .orgsync.toml
- pyproject.toml ([tool.orgsync] section)

Example .orgsync.yaml:

    todoist:
      apiToken: 0123456789abcdef
    searchScope:
      - ~/org/projects
      - ~/org/inbox.org
    requestTimeoutSeconds: 10
    cachedProjects: true

Keys may be written in camelCase or snake_case.
"""

import logging
import re
from pathlib import Path
from typing import Any

import yaml


try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Fallback for older Python

from orgsync.core.domain.enums import SyncDirection
from orgsync.core.exceptions import ConfigurationError
from orgsync.core.ports.config_provider import (
    AppConfig,
    ConfigProviderPort,
    SyncConfig,
    TodoistConfig,
)


logger = logging.getLogger("ConfigProvider")

CONFIG_FILE_NAMES = (".orgsync.yaml", ".orgsync.yml", ".orgsync.toml", "pyproject.toml")

TODOIST_KEYS = ("api_token", "base_url")
SYNC_KEYS = (
    "search_scope",
    "request_timeout_seconds",
    "cached_projects",
    "direction",
    "dry_run",
    "verbose",
    "max_workers",
    "projects",
)

# Flat override names (as used on the command line) to dotted config keys
OVERRIDE_KEYS = {
    **{key: f"todoist.{key}" for key in TODOIST_KEYS},
    **{key: f"sync.{key}" for key in SYNC_KEYS},
    "timeout": "sync.request_timeout_seconds",
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


# -------------------------------------------------------------------------
# Shared helpers
# -------------------------------------------------------------------------


def snake_case(key: str) -> str:
    """``searchScope`` -> ``search_scope``; snake_case keys pass through."""
    return _CAMEL_BOUNDARY.sub("_", key).replace("-", "_").lower()


def empty_data() -> dict[str, dict[str, Any]]:
    return {"todoist": {}, "sync": {}}


def normalize_data(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """
    Bring a parsed config file into the canonical nested shape.

    Sync keys are accepted at the top level or below ``sync``; token and
    URL at the top level or below ``todoist``.
    """
    data = empty_data()
    for key, value in raw.items():
        name = snake_case(str(key))
        if name in data and isinstance(value, dict):
            for sub_key, sub_value in value.items():
                data[name][snake_case(str(sub_key))] = sub_value
        elif name in SYNC_KEYS:
            data["sync"][name] = value
        elif name in TODOIST_KEYS:
            data["todoist"][name] = value
        else:
            logger.debug(f"Ignoring unknown config key {key!r}")
    return data


def set_value(data: dict[str, dict[str, Any]], dotted_key: str, value: Any) -> None:
    section, _, name = dotted_key.partition(".")
    data.setdefault(section, {})[name] = value


def apply_overrides(data: dict[str, dict[str, Any]], overrides: dict[str, Any]) -> None:
    """Apply flat CLI overrides; None values mean "not given"."""
    for key, value in overrides.items():
        if value is None:
            continue
        dotted = OVERRIDE_KEYS.get(key, key)
        if "." not in dotted:
            logger.debug(f"Ignoring unknown override {key!r}")
            continue
        set_value(data, dotted, value)


def lookup(data: dict[str, Any], key: str, default: Any = None) -> Any:
    """Resolve a dotted key (``sync.verbose``) or a flat override name."""
    dotted = OVERRIDE_KEYS.get(key, key)
    current: Any = data
    for part in dotted.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


def _as_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


def _as_list(name: str, value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    raise ConfigurationError(f"{name} must be a list, got {value!r}")


def _as_float(name: str, value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}", cause=e) from e


def _as_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}", cause=e) from e


def build_app_config(data: dict[str, dict[str, Any]]) -> AppConfig:
    """
    Build typed configuration from canonical data.

    Raises:
        ConfigurationError: If a value has the wrong type
    """
    todoist = data.get("todoist", {})
    sync = data.get("sync", {})
    defaults = SyncConfig()

    direction = sync.get("direction", defaults.direction)
    try:
        direction = SyncDirection.from_string(direction)
    except ValueError as e:
        raise ConfigurationError(str(e), cause=e) from e

    return AppConfig(
        todoist=TodoistConfig(
            api_token=str(todoist.get("api_token") or ""),
            base_url=str(todoist.get("base_url") or TodoistConfig().base_url),
        ),
        sync=SyncConfig(
            search_scope=_as_list("searchScope", sync.get("search_scope")),
            request_timeout_seconds=_as_float(
                "requestTimeoutSeconds", sync.get("request_timeout_seconds")
            ),
            cached_projects=_as_bool("cachedProjects", sync.get("cached_projects", False)),
            direction=direction,
            dry_run=_as_bool("dryRun", sync.get("dry_run", False)),
            verbose=_as_bool("verbose", sync.get("verbose", False)),
            max_workers=_as_int("maxWorkers", sync.get("max_workers", defaults.max_workers)),
            projects=_as_list("projects", sync.get("projects")),
        ),
    )


# -------------------------------------------------------------------------
# Provider
# -------------------------------------------------------------------------


class FileConfigProvider(ConfigProviderPort):
    """
    Configuration provider that reads a YAML or TOML file.

    CLI overrides, when given, take precedence over the file.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        cli_overrides: dict[str, Any] | None = None,
    ):
        """
        Initialize the provider.

        Args:
            config_path: Explicit config file (auto-detected when None)
            cli_overrides: Flat overrides such as ``{"verbose": True}``
        """
        self.cli_overrides = cli_overrides or {}
        self.config_file_path = config_path or self._find_config_file()
        self._data: dict[str, dict[str, Any]] | None = None

    @property
    def name(self) -> str:
        if self.config_file_path:
            return f"File ({self.config_file_path.name})"
        return "File (none)"

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
        return config.validate()

    # -------------------------------------------------------------------------
    # File Loading
    # -------------------------------------------------------------------------

    def file_data(self) -> dict[str, dict[str, Any]]:
        """
        Canonical data from the config file alone (empty without a file).

        Raises:
            ConfigurationError: If the file is missing or malformed
        """
        if self._data is None:
            if self.config_file_path is None:
                self._data = empty_data()
            else:
                self._data = normalize_data(self._read_file(self.config_file_path))
                logger.debug(f"Loaded configuration from {self.config_file_path}")
        return {section: dict(values) for section, values in self._data.items()}

    def _merged(self) -> dict[str, dict[str, Any]]:
        data = self.file_data()
        apply_overrides(data, self.cli_overrides)
        return data

    def _read_file(self, path: Path) -> dict[str, Any]:
        if not path.is_file():
            raise ConfigurationError(f"Config file not found: {path}", config_path=str(path))

        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read config file: {e}", config_path=str(path), cause=e
            ) from e

        if path.suffix in (".yaml", ".yml"):
            try:
                data = yaml.safe_load(text)
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Invalid YAML syntax in {path.name}: {e}", config_path=str(path), cause=e
                ) from e
        else:
            try:
                data = tomllib.loads(text)
            except tomllib.TOMLDecodeError as e:
                raise ConfigurationError(
                    f"Invalid TOML syntax in {path.name}: {e}", config_path=str(path), cause=e
                ) from e
            if path.name == "pyproject.toml":
                data = data.get("tool", {}).get("orgsync", {})

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config root must be a mapping in {path.name}", config_path=str(path)
            )
        return data

    @staticmethod
    def _find_config_file() -> Path | None:
        for directory in (Path.cwd(), Path.home()):
            for file_name in CONFIG_FILE_NAMES:
                candidate = directory / file_name
                if not candidate.is_file():
                    continue
                if file_name == "pyproject.toml" and not FileConfigProvider._has_tool_section(
                    candidate
                ):
                    continue
                return candidate
        return None

    @staticmethod
    def _has_tool_section(path: Path) -> bool:
        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError):
            return False
        return "orgsync" in data.get("tool", {})
