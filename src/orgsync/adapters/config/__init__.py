"""
Configuration adapters - YAML/TOML files, environment variables, CLI overrides.
"""

from .environment import EnvironmentConfigProvider
from .file_provider import FileConfigProvider


__all__ = ["EnvironmentConfigProvider", "FileConfigProvider"]
