"""
CLI Module - Command line interface for orgsync.
"""

from .app import main
from .exit_codes import ExitCode


__all__ = ["ExitCode", "main"]
