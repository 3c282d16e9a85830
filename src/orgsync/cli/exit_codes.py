"""
Exit Codes - Process exit codes of the orgsync CLI.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes returned by ``main()``."""

    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2
    CONNECTION_ERROR = 3
    PARTIAL_FAILURE = 4
    CANCELLED = 130
