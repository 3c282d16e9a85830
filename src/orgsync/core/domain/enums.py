"""
Domain Enums - Sync direction and per-project pipeline states.
"""

from enum import Enum


class SyncDirection(Enum):
    """Which side receives the changes."""

    PULL = "pull"  # remote -> local files
    PUSH = "push"  # local files -> remote

    @classmethod
    def from_string(cls, value: "str | SyncDirection") -> "SyncDirection":
        """Parse direction from config or CLI input."""
        if isinstance(value, SyncDirection):
            return value
        normalized = str(value).strip().lower()
        aliases = {
            "pull": cls.PULL,
            "down": cls.PULL,
            "remote-to-local": cls.PULL,
            "push": cls.PUSH,
            "up": cls.PUSH,
            "local-to-remote": cls.PUSH,
        }
        if normalized not in aliases:
            raise ValueError(f"Unknown sync direction: {value!r}")
        return aliases[normalized]


class SyncState(Enum):
    """
    States of one project's reconciliation pipeline.

    FETCHING -> RESOLVING -> DIFFING -> APPLYING -> DONE | FAILED
    A cancelled pipeline stops after its current stage.
    """

    FETCHING = "fetching"
    RESOLVING = "resolving"
    DIFFING = "diffing"
    APPLYING = "applying"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"

    def is_terminal(self) -> bool:
        """Check if the pipeline has stopped."""
        return self in (SyncState.DONE, SyncState.FAILED, SyncState.CANCELLED)
