"""
Domain Entities - Tasks and projects as seen by the reconciliation engine.

Entities are rebuilt from raw records on every sync pass; nothing here is
persisted between runs.
"""

from __future__ import annotations

import textwrap
from dataclasses import dataclass, field
from typing import Any


def normalize_description(value: Any) -> str | None:
    """
    Normalize a multi-line description the way the local store reads it back.

    Trailing whitespace is stripped per line, surrounding blank lines are
    dropped and common indentation is removed. Blank text is absent.
    """
    if value is None:
        return None
    lines = [line.rstrip() for line in str(value).splitlines()]
    while lines and not lines[-1]:
        lines.pop()
    while lines and not lines[0]:
        lines.pop(0)
    if not lines:
        return None
    return textwrap.dedent("\n".join(lines))


@dataclass
class Task:
    """
    An actionable item owned by one project.

    A task without an ``id`` has not been created on the remote side yet.
    """

    content: str
    id: str | None = None
    project_id: str | None = None
    description: str | None = None
    due_date: str | None = None

    @property
    def has_id(self) -> bool:
        """Check if the task is known to the remote service."""
        return bool(self.id)

    def same_fields(self, other: Task) -> bool:
        """
        Compare the fields the apply phases write.

        Descriptions are compared normalized, so an absent description and
        an empty one are equal.
        """
        return (
            self.content == other.content
            and normalize_description(self.description) == normalize_description(other.description)
            and (self.due_date or None) == (other.due_date or None)
        )

    def to_raw(self) -> dict[str, Any]:
        """Render the raw record shape consumed by the ports."""
        raw: dict[str, Any] = {"content": self.content}
        if self.id:
            raw["id"] = self.id
        if self.project_id:
            raw["project_id"] = self.project_id
        if self.description:
            raw["description"] = self.description
        if self.due_date:
            raw["due_date"] = self.due_date
        return raw

    def __str__(self) -> str:
        return f"{self.id or '<new>'}: {self.content}"


@dataclass(frozen=True)
class Project:
    """A named grouping of tasks, mapped 1:1 to a local storage target."""

    id: str
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass
class Delta:
    """
    Partition of two task snapshots into created/updated/deleted buckets.

    A task appears in exactly one of the three lists.
    """

    created: list[Task] = field(default_factory=list)
    updated: list[Task] = field(default_factory=list)
    deleted: list[Task] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Number of tasks across all buckets."""
        return len(self.created) + len(self.updated) + len(self.deleted)

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    def __str__(self) -> str:
        return (
            f"Delta(created={len(self.created)}, updated={len(self.updated)}, "
            f"deleted={len(self.deleted)})"
        )
