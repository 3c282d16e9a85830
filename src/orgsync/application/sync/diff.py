"""
Diff Engine - Classify two task snapshots into created/updated/deleted.

Classification depends only on id set membership, never on position or
field values. Tasks present unchanged on both sides still land in
``updated``; the apply phases compare field by field and skip no-op writes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from orgsync.core.domain.entities import Delta, Task


logger = logging.getLogger("DiffEngine")


def diff(before: Iterable[Task], after: Iterable[Task]) -> Delta:
    """
    Compute the delta that turns ``before`` into ``after``.

    Args:
        before: Snapshot of the side being brought up to date
        after: Snapshot of the side that is the source of truth

    Returns:
        Delta where ``created`` and ``updated`` partition ``after`` and
        ``updated`` and ``deleted`` partition the ids of ``before``
    """
    before = list(before)
    delta = Delta()

    before_ids: set[str] = set()
    for task in before:
        if not task.id:
            continue
        if task.id in before_ids:
            # First occurrence accounts for the id
            logger.warning(f"Duplicate id {task.id} in snapshot, keeping first occurrence")
            continue
        before_ids.add(task.id)

    # Ids of ``before`` not yet matched by a task of ``after``
    unaccounted = set(before_ids)

    for task in after:
        if not task.id:
            delta.created.append(task)
        elif task.id in unaccounted:
            delta.updated.append(task)
            unaccounted.discard(task.id)
        elif task.id in before_ids:
            # Already accounted for; a created task never reuses an id of before
            logger.warning(f"Id {task.id} appears more than once, skipping repeat")
        else:
            delta.created.append(task)

    seen: set[str] = set()
    for task in before:
        if task.id and task.id in unaccounted and task.id not in seen:
            delta.deleted.append(task)
            seen.add(task.id)

    logger.debug(f"Computed {delta}")
    return delta


def index_by_id(tasks: Iterable[Task]) -> dict[str, Task]:
    """Map ids to tasks, first occurrence wins; tasks without id are skipped."""
    index: dict[str, Task] = {}
    for task in tasks:
        if task.id and task.id not in index:
            index[task.id] = task
    return index
