"""
Field Extraction - Normalize raw records from either side into entities.

Extraction is pure: input dictionaries are never mutated. Missing optional
fields map to None; a record without usable content raises ParseError.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from orgsync.core.domain.entities import Project, Task, normalize_description
from orgsync.core.exceptions import ParseError


logger = logging.getLogger("Extraction")

_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")
DATETIME_FORMAT = "%Y-%m-%dT%H:%M"


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _extract_id(raw: Mapping[str, Any]) -> str | None:
    value = raw.get("id")
    if value is None or value == "":
        return None
    return str(value)


def normalize_due_date(value: Any) -> str | None:
    """
    Normalize a due date to an ISO string.

    Accepts date/datetime objects, ISO strings (``2024-05-01`` or
    ``2024-05-01T09:00:00``) and Todoist's ``{"date": ...}`` object.
    Unparseable values are treated as absent.
    """
    if value is None:
        return None
    if isinstance(value, Mapping):
        value = value.get("date")
        if value is None:
            return None
    if isinstance(value, datetime):
        return value.strftime(DATETIME_FORMAT)
    if isinstance(value, date):
        return value.isoformat()

    text = str(value).strip()
    if not text:
        return None
    if not _DATE_PREFIX.match(text):
        logger.warning(f"Ignoring unparseable due date {text!r}")
        return None
    try:
        if len(text) == 10:
            return date.fromisoformat(text).isoformat()
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00").replace(" ", "T"))
    except ValueError:
        logger.warning(f"Ignoring unparseable due date {text!r}")
        return None
    # Minute precision, wall clock time; Org timestamps carry no zone
    return parsed.strftime(DATETIME_FORMAT)


def task_from_raw(raw: Mapping[str, Any], project_id: str | None = None) -> Task:
    """
    Build a Task from a raw record.

    Args:
        raw: Raw record from the remote service or the local store
        project_id: Owning project, used when the record does not carry one

    Raises:
        ParseError: If the record has no non-empty content
    """
    if not isinstance(raw, Mapping):
        raise ParseError(f"Task record must be a mapping, got {type(raw).__name__}")

    content = raw.get("content")
    if content is None or not str(content).strip():
        raise ParseError(f"Task record {_extract_id(raw) or '<new>'} has no content")
    # Titles are single-line
    title = str(content).strip().splitlines()[0].strip()

    due = raw.get("due_date")
    if due is None:
        due = raw.get("due")

    return Task(
        id=_extract_id(raw),
        project_id=_optional_str(raw.get("project_id")) or project_id,
        content=title,
        description=normalize_description(raw.get("description")),
        due_date=normalize_due_date(due),
    )


def project_from_raw(raw: Mapping[str, Any]) -> Project:
    """
    Build a Project from a raw record.

    Raises:
        ParseError: If the record has no id or no name
    """
    if not isinstance(raw, Mapping):
        raise ParseError(f"Project record must be a mapping, got {type(raw).__name__}")

    project_id = _extract_id(raw)
    name = _optional_str(raw.get("name"))
    if project_id is None or name is None:
        raise ParseError(f"Project record is missing id or name: {dict(raw)!r}")
    return Project(id=project_id, name=name.strip())


def extract_tasks(
    raws: Iterable[Mapping[str, Any]],
    project_id: str | None = None,
    source: str | None = None,
) -> tuple[list[Task], list[ParseError]]:
    """
    Normalize a batch of raw task records.

    Malformed records are skipped with a logged diagnostic; they never abort
    the batch.

    Returns:
        Tuple of (tasks, errors for the skipped records)
    """
    tasks: list[Task] = []
    errors: list[ParseError] = []

    for raw in raws:
        try:
            tasks.append(task_from_raw(raw, project_id=project_id))
        except ParseError as e:
            if source and e.source is None:
                e.source = source
            logger.warning(f"Skipping malformed task record: {e}")
            errors.append(e)

    return tasks, errors


def extract_projects(raws: Iterable[Mapping[str, Any]]) -> list[Project]:
    """Normalize raw project records, skipping malformed ones."""
    projects: list[Project] = []
    for raw in raws:
        try:
            projects.append(project_from_raw(raw))
        except ParseError as e:
            logger.warning(f"Skipping malformed project record: {e}")
    return projects
