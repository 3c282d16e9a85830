"""
Org Document - Minimal Org-mode model for project task files.

Only what the sync needs is modelled: the preamble up to the first task,
level-2 task entries under the first top-level heading, and everything after
the next top-level heading, which is kept verbatim. Entries that are never
modified are written back byte for byte.

Example file:

    #+TITLE: Work

    * Work
    ** TODO Write report                                            :office:
    DEADLINE: <2024-05-01 Wed>
    :PROPERTIES:
    :TODOIST_ID: 7025348542
    :END:
    First draft goes to Anna.
"""

from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass, field
from datetime import date, datetime


ID_PROPERTY = "TODOIST_ID"
TASK_LEVEL = 2

# Keywords that mark a heading as an actionable item
TODO_KEYWORDS = ("TODO", "NEXT", "WAITING", "HOLD", "DONE", "CANCELLED", "CANCELED")

HEADING_RE = re.compile(r"^(\*+)\s+(.*?)\s*$")
TAGS_RE = re.compile(r"^(.*?)\s+(:(?:[\w@#%]+:)+)$")
PRIORITY_RE = re.compile(r"^\[#([A-Z0-9])\]\s*")
PLANNING_RE = re.compile(r"^\s*(DEADLINE|SCHEDULED|CLOSED):")
DEADLINE_RE = re.compile(
    r"DEADLINE:\s*<(\d{4}-\d{2}-\d{2})(?:\s+[^\s\d>]+)?(?:\s+(\d{1,2}:\d{2}))?[^>]*>"
)
PROPERTY_RE = re.compile(r"^\s*:([\w-]+):\s*(.*?)\s*$")
DRAWER_START = ":PROPERTIES:"
DRAWER_END = ":END:"


def heading_level(line: str) -> int:
    """Number of leading stars of a heading line, 0 for other lines."""
    match = HEADING_RE.match(line)
    return len(match.group(1)) if match else 0


def _is_structural(line: str) -> bool:
    return bool(
        HEADING_RE.match(line)
        or PLANNING_RE.match(line)
        or line.strip() in (DRAWER_START, DRAWER_END)
    )


def escape_line(line: str) -> str:
    """
    Protect a body line that would parse as Org structure.

    Uses Org's leading comma: ``* milk`` becomes ``,* milk``. Lines that
    already start with commas before such text get one more.
    """
    if _is_structural(line.lstrip(",")):
        return f",{line}"
    return line


def unescape_line(line: str) -> str:
    """Inverse of ``escape_line``."""
    if line.startswith(",") and _is_structural(line.lstrip(",")):
        return line[1:]
    return line


def format_timestamp(due: str) -> str:
    """Render ``2024-05-01`` or ``2024-05-01T09:30`` as an Org active timestamp."""
    day = date.fromisoformat(due[:10])
    stamp = f"{day.isoformat()} {day.strftime('%a')}"
    if len(due) > 10:
        moment = datetime.fromisoformat(due)
        stamp = f"{stamp} {moment.strftime('%H:%M')}"
    return f"<{stamp}>"


@dataclass
class OrgEntry:
    """One task heading with its planning line, properties and body."""

    title: str
    keyword: str | None = "TODO"
    priority: str | None = None
    tags: list[str] = field(default_factory=list)
    deadline: str | None = None
    planning: list[str] = field(default_factory=list)  # other planning items, verbatim
    properties: dict[str, str] = field(default_factory=dict)
    body: str | None = None
    level: int = TASK_LEVEL

    # Original lines, reused as long as the entry is not modified
    lines: list[str] | None = None

    @property
    def task_id(self) -> str | None:
        return self.properties.get(ID_PROPERTY) or None

    @property
    def is_task(self) -> bool:
        """Headings with a TODO keyword or a remote id are tasks."""
        return self.keyword is not None or self.task_id is not None

    def set_id(self, task_id: str) -> None:
        # Id goes first in the drawer
        others = {k: v for k, v in self.properties.items() if k != ID_PROPERTY}
        self.properties = {ID_PROPERTY: task_id, **others}
        self.lines = None

    def update(self, title: str, body: str | None, deadline: str | None) -> None:
        """Replace synced fields; keyword, tags and extra properties stay."""
        self.title = title
        self.body = body
        self.deadline = deadline
        self.lines = None

    # -------------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------------

    @classmethod
    def parse(cls, lines: list[str]) -> OrgEntry:
        """Parse an entry from its heading line and the lines below it."""
        match = HEADING_RE.match(lines[0])
        if match is None:
            raise ValueError(f"Not a heading: {lines[0]!r}")
        level = len(match.group(1))
        text = match.group(2)

        tags: list[str] = []
        tag_match = TAGS_RE.match(text)
        if tag_match:
            text = tag_match.group(1)
            tags = [t for t in tag_match.group(2).split(":") if t]

        keyword = None
        first, _, rest = text.partition(" ")
        if first in TODO_KEYWORDS:
            keyword = first
            text = rest

        priority = None
        priority_match = PRIORITY_RE.match(text)
        if priority_match:
            priority = priority_match.group(1)
            text = text[priority_match.end():]

        deadline: str | None = None
        planning: list[str] = []
        properties: dict[str, str] = {}
        index = 1

        # Planning line directly below the heading
        if index < len(lines) and PLANNING_RE.match(lines[index]):
            line = lines[index]
            deadline_match = DEADLINE_RE.search(line)
            if deadline_match:
                day, clock = deadline_match.groups()
                deadline = day
                if clock:
                    hour, minute = clock.split(":")
                    deadline = f"{day}T{int(hour):02d}:{minute}"
                line = line[: deadline_match.start()] + line[deadline_match.end():]
            remaining = " ".join(line.split())
            planning = [remaining] if remaining else []
            index += 1

        if index < len(lines) and lines[index].strip() == DRAWER_START:
            end = index + 1
            while end < len(lines) and lines[end].strip() != DRAWER_END:
                prop = PROPERTY_RE.match(lines[end])
                if prop:
                    properties[prop.group(1)] = prop.group(2)
                end += 1
            index = end + 1

        body_lines = lines[index:]
        while body_lines and not body_lines[-1].strip():
            body_lines = body_lines[:-1]
        while body_lines and not body_lines[0].strip():
            body_lines = body_lines[1:]
        body = None
        if body_lines:
            dedented = textwrap.dedent("\n".join(body_lines))
            body = "\n".join(unescape_line(line) for line in dedented.splitlines())

        return cls(
            title=text.strip(),
            keyword=keyword,
            priority=priority,
            tags=tags,
            deadline=deadline,
            planning=planning,
            properties=properties,
            body=body,
            level=level,
            lines=list(lines),
        )

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(self) -> list[str]:
        """Lines of the entry, original text when unmodified."""
        if self.lines is not None:
            return list(self.lines)

        heading = "*" * self.level
        if self.keyword:
            heading += f" {self.keyword}"
        if self.priority:
            heading += f" [#{self.priority}]"
        heading += f" {self.title}"
        if self.tags:
            heading += f"  :{':'.join(self.tags)}:"
        out = [heading]

        planning = []
        if self.deadline:
            planning.append(f"DEADLINE: {format_timestamp(self.deadline)}")
        planning.extend(self.planning)
        if planning:
            out.append(" ".join(planning))

        if self.properties:
            out.append(DRAWER_START)
            out.extend(f":{key}: {value}" for key, value in self.properties.items())
            out.append(DRAWER_END)

        if self.body:
            out.extend(escape_line(line) for line in self.body.splitlines())
        return out


@dataclass
class OrgDocument:
    """
    A project file split into preamble, task entries and trailing content.
    """

    head: list[str] = field(default_factory=list)
    entries: list[OrgEntry] = field(default_factory=list)
    tail: list[str] = field(default_factory=list)

    @classmethod
    def parse(cls, text: str) -> OrgDocument:
        lines = text.splitlines()
        doc = cls()

        # Preamble: up to and including the first top-level heading and its text
        index = 0
        seen_top = False
        while index < len(lines):
            level = heading_level(lines[index])
            if level == 1 and seen_top:
                break
            if level == 1:
                seen_top = True
            elif level >= TASK_LEVEL and seen_top:
                break
            doc.head.append(lines[index])
            index += 1

        # Entries: level-2 headings until the next top-level heading
        current: list[str] | None = None
        while index < len(lines):
            level = heading_level(lines[index])
            if level == 1:
                break
            if level == TASK_LEVEL:
                if current is not None:
                    doc.entries.append(OrgEntry.parse(current))
                current = [lines[index]]
            elif current is not None:
                current.append(lines[index])
            else:
                # Deeper heading before any task entry belongs to the preamble
                doc.head.append(lines[index])
            index += 1
        if current is not None:
            doc.entries.append(OrgEntry.parse(current))

        doc.tail = lines[index:]
        return doc

    @classmethod
    def new(cls, title: str) -> OrgDocument:
        return cls(head=[f"#+TITLE: {title}", "", f"* {title}"])

    def tasks(self) -> list[OrgEntry]:
        return [entry for entry in self.entries if entry.is_task]

    def find(self, task_id: str) -> OrgEntry | None:
        for entry in self.entries:
            if entry.task_id == task_id:
                return entry
        return None

    def find_unbound(self, title: str) -> OrgEntry | None:
        """First task entry without an id whose title matches."""
        for entry in self.entries:
            if entry.is_task and entry.task_id is None and entry.title == title:
                return entry
        return None

    def append(self, entry: OrgEntry) -> None:
        if not any(heading_level(line) == 1 for line in self.head):
            self.head.append("* Tasks")
        self.entries.append(entry)

    def remove(self, entry: OrgEntry) -> None:
        self.entries = [e for e in self.entries if e is not entry]

    def render(self) -> str:
        lines = list(self.head)
        for entry in self.entries:
            lines.extend(entry.render())
        lines.extend(self.tail)
        return "\n".join(lines) + "\n"
