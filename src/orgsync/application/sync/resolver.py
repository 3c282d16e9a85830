"""
Project Resolver - Map a remote project to exactly one local target.

The search scope is an ordered list of directories and files. Directories
are searched depth-first, in filesystem enumeration order, for a file named
``<project name><extension>``. The first match wins; when nothing matches the
resolver proposes a new path in the first directory of the scope.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path

from orgsync.core.domain.entities import Project
from orgsync.core.exceptions import ConfigurationError


# Version control and tool metadata directories never hold targets
SKIPPED_DIRECTORIES = frozenset({".git", ".hg", ".svn", ".bzr", "_darcs", "CVS", ".", ".."})


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving a project."""

    path: Path
    exists: bool

    def __str__(self) -> str:
        suffix = "" if self.exists else " (new)"
        return f"{self.path}{suffix}"


class ProjectResolver:
    """
    Resolve projects to storage targets by name.

    Example:
        >>> resolver = ProjectResolver(extension=".org")
        >>> resolver.resolve(Project(id="1", name="Work"), [Path("~/org")])
        PosixPath('/home/me/org/Work.org')
    """

    def __init__(self, extension: str = ".org", skip_hidden: bool = True):
        """
        Initialize the resolver.

        Args:
            extension: Target file extension, including the dot
            skip_hidden: Also skip directories starting with a dot
        """
        self.extension = extension if extension.startswith(".") else f".{extension}"
        self.skip_hidden = skip_hidden
        self.logger = logging.getLogger("ProjectResolver")

    def target_name(self, project: Project) -> str:
        """File name expected for a project."""
        return f"{project.name}{self.extension}"

    def resolve(
        self,
        project: Project,
        search_scope: Sequence[str | Path],
        default_location: str | Path | None = None,
    ) -> Path:
        """
        Return the target path for a project.

        Raises:
            ConfigurationError: If the search scope is empty
        """
        return self.locate(project, search_scope, default_location).path

    def locate(
        self,
        project: Project,
        search_scope: Sequence[str | Path],
        default_location: str | Path | None = None,
    ) -> Resolution:
        """
        Resolve a project and report whether the target already exists.

        Args:
            project: Project to resolve
            search_scope: Ordered directories and/or files to search
            default_location: Directory for a new target when the scope has
                no directory entry

        Raises:
            ConfigurationError: If the search scope is empty
        """
        if not search_scope:
            raise ConfigurationError(
                f"No search scope configured, cannot resolve project '{project.name}'"
            )

        expected = self.target_name(project)
        entries = [Path(entry).expanduser() for entry in search_scope]

        for entry in entries:
            if entry.is_dir():
                match = self._search_directory(entry, expected)
                if match is not None:
                    self.logger.debug(f"Resolved '{project.name}' to {match}")
                    return Resolution(path=match, exists=True)
            elif entry.is_file() and entry.name == expected:
                self.logger.debug(f"Resolved '{project.name}' to {entry}")
                return Resolution(path=entry, exists=True)

        new_path = self._new_target_path(entries, expected, default_location)
        self.logger.info(f"No target found for '{project.name}', will create {new_path}")
        return Resolution(path=new_path, exists=False)

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    def _search_directory(self, root: Path, expected: str) -> Path | None:
        for candidate in self._walk(root):
            if candidate.name == expected:
                return candidate
        return None

    def _walk(self, directory: Path, visited: set[str] | None = None) -> Iterator[Path]:
        """
        Yield files below ``directory`` depth-first, in enumeration order.

        Real paths of visited directories are remembered so symlink cycles
        terminate.
        """
        if visited is None:
            visited = set()
        real = os.path.realpath(directory)
        if real in visited:
            self.logger.debug(f"Skipping already visited directory {directory}")
            return
        visited.add(real)

        try:
            with os.scandir(directory) as iterator:
                entries = list(iterator)
        except OSError as e:
            self.logger.warning(f"Cannot read directory {directory}: {e}")
            return

        for entry in entries:
            try:
                is_dir = entry.is_dir()
                is_file = not is_dir and entry.is_file()
            except OSError as e:
                self.logger.warning(f"Cannot stat {entry.path}: {e}")
                continue

            if is_dir:
                if not self._skip_directory(entry.name):
                    yield from self._walk(Path(entry.path), visited)
            elif is_file:
                yield Path(entry.path)

    def _skip_directory(self, name: str) -> bool:
        if name in SKIPPED_DIRECTORIES:
            return True
        return self.skip_hidden and name.startswith(".")

    def _new_target_path(
        self,
        entries: list[Path],
        expected: str,
        default_location: str | Path | None,
    ) -> Path:
        for entry in entries:
            if entry.is_dir():
                return entry / expected
            if not entry.exists() and not entry.suffix:
                # Directory that does not exist yet; created with the target
                self.logger.warning(f"Search scope directory {entry} does not exist yet")
                return entry / expected

        if default_location is not None:
            base = Path(default_location).expanduser()
            # A file default means "next to it"
            if base.suffix and not base.is_dir():
                base = base.parent
            return base / expected

        # Only file entries in scope: place the new target beside the first one
        return entries[0].parent / expected
