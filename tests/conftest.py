"""
Shared pytest fixtures for the orgsync test suite.

Fixture Categories:
- Domain: Sample projects and tasks
- Ports: Mock task service, real Org-mode store on tmp_path
- Configuration: SyncConfig pointing at a temporary org directory
"""

from __future__ import annotations

from pathlib import Path
from textwrap import dedent
from unittest.mock import MagicMock

import pytest

from orgsync.adapters.orgmode import OrgTaskStore
from orgsync.core.domain import Project, Task
from orgsync.core.ports.config_provider import SyncConfig
from orgsync.core.ports.task_service import TaskServicePort


# =============================================================================
# Domain Fixtures
# =============================================================================


@pytest.fixture
def work_project() -> Project:
    """The 'Work' project."""
    return Project(id="2203306141", name="Work")


@pytest.fixture
def home_project() -> Project:
    """The 'Home' project."""
    return Project(id="2203306142", name="Home")


@pytest.fixture
def sample_tasks() -> list[Task]:
    """Three remote tasks of the Work project."""
    return [
        Task(id="1", project_id="2203306141", content="Write report", due_date="2024-05-01"),
        Task(id="2", project_id="2203306141", content="Review PR", description="Needs tests"),
        Task(id="3", project_id="2203306141", content="Plan sprint", due_date="2024-05-03T09:30"),
    ]


# =============================================================================
# Port Fixtures
# =============================================================================


@pytest.fixture
def mock_service() -> MagicMock:
    """Mock TaskServicePort with no projects and no tasks."""
    service = MagicMock(spec=TaskServicePort)
    service.name = "Todoist"
    service.list_projects.return_value = []
    service.list_tasks.return_value = []
    return service


@pytest.fixture
def org_dir(tmp_path: Path) -> Path:
    """Empty directory used as search scope."""
    directory = tmp_path / "org"
    directory.mkdir()
    return directory


@pytest.fixture
def org_store(tmp_path: Path) -> OrgTaskStore:
    """Org-mode store whose default directory lives under tmp_path."""
    return OrgTaskStore(default_directory=tmp_path / "default")


@pytest.fixture
def sync_config(org_dir: Path) -> SyncConfig:
    """Sync configuration searching only the temporary org directory."""
    return SyncConfig(search_scope=[str(org_dir)], max_workers=2)


# =============================================================================
# Sample Org Content
# =============================================================================


@pytest.fixture
def work_org_text() -> str:
    """Org file for the Work project with two bound tasks and one local draft."""
    return dedent(
        """\
        #+TITLE: Work

        * Work
        ** TODO Write report  :office:
        DEADLINE: <2024-05-01 Wed>
        :PROPERTIES:
        :TODOIST_ID: 1
        :END:
        First draft goes to Anna.
        ** NEXT Review PR
        :PROPERTIES:
        :TODOIST_ID: 2
        :CUSTOM: keep-me
        :END:
        ** TODO Draft agenda
        * Archive
        ** DONE Old thing
        """
    )
