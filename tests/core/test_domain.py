"""
Tests for domain entities and enums.
"""

import pytest

from orgsync.core.domain import Delta, Project, SyncDirection, SyncState, Task


class TestTask:
    """Tests for Task entity."""

    def test_has_id(self):
        """Test tasks without id are not known remotely."""
        assert Task(content="Draft", id="1").has_id
        assert not Task(content="Draft").has_id
        assert not Task(content="Draft", id="").has_id

    def test_same_fields_ignores_id_and_project(self):
        """Test comparison only covers written fields."""
        a = Task(content="Write report", id="1", project_id="p1", due_date="2024-05-01")
        b = Task(content="Write report", id="2", project_id="p2", due_date="2024-05-01")
        assert a.same_fields(b)

    def test_same_fields_empty_description_equals_none(self):
        """Test an empty description matches an absent one."""
        assert Task(content="X", description="").same_fields(Task(content="X"))

    def test_same_fields_normalizes_description(self):
        """Test surrounding whitespace of descriptions is not a change."""
        assert Task(content="X", description="line\n").same_fields(
            Task(content="X", description="line")
        )
        assert Task(content="X", description="\n  a\n  b  \n").same_fields(
            Task(content="X", description="a\nb")
        )

    def test_same_fields_detects_changes(self):
        """Test content, description and due date differences."""
        base = Task(content="X", description="d", due_date="2024-05-01")

        assert not base.same_fields(Task(content="Y", description="d", due_date="2024-05-01"))
        assert not base.same_fields(Task(content="X", description="e", due_date="2024-05-01"))
        assert not base.same_fields(Task(content="X", description="d", due_date=None))

    def test_to_raw_omits_empty_fields(self):
        """Test raw record contains only set fields."""
        assert Task(content="Draft").to_raw() == {"content": "Draft"}

    def test_to_raw_full(self):
        """Test raw record with every field."""
        task = Task(
            content="Write report",
            id="1",
            project_id="p1",
            description="Body",
            due_date="2024-05-01",
        )
        assert task.to_raw() == {
            "content": "Write report",
            "id": "1",
            "project_id": "p1",
            "description": "Body",
            "due_date": "2024-05-01",
        }

    def test_str(self):
        """Test string form shows id and content."""
        assert str(Task(content="Draft", id="7")) == "7: Draft"
        assert str(Task(content="Draft")) == "<new>: Draft"


class TestProject:
    """Tests for Project entity."""

    def test_is_hashable(self):
        """Test projects can be used as dict keys."""
        project = Project(id="1", name="Work")
        assert {project: "ok"}[Project(id="1", name="Work")] == "ok"

    def test_str(self):
        """Test string form is the name."""
        assert str(Project(id="1", name="Work")) == "Work"


class TestDelta:
    """Tests for Delta."""

    def test_empty(self):
        """Test a new delta is empty."""
        delta = Delta()
        assert delta.is_empty
        assert delta.total == 0

    def test_total(self):
        """Test total counts all buckets."""
        delta = Delta(
            created=[Task(content="a")],
            updated=[Task(content="b", id="1"), Task(content="c", id="2")],
            deleted=[Task(content="d", id="3")],
        )
        assert delta.total == 4
        assert not delta.is_empty
        assert str(delta) == "Delta(created=1, updated=2, deleted=1)"


class TestSyncDirection:
    """Tests for SyncDirection."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("pull", SyncDirection.PULL),
            ("PULL", SyncDirection.PULL),
            ("down", SyncDirection.PULL),
            ("remote-to-local", SyncDirection.PULL),
            ("push", SyncDirection.PUSH),
            (" up ", SyncDirection.PUSH),
            ("local-to-remote", SyncDirection.PUSH),
            (SyncDirection.PUSH, SyncDirection.PUSH),
        ],
    )
    def test_from_string(self, value, expected):
        """Test direction aliases."""
        assert SyncDirection.from_string(value) == expected

    def test_from_string_unknown(self):
        """Test unknown direction raises ValueError."""
        with pytest.raises(ValueError, match="sideways"):
            SyncDirection.from_string("sideways")


class TestSyncState:
    """Tests for SyncState."""

    @pytest.mark.parametrize("state", [SyncState.DONE, SyncState.FAILED, SyncState.CANCELLED])
    def test_terminal_states(self, state):
        """Test terminal states."""
        assert state.is_terminal()

    @pytest.mark.parametrize(
        "state",
        [SyncState.FETCHING, SyncState.RESOLVING, SyncState.DIFFING, SyncState.APPLYING],
    )
    def test_non_terminal_states(self, state):
        """Test pipeline stages are not terminal."""
        assert not state.is_terminal()
