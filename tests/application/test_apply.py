"""Tests for the local and remote apply phases."""

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from orgsync.application.sync.apply import (
    ApplyResult,
    FailedOperation,
    LocalApplier,
    RemoteApplier,
)
from orgsync.application.sync.diff import diff, index_by_id
from orgsync.core.domain import Delta, Project, Task
from orgsync.core.exceptions import ReconciliationConflict, ResourceNotFoundError, TransportError


@pytest.fixture
def target(tmp_path: Path, org_store, work_project: Project) -> Path:
    path = tmp_path / "Work.org"
    org_store.create_target(path, work_project)
    return path


# =============================================================================
# ApplyResult
# =============================================================================


class TestApplyResult:
    """Tests for ApplyResult."""

    def test_success_without_failures(self):
        """Should succeed without failures."""
        result = ApplyResult(created=2, updated=1)
        assert result.success
        assert result.changes == 3

    def test_add_failure_records_kind(self):
        """Should record the taxonomy kind of a failure."""
        result = ApplyResult()
        result.add_failure("delete", Task(id="9", content="X"), ResourceNotFoundError("gone"))

        assert not result.success
        assert result.failures == [
            FailedOperation(
                operation="delete",
                task_id="9",
                content="X",
                kind="TransportError",
                error="gone",
            )
        ]

    def test_merge(self):
        """Should add counts and concatenate lists."""
        a = ApplyResult(created=1, created_ids=[(Task(content="a"), "1")])
        b = ApplyResult(dry_run=True, deleted=2)
        b.add_failure("update", Task(id="2", content="b"), TransportError("x"))

        merged = a.merge(b)

        assert merged.dry_run
        assert merged.created == 1
        assert merged.deleted == 2
        assert len(merged.created_ids) == 1
        assert len(merged.failures) == 1


# =============================================================================
# Local Apply
# =============================================================================


class TestLocalApplier:
    """Tests for LocalApplier against a real Org file."""

    def test_creates_entries(self, org_store, target: Path, sample_tasks):
        """Should append one entry per created task."""
        result = LocalApplier(org_store).apply(target, diff([], sample_tasks))

        assert result.created == 3
        assert result.success
        records = org_store.read_tasks(target)
        assert [r["id"] for r in records] == ["1", "2", "3"]
        assert records[2]["due_date"] == "2024-05-03T09:30"

    def test_reapplying_is_idempotent(self, org_store, target: Path, sample_tasks):
        """Should not change the target when the same delta is applied twice."""
        applier = LocalApplier(org_store)
        delta = diff([], sample_tasks)

        applier.apply(target, delta)
        first = target.read_text()
        second_result = applier.apply(target, delta)

        assert target.read_text() == first
        assert second_result.created == 0
        assert second_result.unchanged == 3
        assert second_result.changes == 0

    def test_unchanged_update_is_skipped(self, org_store, target: Path, sample_tasks):
        """Should not rewrite entries whose fields match."""
        applier = LocalApplier(org_store)
        applier.apply(target, diff([], sample_tasks))
        before = target.read_text()

        result = applier.apply(target, diff(sample_tasks, sample_tasks))

        assert result.unchanged == 3
        assert result.updated == 0
        assert target.read_text() == before

    def test_update_keeps_local_annotations(self, org_store, tmp_path: Path, work_org_text):
        """Should rewrite synced fields and keep tags, keyword and properties."""
        path = tmp_path / "Work.org"
        path.write_text(work_org_text)
        task = Task(id="1", content="Write final report", description="Send to Anna.")

        result = LocalApplier(org_store).apply(path, Delta(updated=[task]))

        assert result.updated == 1
        text = path.read_text()
        assert "** TODO Write final report  :office:" in text
        assert "Send to Anna." in text
        assert "DEADLINE" not in text.split("** NEXT")[0]
        assert ":CUSTOM: keep-me" in text
        assert "* Archive" in text

    def test_delete_removes_entry(self, org_store, tmp_path: Path, work_org_text):
        """Should remove the entry carrying the id."""
        path = tmp_path / "Work.org"
        path.write_text(work_org_text)

        result = LocalApplier(org_store).apply(
            path, Delta(deleted=[Task(id="2", content="Review PR")])
        )

        assert result.deleted == 1
        assert "Review PR" not in path.read_text()
        assert "Draft agenda" in path.read_text()

    def test_missing_ids_are_conflicts(self, org_store, tmp_path: Path, work_org_text):
        """Should report and skip updates and deletes of unknown ids."""
        path = tmp_path / "Work.org"
        path.write_text(work_org_text)
        delta = Delta(
            updated=[Task(id="404", content="Ghost")],
            deleted=[Task(id="405", content="Ghost too"), Task(id="2", content="Review PR")],
        )

        result = LocalApplier(org_store).apply(path, delta)

        assert result.deleted == 1
        assert [(f.operation, f.task_id, f.kind) for f in result.failures] == [
            ("update", "404", "ReconciliationConflict"),
            ("delete", "405", "ReconciliationConflict"),
        ]

    def test_dry_run_does_not_write(self, org_store, target: Path, sample_tasks):
        """Should count but not write in dry-run mode."""
        before = target.read_text()

        result = LocalApplier(org_store, dry_run=True).apply(target, diff([], sample_tasks))

        assert result.dry_run
        assert result.created == 3
        assert target.read_text() == before

    def test_store_failure_is_per_task(self, target: Path):
        """Should continue after a store error on one task."""
        store = MagicMock()
        store.read_tasks.return_value = [{"id": "1", "content": "A"}, {"id": "2", "content": "B"}]
        store.remove_task.side_effect = [ReconciliationConflict("vanished"), None]

        result = LocalApplier(store).apply(
            target, Delta(deleted=[Task(id="1", content="A"), Task(id="2", content="B")])
        )

        assert result.deleted == 1
        assert len(result.failures) == 1
        assert store.remove_task.call_count == 2

    def test_os_error_is_per_task(self, target: Path):
        """Should record a raw I/O error of one task and keep going."""
        store = MagicMock()
        store.read_tasks.return_value = []
        store.append_task.side_effect = [PermissionError("denied"), None]

        result = LocalApplier(store).apply(
            target, Delta(created=[Task(id="1", content="A"), Task(id="2", content="B")])
        )

        assert result.created == 1
        assert [(f.operation, f.task_id, f.kind) for f in result.failures] == [
            ("create", "1", "ReconciliationConflict")
        ]
        assert "PermissionError" in result.failures[0].error

    def test_write_failure_on_one_task(self, org_store, target: Path, sample_tasks):
        """Should apply the other tasks when writing one of them fails."""
        real_replace = os.replace
        calls = []

        def flaky_replace(src, dst):
            calls.append(dst)
            if len(calls) == 1:
                raise PermissionError("read-only")
            return real_replace(src, dst)

        with patch("orgsync.adapters.orgmode.store.os.replace", side_effect=flaky_replace):
            result = LocalApplier(org_store).apply(target, diff([], sample_tasks))

        assert result.created == 2
        assert [(f.operation, f.task_id, f.kind) for f in result.failures] == [
            ("create", "1", "ReconciliationConflict")
        ]
        assert [r["id"] for r in org_store.read_tasks(target)] == ["2", "3"]

    def test_heading_like_description_is_idempotent(self, org_store, target: Path):
        """Should keep markdown bullets inside the entry across passes."""
        delta = Delta(
            created=[
                Task(id="1", content="A", description="Shopping:\n* milk\n* eggs"),
                Task(id="2", content="B"),
            ]
        )
        applier = LocalApplier(org_store)

        applier.apply(target, delta)
        first = target.read_text()
        second = applier.apply(target, delta)

        assert target.read_text() == first
        assert second.changes == 0
        assert [(r["id"], r["description"]) for r in org_store.read_tasks(target)] == [
            ("1", "Shopping:\n* milk\n* eggs"),
            ("2", None),
        ]

    def test_description_whitespace_is_not_a_change(self, org_store, target: Path):
        """Should treat surrounding blank lines and indentation as equal."""
        delta = Delta(created=[Task(id="1", content="A", description="  line\n  more  \n\n")])
        applier = LocalApplier(org_store)

        applier.apply(target, delta)
        second = applier.apply(target, delta)

        assert second.updated == 0
        assert second.unchanged == 1


# =============================================================================
# Remote Apply
# =============================================================================


class TestRemoteApplier:
    """Tests for RemoteApplier."""

    def test_failed_delete_does_not_block_batch(self, mock_service):
        """Should process every task and report exactly one failure."""
        mock_service.delete_task.side_effect = [None, TransportError("timeout", task_id="2"), None]
        mock_service.create_task.return_value = {"id": "10", "content": "New"}
        delta = Delta(
            created=[Task(content="New", project_id="p1")],
            updated=[Task(id="5", content="Edited")],
            deleted=[
                Task(id="1", content="A"),
                Task(id="2", content="B"),
                Task(id="3", content="C"),
            ],
        )

        result = RemoteApplier(mock_service).apply(delta)

        assert mock_service.delete_task.call_count == 3
        mock_service.create_task.assert_called_once()
        mock_service.update_task.assert_called_once_with("5", {"content": "Edited"})
        assert result.deleted == 2
        assert result.created == 1
        assert result.updated == 1
        assert len(result.failures) == 1
        assert result.failures[0].task_id == "2"
        assert result.failures[0].kind == "TransportError"

    def test_created_ids_are_returned(self, mock_service):
        """Should hand back the ids assigned by the service."""
        task = Task(content="New", project_id="p1", due_date="2024-05-01")
        mock_service.create_task.return_value = {"id": "10"}

        result = RemoteApplier(mock_service).apply(Delta(created=[task]))

        mock_service.create_task.assert_called_once_with(
            {"content": "New", "project_id": "p1", "due_date": "2024-05-01"}
        )
        assert result.created_ids == [(task, "10")]

    def test_created_task_id_is_not_sent(self, mock_service):
        """Should never send a local id on create."""
        mock_service.create_task.return_value = {"id": "11"}

        RemoteApplier(mock_service).apply(Delta(created=[Task(id="stale", content="X")]))

        sent = mock_service.create_task.call_args[0][0]
        assert "id" not in sent

    def test_updates_matching_baseline_are_skipped(self, mock_service, sample_tasks):
        """Should skip updates whose fields already match the remote snapshot."""
        edited = Task(id="2", content="Review PR", description="Needs more tests")

        result = RemoteApplier(mock_service).apply(
            Delta(updated=[sample_tasks[0], edited]), baseline=index_by_id(sample_tasks)
        )

        assert result.unchanged == 1
        assert result.updated == 1
        mock_service.update_task.assert_called_once()

    def test_dry_run_makes_no_calls(self, mock_service, sample_tasks):
        """Should not call the service in dry-run mode."""
        delta = Delta(
            created=[Task(content="New")], updated=sample_tasks[:1], deleted=sample_tasks[1:]
        )

        result = RemoteApplier(mock_service, dry_run=True).apply(delta)

        mock_service.create_task.assert_not_called()
        mock_service.update_task.assert_not_called()
        mock_service.delete_task.assert_not_called()
        assert (result.created, result.updated, result.deleted) == (1, 1, 2)
        assert result.created_ids == []

    def test_apply_remote_alias(self, mock_service):
        result = RemoteApplier(mock_service, dry_run=True).apply_remote(
            Delta(created=[Task(content="New")])
        )

        assert result.created == 1


def test_apply_local_alias(org_store, target: Path, sample_tasks):
    result = LocalApplier(org_store).apply_local(target, diff([], sample_tasks[:1]))

    assert result.created == 1
    assert org_store.read_tasks(target)[0]["id"] == "1"
