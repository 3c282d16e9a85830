"""Tests for the project resolver."""

import os
from pathlib import Path

import pytest

from orgsync.application.sync.resolver import ProjectResolver, Resolution
from orgsync.core.domain import Project
from orgsync.core.exceptions import ConfigurationError


@pytest.fixture
def resolver() -> ProjectResolver:
    return ProjectResolver(extension=".org")


@pytest.fixture
def work() -> Project:
    return Project(id="1", name="Work")


class TestResolve:
    """Tests for resolve() and locate()."""

    def test_first_scope_entry_wins(self, tmp_path: Path, resolver, work):
        """Should return the match in the first directory, never a duplicate."""
        dir_a = tmp_path / "a"
        dir_b = tmp_path / "b"
        dir_a.mkdir()
        dir_b.mkdir()
        (dir_a / "Work.org").write_text("* Work\n")

        assert resolver.resolve(work, [dir_a, dir_b]) == dir_a / "Work.org"
        assert not (dir_b / "Work.org").exists()

    def test_scope_order_is_respected(self, tmp_path: Path, resolver, work):
        """Should prefer earlier scope entries when both contain a match."""
        dir_a = tmp_path / "a"
        dir_b = tmp_path / "b"
        dir_a.mkdir()
        dir_b.mkdir()
        (dir_a / "Work.org").write_text("")
        (dir_b / "Work.org").write_text("")

        assert resolver.resolve(work, [dir_b, dir_a]) == dir_b / "Work.org"

    def test_recursive_search(self, tmp_path: Path, resolver, work):
        """Should find targets in nested directories."""
        nested = tmp_path / "areas" / "job"
        nested.mkdir(parents=True)
        (nested / "Work.org").write_text("")

        resolution = resolver.locate(work, [tmp_path])

        assert resolution == Resolution(path=nested / "Work.org", exists=True)

    def test_exact_name_match(self, tmp_path: Path, resolver, work):
        """Should not match names that only contain the project name."""
        (tmp_path / "Work-old.org").write_text("")
        (tmp_path / "My Work.org").write_text("")
        (tmp_path / "Work.txt").write_text("")

        resolution = resolver.locate(work, [tmp_path])

        assert resolution == Resolution(path=tmp_path / "Work.org", exists=False)

    def test_file_entry_matches_directly(self, tmp_path: Path, resolver, work):
        """Should match a file scope entry by name."""
        target = tmp_path / "Work.org"
        target.write_text("")

        assert resolver.locate(work, [target]) == Resolution(path=target, exists=True)

    def test_file_entry_with_other_name_is_skipped(self, tmp_path: Path, resolver, work):
        """Should not match a file entry of another project."""
        other = tmp_path / "Home.org"
        other.write_text("")

        resolution = resolver.locate(work, [other])

        assert resolution.exists is False
        assert resolution.path == tmp_path / "Work.org"

    def test_skips_version_control_directories(self, tmp_path: Path, resolver, work):
        """Should not descend into metadata directories."""
        git_dir = tmp_path / ".git"
        git_dir.mkdir()
        (git_dir / "Work.org").write_text("")

        resolution = resolver.locate(work, [tmp_path])

        assert resolution.exists is False

    def test_hidden_directories_can_be_searched(self, tmp_path: Path, work):
        """Should search hidden directories when skip_hidden is off."""
        hidden = tmp_path / ".notes"
        hidden.mkdir()
        (hidden / "Work.org").write_text("")

        resolution = ProjectResolver(skip_hidden=False).locate(work, [tmp_path])

        assert resolution.path == hidden / "Work.org"

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_symlink_cycle_terminates(self, tmp_path: Path, resolver, work):
        """Should not loop forever on symlink cycles."""
        loop_dir = tmp_path / "loop"
        loop_dir.mkdir()
        try:
            (loop_dir / "back").symlink_to(tmp_path, target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlinks here")

        resolution = resolver.locate(work, [tmp_path])

        assert resolution.exists is False
        assert resolution.path == tmp_path / "Work.org"

    def test_empty_scope_raises(self, resolver, work):
        """Should fail with ConfigurationError for an empty scope."""
        with pytest.raises(ConfigurationError):
            resolver.resolve(work, [])

    def test_extension_without_dot(self, work):
        """Should accept an extension without leading dot."""
        assert ProjectResolver(extension="org").target_name(work) == "Work.org"


class TestNewTargetPath:
    """Tests for the proposed path when nothing matches."""

    def test_first_directory_entry(self, tmp_path: Path, resolver, work):
        """Should propose the first directory of the scope."""
        single = tmp_path / "inbox.org"
        single.write_text("")
        directory = tmp_path / "projects"
        directory.mkdir()

        resolution = resolver.locate(work, [single, directory])

        assert resolution == Resolution(path=directory / "Work.org", exists=False)

    def test_missing_scope_directory_is_used(self, tmp_path: Path, resolver, work):
        """Should propose a scope directory that does not exist yet."""
        missing = tmp_path / "org" / "projects"

        resolution = resolver.locate(work, [missing], default_location=tmp_path / "default")

        assert resolution == Resolution(path=missing / "Work.org", exists=False)

    def test_missing_file_entry_is_not_a_directory(self, tmp_path: Path, resolver, work):
        """Should not treat a missing file entry as a directory."""
        default = tmp_path / "default"

        resolution = resolver.locate(work, [tmp_path / "gone.org"], default_location=default)

        assert resolution.path == default / "Work.org"

    def test_default_location_without_directory_entry(self, tmp_path: Path, resolver, work):
        """Should fall back to the default location."""
        single = tmp_path / "inbox.org"
        single.write_text("")
        default = tmp_path / "default"

        resolution = resolver.locate(work, [single], default_location=default)

        assert resolution.path == default / "Work.org"

    def test_default_location_file_means_its_directory(self, tmp_path: Path, resolver, work):
        """Should place the target next to a default file."""
        single = tmp_path / "inbox.org"
        single.write_text("")

        resolution = resolver.locate(
            work, [single], default_location=tmp_path / "store" / "todo.org"
        )

        assert resolution.path == tmp_path / "store" / "Work.org"

    def test_str_marks_new_targets(self, tmp_path: Path):
        """Should mark new targets in the string form."""
        assert str(Resolution(path=tmp_path / "Work.org", exists=False)).endswith("(new)")
