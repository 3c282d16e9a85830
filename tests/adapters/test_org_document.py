"""Tests for the Org-mode document model."""

import textwrap

import pytest

from orgsync.adapters.orgmode.document import (
    OrgDocument,
    OrgEntry,
    escape_line,
    format_timestamp,
    heading_level,
    unescape_line,
)


def entry_from(text: str) -> OrgEntry:
    return OrgEntry.parse(textwrap.dedent(text).strip("\n").splitlines())


class TestHelpers:
    """Tests for module-level helpers."""

    @pytest.mark.parametrize(
        ("line", "level"),
        [("* Work", 1), ("** TODO Task", 2), ("*** Deep", 3), ("*bold* text", 0), ("plain", 0)],
    )
    def test_heading_level(self, line, level):
        assert heading_level(line) == level

    def test_format_timestamp_date(self):
        assert format_timestamp("2024-05-01") == "<2024-05-01 Wed>"

    def test_format_timestamp_datetime(self):
        assert format_timestamp("2024-05-03T09:30") == "<2024-05-03 Fri 09:30>"


    @pytest.mark.parametrize(
        ("line", "escaped"),
        [
            ("* milk", ",* milk"),
            ("** nested", ",** nested"),
            ("DEADLINE: <2024-05-01 Wed>", ",DEADLINE: <2024-05-01 Wed>"),
            (":PROPERTIES:", ",:PROPERTIES:"),
            (":END:", ",:END:"),
            (",* already", ",,* already"),
            ("*bold* text", "*bold* text"),
            ("  - item", "  - item"),
            (",plain", ",plain"),
        ],
    )
    def test_escape_line(self, line, escaped):
        assert escape_line(line) == escaped
        assert unescape_line(escaped) == line


class TestOrgEntry:
    """Tests for OrgEntry parsing and rendering."""

    def test_parse_full_entry(self):
        """Should read keyword, tags, deadline, properties and body."""
        entry = entry_from(
            """
            ** TODO Write report  :office:urgent:
            DEADLINE: <2024-05-01 Wed>
            :PROPERTIES:
            :TODOIST_ID: 1
            :EFFORT: 1:00
            :END:
            First draft goes to Anna.
              Indented detail.
            """
        )

        assert entry.keyword == "TODO"
        assert entry.title == "Write report"
        assert entry.tags == ["office", "urgent"]
        assert entry.deadline == "2024-05-01"
        assert entry.task_id == "1"
        assert entry.properties["EFFORT"] == "1:00"
        assert entry.body == "First draft goes to Anna.\n  Indented detail."
        assert entry.is_task

    def test_deadline_with_time(self):
        """Should normalize the deadline time to HH:MM."""
        entry = entry_from(
            """
            ** TODO Plan sprint
            DEADLINE: <2024-05-03 Fri 9:30>
            """
        )
        assert entry.deadline == "2024-05-03T09:30"

    def test_other_planning_items_are_kept(self):
        """Should keep SCHEDULED next to a rewritten DEADLINE."""
        entry = entry_from(
            """
            ** TODO Pay rent
            SCHEDULED: <2024-04-30 Tue> DEADLINE: <2024-05-01 Wed>
            """
        )

        assert entry.deadline == "2024-05-01"
        assert entry.planning == ["SCHEDULED: <2024-04-30 Tue>"]

        entry.update("Pay rent", None, "2024-05-02")

        assert entry.render() == [
            "** TODO Pay rent",
            "DEADLINE: <2024-05-02 Thu> SCHEDULED: <2024-04-30 Tue>",
        ]

    def test_priority(self):
        entry = entry_from("** NEXT [#A] Call bank")

        assert entry.keyword == "NEXT"
        assert entry.priority == "A"
        assert entry.title == "Call bank"

    def test_plain_heading_is_not_a_task(self):
        """Should ignore headings without keyword or id."""
        assert not entry_from("** Meeting notes").is_task

    def test_plain_heading_with_id_is_a_task(self):
        entry = entry_from(
            """
            ** Meeting notes
            :PROPERTIES:
            :TODOIST_ID: 5
            :END:
            """
        )
        assert entry.is_task
        assert entry.keyword is None

    def test_unmodified_entry_renders_original_lines(self):
        """Should write untouched entries back byte for byte."""
        lines = ["** TODO   Oddly   spaced   :a:", "DEADLINE:   <2024-05-01 Wed>", "body"]

        assert OrgEntry.parse(lines).render() == lines

    def test_update_rewrites_synced_fields_only(self):
        """Should keep keyword, tags and extra properties on update."""
        entry = entry_from(
            """
            ** NEXT Review PR  :code:
            :PROPERTIES:
            :TODOIST_ID: 2
            :CUSTOM: keep-me
            :END:
            """
        )

        entry.update("Review PR #12", "Two comments left", None)

        assert entry.render() == [
            "** NEXT Review PR #12  :code:",
            ":PROPERTIES:",
            ":TODOIST_ID: 2",
            ":CUSTOM: keep-me",
            ":END:",
            "Two comments left",
        ]

    def test_set_id_goes_first(self):
        """Should put the id first in the property drawer."""
        entry = entry_from(
            """
            ** TODO Draft
            :PROPERTIES:
            :CUSTOM: x
            :END:
            """
        )

        entry.set_id("100")

        assert entry.render() == [
            "** TODO Draft",
            ":PROPERTIES:",
            ":TODOIST_ID: 100",
            ":CUSTOM: x",
            ":END:",
        ]

    def test_new_entry_renders_minimal(self):
        assert OrgEntry(title="Buy milk").render() == ["** TODO Buy milk"]

    def test_parse_rejects_non_heading(self):
        with pytest.raises(ValueError):
            OrgEntry.parse(["not a heading"])


class TestOrgDocument:
    """Tests for OrgDocument."""

    def test_parse_splits_head_entries_tail(self, work_org_text):
        doc = OrgDocument.parse(work_org_text)

        assert doc.head == ["#+TITLE: Work", "", "* Work"]
        assert [e.title for e in doc.entries] == ["Write report", "Review PR", "Draft agenda"]
        assert doc.tail == ["* Archive", "** DONE Old thing"]

    def test_roundtrip_is_byte_identical(self, work_org_text):
        """Should render an unmodified document exactly as read."""
        assert OrgDocument.parse(work_org_text).render() == work_org_text

    def test_tasks_skip_plain_headings(self):
        doc = OrgDocument.parse("* Work\n** TODO A\n** Notes\nsome text\n** B  :x:\n")

        assert [e.title for e in doc.tasks()] == ["A"]
        assert len(doc.entries) == 3

    def test_deeper_heading_before_entries_stays_in_head(self):
        text = "* Work\n*** Stray\n** TODO A\n"
        doc = OrgDocument.parse(text)

        assert doc.head == ["* Work", "*** Stray"]
        assert [e.title for e in doc.tasks()] == ["A"]
        assert doc.render() == text

    def test_subheadings_belong_to_entry(self):
        doc = OrgDocument.parse("* Work\n** TODO A\n*** Sub step\n** TODO B\n")

        assert doc.entries[0].body == "*** Sub step"
        assert doc.entries[1].title == "B"

    def test_heading_like_body_lines_roundtrip(self):
        """Should keep a markdown-style description inside its entry."""
        doc = OrgDocument.parse("* Work\n")
        doc.append(OrgEntry(title="A", body="Shopping:\n* milk\n:END:\n,* eggs"))
        doc.append(OrgEntry(title="B"))

        text = doc.render()
        reread = OrgDocument.parse(text)

        assert ",* milk" in text
        assert [e.title for e in reread.entries] == ["A", "B"]
        assert reread.entries[0].body == "Shopping:\n* milk\n:END:\n,* eggs"
        assert reread.tail == []
        assert reread.render() == text

    def test_planning_like_first_body_line_stays_body(self):
        doc = OrgDocument(head=["* Work"], entries=[OrgEntry(title="A", body="DEADLINE: tomorrow")])

        entry = OrgDocument.parse(doc.render()).entries[0]

        assert entry.deadline is None
        assert entry.planning == []
        assert entry.body == "DEADLINE: tomorrow"

    def test_new_document(self):
        assert OrgDocument.new("Work").render() == "#+TITLE: Work\n\n* Work\n"

    def test_append_adds_top_heading_when_missing(self):
        doc = OrgDocument.parse("#+TITLE: Inbox\n")

        doc.append(OrgEntry(title="First"))

        assert doc.render() == "#+TITLE: Inbox\n* Tasks\n** TODO First\n"

    def test_find_and_find_unbound(self, work_org_text):
        doc = OrgDocument.parse(work_org_text)

        assert doc.find("2").title == "Review PR"
        assert doc.find("404") is None
        assert doc.find_unbound("Draft agenda") is doc.entries[2]
        assert doc.find_unbound("Write report") is None

    def test_remove_by_identity(self):
        """Should remove the given entry, not an equal twin."""
        first = OrgEntry(title="Same")
        second = OrgEntry(title="Same")
        doc = OrgDocument(head=["* Work"], entries=[first, second])

        doc.remove(second)

        assert len(doc.entries) == 1
        assert doc.entries[0] is first
