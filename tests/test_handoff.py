"""Tests for HANDOFF.md parsing."""

from __future__ import annotations

import pytest

from buffer_dashboard.core.handoff import (
    load_handoff,
    parse_sections,
    read_handoff_document,
    summarize_handoff,
)

HANDOFF = """\
# Handoff

Preamble text that belongs to no section.

## Current Work
- Migrating the poller to the new registry format
- second line

## Stopping Point
Tests green on the parser, server untouched.

## Next Steps
- one
* two
- three
-   four
- five

## Open Questions
- Should velocity reset on rollover?
- Cap the tail window?
"""


class TestParseSections:
    def test_sections_and_bullet_stripping(self):
        sections = parse_sections(HANDOFF)
        assert list(sections) == ["Current Work", "Stopping Point", "Next Steps", "Open Questions"]
        assert sections["Next Steps"] == ["one", "two", "three", "four", "five"]
        assert sections["Stopping Point"] == ["Tests green on the parser, server untouched."]

    def test_blank_lines_skipped(self):
        sections = parse_sections("## A\n\n   \n- x\n\n- y\n")
        assert sections == {"A": ["x", "y"]}

    def test_indented_bullets(self):
        assert parse_sections("## A\n  - nested\n\t* tabbed\n") == {"A": ["nested", "tabbed"]}

    def test_repeated_heading_restarts_section(self):
        assert parse_sections("## A\n- old\n## A\n- new\n") == {"A": ["new"]}

    def test_level_three_headings_are_content(self):
        assert parse_sections("## A\n### detail\n") == {"A": ["### detail"]}

    def test_crlf_line_endings(self):
        assert parse_sections("## A\r\n- x\r\n") == {"A": ["x"]}


class TestSummarizeHandoff:
    def test_summary_fields(self):
        state = summarize_handoff(HANDOFF, mtime="2026-01-15T10:00:00+00:00")
        assert state.current_work == "Migrating the poller to the new registry format"
        assert state.stopping_point == "Tests green on the parser, server untouched."
        assert state.next_steps == ["one", "two", "three"]
        assert state.open_questions == 2
        assert state.size == len(HANDOFF.encode("utf-8"))
        assert state.mtime == "2026-01-15T10:00:00+00:00"

    def test_absent_sections(self):
        state = summarize_handoff("# Nothing here\n")
        assert state.current_work is None
        assert state.stopping_point is None
        assert state.next_steps == []
        assert state.open_questions == 0

    def test_size_is_utf8_bytes(self):
        text = "## Current Work\n- café ☕\n"
        assert summarize_handoff(text).size == len(text.encode("utf-8"))

    def test_to_dict_keys(self):
        d = summarize_handoff(HANDOFF).to_dict()
        assert d["nextSteps"] == ["one", "two", "three"]
        assert d["openQuestions"] == 2
        assert set(d) == {
            "currentWork", "stoppingPoint", "nextSteps", "openQuestions", "size", "mtime",
        }


class TestLoadHandoff:
    def test_missing_file(self, tmp_path):
        assert load_handoff(tmp_path / "HANDOFF.md") is None
        assert read_handoff_document(tmp_path / "HANDOFF.md") is None

    def test_loads_from_disk(self, tmp_path):
        path = tmp_path / "HANDOFF.md"
        path.write_text(HANDOFF)
        state = load_handoff(path)
        assert state.next_steps == ["one", "two", "three"]
        assert state.mtime is not None

    def test_read_document_returns_raw_content(self, tmp_path):
        path = tmp_path / "HANDOFF.md"
        path.write_text(HANDOFF)
        content, mtime = read_handoff_document(path)
        assert content == HANDOFF
        assert mtime.endswith("+00:00")

    def test_unreadable_file_is_none(self, tmp_path):
        path = tmp_path / "HANDOFF.md"
        path.write_bytes(b"## A\n\xff\xfe\n")
        assert load_handoff(path) is None
        with pytest.raises(UnicodeDecodeError):
            read_handoff_document(path)

    def test_crlf_document_kept_verbatim(self, tmp_path):
        path = tmp_path / "HANDOFF.md"
        raw = b"## Current Work\r\n- x\r\n"
        path.write_bytes(raw)
        content, _ = read_handoff_document(path)
        assert content == raw.decode("utf-8")
        state = load_handoff(path)
        assert state.size == len(raw)
        assert state.current_work == "x"
