"""
Tests for parsers/task_parser.py.

Covers:
- parse_line: admission rule, defaults, task type priority
- scan_content: open items only, 1-based line numbers, CRLF
- repeated scans give identical records
"""

import sys
from pathlib import Path

# Add src to path so imports work without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from habit_matrix.models.task import Quadrant
from habit_matrix.parsers.task_parser import parse_line, scan_content, split_lines


SAMPLE = (
    "# Week 23\n"
    "\n"
    "- [ ] Report 🔥⭐ importance::high urgency::high\n"
    "- [ ] Buy milk\n"
    "- [x] Old task ⭐ ✅ 2025-06-01\n"
    "  - [ ] Indented ⭐\n"
    "- [ ] Meditate [accumulated::true] [success::7]\n"
    "- [ ] Run [habit::daily] [streak::3] ⏳20\n"
    "- [ ] Dentist ⏳ 2025-06-10 [habit::weekly]\n"
)


# ---------------------------------------------------------------------------
# parse_line
# ---------------------------------------------------------------------------

class TestParseLine:
    def test_matrix_scenario(self):
        record = parse_line("- [ ] Report 🔥⭐ importance::high urgency::high", "a.md", 3)
        assert record.importance == "high"
        assert record.urgency == "high"
        assert record.quadrant is Quadrant.URGENT_IMPORTANT
        assert record.ref == "a.md:3"

    @pytest.mark.parametrize("line", [
        "- [ ] Buy milk",
        "- [ ] Write ⏳45",
        "- [ ] Write [duration::45]",
        "- [ ] Pages [success::3]",
        "- [ ] Run [streak::4] [last-done::2025-06-01]",
    ])
    def test_not_admitted(self, line):
        assert parse_line(line, "a.md", 1) is None

    @pytest.mark.parametrize("line", [
        "- [ ] Task ⭐",
        "- [ ] Task 🔥",
        "- [ ] Task [importance::low]",
        "- [ ] Task [habit::weekly]",
        "- [ ] Task 📈",
        "- [ ] Task ⏳ 2025-06-10",
        "- [ ] Task ➕ 2025-06-01",
        "- [ ] Task [attribute::pages]",
    ])
    def test_admitted(self, line):
        assert parse_line(line, "a.md", 1) is not None

    def test_defaults(self):
        record = parse_line("- [ ] Task ➕ 2025-06-01", "a.md", 1)
        assert record.importance == "low"
        assert record.urgency == "low"
        assert record.duration_minutes == 0
        assert record.current_streak == 0
        assert record.max_streak == 0
        assert record.accumulated is False
        assert record.accumulated_count is None
        assert record.task_type == "regular"
        assert record.quadrant is Quadrant.NEITHER

    def test_content_is_verbatim(self):
        line = "- [ ] Task  ⭐   extra"
        assert parse_line(line, "a.md", 1).content == line

    def test_scheduled_wins_task_type(self):
        record = parse_line("- [ ] Dentist ⏳ 2025-06-10 [habit::weekly]", "a.md", 1)
        assert record.task_type == "scheduled"
        assert record.habit_type == "weekly"

    def test_habit_task_type(self):
        assert parse_line("- [ ] Run 🔁", "a.md", 1).task_type == "repeated-daily"

    def test_accumulated_count_defaults_to_zero(self):
        assert parse_line("- [ ] Pages 📈", "a.md", 1).accumulated_count == 0

    def test_accumulated_count_from_legacy(self):
        assert parse_line("- [ ] Pages 📈 [7]", "a.md", 1).accumulated_count == 7

    def test_counter_ignored_when_not_accumulated(self):
        record = parse_line("- [ ] Pages ⭐ [success::5]", "a.md", 1)
        assert record.accumulated_count is None


# ---------------------------------------------------------------------------
# scan_content
# ---------------------------------------------------------------------------

class TestScanContent:
    def test_open_items_only(self):
        records = scan_content(SAMPLE, "Week 23.md")
        assert [r.line for r in records] == [3, 7, 8, 9]

    def test_fields(self):
        records = {r.line: r for r in scan_content(SAMPLE, "Week 23.md")}
        assert records[7].accumulated_count == 7
        assert records[8].habit_type == "daily"
        assert records[8].duration_minutes == 20
        assert records[8].current_streak == 3
        assert records[9].scheduled_date == "2025-06-10"

    def test_crlf(self):
        content = SAMPLE.replace("\n", "\r\n")
        records = scan_content(content, "Week 23.md")
        assert [r.line for r in records] == [3, 7, 8, 9]
        assert not any(r.content.endswith("\r") for r in records)

    def test_rescan_is_identical(self):
        assert scan_content(SAMPLE, "w.md") == scan_content(SAMPLE, "w.md")

    def test_empty(self):
        assert scan_content("", "w.md") == []


class TestSplitLines:
    def test_strips_cr_only(self):
        assert split_lines("a\r\nb\nc") == ["a", "b", "c"]

    def test_keeps_unicode_separators(self):
        assert split_lines("a\u2028b") == ["a\u2028b"]
