"""
Tests for engine/actions.py.

Uses a real VaultStore on a temp vault and a fixed calendar
(today = 2025-06-08).
"""

import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from habit_matrix.engine.actions import (
    TaskActions,
    complete_habit_line,
    counter_line,
    refresh_streak_line,
)
from habit_matrix.errors import DailyNoteError, DocumentNotFoundError, LineDivergedError, NotATaskError
from habit_matrix.store.daily_notes import DailyNoteCounter, VaultDailyNotes
from habit_matrix.store.vault_store import VaultStore

TODAY = date(2025, 6, 8)

HABIT = "- [ ] Read [habit::daily] [last-done::2025-06-07] [last-streak-date::2025-06-07] [streak::4]"
COUNTER = "- [ ] Meditate [accumulated::true] [success::7]"
REGULAR = "- [ ] Buy milk ⭐"
ATTRIBUTE = "- [ ] Pushups [attribute::pushups] [habit::daily]"
BROKEN = "- [ ] Journal [habit::daily] [last-done::2025-06-01] [last-streak-date::2025-06-01] [streak::9] [max-streak::9]"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_vault(tmp_path: Path) -> Path:
    vault = tmp_path / "vault"
    vault.mkdir()
    (vault / "Habits.md").write_text(
        "# Habits\n"
        f"{HABIT}\n"
        f"{COUNTER}\n"
        f"{REGULAR}\n"
        f"{ATTRIBUTE}\n"
        f"{BROKEN}\n",
        encoding="utf-8",
    )
    (vault / "Daily").mkdir()
    (vault / "Daily" / "2025-06-08.md").write_text("# Sunday\npushups:: 2\n", encoding="utf-8")
    return vault


def _line(vault: Path, n: int, name: str = "Habits.md") -> str:
    return (vault / name).read_text(encoding="utf-8").split("\n")[n - 1]


@pytest.fixture
def setup(tmp_path):
    vault = _make_vault(tmp_path)
    store = VaultStore(vault)
    actions = TaskActions(store, daily_notes=VaultDailyNotes(store), today=lambda: TODAY)
    return actions, vault


class _FailingNotes(DailyNoteCounter):
    def increment(self, attribute, day):
        raise DailyNoteError("daily notes are read-only")


# ---------------------------------------------------------------------------
# Pure transitions
# ---------------------------------------------------------------------------

class TestLineTransitions:
    def test_complete_scenario(self):
        new, update = complete_habit_line(HABIT, TODAY)
        assert update.new_streak == 5 and update.should_update
        assert "[last-done::2025-06-08] [last-streak-date::2025-06-08] [streak::5]" in new
        assert new.endswith("[max-streak::5]")

    def test_complete_twice_is_noop(self):
        once, _ = complete_habit_line(HABIT, TODAY)
        twice, update = complete_habit_line(once, TODAY)
        assert twice == once
        assert update.should_update is False

    def test_max_streak_only_grows(self):
        line = "- [ ] Run 🔁 [last-done::2025-06-08] [streak::0] [max-streak::9]"
        new, _ = complete_habit_line(line, TODAY)
        assert "[streak::1]" in new
        assert "[max-streak::9]" in new

    def test_refresh_persists_break(self):
        new, update = refresh_streak_line(BROKEN, TODAY)
        assert update.should_update
        assert "[streak::0]" in new
        assert "[max-streak::9]" in new
        assert "[last-streak-date::2025-06-01]" in new

    def test_refresh_keeps_day_in_progress(self):
        line = "- [ ] Run 🔁 [last-done::2025-06-07] [last-streak-date::2025-06-07] [streak::3]"
        new, update = refresh_streak_line(line, TODAY)
        assert new == line
        assert update.should_update is False

    def test_counter_requires_accumulated(self):
        with pytest.raises(NotATaskError):
            counter_line(REGULAR, "+1")


# ---------------------------------------------------------------------------
# Store-backed mutations
# ---------------------------------------------------------------------------

class TestCompletion:
    def test_habit(self, setup):
        actions, vault = setup
        result = actions.apply_completion("Habits.md", 2, HABIT)
        assert result.written
        assert _line(vault, 2) == result.new_text
        assert "[streak::5]" in result.new_text
        assert "Streak: 5 days" in result.notices

    def test_habit_twice_same_day(self, setup):
        actions, vault = setup
        first = actions.apply_completion("Habits.md", 2, HABIT)
        second = actions.apply_completion("Habits.md", 2, first.new_text)
        assert second.written is False
        assert second.notices == ["Already completed today"]

    def test_accumulated_increments(self, setup):
        actions, vault = setup
        result = actions.apply_completion("Habits.md", 3, COUNTER)
        assert _line(vault, 3) == "- [ ] Meditate [accumulated::true] [success::8]"

    def test_regular_is_ticked(self, setup):
        actions, vault = setup
        actions.apply_completion("Habits.md", 4, REGULAR)
        assert _line(vault, 4) == "- [x] Buy milk ⭐ ✅ 2025-06-08"

    def test_attribute_bumps_daily_note(self, setup):
        actions, vault = setup
        result = actions.apply_completion("Habits.md", 5, ATTRIBUTE)
        assert "pushups: 3" in result.notices
        assert "[last-done::2025-06-08]" in _line(vault, 5)
        assert (vault / "Daily" / "2025-06-08.md").read_text(encoding="utf-8") == "# Sunday\npushups:: 3\n"

    def test_daily_note_failure_still_marks_line(self, tmp_path):
        vault = _make_vault(tmp_path)
        actions = TaskActions(VaultStore(vault), daily_notes=_FailingNotes(), today=lambda: TODAY)
        result = actions.apply_completion("Habits.md", 5, ATTRIBUTE)
        assert result.written
        assert result.notices[0] == "Warning: daily notes are read-only"
        assert "[last-done::2025-06-08]" in _line(vault, 5)

    def test_without_daily_notes(self, tmp_path):
        vault = _make_vault(tmp_path)
        actions = TaskActions(VaultStore(vault), today=lambda: TODAY)
        result = actions.apply_completion("Habits.md", 5, ATTRIBUTE)
        assert result.written
        assert "was not counted" in result.notices[0]

    def test_attribute_repeat_counts_once(self, setup):
        actions, vault = setup
        first = actions.apply_completion("Habits.md", 5, ATTRIBUTE)
        second = actions.apply_completion("Habits.md", 5, ATTRIBUTE)
        assert first.written
        assert second.written is False
        assert "Already completed today" in second.notices
        assert (vault / "Daily" / "2025-06-08.md").read_text(encoding="utf-8") == "# Sunday\npushups:: 3\n"

    def test_not_a_task(self, setup):
        actions, vault = setup
        with pytest.raises(NotATaskError):
            actions.apply_completion("Habits.md", 1, "# Habits")


class TestDivergence:
    def test_exact_mismatch(self, setup):
        actions, vault = setup
        before = (vault / "Habits.md").read_text(encoding="utf-8")
        with pytest.raises(LineDivergedError):
            actions.apply_completion("Habits.md", 4, "- [ ] Buy bread ⭐")
        assert (vault / "Habits.md").read_text(encoding="utf-8") == before

    def test_shifted_lines(self, setup):
        actions, vault = setup
        with pytest.raises(LineDivergedError):
            actions.apply_counter_delta("Habits.md", 2, COUNTER, "+1")

    def test_out_of_range(self, setup):
        actions, vault = setup
        with pytest.raises(LineDivergedError):
            actions.apply_counter_delta("Habits.md", 99, COUNTER, "+1")

    def test_prefix_tolerates_annotation_changes(self, setup):
        actions, vault = setup
        stale = "- [ ] Meditate [accumulated::true] [success::5]"
        result = actions.apply_counter_delta("Habits.md", 3, stale, "+1")
        assert result.new_text == "- [ ] Meditate [accumulated::true] [success::8]"

    def test_missing_document(self, setup):
        actions, vault = setup
        with pytest.raises(DocumentNotFoundError):
            actions.apply_counter_delta("Gone.md", 1, COUNTER, "+1")

    def test_diverged_completion_leaves_daily_note(self, setup):
        actions, vault = setup
        path = vault / "Habits.md"
        path.write_text(path.read_text(encoding="utf-8").replace(ATTRIBUTE, "- [x] Pushups [attribute::pushups] [habit::daily]"), encoding="utf-8")
        with pytest.raises(LineDivergedError):
            actions.apply_completion("Habits.md", 5, ATTRIBUTE)
        assert (vault / "Daily" / "2025-06-08.md").read_text(encoding="utf-8") == "# Sunday\npushups:: 2\n"

    def test_completion_kind_taken_from_current_line(self, setup):
        actions, vault = setup
        path = vault / "Habits.md"
        path.write_text(path.read_text(encoding="utf-8").replace(HABIT, "- [ ] Read ⭐"), encoding="utf-8")
        with pytest.raises(LineDivergedError):
            actions.apply_completion("Habits.md", 2, HABIT)
        assert _line(vault, 2) == "- [ ] Read ⭐"


class TestCounterDelta:
    @pytest.mark.parametrize("delta,expected", [("+1", 8), ("-1", 6), ("reset", 0)])
    def test_deltas(self, setup, delta, expected):
        actions, vault = setup
        actions.apply_counter_delta("Habits.md", 3, COUNTER, delta)
        assert _line(vault, 3) == f"- [ ] Meditate [accumulated::true] [success::{expected}]"

    def test_unknown_delta_does_not_touch_store(self, setup):
        actions, vault = setup
        with pytest.raises(ValueError):
            actions.apply_counter_delta("Habits.md", 3, COUNTER, "+5")
        assert _line(vault, 3) == COUNTER

    def test_crlf_preserved(self, tmp_path):
        vault = tmp_path / "vault"
        vault.mkdir()
        (vault / "c.md").write_bytes(f"{COUNTER}\r\nnext\r\n".encode("utf-8"))
        actions = TaskActions(VaultStore(vault), today=lambda: TODAY)
        actions.apply_counter_delta("c.md", 1, COUNTER, "+1")
        assert (vault / "c.md").read_bytes() == \
            "- [ ] Meditate [accumulated::true] [success::8]\r\nnext\r\n".encode("utf-8")

    def test_unchanged_line_not_written(self, tmp_path):
        vault = tmp_path / "vault"
        vault.mkdir()
        (vault / "c.md").write_text("- [ ] Pages 📈 [success::0]\n", encoding="utf-8")
        actions = TaskActions(VaultStore(vault), today=lambda: TODAY)
        result = actions.apply_counter_delta("c.md", 1, "- [ ] Pages 📈 [success::0]", "-1")
        assert result.written is False


class TestStreakRefresh:
    def test_broken_streak_written(self, setup):
        actions, vault = setup
        result = actions.apply_streak_refresh("Habits.md", 6, BROKEN)
        assert result.written
        assert "[streak::0]" in _line(vault, 6)


class TestMatrixPlacement:
    def test_quadrant_move(self, setup):
        actions, vault = setup
        actions.apply_quadrant("Habits.md", 4, REGULAR, "urgent")
        assert _line(vault, 4) == "- [ ] Buy milk ⭐ [importance::low] [urgency::high]"

    def test_unknown_quadrant(self, setup):
        actions, vault = setup
        with pytest.raises(ValueError):
            actions.apply_quadrant("Habits.md", 4, REGULAR, "urgent-ish")

    def test_add_properties(self, setup):
        actions, vault = setup
        actions.apply_properties("Habits.md", 4, REGULAR, "high", "high", 15)
        assert _line(vault, 4) == "- [ ] Buy milk ⭐ [importance::high] [urgency::high] [duration::15]"
