"""
State changes applied to task lines in the store.

Line numbers drift when a document is edited elsewhere, so every mutation
re-reads the document and checks the target line before writing:

- "exact":  the line must equal the text the caller last saw (done-marking,
            quadrant moves, property additions);
- "prefix": only the text before the first annotation must match (counter
            and streak updates, whose annotations are what is being rewritten).

On a mismatch nothing is written and LineDivergedError is raised for the
caller to report.
"""

import logging
from datetime import date
from typing import Callable, List, Optional, Tuple, Union

from habit_matrix.errors import HabitMatrixError, LineDivergedError, NotATaskError
from habit_matrix.engine.habits import StreakUpdate, apply_delta, next_max_streak, update_streak
from habit_matrix.models.task import MutationResult, Quadrant, TaskRecord
from habit_matrix.parsers.annotations import DEFAULT_GLYPHS, Glyphs, content_prefix, lex
from habit_matrix.parsers.task_parser import parse_line
from habit_matrix.store.daily_notes import DailyNoteCounter
from habit_matrix.store.vault_store import TextStore
from habit_matrix.utils.dates import DateLike, iso
from habit_matrix.utils.formatting import (
    add_matrix_properties,
    mark_done,
    set_counter,
    set_field,
    set_levels,
)

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pure line transitions
# ---------------------------------------------------------------------------

def _write_streak(line: str, update: StreakUpdate, max_streak: Optional[int]) -> str:
    line = set_field(line, "streak", update.new_streak)
    new_max = next_max_streak(max_streak or 0, update.new_streak)
    if max_streak is not None or new_max > 0:
        line = set_field(line, "max-streak", new_max)
    return line


def complete_habit_line(line: str, today: DateLike, glyphs: Glyphs = DEFAULT_GLYPHS) -> Tuple[str, StreakUpdate]:
    """Record a habit completion on ``today`` and advance its streak."""
    ann = lex(line, glyphs)
    today_str = iso(today)
    line = set_field(line, "last-done", today_str)
    update = update_streak(today_str, ann.last_streak_date, ann.streak or 0, today)
    if update.should_update:
        line = _write_streak(line, update, ann.max_streak)
        line = set_field(line, "last-streak-date", today_str)
    return line, update


def refresh_streak_line(line: str, today: DateLike, glyphs: Glyphs = DEFAULT_GLYPHS) -> Tuple[str, StreakUpdate]:
    """Bring streak fields up to date without a new completion (persists broken streaks)."""
    ann = lex(line, glyphs)
    update = update_streak(ann.last_done_date, ann.last_streak_date, ann.streak or 0, today)
    if update.should_update:
        line = _write_streak(line, update, ann.max_streak)
        if ann.last_done_date == iso(today):
            line = set_field(line, "last-streak-date", iso(today))
    return line, update


def counter_line(line: str, delta: str, glyphs: Glyphs = DEFAULT_GLYPHS) -> str:
    """Apply a counter delta ("+1", "-1", "reset") to an accumulated task line."""
    ann = lex(line, glyphs)
    if not ann.accumulated:
        raise NotATaskError("Task is not an accumulated habit")
    return set_counter(line, apply_delta(ann.counter or 0, delta))


# ---------------------------------------------------------------------------
# Store-backed mutations
# ---------------------------------------------------------------------------

def _is_habit(record: TaskRecord) -> bool:
    return record.task_type == "repeated-daily" or bool(record.attribute_name)


class TaskActions:
    """
    Applies user actions to task lines in a TextStore.

    The daily-note collaborator is injected; when it is absent, completing an
    attribute-based habit only updates the task line and says so.
    """

    def __init__(
        self,
        store: TextStore,
        daily_notes: Optional[DailyNoteCounter] = None,
        glyphs: Glyphs = DEFAULT_GLYPHS,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._daily_notes = daily_notes
        self._glyphs = glyphs
        self._today = today

    def _locate(
        self,
        path: str,
        line_no: int,
        original: str,
        match: str = "exact",
    ) -> Tuple[List[str], int, str, bool]:
        """Read the document and check the target line; returns (lines, index, current, has_cr)."""
        text = self._store.read_document(path)
        lines = text.split("\n")
        idx = line_no - 1
        if idx < 0 or idx >= len(lines):
            log.warning("Line %s:%d is out of range", path, line_no)
            raise LineDivergedError(path, line_no, "line no longer exists")

        raw = lines[idx]
        has_cr = raw.endswith("\r")
        current = raw[:-1] if has_cr else raw

        if match == "exact":
            diverged = current != original
        else:
            diverged = content_prefix(current, self._glyphs) != content_prefix(original, self._glyphs)
        if diverged:
            log.warning("Line %s:%d diverged: expected %r, found %r", path, line_no, original, current)
            raise LineDivergedError(path, line_no, "content does not match")
        return lines, idx, current, has_cr

    def _replace(
        self, path: str, lines: List[str], idx: int, current: str, has_cr: bool, new_line: str
    ) -> MutationResult:
        line_no = idx + 1
        if new_line == current:
            return MutationResult(path, line_no, current, current, written=False)

        lines[idx] = new_line + ("\r" if has_cr else "")
        self._store.write_document(path, "\n".join(lines))
        log.info("Updated %s:%d", path, line_no)
        return MutationResult(path, line_no, current, new_line, written=True)

    def _edit_line(
        self,
        path: str,
        line_no: int,
        original: str,
        transform: Callable[[str], str],
        match: str = "exact",
    ) -> MutationResult:
        lines, idx, current, has_cr = self._locate(path, line_no, original, match)
        return self._replace(path, lines, idx, current, has_cr, transform(current))

    def _record(self, path: str, line_no: int, original: str) -> TaskRecord:
        record = parse_line(original, path, line_no, self._glyphs)
        if record is None:
            raise NotATaskError(f"{path}:{line_no} carries no task annotations")
        return record

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def apply_completion(self, path: str, line_no: int, original: str) -> MutationResult:
        """
        Complete a task, choosing the behaviour from its kind.

        - accumulated habit: counter +1
        - daily/weekly or attribute habit: last-done = today, streak advanced, and the
          daily-note counter bumped when the habit names an attribute
        - anything else: checkbox ticked and completion date stamped

        The kind and the done-today check come from the line as it is now in
        the store, and the daily note is only touched once that line has
        been validated.
        """
        seen = self._record(path, line_no, original)
        today = self._today()

        match = "prefix" if seen.accumulated or _is_habit(seen) else "exact"
        lines, idx, current, has_cr = self._locate(path, line_no, original, match)
        record = parse_line(current, path, line_no, self._glyphs)
        if record is None or (match == "prefix" and not (record.accumulated or _is_habit(record))):
            log.warning("Line %s:%d is no longer the same kind of task: %r", path, line_no, current)
            raise LineDivergedError(path, line_no, "task kind changed")

        if record.accumulated:
            return self._replace(path, lines, idx, current, has_cr, counter_line(current, "+1", self._glyphs))

        if not _is_habit(record):
            return self._replace(path, lines, idx, current, has_cr, mark_done(current, today, self._glyphs))

        notices: List[str] = []
        if record.last_done_date == iso(today):
            notices.append("Already completed today")
        elif record.attribute_name:
            notices.extend(self._bump_daily_note(record.attribute_name, today))

        new_line, update = complete_habit_line(current, today, self._glyphs)
        result = self._replace(path, lines, idx, current, has_cr, new_line)
        if update.should_update and update.new_streak > 1:
            notices.append(f"Streak: {update.new_streak} days")
        result.notices.extend(notices)
        return result

    def _bump_daily_note(self, attribute: str, today: date) -> List[str]:
        if self._daily_notes is None:
            return [f"No daily notes configured; '{attribute}' was not counted"]
        try:
            value = self._daily_notes.increment(attribute, today)
        except HabitMatrixError as e:
            log.warning("Daily note update failed for %s: %s", attribute, e)
            return [f"Warning: {e}"]
        return [f"{attribute}: {value}"]

    # ------------------------------------------------------------------
    # Counters and streaks
    # ------------------------------------------------------------------

    def apply_counter_delta(self, path: str, line_no: int, original: str, delta: str) -> MutationResult:
        apply_delta(0, delta)  # validate before touching the store
        return self._edit_line(
            path, line_no, original, lambda line: counter_line(line, delta, self._glyphs), match="prefix"
        )

    def apply_streak_refresh(self, path: str, line_no: int, original: str) -> MutationResult:
        today = self._today()
        return self._edit_line(
            path, line_no, original, lambda line: refresh_streak_line(line, today, self._glyphs)[0], match="prefix"
        )

    # ------------------------------------------------------------------
    # Matrix placement
    # ------------------------------------------------------------------

    def apply_quadrant(
        self, path: str, line_no: int, original: str, quadrant: Union[Quadrant, str]
    ) -> MutationResult:
        """Move a task to another quadrant (matrix drag)."""
        quadrant = Quadrant(quadrant)
        return self._edit_line(
            path, line_no, original, lambda line: set_levels(line, quadrant.importance, quadrant.urgency)
        )

    def apply_properties(
        self,
        path: str,
        line_no: int,
        original: str,
        importance: str,
        urgency: str,
        duration: Optional[int] = None,
    ) -> MutationResult:
        """Append importance/urgency/duration to a checklist line that lacks them."""
        return self._edit_line(
            path, line_no, original, lambda line: add_matrix_properties(line, importance, urgency, duration)
        )
