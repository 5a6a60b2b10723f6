"""
Annotation lexer for checklist lines.

Every field has two independent spellings:

- a key form, ``[key::value]`` (the square brackets may be omitted, as in
  ``importance::high``), matched case-insensitively;
- an emoji/shorthand form, e.g. ``⭐`` for high importance.

Both forms are always checked; when both are present for the same field the
key form wins. Anything malformed (unknown enum value, impossible date) is
simply treated as absent: the lexer never raises.

The ``⏳`` glyph is shared by duration and scheduled date. A date-shaped
literal after it (``⏳ 2025-06-01``) is a schedule; digits immediately after
it (``⏳30``) are a duration in minutes.

Main API:
    lex(line, glyphs)                  → Annotations
    find_field(line, key)              → re.Match | None
    first_annotation_index(line)       → int
    content_prefix(line)               → str
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from habit_matrix.utils.dates import ISO_DATE_PATTERN, parse_iso_date


@dataclass(frozen=True)
class Glyphs:
    """Emoji shorthands. Importance, urgency and duration are user-configurable."""

    importance: str = "⭐"
    urgency: str = "🔥"
    duration: str = "⏳"
    habit: str = "🔁"
    accumulated: str = "📈"
    start: str = "➕"
    done: str = "✅"


DEFAULT_GLYPHS = Glyphs()


# ---------------------------------------------------------------------------
# Key-form patterns
# ---------------------------------------------------------------------------

def _key_pattern(key: str, value: str, bracketed_only: bool = False) -> "re.Pattern[str]":
    """
    Build the pattern for one ``key::value`` field.

    Groups: (1) opening bracket or "", (2) value, (3) closing bracket or "".
    The lookbehind keeps ``streak::`` from matching inside ``max-streak::``.
    """
    open_br, close_br = (r"(\[)", r"(\])") if bracketed_only else (r"(\[?)", r"(\]?)")
    return re.compile(
        rf"(?<![\w-]){open_br}{re.escape(key)}::[ \t]*({value})(?![\w]){close_br}",
        re.IGNORECASE,
    )


KEY_PATTERNS: Dict[str, "re.Pattern[str]"] = {
    "importance": _key_pattern("importance", r"high|low"),
    "urgency": _key_pattern("urgency", r"high|low"),
    "duration": _key_pattern("duration", r"\d+"),
    "habit": _key_pattern("habit", r"daily|weekly"),
    "accumulated": _key_pattern("accumulated", r"true"),
    "success": _key_pattern("success", r"[+-]?\d+"),
    "last-done": _key_pattern("last-done", ISO_DATE_PATTERN),
    "streak": _key_pattern("streak", r"\d+"),
    "max-streak": _key_pattern("max-streak", r"\d+"),
    "last-streak-date": _key_pattern("last-streak-date", ISO_DATE_PATTERN),
    "attribute": _key_pattern("attribute", r"[^\[\]\s]+", bracketed_only=True),
}

# Legacy counter: a bare "[N]" closing the line
LEGACY_COUNTER_RE = re.compile(r"\[(\d+)\]\s*$")


def find_field(line: str, key: str) -> Optional["re.Match[str]"]:
    """Return the first key-form match for ``key`` in ``line``, or None."""
    return KEY_PATTERNS[key].search(line)


def _field_value(line: str, key: str) -> Optional[str]:
    m = find_field(line, key)
    return m.group(2) if m else None


# ---------------------------------------------------------------------------
# Emoji patterns (depend on the configured glyphs)
# ---------------------------------------------------------------------------

def _duration_re(glyphs: Glyphs) -> "re.Pattern[str]":
    # Digits glued to the glyph and not the start of a date
    return re.compile(rf"{re.escape(glyphs.duration)}\ufe0f?(\d+)(?![\d-])")


def _scheduled_re(glyphs: Glyphs) -> "re.Pattern[str]":
    return re.compile(rf"{re.escape(glyphs.duration)}\ufe0f?\s*({ISO_DATE_PATTERN})(?!\d)")


def _start_re(glyphs: Glyphs) -> "re.Pattern[str]":
    return re.compile(rf"{re.escape(glyphs.start)}\ufe0f?\s*({ISO_DATE_PATTERN})(?!\d)")


@dataclass(frozen=True)
class Annotations:
    """
    Raw lexer output for one line. ``None`` means the field is absent.

    Importance and urgency stay None unless a signal was found, so the task
    builder can tell "explicitly low" from "not annotated".
    """

    importance: Optional[str] = None
    urgency: Optional[str] = None
    duration_minutes: Optional[int] = None
    habit_type: Optional[str] = None
    accumulated: bool = False
    counter: Optional[int] = None
    last_done_date: Optional[str] = None
    last_streak_date: Optional[str] = None
    streak: Optional[int] = None
    max_streak: Optional[int] = None
    scheduled_date: Optional[str] = None
    start_date: Optional[str] = None
    attribute_name: Optional[str] = None


def lex(line: str, glyphs: Glyphs = DEFAULT_GLYPHS) -> Annotations:
    """Extract every recognised field from ``line``."""
    importance = _field_value(line, "importance")
    if importance:
        importance = importance.lower()
    elif glyphs.importance and glyphs.importance in line:
        importance = "high"

    urgency = _field_value(line, "urgency")
    if urgency:
        urgency = urgency.lower()
    elif glyphs.urgency and glyphs.urgency in line:
        urgency = "high"

    duration_raw = _field_value(line, "duration")
    if duration_raw is None:
        m = _duration_re(glyphs).search(line)
        duration_raw = m.group(1) if m else None

    habit_type = _field_value(line, "habit")
    if habit_type:
        habit_type = habit_type.lower()
    elif glyphs.habit and glyphs.habit in line:
        habit_type = "daily"

    accumulated = bool(find_field(line, "accumulated")) or bool(glyphs.accumulated and glyphs.accumulated in line)

    counter_raw = _field_value(line, "success")
    if counter_raw is None:
        m = LEGACY_COUNTER_RE.search(line)
        counter_raw = m.group(1) if m else None

    streak_raw = _field_value(line, "streak")
    max_streak_raw = _field_value(line, "max-streak")

    scheduled = _scheduled_re(glyphs).search(line)
    start = _start_re(glyphs).search(line)

    return Annotations(
        importance=importance,
        urgency=urgency,
        duration_minutes=int(duration_raw) if duration_raw is not None else None,
        habit_type=habit_type,
        accumulated=accumulated,
        counter=int(counter_raw) if counter_raw is not None else None,
        last_done_date=parse_iso_date(_field_value(line, "last-done")),
        last_streak_date=parse_iso_date(_field_value(line, "last-streak-date")),
        streak=int(streak_raw) if streak_raw is not None else None,
        max_streak=int(max_streak_raw) if max_streak_raw is not None else None,
        scheduled_date=parse_iso_date(scheduled.group(1)) if scheduled else None,
        start_date=parse_iso_date(start.group(1)) if start else None,
        attribute_name=_field_value(line, "attribute"),
    )


# ---------------------------------------------------------------------------
# Token positions
# ---------------------------------------------------------------------------

def _token_starts(line: str, glyphs: Glyphs) -> Iterator[int]:
    for pattern in KEY_PATTERNS.values():
        m = pattern.search(line)
        if m:
            yield m.start()
    for glyph in (glyphs.importance, glyphs.urgency, glyphs.duration,
                  glyphs.habit, glyphs.accumulated, glyphs.start):
        if glyph:
            pos = line.find(glyph)
            if pos >= 0:
                yield pos
    m = LEGACY_COUNTER_RE.search(line)
    if m:
        yield m.start()


def first_annotation_index(line: str, glyphs: Glyphs = DEFAULT_GLYPHS) -> int:
    """Index of the earliest annotation token, or ``len(line)`` if there is none."""
    return min(_token_starts(line, glyphs), default=len(line))


def content_prefix(line: str, glyphs: Glyphs = DEFAULT_GLYPHS) -> str:
    """The line up to its first annotation token, trailing whitespace removed."""
    return line[: first_annotation_index(line, glyphs)].rstrip()
