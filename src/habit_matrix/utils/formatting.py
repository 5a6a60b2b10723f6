"""
Canonical annotation formatting and in-place line rewrites.

Every function here takes a line and returns the new line. Only the targeted
annotation substring changes; the rest of the line is kept verbatim. New
fields are always written in the bracketed key form, ``[key::value]``.
"""

import re
from typing import Optional

from habit_matrix.errors import NotATaskError
from habit_matrix.parsers.annotations import (
    DEFAULT_GLYPHS,
    KEY_PATTERNS,
    LEGACY_COUNTER_RE,
    Glyphs,
    find_field,
)
from habit_matrix.parsers.task_parser import CHECKLIST_RE, OPEN_TASK_RE
from habit_matrix.utils.dates import ISO_DATE_PATTERN, DateLike, iso


def render_field(key: str, value) -> str:
    """Render one annotation, e.g. ``[streak::5]``."""
    return f"[{key}::{value}]"


def _append_token(line: str, token: str) -> str:
    """Append a token, keeping a legacy ``[N]`` counter at the very end of the line."""
    legacy = LEGACY_COUNTER_RE.search(line)
    if legacy:
        head = line[: legacy.start()].rstrip()
        return f"{head} {token} {line[legacy.start():]}"
    return f"{line.rstrip()} {token}"


def set_field(line: str, key: str, value) -> str:
    """
    Set a key-form annotation.

    The value of an existing annotation is replaced in place (its bracket
    style is kept); otherwise ``[key::value]`` is appended.
    """
    m = find_field(line, key)
    if m:
        return f"{line[:m.start(2)]}{value}{line[m.end(2):]}"
    return _append_token(line, render_field(key, value))


def set_counter(line: str, value: int) -> str:
    """
    Write an accumulated counter.

    ``[success::N]`` is rewritten in place. A legacy trailing ``[N]`` is
    migrated to ``[success::N]`` where it stands. With neither present the
    annotation is appended.
    """
    if find_field(line, "success"):
        return set_field(line, "success", value)
    legacy = LEGACY_COUNTER_RE.search(line)
    if legacy:
        end = legacy.end(1) + 1  # past the closing bracket
        return f"{line[:legacy.start()]}{render_field('success', value)}{line[end:]}"
    return _append_token(line, render_field("success", value))


def set_levels(line: str, importance: str, urgency: str) -> str:
    """Move a task to another quadrant by rewriting importance and urgency."""
    line = set_field(line, "importance", importance)
    return set_field(line, "urgency", urgency)


def mark_done(line: str, today: DateLike, glyphs: Glyphs = DEFAULT_GLYPHS) -> str:
    """Tick an open checklist item and stamp its completion date."""
    if not OPEN_TASK_RE.match(line):
        raise NotATaskError("Only open checklist items (- [ ]) can be marked done")
    ticked = "- [x]" + line[len("- [ ]"):]
    return _append_token(ticked, f"{glyphs.done} {iso(today)}")


def add_matrix_properties(
    line: str,
    importance: str,
    urgency: str,
    duration: Optional[int] = None,
) -> str:
    """
    Append importance, urgency and (optionally) duration to a checklist line.

    Fields already carried in key form are left untouched.
    """
    if not CHECKLIST_RE.match(line):
        raise NotATaskError("Line must be a task (starting with - [ ] or - [x])")
    for key, value in (("importance", importance), ("urgency", urgency)):
        if value not in ("high", "low"):
            raise ValueError(f"{key} must be 'high' or 'low', got '{value}'")
        if not find_field(line, key):
            line = _append_token(line, render_field(key, value))
    if duration is not None and int(duration) < 0:
        raise ValueError(f"duration must not be negative, got {duration}")
    if duration is not None and not find_field(line, "duration"):
        line = _append_token(line, render_field("duration", int(duration)))
    return line


def strip_annotations(line: str, glyphs: Glyphs = DEFAULT_GLYPHS) -> str:
    """Display text of a task: checkbox, annotations and shorthands removed."""
    text = re.sub(r"^\s*- \[.\]\s*", "", line)
    for pattern in KEY_PATTERNS.values():
        text = pattern.sub("", text)
    text = LEGACY_COUNTER_RE.sub("", text)
    for glyph in (glyphs.duration, glyphs.start, glyphs.done):
        if glyph:
            text = re.sub(rf"{re.escape(glyph)}\ufe0f?\s*(?:{ISO_DATE_PATTERN}|\d+)?", "", text)
    for glyph in (glyphs.importance, glyphs.urgency, glyphs.habit, glyphs.accumulated):
        if glyph:
            text = text.replace(glyph, "")
    return re.sub(r"\s{2,}", " ", text).strip()
