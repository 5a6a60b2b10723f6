"""
Task model builder.

Main API:
    parse_line(line, file_path, line_number)  → TaskRecord | None
    scan_content(content, file_path)          → List[TaskRecord]

parse_line is a pure function of its inputs. A line becomes a TaskRecord only
if it carries at least one admission signal: an importance or urgency
annotation, a habit type, the accumulated flag, a scheduled or start date, or
an attribute name. Duration alone does not admit a line.
"""

import re
from typing import List, Optional

from habit_matrix.models.task import TaskRecord
from habit_matrix.parsers.annotations import DEFAULT_GLYPHS, Annotations, Glyphs, lex

# Only open checklist items are scanned; "- [x]" lines are finished.
OPEN_TASK_RE = re.compile(r"^- \[ \]")
# Any checklist item, open or not
CHECKLIST_RE = re.compile(r"^- \[.\]")


def split_lines(content: str) -> List[str]:
    """Split on LF only, dropping a trailing CR, so line numbers match the mutators."""
    return [line[:-1] if line.endswith("\r") else line for line in content.split("\n")]


def is_open_task_line(line: str) -> bool:
    return bool(OPEN_TASK_RE.match(line))


def _is_admitted(ann: Annotations) -> bool:
    return any((
        ann.importance is not None,
        ann.urgency is not None,
        ann.habit_type is not None,
        ann.accumulated,
        ann.scheduled_date is not None,
        ann.start_date is not None,
        ann.attribute_name is not None,
    ))


def _task_type(ann: Annotations) -> str:
    if ann.scheduled_date:
        return "scheduled"
    if ann.habit_type:
        return "repeated-daily"
    return "regular"


def parse_line(
    line: str,
    file_path: str,
    line_number: int,
    glyphs: Glyphs = DEFAULT_GLYPHS,
) -> Optional[TaskRecord]:
    """
    Build a TaskRecord from one line of text.

    Args:
        line: Raw line (kept verbatim as ``content``)
        file_path: Store path of the containing document
        line_number: 1-based line number
        glyphs: Emoji shorthands in effect

    Returns:
        TaskRecord, or None if the line carries no admission signal
    """
    ann = lex(line, glyphs)
    if not _is_admitted(ann):
        return None

    return TaskRecord(
        content=line,
        file=file_path,
        line=line_number,
        importance=ann.importance or "low",
        urgency=ann.urgency or "low",
        duration_minutes=ann.duration_minutes or 0,
        habit_type=ann.habit_type,
        accumulated=ann.accumulated,
        accumulated_count=(ann.counter or 0) if ann.accumulated else None,
        last_done_date=ann.last_done_date,
        last_streak_date=ann.last_streak_date,
        current_streak=ann.streak or 0,
        max_streak=ann.max_streak or 0,
        task_type=_task_type(ann),
        scheduled_date=ann.scheduled_date,
        start_date=ann.start_date,
        attribute_name=ann.attribute_name,
    )


def scan_content(
    content: str,
    file_path: str,
    glyphs: Glyphs = DEFAULT_GLYPHS,
) -> List[TaskRecord]:
    """Parse every open checklist line of a document, in document order."""
    records: List[TaskRecord] = []
    for line_num, line in enumerate(split_lines(content), start=1):
        if not is_open_task_line(line):
            continue
        record = parse_line(line, file_path, line_num, glyphs)
        if record is not None:
            records.append(record)
    return records
