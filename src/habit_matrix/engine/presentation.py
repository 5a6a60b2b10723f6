"""
Sorting and grouping of task collections for display.

Every sort is stable, so ties (and the "default" key) keep input order.
"""

from typing import Dict, Iterable, List, Optional

from habit_matrix.models.task import TaskRecord
from habit_matrix.utils.formatting import strip_annotations

SORT_KEYS = ("default", "progress", "start-date")
SORT_DIRECTIONS = ("asc", "desc")
GROUP_MODES = ("none", "accumulated", "category")
NATURAL_DIRECTION = {"progress": "desc", "start-date": "asc"}


def sort_tasks(
    tasks: Iterable[TaskRecord],
    key: str = "default",
    direction: Optional[str] = None,
) -> List[TaskRecord]:
    """
    Order tasks for display.

    Args:
        tasks: Records in input order
        key: "default" (input order), "progress" or "start-date"
        direction: "asc", "desc", or None for the key's natural order.
            For progress the natural order is highest count first and
            "asc" reverses it; for start-date the natural order is earliest
            first and "desc" reverses it.

    Returns:
        A new list. Records lacking the sort attribute always follow the
        ones that have it, in input order.
    """
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key '{key}'")
    direction = direction or NATURAL_DIRECTION.get(key, "asc")
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"Unknown sort direction '{direction}'")

    tasks = list(tasks)
    if key == "default":
        return tasks

    if key == "progress":
        keyed = [t for t in tasks if t.accumulated]
        rest = [t for t in tasks if not t.accumulated]
        keyed.sort(key=lambda t: t.accumulated_count or 0, reverse=(direction == "desc"))
        return keyed + rest

    keyed = [t for t in tasks if t.start_date]
    rest = [t for t in tasks if not t.start_date]
    keyed.sort(key=lambda t: t.start_date, reverse=(direction == "desc"))
    return keyed + rest


def group_by_accumulated(tasks: Iterable[TaskRecord]) -> Dict[str, List[TaskRecord]]:
    """Split into counter-tracked ("accumulated") and date-tracked ("tracked") tasks."""
    groups: Dict[str, List[TaskRecord]] = {"accumulated": [], "tracked": []}
    for task in tasks:
        groups["accumulated" if task.accumulated else "tracked"].append(task)
    return groups


def category_of(task: TaskRecord) -> Optional[str]:
    """'scheduled', 'daily', 'weekly', or None when the task is in no category."""
    if task.scheduled_date:
        return "scheduled"
    return task.habit_type


def group_by_category(tasks: Iterable[TaskRecord]) -> Dict[str, List[TaskRecord]]:
    """
    Partition into daily / weekly / scheduled.

    A scheduled date wins over a habit type. Tasks in none of the three are
    outside this grouping and are left out.
    """
    groups: Dict[str, List[TaskRecord]] = {"daily": [], "weekly": [], "scheduled": []}
    for task in tasks:
        category = category_of(task)
        if category:
            groups[category].append(task)
    return groups


def _habit_line(task: TaskRecord) -> str:
    title = strip_annotations(task.content)
    if task.accumulated:
        return f"- {title}: {task.accumulated_count}"
    streak = f"streak {task.current_streak} (best {task.max_streak})"
    if task.last_done_date:
        return f"- {title}: {streak}, last done {task.last_done_date}"
    return f"- {title}: {streak}"


def render_habits_markdown(tasks: Iterable[TaskRecord]) -> str:
    """Habit tracker note: habits by category, then counter-tracked habits by progress."""
    tasks = list(tasks)
    parts = ["# Habit Tracker"]
    for category, members in group_by_category(t for t in tasks if not t.accumulated).items():
        lines = [f"## {category.capitalize()}"]
        lines.extend(_habit_line(t) for t in members)
        if not members:
            lines.append("- No habits")
        parts.append("\n".join(lines))

    counters = sort_tasks(group_by_accumulated(tasks)["accumulated"], "progress")
    lines = ["## Accumulated"]
    lines.extend(_habit_line(t) for t in counters)
    if not counters:
        lines.append("- No habits")
    parts.append("\n".join(lines))
    return "\n\n".join(parts) + "\n"
