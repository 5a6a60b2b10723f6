"""
Eisenhower matrix classification and rendering.

group_by_quadrant is a stable partition: every record lands in exactly one
quadrant and keeps its input order there.
"""

from typing import Dict, Iterable, List

from habit_matrix.models.task import Quadrant, TaskRecord
from habit_matrix.utils.formatting import strip_annotations

MatrixGroups = Dict[Quadrant, List[TaskRecord]]


def quadrant_of(task: TaskRecord) -> Quadrant:
    return Quadrant.from_levels(task.importance, task.urgency)


def group_by_quadrant(tasks: Iterable[TaskRecord]) -> MatrixGroups:
    """Partition tasks into the four quadrants, always returning all four keys."""
    groups: MatrixGroups = {q: [] for q in Quadrant}
    for task in tasks:
        groups[quadrant_of(task)].append(task)
    return groups


def render_matrix_markdown(groups: MatrixGroups) -> str:
    """
    Render the matrix as a markdown note: one ``##`` section per quadrant,
    each task shown by its display text with a link back to its note.
    """
    parts = ["# Eisenhower Matrix"]
    for quadrant in Quadrant:
        lines = [f"## {quadrant.label}"]
        tasks = groups.get(quadrant, [])
        for task in tasks:
            lines.append(f"- {strip_annotations(task.content)} ([[{task.file}]])")
        if not tasks:
            lines.append("- No tasks")
        parts.append("\n".join(lines))
    return "\n\n".join(parts) + "\n"


def matrix_to_dict(groups: MatrixGroups) -> dict:
    return {
        q.value: {"label": q.label, "tasks": [t.to_dict() for t in groups.get(q, [])]}
        for q in Quadrant
    }
