"""
Core task data models.

A TaskRecord is derived entirely from one checklist line. It is never stored
on its own: the annotations embedded in the line are the only durable state,
and the record is rebuilt on every scan. Mutating a task means rewriting its
line (see utils.formatting and engine.actions).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import List, Literal, Optional

Level = Literal["high", "low"]
HabitType = Literal["daily", "weekly"]
TaskType = Literal["scheduled", "repeated-daily", "regular"]


class Quadrant(str, Enum):
    """The four importance x urgency buckets, in matrix order."""

    URGENT_IMPORTANT = "urgent-important"
    IMPORTANT = "important"
    URGENT = "urgent"
    NEITHER = "neither"

    @property
    def label(self) -> str:
        return _QUADRANT_LABELS[self]

    @property
    def importance(self) -> Level:
        return "high" if self in (Quadrant.URGENT_IMPORTANT, Quadrant.IMPORTANT) else "low"

    @property
    def urgency(self) -> Level:
        return "high" if self in (Quadrant.URGENT_IMPORTANT, Quadrant.URGENT) else "low"

    @classmethod
    def from_levels(cls, importance: str, urgency: str) -> "Quadrant":
        if importance == "high":
            return cls.URGENT_IMPORTANT if urgency == "high" else cls.IMPORTANT
        return cls.URGENT if urgency == "high" else cls.NEITHER


_QUADRANT_LABELS = {
    Quadrant.URGENT_IMPORTANT: "Urgent & Important",
    Quadrant.IMPORTANT: "Not Urgent but Important",
    Quadrant.URGENT: "Urgent but Not Important",
    Quadrant.NEITHER: "Neither Urgent nor Important",
}


@dataclass(frozen=True)
class TaskRecord:
    """
    One admitted checklist line.

    ``content`` is the raw line and acts as the identity key; ``file`` and
    ``line`` locate it but shift as the document is edited, so mutations
    re-validate content before writing.
    """

    content: str
    file: str
    line: int
    importance: Level = "low"
    urgency: Level = "low"
    duration_minutes: int = 0
    habit_type: Optional[HabitType] = None
    accumulated: bool = False
    accumulated_count: Optional[int] = None
    last_done_date: Optional[str] = None
    last_streak_date: Optional[str] = None
    current_streak: int = 0
    max_streak: int = 0
    task_type: TaskType = "regular"
    scheduled_date: Optional[str] = None
    start_date: Optional[str] = None
    attribute_name: Optional[str] = None

    @property
    def ref(self) -> str:
        """Location in 'path:line' format."""
        return f"{self.file}:{self.line}"

    @property
    def quadrant(self) -> Quadrant:
        return Quadrant.from_levels(self.importance, self.urgency)

    @property
    def is_habit(self) -> bool:
        """True for date-tracked (habit type) or counter-tracked (accumulated) tasks."""
        return self.habit_type is not None or self.accumulated

    def to_dict(self) -> dict:
        d = asdict(self)
        d["quadrant"] = self.quadrant.value
        return d


@dataclass
class MutationResult:
    """Outcome of a store-backed line mutation."""

    file: str
    line: int
    old_text: str
    new_text: str
    written: bool
    notices: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CachedDocument:
    """The parsed records of one document held in the scan cache."""

    path: str
    mtime: float
    records: List[TaskRecord] = field(default_factory=list)
