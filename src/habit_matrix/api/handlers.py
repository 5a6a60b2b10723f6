"""Handler functions shared by MCP tools and REST API."""

import logging
from datetime import datetime
from typing import Callable, Optional

from habit_matrix.engine.matrix import group_by_quadrant, matrix_to_dict
from habit_matrix.engine.presentation import (
    GROUP_MODES,
    group_by_accumulated,
    group_by_category,
    sort_tasks,
)
from habit_matrix.engine.summary import build_week_summary
from habit_matrix.errors import DocumentNotFoundError, HabitMatrixError, LineDivergedError
from habit_matrix.models.task import MutationResult
from habit_matrix.parsers.task_parser import parse_line
from habit_matrix.service import Services
from habit_matrix.utils.formatting import strip_annotations

log = logging.getLogger(__name__)


def _error(e: Exception) -> dict:
    if isinstance(e, DocumentNotFoundError):
        code = "not_found"
    elif isinstance(e, LineDivergedError):
        code = "line_diverged"
    else:
        code = "invalid"
    return {"error": str(e), "code": code}


def _mutate(services: Services, file_path: str, action: Callable[[], MutationResult]) -> dict:
    try:
        result = action()
    except (HabitMatrixError, ValueError) as e:
        return _error(e)
    if result.written:
        services.index.invalidate(file_path)
    return result.to_dict()


# ---------------------------------------------------------------------------
# Read-only views
# ---------------------------------------------------------------------------

def handle_task_parse(services: Services, *, line: str, file_path: str = "", line_number: int = 1) -> dict:
    record = parse_line(line, file_path, line_number, services.settings.glyphs)
    return {
        "task": record.to_dict() if record else None,
        "display": strip_annotations(line, services.settings.glyphs),
    }


def handle_matrix(services: Services) -> dict:
    return matrix_to_dict(group_by_quadrant(services.index.scan()))


def handle_habit_list(
    services: Services,
    *,
    sort: str = "default",
    direction: Optional[str] = None,
    group: str = "none",
) -> dict:
    if group not in GROUP_MODES:
        return {"error": f"Unknown group mode '{group}'", "code": "invalid"}
    habits = [r for r in services.index.scan() if r.is_habit or r.scheduled_date]
    try:
        ordered = sort_tasks(habits, sort, direction)
    except ValueError as e:
        return _error(e)

    if group == "accumulated":
        groups = group_by_accumulated(ordered)
    elif group == "category":
        groups = group_by_category(ordered)
    else:
        return {"count": len(ordered), "tasks": [t.to_dict() for t in ordered]}
    return {
        "count": len(ordered),
        "groups": {name: [t.to_dict() for t in members] for name, members in groups.items()},
    }


def handle_week_summary(services: Services, *, now: Optional[datetime] = None) -> dict:
    settings = services.settings
    text = build_week_summary(
        services.store,
        settings.summary_header,
        settings.summary_template,
        now=now,
        exclude=settings.generated_notes,
    )
    return {"summary": text}


def handle_index_status(services: Services) -> dict:
    status = services.index.status()
    status["views"] = [
        {
            "name": view.name,
            "renders": view.state.renders,
            "last_run": view.state.last_run.isoformat() if view.state.last_run else None,
        }
        for view in services.views
    ]
    return status


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

def handle_task_complete(services: Services, *, file_path: str, line: int, text: str) -> dict:
    return _mutate(services, file_path, lambda: services.actions.apply_completion(file_path, line, text))


def handle_habit_counter(services: Services, *, file_path: str, line: int, text: str, delta: str) -> dict:
    return _mutate(
        services, file_path, lambda: services.actions.apply_counter_delta(file_path, line, text, delta)
    )


def handle_task_set_quadrant(services: Services, *, file_path: str, line: int, text: str, quadrant: str) -> dict:
    return _mutate(
        services, file_path, lambda: services.actions.apply_quadrant(file_path, line, text, quadrant)
    )


def handle_task_add_properties(
    services: Services,
    *,
    file_path: str,
    line: int,
    text: str,
    importance: str,
    urgency: str,
    duration: Optional[int] = None,
) -> dict:
    return _mutate(
        services,
        file_path,
        lambda: services.actions.apply_properties(file_path, line, text, importance, urgency, duration),
    )


def handle_refresh_streaks(services: Services) -> dict:
    """Persist the current streak of every date-tracked habit (breaks included)."""
    updated, errors = [], []
    for record in services.index.scan():
        if record.habit_type is None or record.accumulated:
            continue
        result = handle_streak_refresh(services, record.file, record.line, record.content)
        if "error" in result:
            errors.append({"ref": record.ref, **result})
        elif result["written"]:
            updated.append(result)
    log.info("Streak refresh: %d updated, %d errors", len(updated), len(errors))
    return {"updated": updated, "errors": errors}


def handle_streak_refresh(services: Services, file_path: str, line: int, text: str) -> dict:
    return _mutate(services, file_path, lambda: services.actions.apply_streak_refresh(file_path, line, text))
