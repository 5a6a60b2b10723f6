"""REST API routes for the matrix, habits and task mutations."""

from typing import Literal, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from habit_matrix.api.handlers import (
    handle_habit_counter,
    handle_habit_list,
    handle_index_status,
    handle_matrix,
    handle_refresh_streaks,
    handle_task_add_properties,
    handle_task_complete,
    handle_task_parse,
    handle_task_set_quadrant,
    handle_week_summary,
)
from habit_matrix.service import Services

_STATUS_CODES = {"not_found": 404, "line_diverged": 409, "invalid": 400}


class ParseBody(BaseModel):
    line: str
    file_path: str = ""
    line_number: int = 1


class TaskRefBody(BaseModel):
    file_path: str
    line: int
    text: str


class CounterBody(TaskRefBody):
    delta: Literal["+1", "-1", "reset"]


class QuadrantBody(TaskRefBody):
    quadrant: Literal["urgent-important", "important", "urgent", "neither"]


class PropertiesBody(TaskRefBody):
    importance: Literal["high", "low"]
    urgency: Literal["high", "low"]
    duration: Optional[int] = Field(None, ge=0)


def _checked(result: dict) -> dict:
    if "error" in result:
        raise HTTPException(status_code=_STATUS_CODES.get(result.get("code"), 400), detail=result["error"])
    return result


def register_routes(app_router: APIRouter, services: Services) -> None:
    """Attach REST routes that use the shared services."""

    @app_router.get("/matrix")
    def get_matrix():
        return handle_matrix(services)

    @app_router.get("/habits")
    def get_habits(
        sort: str = Query("default"),
        direction: Optional[str] = Query(None),
        group: str = Query("none"),
    ):
        return _checked(handle_habit_list(services, sort=sort, direction=direction, group=group))

    @app_router.post("/parse")
    def parse(body: ParseBody):
        return handle_task_parse(services, **body.model_dump())

    @app_router.post("/tasks/complete")
    def complete_task(body: TaskRefBody):
        return _checked(handle_task_complete(services, **body.model_dump()))

    @app_router.post("/tasks/counter")
    def update_counter(body: CounterBody):
        return _checked(handle_habit_counter(services, **body.model_dump()))

    @app_router.post("/tasks/quadrant")
    def set_quadrant(body: QuadrantBody):
        return _checked(handle_task_set_quadrant(services, **body.model_dump()))

    @app_router.post("/tasks/properties")
    def add_properties(body: PropertiesBody):
        return _checked(handle_task_add_properties(services, **body.model_dump()))

    @app_router.post("/habits/refresh-streaks")
    def refresh_streaks():
        return handle_refresh_streaks(services)

    @app_router.get("/summary/week")
    def week_summary():
        return handle_week_summary(services)

    @app_router.get("/index/status")
    def index_status():
        return handle_index_status(services)
