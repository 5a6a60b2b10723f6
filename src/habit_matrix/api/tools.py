"""MCP tool registration for habit-matrix."""

import json
import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

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

log = logging.getLogger(__name__)


def register_tools(mcp: FastMCP, services: Services) -> None:
    """Register all MCP tools onto the FastMCP instance."""

    # ------------------------------------------------------------------
    # Read-only tools
    # ------------------------------------------------------------------

    @mcp.tool()
    def task_parse(line: str, file_path: str = "", line_number: int = 1) -> str:
        """
        Parse a single checklist line into a task record.

        Args:
            line: The raw line, e.g. "- [ ] Write report ⭐ [urgency::high] ⏳45"
            file_path: Optional note path to attach to the record
            line_number: Optional 1-based line number

        Returns:
            JSON object with "task" (null when the line carries no
            annotations) and "display" (the line with annotations removed)
        """
        return json.dumps(
            handle_task_parse(services, line=line, file_path=file_path, line_number=line_number),
            indent=2,
            ensure_ascii=False,
        )

    @mcp.tool()
    def matrix_show() -> str:
        """
        Show every open annotated task grouped into the four Eisenhower quadrants.

        Returns:
            JSON object keyed by quadrant ("urgent-important", "important",
            "urgent", "neither"), each with a label and its tasks
        """
        return json.dumps(handle_matrix(services), indent=2, ensure_ascii=False)

    @mcp.tool()
    def habit_list(sort: str = "default", direction: Optional[str] = None, group: str = "none") -> str:
        """
        List habits, scheduled tasks and counters.

        Args:
            sort: "default" (note order), "progress" (counter value) or "start-date"
            direction: "asc" or "desc"; omit for the natural order of the sort
                       (progress: highest first, start-date: earliest first)
            group: "none", "accumulated" (counters vs date-tracked) or
                   "category" (daily / weekly / scheduled)

        Returns:
            JSON object with "tasks" or "groups"
        """
        return json.dumps(
            handle_habit_list(services, sort=sort, direction=direction, group=group),
            indent=2,
            ensure_ascii=False,
        )

    @mcp.tool()
    def week_summary() -> str:
        """
        Build a weekly review prompt from the day sections of notes edited in
        the last 7 days.

        Returns:
            JSON object with the "summary" text
        """
        return json.dumps(handle_week_summary(services), indent=2, ensure_ascii=False)

    @mcp.tool()
    def index_status() -> str:
        """Get task index statistics and view reconciliation state."""
        return json.dumps(handle_index_status(services), indent=2)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @mcp.tool()
    def task_complete(file_path: str, line: int, text: str) -> str:
        """
        Complete a task.

        Regular tasks are ticked and stamped with today's date. Daily/weekly
        habits record today's completion and advance their streak; habits
        with an attribute also bump that field in today's daily note.
        Counter habits are incremented by one.

        Args:
            file_path: Note path relative to the vault root
            line: 1-based line number
            text: The line as last read; the edit is refused if it changed

        Returns:
            JSON mutation result (old/new text, notices) or error
        """
        try:
            return json.dumps(
                handle_task_complete(services, file_path=file_path, line=line, text=text),
                indent=2,
                ensure_ascii=False,
            )
        except Exception as e:
            log.exception("task_complete failed")
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def habit_counter(file_path: str, line: int, text: str, delta: str) -> str:
        """
        Change the counter of an accumulated habit.

        Args:
            file_path: Note path relative to the vault root
            line: 1-based line number
            text: The line as last read
            delta: "+1", "-1" (never below zero) or "reset"

        Returns:
            JSON mutation result or error
        """
        try:
            return json.dumps(
                handle_habit_counter(services, file_path=file_path, line=line, text=text, delta=delta),
                indent=2,
                ensure_ascii=False,
            )
        except Exception as e:
            log.exception("habit_counter failed")
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def habit_refresh_streaks() -> str:
        """
        Bring the streak fields of every daily/weekly habit up to date,
        writing 0 for streaks that have been broken.

        Returns:
            JSON object with "updated" results and per-line "errors"
        """
        try:
            return json.dumps(handle_refresh_streaks(services), indent=2, ensure_ascii=False)
        except Exception as e:
            log.exception("habit_refresh_streaks failed")
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def task_set_quadrant(file_path: str, line: int, text: str, quadrant: str) -> str:
        """
        Move a task to another Eisenhower quadrant by rewriting its
        importance and urgency.

        Args:
            file_path: Note path relative to the vault root
            line: 1-based line number
            text: The line as last read
            quadrant: "urgent-important", "important", "urgent" or "neither"

        Returns:
            JSON mutation result or error
        """
        try:
            return json.dumps(
                handle_task_set_quadrant(services, file_path=file_path, line=line, text=text, quadrant=quadrant),
                indent=2,
                ensure_ascii=False,
            )
        except Exception as e:
            log.exception("task_set_quadrant failed")
            return json.dumps({"error": str(e)})

    @mcp.tool()
    def task_add_properties(
        file_path: str,
        line: int,
        text: str,
        importance: str,
        urgency: str,
        duration: Optional[int] = None,
    ) -> str:
        """
        Add matrix properties to a checklist line. Fields already present
        are left alone.

        Args:
            file_path: Note path relative to the vault root
            line: 1-based line number
            text: The line as last read
            importance: "high" or "low"
            urgency: "high" or "low"
            duration: Optional duration in minutes

        Returns:
            JSON mutation result or error
        """
        try:
            return json.dumps(
                handle_task_add_properties(
                    services,
                    file_path=file_path,
                    line=line,
                    text=text,
                    importance=importance,
                    urgency=urgency,
                    duration=duration,
                ),
                indent=2,
                ensure_ascii=False,
            )
        except Exception as e:
            log.exception("task_add_properties failed")
            return json.dumps({"error": str(e)})
