"""
Poll-driven view reconciliation.

Each view owns its state (previous fingerprint, last run) and its own daemon
thread and interval. A cycle is staged as:

1. scan:   rebuild records from the store (always current truth)
2. diff:   compare the fingerprint against the previous cycle's
3. render: only when the fingerprint changed

Scans race freely with user mutations; a stale cycle is simply superseded by
the next one.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from habit_matrix.cache.task_index import TaskIndex, fingerprint
from habit_matrix.engine.matrix import group_by_quadrant, render_matrix_markdown
from habit_matrix.engine.presentation import render_habits_markdown
from habit_matrix.models.task import TaskRecord
from habit_matrix.store.vault_store import TextStore

log = logging.getLogger(__name__)

_DEFAULT_POLL_INTERVAL = 5.0


@dataclass
class ReconcileState:
    previous_fingerprint: Optional[str] = None
    last_run: Optional[datetime] = None
    renders: int = 0


class PollingView:
    """
    One display surface kept in sync with the store.

    Usage:
        view = PollingView("matrix", index.scan, render_fn, poll_interval=5)
        view.start()
        ...
        view.stop()
    """

    def __init__(
        self,
        name: str,
        scan: Callable[[], List[TaskRecord]],
        render: Callable[[List[TaskRecord]], None],
        poll_interval: Optional[float] = None,
    ) -> None:
        self.name = name
        self._scan = scan
        self._render = render
        self._poll_interval = poll_interval or _DEFAULT_POLL_INTERVAL
        self.state = ReconcileState()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def reconcile_once(self) -> bool:
        """Run one scan → diff → render cycle. Returns True if the view was re-rendered."""
        records = self._scan()
        current = fingerprint(records)
        self.state.last_run = datetime.now()
        if current == self.state.previous_fingerprint:
            return False
        self._render(records)
        self.state.previous_fingerprint = current
        self.state.renders += 1
        log.debug("View %s re-rendered (%d records)", self.name, len(records))
        return True

    def start(self) -> None:
        """Start the polling thread (daemon); the first cycle runs immediately."""
        log.info("Starting %s view (polling every %.1fs)", self.name, self._poll_interval)
        self._thread = threading.Thread(
            target=self._poll_loop, daemon=True, name=f"view-{self.name}"
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the poll thread to stop and wait for it."""
        log.info("Stopping %s view", self.name)
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=self._poll_interval + 2)

    def _poll_loop(self) -> None:
        """Main polling loop; runs until stop_event is set."""
        while not self._stop_event.is_set():
            try:
                self.reconcile_once()
            except Exception:
                log.exception("Error during %s view cycle", self.name)
            self._stop_event.wait(self._poll_interval)


def matrix_view(index: TaskIndex, store: TextStore, note: str, poll_interval: Optional[float] = None) -> PollingView:
    """View that keeps the Eisenhower matrix note up to date."""

    def render(records: List[TaskRecord]) -> None:
        store.write_document(note, render_matrix_markdown(group_by_quadrant(records)), create=True)

    return PollingView("matrix", index.scan, render, poll_interval)


def habits_view(index: TaskIndex, store: TextStore, note: str, poll_interval: Optional[float] = None) -> PollingView:
    """View that keeps the habit tracker note up to date."""

    def scan() -> List[TaskRecord]:
        return [r for r in index.scan() if r.is_habit or r.scheduled_date]

    def render(records: List[TaskRecord]) -> None:
        store.write_document(note, render_habits_markdown(records), create=True)

    return PollingView("habits", scan, render, poll_interval)
