"""Wiring of the store, index and actions that every surface shares."""

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List

from habit_matrix.cache.task_index import TaskIndex
from habit_matrix.config import Settings
from habit_matrix.engine.actions import TaskActions
from habit_matrix.store.daily_notes import VaultDailyNotes
from habit_matrix.store.vault_store import VaultStore
from habit_matrix.watcher.reconciler import PollingView, habits_view, matrix_view


@dataclass
class Services:
    settings: Settings
    store: VaultStore
    index: TaskIndex
    actions: TaskActions
    views: List[PollingView] = field(default_factory=list)


def build_services(settings: Settings, today: Callable[[], date] = date.today) -> Services:
    store = VaultStore(settings.vault_root, settings.exclude_dirs)
    index = TaskIndex(store, settings.glyphs, exclude=settings.generated_notes)
    actions = TaskActions(
        store,
        daily_notes=VaultDailyNotes(store, settings.daily_notes_dir),
        glyphs=settings.glyphs,
        today=today,
    )
    services = Services(settings=settings, store=store, index=index, actions=actions)
    if settings.views_enabled:
        services.views = [
            matrix_view(index, store, settings.matrix_note, settings.poll_interval),
            habits_view(index, store, settings.habits_note, settings.poll_interval),
        ]
    return services
