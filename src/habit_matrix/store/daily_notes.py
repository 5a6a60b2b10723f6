"""
Daily-note counters for attribute-based habits.

A habit tagged ``[attribute::pushups]`` bumps the inline field
``pushups:: N`` in the daily note for the day it is completed
(``<DAILY_NOTES_DIR>/YYYY-MM-DD.md``). The field is appended when missing;
the note itself is never created here.
"""

import logging
import re
from abc import ABC, abstractmethod

from habit_matrix.errors import DailyNoteError, DocumentNotFoundError
from habit_matrix.store.vault_store import TextStore
from habit_matrix.utils.dates import DateLike, iso

log = logging.getLogger(__name__)


class DailyNoteCounter(ABC):
    """Capability handed to TaskActions for attribute-based completions."""

    @abstractmethod
    def increment(self, attribute: str, day: DateLike) -> int:
        """Add one to ``attribute`` in the note for ``day``; return the new value."""


class VaultDailyNotes(DailyNoteCounter):
    def __init__(self, store: TextStore, folder: str = "Daily") -> None:
        self._store = store
        self._folder = folder.strip("/")

    def note_path(self, day: DateLike) -> str:
        name = f"{iso(day)}.md"
        return f"{self._folder}/{name}" if self._folder else name

    def increment(self, attribute: str, day: DateLike) -> int:
        path = self.note_path(day)
        try:
            text = self._store.read_document(path)
        except DocumentNotFoundError:
            raise DailyNoteError(f"Daily note '{path}' does not exist") from None

        field_re = re.compile(rf"^({re.escape(attribute)}::[ \t]*)(-?\d+)", re.MULTILINE)
        m = field_re.search(text)
        if m:
            value = int(m.group(2)) + 1
            new_text = f"{text[:m.start(2)]}{value}{text[m.end(2):]}"
        else:
            value = 1
            sep = "" if not text or text.endswith("\n") else "\n"
            new_text = f"{text}{sep}{attribute}:: {value}\n"

        try:
            self._store.write_document(path, new_text)
        except (OSError, DocumentNotFoundError) as e:
            raise DailyNoteError(f"Could not update '{path}': {e}") from e

        log.info("Daily note %s: %s -> %d", path, attribute, value)
        return value
