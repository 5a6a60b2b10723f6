from .daily_notes import DailyNoteCounter, VaultDailyNotes
from .vault_store import TextStore, VaultStore

__all__ = [
    "DailyNoteCounter",
    "VaultDailyNotes",
    "TextStore",
    "VaultStore",
]
