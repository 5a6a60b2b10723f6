"""
Exception hierarchy for habit-matrix.

Handlers catch HabitMatrixError and surface the message to the caller
instead of letting it propagate; nothing here is fatal to the server.
"""


class HabitMatrixError(Exception):
    """Base class for all reportable, non-fatal failures."""


class DocumentNotFoundError(HabitMatrixError):
    """The target document no longer resolves in the store."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Document '{path}' not found")
        self.path = path


class LineDivergedError(HabitMatrixError):
    """The target line no longer matches the text the caller last saw."""

    def __init__(self, path: str, line: int, reason: str) -> None:
        super().__init__(f"{path}:{line} has changed since it was read ({reason})")
        self.path = path
        self.line = line


class NotATaskError(HabitMatrixError):
    """The line is not a checklist item, or carries no recognised annotation."""


class DailyNoteError(HabitMatrixError):
    """Updating the external daily-note counter failed."""


class ConfigError(HabitMatrixError):
    """An environment setting is missing or malformed."""
