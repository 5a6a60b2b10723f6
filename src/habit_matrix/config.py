"""Environment-driven settings."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Set

from habit_matrix.engine.summary import DEFAULT_TEMPLATE
from habit_matrix.errors import ConfigError
from habit_matrix.parsers.annotations import Glyphs

_TRUTHY = ("true", "1", "yes")


def _parse_exclude_dirs(raw: str) -> Set[str]:
    """Parse a comma-separated list of directory names to exclude."""
    return {part.strip() for part in raw.split(",") if part.strip()}


def _number(environ: Mapping[str, str], name: str, default: str, kind):
    raw = environ.get(name, default)
    try:
        value = kind(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass
class Settings:
    vault_root: Path
    exclude_dirs: Set[str] = field(default_factory=lambda: {".git", ".obsidian", "node_modules", ".trash"})
    api_enabled: bool = True
    api_port: int = 9400
    poll_interval: float = 5.0
    views_enabled: bool = True
    matrix_note: str = "Eisenhower Matrix.md"
    habits_note: str = "Habit Tracker.md"
    daily_notes_dir: str = "Daily"
    summary_header: str = "Today"
    summary_template: str = DEFAULT_TEMPLATE
    glyphs: Glyphs = field(default_factory=Glyphs)

    @property
    def generated_notes(self) -> Set[str]:
        """Notes written by the views; never scanned for tasks."""
        return {self.matrix_note, self.habits_note}

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        vault_root_env = env.get("VAULT_ROOT", "")
        if not vault_root_env:
            raise ConfigError("VAULT_ROOT environment variable is not set")
        vault_root = Path(vault_root_env).expanduser()
        if not vault_root.is_dir():
            raise ConfigError(f"VAULT_ROOT does not exist or is not a directory: {vault_root}")

        defaults = Glyphs()
        glyphs = Glyphs(
            importance=env.get("IMPORTANCE_EMOJI") or defaults.importance,
            urgency=env.get("URGENCY_EMOJI") or defaults.urgency,
            duration=env.get("DURATION_EMOJI") or defaults.duration,
        )

        return cls(
            vault_root=vault_root,
            exclude_dirs=_parse_exclude_dirs(env.get("EXCLUDE_DIRS", ".git,.obsidian,node_modules,.trash")),
            api_enabled=env.get("API_ENABLED", "true").lower() in _TRUTHY,
            api_port=_number(env, "API_PORT", "9400", int),
            poll_interval=_number(env, "POLL_INTERVAL", "5.0", float),
            views_enabled=env.get("VIEWS_ENABLED", "true").lower() in _TRUTHY,
            matrix_note=env.get("MATRIX_NOTE", "Eisenhower Matrix.md"),
            habits_note=env.get("HABITS_NOTE", "Habit Tracker.md"),
            daily_notes_dir=env.get("DAILY_NOTES_DIR", "Daily"),
            summary_header=env.get("SUMMARY_HEADER", "Today"),
            summary_template=env.get("SUMMARY_TEMPLATE") or DEFAULT_TEMPLATE,
            glyphs=glyphs,
        )
