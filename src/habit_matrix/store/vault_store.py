"""
Line-oriented text store backed by a vault directory.

Documents are markdown files addressed by their vault-relative POSIX path
("Projects/Week 23.md"). Reads and writes are always whole-document, and
line endings are preserved exactly.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional, Set

from habit_matrix.errors import DocumentNotFoundError

log = logging.getLogger(__name__)


class TextStore(ABC):
    """What the core needs from its host: list, read, write, and modification times."""

    @abstractmethod
    def list_documents(self) -> List[str]:
        """Return the handles of all documents, in a stable order."""

    @abstractmethod
    def read_document(self, handle: str) -> str:
        """Return the full text of a document. Raises DocumentNotFoundError."""

    @abstractmethod
    def write_document(self, handle: str, text: str, create: bool = False) -> None:
        """Replace the full text of a document. Raises DocumentNotFoundError
        unless the document exists or ``create`` is set."""

    @abstractmethod
    def document_modified_time(self, handle: str) -> float:
        """Modification time as a POSIX timestamp. Raises DocumentNotFoundError."""


class VaultStore(TextStore):
    """
    TextStore over the markdown files under a vault root.

    Usage:
        store = VaultStore(Path("~/notes").expanduser(), {".git", ".obsidian"})
        for handle in store.list_documents():
            text = store.read_document(handle)
    """

    def __init__(
        self,
        root: Path,
        exclude_dirs: Optional[Iterable[str]] = None,
        suffix: str = ".md",
    ) -> None:
        self._root = root
        self._exclude_dirs: Set[str] = set(exclude_dirs or ())
        self._suffix = suffix

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self, handle: str) -> Path:
        path = (self._root / handle).resolve()
        try:
            path.relative_to(self._root.resolve())
        except ValueError:
            raise DocumentNotFoundError(handle) from None
        return path

    def list_documents(self) -> List[str]:
        handles = []
        for path in self._root.rglob(f"*{self._suffix}"):
            if not path.is_file():
                continue
            rel = path.relative_to(self._root)
            # Check if any parent component is excluded
            if any(part in self._exclude_dirs for part in rel.parts[:-1]):
                continue
            handles.append(rel.as_posix())
        return sorted(handles)

    def read_document(self, handle: str) -> str:
        path = self._resolve(handle)
        try:
            with path.open(encoding="utf-8", newline="") as f:
                return f.read()
        except (FileNotFoundError, IsADirectoryError):
            raise DocumentNotFoundError(handle) from None

    def write_document(self, handle: str, text: str, create: bool = False) -> None:
        path = self._resolve(handle)
        if not path.is_file():
            if not create:
                raise DocumentNotFoundError(handle)
            path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as f:
            f.write(text)
        log.debug("Wrote %s (%d chars)", handle, len(text))

    def document_modified_time(self, handle: str) -> float:
        try:
            return self._resolve(handle).stat().st_mtime
        except FileNotFoundError:
            raise DocumentNotFoundError(handle) from None
