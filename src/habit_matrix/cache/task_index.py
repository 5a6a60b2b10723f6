"""
Thread-safe scan cache of task records.

Design:
    Primary store: Dict[str, CachedDocument]   (records per document handle)

A document is re-parsed only when its modification time differs from the
cached one; vanished documents are dropped. Records are never edited in
place: a scan always reconstructs current truth from the store, so repeated
scans of an unchanged store return equal results.

All access to the document map acquires _lock (threading.RLock).
"""

import hashlib
import json
import logging
import threading
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from habit_matrix.errors import DocumentNotFoundError
from habit_matrix.models.task import CachedDocument, TaskRecord
from habit_matrix.parsers.annotations import DEFAULT_GLYPHS, Glyphs
from habit_matrix.parsers.task_parser import scan_content
from habit_matrix.store.vault_store import TextStore

log = logging.getLogger(__name__)


def fingerprint(records: Iterable[TaskRecord]) -> str:
    """Structural hash of a result set; equal records give equal fingerprints."""
    payload = json.dumps([r.to_dict() for r in records], sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class TaskIndex:
    """
    Cache of parsed task records over a TextStore.

    Usage:
        index = TaskIndex(store, exclude={"Eisenhower Matrix.md"})
        records = index.scan()
    """

    def __init__(
        self,
        store: TextStore,
        glyphs: Glyphs = DEFAULT_GLYPHS,
        exclude: Optional[Iterable[str]] = None,
    ) -> None:
        self._store = store
        self._glyphs = glyphs
        self._exclude: Set[str] = set(exclude or ())
        self._lock = threading.RLock()
        self._docs: Dict[str, CachedDocument] = {}
        self._last_full_scan: Optional[datetime] = None

    @property
    def store(self) -> TextStore:
        return self._store

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def scan(self) -> List[TaskRecord]:
        """Refresh changed documents and return all records in document order."""
        handles = [h for h in self._store.list_documents() if h not in self._exclude]
        with self._lock:
            for handle in handles:
                self._refresh(handle)
            for handle in set(self._docs) - set(handles):
                log.debug("Document removed: %s", handle)
                del self._docs[handle]
            self._last_full_scan = datetime.now()
            return [r for handle in handles if handle in self._docs for r in self._docs[handle].records]

    def _refresh(self, handle: str) -> None:
        """Re-parse one document if its mtime changed (caller holds _lock)."""
        try:
            mtime = self._store.document_modified_time(handle)
            cached = self._docs.get(handle)
            if cached and cached.mtime == mtime:
                return
            text = self._store.read_document(handle)
        except DocumentNotFoundError:
            self._docs.pop(handle, None)
            return
        except (OSError, UnicodeDecodeError):
            log.exception("Failed to read %s", handle)
            return
        records = scan_content(text, handle, self._glyphs)
        self._docs[handle] = CachedDocument(path=handle, mtime=mtime, records=records)

    def invalidate(self, handle: str) -> None:
        """Forget a document so the next scan re-reads it regardless of mtime."""
        with self._lock:
            self._docs.pop(handle, None)

    def records_for(self, handle: str) -> List[TaskRecord]:
        with self._lock:
            self._refresh(handle)
            cached = self._docs.get(handle)
            return list(cached.records) if cached else []

    # ------------------------------------------------------------------
    # Status / diagnostics
    # ------------------------------------------------------------------

    def status(self) -> dict:
        with self._lock:
            return {
                "documents_indexed": len(self._docs),
                "tasks_indexed": sum(len(d.records) for d in self._docs.values()),
                "last_full_scan": self._last_full_scan.isoformat() if self._last_full_scan else None,
                "excluded": sorted(self._exclude),
            }
