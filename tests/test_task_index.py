"""
Tests for cache/task_index.py.

Covers:
- scan: document order, repeated scans identical, mtime-driven refresh
- vanished documents dropped, excluded notes skipped
- invalidate / records_for
- fingerprint determinism
- status diagnostics
- Thread safety: concurrent scans don't crash
"""

import os
import sys
import threading
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from habit_matrix.cache.task_index import TaskIndex, fingerprint
from habit_matrix.store.vault_store import VaultStore


def _make_vault(tmp_path: Path) -> Path:
    vault = tmp_path / "vault"
    vault.mkdir()
    (vault / "A.md").write_text(
        "- [ ] Alpha ⭐\n"
        "- [ ] Plain\n"
        "- [ ] Beta 🔥\n",
        encoding="utf-8",
    )
    (vault / "B.md").write_text("- [ ] Gamma [habit::daily]\n", encoding="utf-8")
    (vault / "Eisenhower Matrix.md").write_text("- [ ] Generated ⭐\n", encoding="utf-8")
    return vault


def _touch(path: Path, text: str) -> None:
    """Rewrite a file and push its mtime forward so the change is always visible."""
    st = path.stat()
    path.write_text(text, encoding="utf-8")
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + 10_000_000_000))


@pytest.fixture
def index(tmp_path):
    vault = _make_vault(tmp_path)
    return TaskIndex(VaultStore(vault), exclude={"Eisenhower Matrix.md"}), vault


class TestScan:
    def test_records_in_document_order(self, index):
        idx, vault = index
        records = idx.scan()
        assert [(r.file, r.line) for r in records] == [("A.md", 1), ("A.md", 3), ("B.md", 1)]

    def test_rescan_identical(self, index):
        idx, vault = index
        assert idx.scan() == idx.scan()

    def test_fresh_index_agrees(self, index):
        idx, vault = index
        other = TaskIndex(VaultStore(vault), exclude={"Eisenhower Matrix.md"})
        assert idx.scan() == other.scan()

    def test_picks_up_changes(self, index):
        idx, vault = index
        idx.scan()
        _touch(vault / "B.md", "- [ ] Gamma [habit::daily]\n- [ ] Delta ⭐\n")
        assert [r.line for r in idx.scan() if r.file == "B.md"] == [1, 2]

    def test_unchanged_mtime_uses_cache(self, index):
        idx, vault = index
        idx.scan()
        path = vault / "B.md"
        st = path.stat()
        path.write_text("- [ ] Replaced ⭐\n", encoding="utf-8")
        os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns))
        assert [r.content for r in idx.scan() if r.file == "B.md"] == ["- [ ] Gamma [habit::daily]"]

    def test_vanished_document(self, index):
        idx, vault = index
        idx.scan()
        (vault / "B.md").unlink()
        assert all(r.file == "A.md" for r in idx.scan())
        assert idx.status()["documents_indexed"] == 1

    def test_excluded_note(self, index):
        idx, vault = index
        assert not any(r.file == "Eisenhower Matrix.md" for r in idx.scan())


class TestInvalidate:
    def test_invalidate_forces_reread(self, index):
        idx, vault = index
        idx.scan()
        path = vault / "B.md"
        st = path.stat()
        path.write_text("- [ ] Replaced ⭐\n", encoding="utf-8")
        os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns))
        idx.invalidate("B.md")
        assert [r.content for r in idx.scan() if r.file == "B.md"] == ["- [ ] Replaced ⭐"]

    def test_records_for(self, index):
        idx, vault = index
        assert [r.line for r in idx.records_for("A.md")] == [1, 3]
        assert idx.records_for("Missing.md") == []


class TestFingerprint:
    def test_deterministic(self, index):
        idx, vault = index
        assert fingerprint(idx.scan()) == fingerprint(idx.scan())

    def test_changes_with_content(self, index):
        idx, vault = index
        before = fingerprint(idx.scan())
        _touch(vault / "A.md", "- [ ] Alpha ⭐🔥\n- [ ] Plain\n- [ ] Beta 🔥\n")
        assert fingerprint(idx.scan()) != before

    def test_empty(self):
        assert fingerprint([]) == fingerprint([])


class TestStatus:
    def test_status(self, index):
        idx, vault = index
        assert idx.status()["last_full_scan"] is None
        idx.scan()
        st = idx.status()
        assert st["documents_indexed"] == 2
        assert st["tasks_indexed"] == 3
        assert st["excluded"] == ["Eisenhower Matrix.md"]
        assert st["last_full_scan"] is not None


class TestThreadSafety:
    def test_concurrent_scans(self, index):
        idx, vault = index
        errors = []

        def worker():
            try:
                for _ in range(20):
                    assert len(idx.scan()) == 3
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert errors == []
