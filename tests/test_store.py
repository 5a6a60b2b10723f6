"""Tests for store/vault_store.py and store/daily_notes.py."""

import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from habit_matrix.errors import DailyNoteError, DocumentNotFoundError
from habit_matrix.store.daily_notes import VaultDailyNotes
from habit_matrix.store.vault_store import VaultStore


def _make_vault(tmp_path: Path) -> Path:
    vault = tmp_path / "vault"
    vault.mkdir()
    (vault / "Inbox.md").write_text("- [ ] Task ⭐\n", encoding="utf-8")
    (vault / "Projects").mkdir()
    (vault / "Projects" / "Trip.md").write_text("- [ ] Book flights 🔥\n", encoding="utf-8")
    (vault / ".obsidian").mkdir()
    (vault / ".obsidian" / "workspace.md").write_text("ignored\n", encoding="utf-8")
    (vault / "notes.txt").write_text("not markdown\n", encoding="utf-8")
    (vault / "Daily").mkdir()
    (vault / "Daily" / "2025-06-08.md").write_text("# Sunday\n\nmood:: 4\npushups:: 9\n", encoding="utf-8")
    return vault


class TestVaultStore:
    def test_list_documents(self, tmp_path):
        store = VaultStore(_make_vault(tmp_path), {".obsidian"})
        assert store.list_documents() == ["Daily/2025-06-08.md", "Inbox.md", "Projects/Trip.md"]

    def test_read(self, tmp_path):
        store = VaultStore(_make_vault(tmp_path))
        assert store.read_document("Inbox.md") == "- [ ] Task ⭐\n"

    def test_read_missing(self, tmp_path):
        store = VaultStore(_make_vault(tmp_path))
        with pytest.raises(DocumentNotFoundError):
            store.read_document("Nope.md")

    def test_write_requires_existing(self, tmp_path):
        store = VaultStore(_make_vault(tmp_path))
        with pytest.raises(DocumentNotFoundError):
            store.write_document("New.md", "text")

    def test_write_create(self, tmp_path):
        vault = _make_vault(tmp_path)
        store = VaultStore(vault)
        store.write_document("Views/Matrix.md", "# Matrix\n", create=True)
        assert (vault / "Views" / "Matrix.md").read_text(encoding="utf-8") == "# Matrix\n"

    def test_preserves_crlf(self, tmp_path):
        vault = _make_vault(tmp_path)
        store = VaultStore(vault)
        store.write_document("Inbox.md", "a\r\nb\r\n")
        assert store.read_document("Inbox.md") == "a\r\nb\r\n"
        assert (vault / "Inbox.md").read_bytes() == b"a\r\nb\r\n"

    def test_rejects_escape(self, tmp_path):
        store = VaultStore(_make_vault(tmp_path))
        with pytest.raises(DocumentNotFoundError):
            store.read_document("../outside.md")

    def test_modified_time(self, tmp_path):
        vault = _make_vault(tmp_path)
        store = VaultStore(vault)
        assert store.document_modified_time("Inbox.md") == (vault / "Inbox.md").stat().st_mtime
        with pytest.raises(DocumentNotFoundError):
            store.document_modified_time("Nope.md")


class TestVaultDailyNotes:
    def test_note_path(self, tmp_path):
        notes = VaultDailyNotes(VaultStore(_make_vault(tmp_path)), "Daily/")
        assert notes.note_path(date(2025, 6, 8)) == "Daily/2025-06-08.md"

    def test_increment_existing_field(self, tmp_path):
        vault = _make_vault(tmp_path)
        notes = VaultDailyNotes(VaultStore(vault))
        assert notes.increment("pushups", date(2025, 6, 8)) == 10
        assert (vault / "Daily" / "2025-06-08.md").read_text(encoding="utf-8") == \
            "# Sunday\n\nmood:: 4\npushups:: 10\n"

    def test_increment_appends_field(self, tmp_path):
        vault = _make_vault(tmp_path)
        notes = VaultDailyNotes(VaultStore(vault))
        assert notes.increment("squats", "2025-06-08") == 1
        assert (vault / "Daily" / "2025-06-08.md").read_text(encoding="utf-8").endswith("pushups:: 9\nsquats:: 1\n")

    def test_missing_note(self, tmp_path):
        notes = VaultDailyNotes(VaultStore(_make_vault(tmp_path)))
        with pytest.raises(DailyNoteError):
            notes.increment("pushups", date(2025, 6, 9))
