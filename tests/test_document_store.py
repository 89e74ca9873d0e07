"""
Tests for store/document_store.py.

Uses a temporary document root on disk.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from quick_task.store.document_store import DocumentStore


@pytest.fixture
def root(tmp_path):
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "today.md").write_text("# Today\n- [ ] A\n", encoding="utf-8")
    return docs


class TestResolve:
    def test_relative_path(self, root):
        store = DocumentStore(root)
        assert store.resolve("today.md") == (root / "today.md").resolve()

    def test_absolute_path_inside_root(self, root):
        store = DocumentStore(root)
        assert store.resolve(root / "today.md") == (root / "today.md").resolve()

    def test_escape_rejected(self, root):
        store = DocumentStore(root)
        with pytest.raises(PermissionError):
            store.resolve("../outside.md")

    def test_absolute_outside_root_rejected(self, root, tmp_path):
        store = DocumentStore(root)
        with pytest.raises(PermissionError):
            store.resolve(tmp_path / "outside.md")

    def test_no_root_allows_any_path(self, tmp_path):
        store = DocumentStore()
        assert store.root is None
        assert store.resolve(tmp_path / "x.md") == (tmp_path / "x.md").resolve()


class TestReadWrite:
    def test_read(self, root):
        assert DocumentStore(root).read("today.md") == "# Today\n- [ ] A\n"

    def test_read_missing(self, root):
        with pytest.raises(FileNotFoundError):
            DocumentStore(root).read("missing.md")

    def test_write_creates_parents(self, root):
        store = DocumentStore(root)
        store.write("notes/2026/new.md", "- [ ] New\n")
        assert (root / "notes" / "2026" / "new.md").read_text(encoding="utf-8") == "- [ ] New\n"

    def test_crlf_round_trip(self, root):
        store = DocumentStore(root)
        store.write("crlf.md", "- [ ] A\r\n  due:: 2026-01-10\r\n")
        assert (root / "crlf.md").read_bytes() == b"- [ ] A\r\n  due:: 2026-01-10\r\n"
        assert store.read("crlf.md") == "- [ ] A\r\n  due:: 2026-01-10\r\n"

    def test_write_leaves_no_temp_files(self, root):
        store = DocumentStore(root)
        store.write("today.md", "replaced\n")
        assert sorted(p.name for p in root.iterdir()) == ["today.md"]


class TestEdit:
    def test_edit_writes_and_returns_result(self, root):
        store = DocumentStore(root)
        result = store.edit("today.md", lambda text: (text + "- [ ] B\n", "ok"))
        assert result == "ok"
        assert store.read("today.md") == "# Today\n- [ ] A\n- [ ] B\n"

    def test_edit_missing_file_raises(self, root):
        store = DocumentStore(root)
        with pytest.raises(FileNotFoundError):
            store.edit("missing.md", lambda text: (text + "x", None))
        assert not (root / "missing.md").exists()

    def test_edit_missing_ok_creates_file(self, root):
        store = DocumentStore(root)
        seen = []

        def fn(text):
            seen.append(text)
            return "- [ ] New\n", None

        store.edit("new.md", fn, missing_ok=True)
        assert seen == [""]
        assert (root / "new.md").read_text(encoding="utf-8") == "- [ ] New\n"

    def test_unchanged_text_not_written(self, root):
        store = DocumentStore(root)
        store.edit("new.md", lambda text: (text, None), missing_ok=True)
        assert not (root / "new.md").exists()

    def test_failing_edit_leaves_file(self, root):
        store = DocumentStore(root)

        def fn(text):
            raise ValueError("boom")

        with pytest.raises(ValueError):
            store.edit("today.md", fn)
        assert store.read("today.md") == "# Today\n- [ ] A\n"
