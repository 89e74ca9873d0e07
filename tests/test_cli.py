"""
Tests for the quick-task CLI (cli.py).

Drives main() with explicit --root/--settings against a temp document root.
"""

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from quick_task.cli import format_task, main
from quick_task.parsers.task_parser import parse_tasks


# --- test fixtures ---

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("QUICK_TASK_ROOT", "QUICK_TASK_SETTINGS", "QUICK_TASK_DIALECT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def env(tmp_path):
    root = tmp_path / "docs"
    root.mkdir()
    (root / "today.md").write_text(
        "# Today\n"
        "- [ ] Buy milk #home\n"
        "  due:: 2026-01-10\n",
        encoding="utf-8",
    )
    settings = tmp_path / "settings.json"

    def run(*argv):
        return main(["--root", str(root), "--settings", str(settings), *argv])

    return run, root


# ============================================================
# format_task
# ============================================================

class TestFormatTask:
    def test_open_task(self):
        task = parse_tasks("- [ ] Buy milk #home ⏫\n  due:: 2026-01-10")[0]
        assert format_task(task) == "   0  [ ] Buy milk #home ⏫ (todo, due 2026-01-10)"

    def test_done_task(self):
        task = parse_tasks("- [x] File taxes")[0]
        assert format_task(task) == "   0  [x] File taxes (done)"

    def test_cancelled_task(self):
        task = parse_tasks("- [-] Old idea")[0]
        assert format_task(task).startswith("   0  [-] Old idea")


# ============================================================
# Commands
# ============================================================

class TestList:
    def test_list(self, env, capsys):
        run, root = env
        assert run("list", "today.md") == 0
        out = capsys.readouterr().out
        assert "   1  [ ] Buy milk #home (todo, due 2026-01-10)" in out
        assert "1 task(s) found." in out

    def test_list_json(self, env, capsys):
        run, root = env
        assert run("list", "today.md", "--json") == 0
        data = json.loads(capsys.readouterr().out)
        assert data[0]["title"] == "Buy milk"
        assert data[0]["end_line"] == 2

    def test_list_filter_empty(self, env, capsys):
        run, root = env
        assert run("list", "today.md", "--status", "done") == 0
        assert "No tasks found." in capsys.readouterr().out

    def test_list_missing_document(self, env, capsys):
        run, root = env
        assert run("list", "missing.md") == 1
        assert "Error: Document not found" in capsys.readouterr().out


class TestShow:
    def test_show(self, env, capsys):
        run, root = env
        assert run("show", "today.md", "1") == 0
        out = capsys.readouterr().out
        assert "Lines: 1-2" in out
        assert "Due: 2026-01-10" in out

    def test_show_wrong_line(self, env, capsys):
        run, root = env
        assert run("show", "today.md", "0") == 1
        assert "Error: No task starts at line 0" in capsys.readouterr().out


class TestAdd:
    def test_add(self, env, capsys):
        run, root = env
        assert run("add", "today.md", "Call mom", "--tag", "family", "--priority", "High") == 0
        out = capsys.readouterr().out
        assert "Added: Call mom" in out
        assert "Line: 4" in out
        text = (root / "today.md").read_text(encoding="utf-8")
        assert "\n- [ ] Call mom #family 🔺\n" in text

    def test_add_bullet_dialect(self, env, capsys):
        run, root = env
        assert main([
            "--root", str(root), "--dialect", "bullet",
            "--settings", str(root.parent / "settings.json"),
            "add", "new.md", "Stretch", "--due", "2026-01-12",
        ]) == 0
        assert "  - Due: 2026-01-12" in (root / "new.md").read_text(encoding="utf-8")

    def test_add_invalid_title(self, env, capsys):
        run, root = env
        assert run("add", "today.md", "   ") == 1
        assert "Error: Task title is required" in capsys.readouterr().out

    def test_add_title_ending_in_status_word(self, env, capsys):
        run, root = env
        before = (root / "today.md").read_text(encoding="utf-8")
        assert run("add", "today.md", "Order cancelled") == 1
        assert "ends with a status keyword" in capsys.readouterr().out
        assert (root / "today.md").read_text(encoding="utf-8") == before


class TestEdit:
    def test_edit_fields(self, env, capsys):
        run, root = env
        assert run("edit", "today.md", "1", "--priority", "Low", "--due", "") == 0
        assert "Updated: Buy milk (line 1)" in capsys.readouterr().out
        task = parse_tasks((root / "today.md").read_text(encoding="utf-8"))[0]
        assert task.priority == "Low"
        assert task.due is None
        assert task.tags == ["#home"]

    def test_edit_status_done(self, env, capsys):
        run, root = env
        assert run("edit", "today.md", "1", "--status", "done") == 0
        task = parse_tasks((root / "today.md").read_text(encoding="utf-8"))[0]
        assert task.is_done
        assert task.status == "done"

    def test_edit_nothing(self, env, capsys):
        run, root = env
        before = (root / "today.md").read_text(encoding="utf-8")
        assert run("edit", "today.md", "1") == 0
        assert "No changes made." in capsys.readouterr().out
        assert (root / "today.md").read_text(encoding="utf-8") == before


class TestDeleteAndToggle:
    def test_delete(self, env, capsys):
        run, root = env
        assert run("delete", "today.md", "1") == 0
        assert "Deleted: Buy milk" in capsys.readouterr().out
        assert (root / "today.md").read_text(encoding="utf-8") == "# Today\n"

    def test_toggle(self, env, capsys):
        run, root = env
        assert run("toggle", "today.md", "1") == 0
        out = capsys.readouterr().out
        assert "Done: Buy milk" in out
        assert "Completed:" in out

        assert run("toggle", "today.md", "1") == 0
        assert "Reopened: Buy milk" in capsys.readouterr().out


class TestDefaults:
    def test_set_show_clear(self, env, capsys):
        run, root = env
        assert run("defaults", "today.md", "#daily", "home") == 0
        assert "#daily home" in capsys.readouterr().out

        assert run("defaults", "today.md") == 0
        assert "#daily home" in capsys.readouterr().out

        assert run("defaults", "today.md", "--clear") == 0
        assert "Cleared default tags for today.md" in capsys.readouterr().out

        assert run("defaults", "today.md") == 0
        assert "No default tags." in capsys.readouterr().out


class TestMain:
    def test_no_command(self, env, capsys):
        run, root = env
        assert run() == 1

    def test_missing_root(self, tmp_path, capsys):
        assert main(["--root", str(tmp_path / "nope"), "list", "x.md"]) == 1
        assert "Error: Document root not found" in capsys.readouterr().out

    def test_bad_env_dialect(self, env, capsys, monkeypatch):
        run, root = env
        monkeypatch.setenv("QUICK_TASK_DIALECT", "yaml")
        assert run("list", "today.md") == 1
        assert "QUICK_TASK_DIALECT" in capsys.readouterr().out
