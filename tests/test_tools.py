"""
Tests for tools/task_tools.py.

Uses a real TaskService backed by a temporary document root on disk.
Exercises the MCP tool wrappers directly (bypasses transport).
"""

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from quick_task.service import TaskService
from quick_task.settings import SettingsStore
from quick_task.store.document_store import DocumentStore
from quick_task.tools.task_tools import register_task_tools, split_tags


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_root(tmp_path: Path) -> Path:
    root = tmp_path / "docs"
    root.mkdir()
    (root / "today.md").write_text(
        "# Today\n"
        "\n"
        "- [ ] Buy groceries #errand\n"
        "  due:: 2026-02-28\n"
        "- [x] File taxes #admin\n"
        "  completed:: 2026-01-15\n"
        "- [ ] Refactor parser in progress #work\n",
        encoding="utf-8",
    )
    return root


class _FakeMCP:
    """Minimal fake to capture tool registrations."""

    def __init__(self):
        self._tools = {}

    def tool(self, *args, **kwargs):
        """Decorator that records functions by name."""
        def decorator(fn):
            self._tools[fn.__name__] = fn
            return fn
        return decorator

    def get(self, name: str):
        return self._tools[name]


@pytest.fixture
def setup(tmp_path):
    root = _make_root(tmp_path)
    service = TaskService(
        DocumentStore(root),
        SettingsStore(tmp_path / "settings.json"),
        today=lambda: "2026-01-08",
    )

    mcp = _FakeMCP()
    register_task_tools(mcp, service)

    return mcp, service, root


def test_registered_tool_names(setup):
    mcp, service, root = setup
    assert set(mcp._tools) == {
        "task_list",
        "task_get",
        "task_add",
        "task_update",
        "task_delete",
        "task_toggle",
        "task_defaults",
    }


class TestSplitTags:
    def test_string(self):
        assert split_tags("#home, #errand  work") == ["#home", "#errand", "work"]

    def test_list(self):
        assert split_tags(["#a", " ", " #b "]) == ["#a", "#b"]

    def test_none(self):
        assert split_tags(None) == []


# ---------------------------------------------------------------------------
# Query tools
# ---------------------------------------------------------------------------

class TestTaskList:
    def test_list_all(self, setup):
        mcp, service, root = setup
        data = json.loads(mcp.get("task_list")(file_path="today.md"))
        assert [t["title"] for t in data] == ["Buy groceries", "File taxes", "Refactor parser"]
        assert data[0]["start_line"] == 2
        assert data[0]["raw_line"] == "- [ ] Buy groceries #errand"

    def test_list_by_status(self, setup):
        mcp, service, root = setup
        data = json.loads(mcp.get("task_list")(file_path="today.md", status="done,in-progress"))
        assert [t["title"] for t in data] == ["File taxes", "Refactor parser"]

    def test_list_by_tag(self, setup):
        mcp, service, root = setup
        data = json.loads(mcp.get("task_list")(file_path="today.md", tag="errand"))
        assert [t["title"] for t in data] == ["Buy groceries"]

    def test_list_missing_document(self, setup):
        mcp, service, root = setup
        data = json.loads(mcp.get("task_list")(file_path="missing.md"))
        assert "error" in data


class TestTaskGet:
    def test_get_existing(self, setup):
        mcp, service, root = setup
        data = json.loads(mcp.get("task_get")(file_path="today.md", start_line=4))
        assert data["title"] == "File taxes"
        assert data["checkbox_state"] == "done"
        assert data["completed"] == "2026-01-15"

    def test_get_nonexistent(self, setup):
        mcp, service, root = setup
        data = json.loads(mcp.get("task_get")(file_path="today.md", start_line=3))
        assert "error" in data


# ---------------------------------------------------------------------------
# Mutation tools
# ---------------------------------------------------------------------------

class TestTaskAdd:
    def test_add_task(self, setup):
        mcp, service, root = setup
        data = json.loads(mcp.get("task_add")(
            file_path="today.md",
            title="Call dentist",
            tags="#health",
            priority="Medium",
            due="2026-01-20",
        ))
        assert data["title"] == "Call dentist"
        assert data["tags"] == ["#health"]
        assert data["priority"] == "Medium"
        assert data["created"] == "2026-01-08"
        assert data["file_path"] == "today.md"

        found = service.get_task("today.md", data["start_line"])
        assert found.due == "2026-01-20"

    def test_add_invalid_priority(self, setup):
        mcp, service, root = setup
        before = (root / "today.md").read_text(encoding="utf-8")
        data = json.loads(mcp.get("task_add")(file_path="today.md", title="X", priority="Urgent"))
        assert "error" in data
        assert (root / "today.md").read_text(encoding="utf-8") == before

    def test_add_outside_root(self, setup):
        mcp, service, root = setup
        data = json.loads(mcp.get("task_add")(file_path="../escape.md", title="X"))
        assert "error" in data


class TestTaskUpdate:
    def test_update(self, setup):
        mcp, service, root = setup
        data = json.loads(mcp.get("task_update")(
            file_path="today.md",
            start_line=2,
            title="Buy groceries",
            tags="#errand #home",
            status="in-progress",
        ))
        assert data["status"] == "in-progress"
        assert data["tags"] == ["#errand", "#home"]
        assert data["due"] is None

    def test_update_stale(self, setup):
        mcp, service, root = setup
        data = json.loads(mcp.get("task_update")(
            file_path="today.md",
            start_line=2,
            title="Buy groceries",
            expected_raw="- [ ] Buy bread",
        ))
        assert "error" in data


class TestTaskDelete:
    def test_delete(self, setup):
        mcp, service, root = setup
        data = json.loads(mcp.get("task_delete")(file_path="today.md", start_line=4))
        assert data["deleted"]["title"] == "File taxes"
        assert [t.title for t in service.list_tasks("today.md")] == [
            "Buy groceries",
            "Refactor parser",
        ]


class TestTaskToggle:
    def test_toggle_done(self, setup):
        mcp, service, root = setup
        data = json.loads(mcp.get("task_toggle")(
            file_path="today.md",
            start_line=2,
            expected_raw="- [ ] Buy groceries #errand",
        ))
        assert data["checkbox_state"] == "done"
        assert data["status"] == "done"
        assert data["completed"] == "2026-01-08"

    def test_toggle_reopen(self, setup):
        mcp, service, root = setup
        data = json.loads(mcp.get("task_toggle")(file_path="today.md", start_line=4))
        assert data["checkbox_state"] == "open"
        assert data["status"] == "todo"
        assert data["completed"] is None


class TestTaskDefaults:
    def test_set_then_get(self, setup):
        mcp, service, root = setup
        data = json.loads(mcp.get("task_defaults")(file_path="today.md", tags="#daily #home"))
        assert data == {"file_path": "today.md", "tags": ["#daily", "#home"]}

        data = json.loads(mcp.get("task_defaults")(file_path="today.md"))
        assert data["tags"] == ["#daily", "#home"]

    def test_clear(self, setup):
        mcp, service, root = setup
        mcp.get("task_defaults")(file_path="today.md", tags="#daily")
        data = json.loads(mcp.get("task_defaults")(file_path="today.md", tags=""))
        assert data["tags"] == []

    def test_defaults_applied_to_new_tasks(self, setup):
        mcp, service, root = setup
        mcp.get("task_defaults")(file_path="today.md", tags="#daily")
        data = json.loads(mcp.get("task_add")(file_path="today.md", title="Stretch"))
        assert data["tags"] == ["#daily"]
