"""
Task tool handlers.

Core logic lives in handle_* functions (return dicts, shared by MCP tools
and the REST API). MCP wrappers in register_task_tools() serialize to JSON
strings and report failures as {"error": ...}.
"""

import json
import logging
from typing import Iterable, List, Optional, Union

from mcp.server.fastmcp import FastMCP

from quick_task.models.task import QuickTaskError, TaskFields, TaskRecord

log = logging.getLogger(__name__)

TagsArg = Union[str, Iterable[str], None]


def _task_to_dict(task: TaskRecord) -> dict:
    """Serialize a TaskRecord to a JSON-serializable dict."""
    return task.to_dict()


def split_tags(tags: TagsArg) -> List[str]:
    """Accept tags as a space/comma separated string or a list."""
    if tags is None:
        return []
    if isinstance(tags, str):
        return [t for t in tags.replace(",", " ").split() if t]
    return [t.strip() for t in tags if t and t.strip()]


def _fields(
    title: str,
    description: Optional[str],
    due: Optional[str],
    tags: TagsArg,
    priority: Optional[str],
    status: Optional[str],
    created: Optional[str] = None,
) -> TaskFields:
    return TaskFields(
        title=title,
        tags=split_tags(tags),
        priority=priority or None,
        status=status or None,
        description=description or None,
        created=created or None,
        due=due or None,
    )


# ---------------------------------------------------------------------------
# Handler functions (return dicts, shared by MCP tools and REST API)
# ---------------------------------------------------------------------------


def handle_task_list(
    service,
    *,
    file_path: str,
    status: Optional[str] = None,
    tag: Optional[str] = None,
) -> List[dict]:
    tasks = service.list_tasks(file_path)
    if status:
        wanted = {s.strip() for s in status.split(",") if s.strip()}
        tasks = [t for t in tasks if t.status in wanted]
    if tag:
        wanted_tag = tag if tag.startswith("#") else f"#{tag}"
        tasks = [t for t in tasks if wanted_tag in t.tags]
    return [_task_to_dict(t) for t in tasks]


def handle_task_get(service, *, file_path: str, start_line: int) -> dict:
    return _task_to_dict(service.get_task(file_path, start_line))


def handle_task_add(
    service,
    *,
    file_path: str,
    title: str,
    description: Optional[str] = None,
    due: Optional[str] = None,
    tags: TagsArg = None,
    priority: Optional[str] = None,
    status: Optional[str] = None,
    at_line: Optional[int] = None,
) -> dict:
    fields = _fields(title, description, due, tags, priority, status)
    record = service.add_task(file_path, fields, at_line=at_line)
    result = _task_to_dict(record)
    result["file_path"] = file_path
    return result


def handle_task_update(
    service,
    *,
    file_path: str,
    start_line: int,
    title: str,
    description: Optional[str] = None,
    due: Optional[str] = None,
    tags: TagsArg = None,
    priority: Optional[str] = None,
    status: Optional[str] = None,
    created: Optional[str] = None,
    expected_raw: Optional[str] = None,
) -> dict:
    fields = _fields(title, description, due, tags, priority, status, created)
    record = service.update_task(file_path, start_line, fields, expected_raw=expected_raw)
    return _task_to_dict(record)


def handle_task_delete(
    service,
    *,
    file_path: str,
    start_line: int,
    expected_raw: Optional[str] = None,
) -> dict:
    record = service.delete_task(file_path, start_line, expected_raw=expected_raw)
    return {"deleted": _task_to_dict(record)}


def handle_task_toggle(
    service,
    *,
    file_path: str,
    start_line: int,
    expected_raw: Optional[str] = None,
) -> dict:
    return _task_to_dict(service.toggle_task(file_path, start_line, expected_raw=expected_raw))


def handle_defaults_get(service, *, file_path: str) -> dict:
    return {"file_path": file_path, "tags": service.get_default_tags(file_path)}


def handle_defaults_set(service, *, file_path: str, tags: TagsArg = None) -> dict:
    return {"file_path": file_path, "tags": service.set_default_tags(file_path, split_tags(tags))}


def _run(fn, **kwargs) -> str:
    """Call a handler and encode the result (or the failure) as JSON."""
    try:
        return json.dumps(fn(**kwargs), indent=2, ensure_ascii=False)
    except (QuickTaskError, OSError) as e:
        log.warning("%s failed: %s", fn.__name__, e)
        return json.dumps({"error": str(e)})


# ---------------------------------------------------------------------------
# MCP tool registration (thin wrappers)
# ---------------------------------------------------------------------------


def register_task_tools(mcp: FastMCP, service) -> None:
    """Register all task-related MCP tools onto the FastMCP instance."""

    @mcp.tool()
    def task_list(file_path: str, status: Optional[str] = None, tag: Optional[str] = None) -> str:
        """
        List the checklist tasks in a document.

        Args:
            file_path: Document path (relative to the configured root, if any)
            status: Comma-separated statuses to include
                    ("todo", "in-progress", "done", "cancelled"). Omit for all.
            tag: Only tasks carrying this tag (with or without the leading #)

        Returns:
            JSON array of task objects. Use start_line and raw_line to refer
            to a task in later edits.
        """
        return _run(handle_task_list, service=service, file_path=file_path, status=status, tag=tag)

    @mcp.tool()
    def task_get(file_path: str, start_line: int) -> str:
        """
        Get the task whose checklist line is at start_line.

        Args:
            file_path: Document path
            start_line: 0-based line index from task_list

        Returns:
            JSON task object, or error message
        """
        return _run(handle_task_get, service=service, file_path=file_path, start_line=start_line)

    @mcp.tool()
    def task_add(
        file_path: str,
        title: str,
        description: Optional[str] = None,
        due: Optional[str] = None,
        tags: Optional[str] = None,
        priority: Optional[str] = None,
        status: Optional[str] = None,
        at_line: Optional[int] = None,
    ) -> str:
        """
        Add a task to a document.

        The task gets today's date as 'created' and the document's default
        tags. Without at_line it is appended to the end of the document.

        Args:
            file_path: Document path (created if missing)
            title: Task title (required)
            description: Free text; may span several lines
            due: Due date, YYYY-MM-DD
            tags: Space-separated tags, e.g. "#home #errand"
            priority: "Low", "Medium" or "High"
            status: "todo", "in-progress", "done" or "cancelled"
            at_line: 0-based line index to insert before

        Returns:
            JSON object with the new task
        """
        return _run(
            handle_task_add,
            service=service,
            file_path=file_path,
            title=title,
            description=description,
            due=due,
            tags=tags,
            priority=priority,
            status=status,
            at_line=at_line,
        )

    @mcp.tool()
    def task_update(
        file_path: str,
        start_line: int,
        title: str,
        description: Optional[str] = None,
        due: Optional[str] = None,
        tags: Optional[str] = None,
        priority: Optional[str] = None,
        status: Optional[str] = None,
        expected_raw: Optional[str] = None,
    ) -> str:
        """
        Replace a task with new content.

        The whole block is rewritten from the given fields; fields you omit
        are removed (except 'created', which is kept). Re-list tasks
        afterwards: other tasks' line numbers may have shifted.

        Args:
            file_path: Document path
            start_line: 0-based line index of the task's checklist line
            title: New title (required)
            description: New description
            due: New due date
            tags: Space-separated tags
            priority: "Low", "Medium" or "High"
            status: "todo", "in-progress", "done" or "cancelled"
            expected_raw: raw_line from task_list; rejects the edit if the line changed

        Returns:
            Updated task JSON or error message
        """
        return _run(
            handle_task_update,
            service=service,
            file_path=file_path,
            start_line=start_line,
            title=title,
            description=description,
            due=due,
            tags=tags,
            priority=priority,
            status=status,
            expected_raw=expected_raw,
        )

    @mcp.tool()
    def task_delete(file_path: str, start_line: int, expected_raw: Optional[str] = None) -> str:
        """
        Delete a task block (checklist line and its metadata lines).

        Args:
            file_path: Document path
            start_line: 0-based line index of the task's checklist line
            expected_raw: raw_line from task_list; rejects the edit if the line changed

        Returns:
            JSON with the deleted task, or error message
        """
        return _run(
            handle_task_delete,
            service=service,
            file_path=file_path,
            start_line=start_line,
            expected_raw=expected_raw,
        )

    @mcp.tool()
    def task_toggle(file_path: str, start_line: int, expected_raw: Optional[str] = None) -> str:
        """
        Toggle a task between done and not done.

        Marking done sets status "done" and a 'completed' date; un-marking
        resets status to "todo".

        Args:
            file_path: Document path
            start_line: 0-based line index of the task's checklist line
            expected_raw: raw_line from task_list; rejects the edit if the line changed

        Returns:
            Updated task JSON or error message
        """
        return _run(
            handle_task_toggle,
            service=service,
            file_path=file_path,
            start_line=start_line,
            expected_raw=expected_raw,
        )

    @mcp.tool()
    def task_defaults(file_path: str, tags: Optional[str] = None) -> str:
        """
        Show or set the default tags added to new tasks in a document.

        Args:
            file_path: Document path
            tags: Space-separated tags to store; omit to just read them,
                  pass "" to clear

        Returns:
            JSON with the document's default tags
        """
        if tags is None:
            return _run(handle_defaults_get, service=service, file_path=file_path)
        return _run(handle_defaults_set, service=service, file_path=file_path, tags=tags)
