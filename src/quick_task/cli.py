"""
quick-task - command line editing surface for checklist tasks

Usage:
    quick-task list <file> [--status S] [--tag T] [--json]
    quick-task show <file> <line>
    quick-task add <file> <title> [options]
    quick-task edit <file> <line> [options]
    quick-task delete <file> <line>
    quick-task toggle <file> <line>
    quick-task defaults <file> [tags...] [--clear]

Lines are the 0-based checklist line numbers shown by `list`.

Examples:
    quick-task add notes/today.md "Buy milk" --tag home --tag errand --due 2026-01-10
    quick-task list notes/today.md --status todo,in-progress
    quick-task edit notes/today.md 4 --priority High --description "ask for oat"
    quick-task toggle notes/today.md 4
    quick-task defaults notes/today.md "#home" "#daily"
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from quick_task.models.task import PRIORITIES, STATUSES, QuickTaskError, TaskFields, TaskRecord
from quick_task.service import TaskService
from quick_task.settings import Config, SettingsStore
from quick_task.store.document_store import DocumentStore
from quick_task.utils.formatting import DIALECTS, PRIORITY_TO_EMOJI

log = logging.getLogger(__name__)


# --- helpers ---

def format_task(task: TaskRecord) -> str:
    """One-line summary: line number, checkbox, title, tags, priority, status."""
    checkbox = "[x]" if task.is_done else "[-]" if task.checkbox_state == "cancelled" else "[ ]"
    parts = [f"{task.start_line:>4}  {checkbox} {task.title}"]
    if task.tags:
        parts.append(" ".join(task.tags))
    if task.priority:
        parts.append(PRIORITY_TO_EMOJI[task.priority])
    extras = [task.status]
    if task.due:
        extras.append(f"due {task.due}")
    parts.append(f"({', '.join(extras)})")
    return " ".join(parts)


def _print_details(task: TaskRecord) -> None:
    print(format_task(task).strip())
    print(f"  Lines: {task.start_line}-{task.end_line}")
    for label, value in (
        ("Priority", task.priority),
        ("Created", task.created),
        ("Due", task.due),
        ("Completed", task.completed),
    ):
        if value:
            print(f"  {label}: {value}")
    if task.description:
        print("  Description:")
        for line in task.description.splitlines():
            print(f"    {line}")


def _tags(values: Optional[List[str]]) -> List[str]:
    tags: List[str] = []
    for value in values or []:
        tags.extend(t for t in value.replace(",", " ").split() if t)
    return tags


# --- commands ---

def list_cmd(service: TaskService, args) -> int:
    tasks = service.list_tasks(args.file)
    if args.status:
        wanted = {s.strip() for s in args.status.split(",") if s.strip()}
        tasks = [t for t in tasks if t.status in wanted]
    if args.tag:
        tag = args.tag if args.tag.startswith("#") else f"#{args.tag}"
        tasks = [t for t in tasks if tag in t.tags]

    if args.json:
        print(json.dumps([t.to_dict() for t in tasks], indent=2, ensure_ascii=False))
        return 0

    if not tasks:
        print("No tasks found.")
        return 0
    for task in tasks:
        print(format_task(task))
    print(f"{len(tasks)} task(s) found.")
    return 0


def show_cmd(service: TaskService, args) -> int:
    _print_details(service.get_task(args.file, args.line))
    return 0


def add_cmd(service: TaskService, args) -> int:
    fields = TaskFields(
        title=args.title,
        tags=_tags(args.tag),
        priority=args.priority,
        status=args.status,
        description=args.description,
        due=args.due,
    )
    record = service.add_task(args.file, fields, at_line=args.line)
    print(f"Added: {record.title}")
    print(f"  Line: {record.start_line}")
    print(f"  File: {args.file}")
    if record.due:
        print(f"  Due: {record.due}")
    return 0


def edit_cmd(service: TaskService, args) -> int:
    """Change only the fields given on the command line."""
    task = service.get_task(args.file, args.line)
    fields = task.to_fields()

    changes = {}
    if args.title is not None:
        changes["title"] = args.title
    if args.description is not None:
        changes["description"] = args.description or None
    if args.due is not None:
        changes["due"] = args.due or None
    if args.priority is not None:
        changes["priority"] = args.priority or None
    if args.status is not None:
        changes["status"] = args.status
        changes["checkbox"] = "done" if args.status == "done" else "open"
    if args.tag is not None:
        changes["tags"] = _tags(args.tag)

    if not changes:
        print("No changes made.")
        return 0

    record = service.update_task(
        args.file, args.line, fields.replace(**changes), expected_raw=task.raw_line
    )
    print(f"Updated: {record.title} (line {record.start_line})")
    return 0


def delete_cmd(service: TaskService, args) -> int:
    record = service.delete_task(args.file, args.line)
    print(f"Deleted: {record.title}")
    return 0


def toggle_cmd(service: TaskService, args) -> int:
    record = service.toggle_task(args.file, args.line)
    print(f"{'Done' if record.is_done else 'Reopened'}: {record.title}")
    if record.completed:
        print(f"  Completed: {record.completed}")
    return 0


def defaults_cmd(service: TaskService, args) -> int:
    if args.clear:
        service.set_default_tags(args.file, [])
        print(f"Cleared default tags for {args.file}")
        return 0
    if args.tags:
        tags = service.set_default_tags(args.file, _tags(args.tags))
    else:
        tags = service.get_default_tags(args.file)
    print(" ".join(tags) if tags else "No default tags.")
    return 0


# --- main ---

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quick-task",
        description="Manage checklist tasks embedded in markdown documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--root", help="Document root (default: $QUICK_TASK_ROOT)")
    parser.add_argument("--settings", help="Settings file (default: $QUICK_TASK_SETTINGS)")
    parser.add_argument("--dialect", choices=DIALECTS,
                        help="Metadata dialect to write (default: $QUICK_TASK_DIALECT or inline)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # --- list ---
    list_p = subparsers.add_parser("list", help="List tasks in a document")
    list_p.add_argument("file", help="Document path")
    list_p.add_argument("--status", help="Comma-separated statuses to include")
    list_p.add_argument("--tag", help="Only tasks with this tag")
    list_p.add_argument("--json", action="store_true", help="Print JSON")
    list_p.set_defaults(func=list_cmd)

    # --- show ---
    show_p = subparsers.add_parser("show", help="Show one task")
    show_p.add_argument("file", help="Document path")
    show_p.add_argument("line", type=int, help="Checklist line number")
    show_p.set_defaults(func=show_cmd)

    # --- add ---
    add_p = subparsers.add_parser("add", help="Add a task")
    add_p.add_argument("file", help="Document path (created if missing)")
    add_p.add_argument("title", help="Task title")
    add_p.add_argument("--description", help="Description")
    add_p.add_argument("--due", help="Due date (YYYY-MM-DD)")
    add_p.add_argument("--tag", action="append", help="Tag (repeatable)")
    add_p.add_argument("--priority", choices=PRIORITIES, help="Priority")
    add_p.add_argument("--status", choices=STATUSES, help="Status")
    add_p.add_argument("--line", type=int, help="Insert before this line (default: append)")
    add_p.set_defaults(func=add_cmd)

    # --- edit ---
    edit_p = subparsers.add_parser("edit", help="Edit a task")
    edit_p.add_argument("file", help="Document path")
    edit_p.add_argument("line", type=int, help="Checklist line number")
    edit_p.add_argument("--title", help="New title")
    edit_p.add_argument("--description", help="New description (empty string to clear)")
    edit_p.add_argument("--due", help="New due date (empty string to clear)")
    edit_p.add_argument("--tag", action="append", help="Replace tags (repeatable)")
    edit_p.add_argument("--priority", choices=PRIORITIES + ("",), help="New priority")
    edit_p.add_argument("--status", choices=STATUSES, help="New status")
    edit_p.set_defaults(func=edit_cmd)

    # --- delete / toggle ---
    delete_p = subparsers.add_parser("delete", help="Delete a task")
    delete_p.add_argument("file", help="Document path")
    delete_p.add_argument("line", type=int, help="Checklist line number")
    delete_p.set_defaults(func=delete_cmd)

    toggle_p = subparsers.add_parser("toggle", help="Toggle a task done/not done")
    toggle_p.add_argument("file", help="Document path")
    toggle_p.add_argument("line", type=int, help="Checklist line number")
    toggle_p.set_defaults(func=toggle_cmd)

    # --- defaults ---
    defaults_p = subparsers.add_parser("defaults", help="Show or set default tags for a document")
    defaults_p.add_argument("file", help="Document path")
    defaults_p.add_argument("tags", nargs="*", help="Tags to store")
    defaults_p.add_argument("--clear", action="store_true", help="Remove default tags")
    defaults_p.set_defaults(func=defaults_cmd)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = Config.from_env()
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    root = Path(args.root).expanduser() if args.root else config.root
    if root is not None and not root.is_dir():
        print(f"Error: Document root not found: {root}")
        return 1
    settings_file = Path(args.settings).expanduser() if args.settings else config.settings_file

    service = TaskService(
        DocumentStore(root),
        SettingsStore(settings_file),
        dialect=args.dialect or config.dialect,
    )

    try:
        return args.func(service, args)
    except FileNotFoundError as e:
        print(f"Error: Document not found: {e.filename}")
        return 1
    except (QuickTaskError, OSError) as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
