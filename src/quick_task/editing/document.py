"""
Pure document-splicing helpers.

These sit on the caller side of the parser/serializer pair: they take the
full document text plus a freshly parsed TaskRecord and return the new full
text. Every helper works on whole blocks; a replaced block may have a
different number of lines, so any other TaskRecord parsed from the old text
is stale afterwards and the document must be re-parsed.

Line endings are preserved: a document using CRLF keeps CRLF.
"""

import re
from typing import List, Optional, Tuple

from quick_task.models.task import StaleTaskError, TaskRecord
from quick_task.parsers.task_parser import (
    RECOGNIZED_KEYS,
    is_metadata_line,
    parse_metadata_line,
    parse_tasks,
)
from quick_task.utils.formatting import BULLET_DIALECT, INLINE_DIALECT, render_field

_CHECKBOX = re.compile(r"^(\s*-\s*\[)[ xX-](\])")


def _split(content: str) -> Tuple[List[str], str]:
    newline = "\r\n" if "\r\n" in content else "\n"
    return content.split(newline), newline


def _block_lines(content: str, task: TaskRecord) -> List[str]:
    lines, _ = _split(content)
    return lines[task.start_line + 1: task.end_line + 1]


def check_range(content: str, task: TaskRecord) -> None:
    """
    Verify ``task`` still describes ``content``.

    Raises:
        StaleTaskError: if the task's range runs past the document or its
            checklist line no longer matches ``task.raw_line``
    """
    lines, _ = _split(content)
    if task.start_line < 0 or task.end_line >= len(lines) or task.end_line < task.start_line:
        raise StaleTaskError(
            f"Task range {task.start_line}-{task.end_line} is outside the document"
        )
    if lines[task.start_line] != task.raw_line:
        raise StaleTaskError(
            f"Line {task.start_line} changed since the task was parsed"
        )


def insert_block(content: str, block: str, at_line: Optional[int] = None) -> Tuple[str, int]:
    """
    Insert a serialized block.

    Args:
        content: Full document text
        block: Serialized task block (no trailing newline)
        at_line: Line index to insert before. None appends to the end of the
            document, separated by a blank line. An index that falls inside
            an existing task block is moved past that block. When the line
            at the insertion point is indented text, a blank line follows
            the block so that text stays out of it.

    Returns:
        (new document text, line index where the block starts)
    """
    lines, newline = _split(content)
    block_lines = block.split("\n")

    if not content.strip():
        return newline.join(block_lines) + newline, 0

    if at_line is None:
        while lines and not lines[-1].strip():
            lines.pop()
        start = len(lines) + 1
        return newline.join(lines + [""] + block_lines) + newline, start

    at = max(0, min(at_line, len(lines)))
    for task in parse_tasks(content):
        if task.start_line < at <= task.end_line:
            at = task.end_line + 1
            break
    if at < len(lines) and is_metadata_line(lines[at]):
        block_lines.append("")
    return newline.join(lines[:at] + block_lines + lines[at:]), at


def replace_block(content: str, task: TaskRecord, block: str) -> str:
    """Replace the ``task`` span with ``block``."""
    check_range(content, task)
    lines, newline = _split(content)
    new_lines = lines[: task.start_line] + block.split("\n") + lines[task.end_line + 1:]
    return newline.join(new_lines)


def delete_block(content: str, task: TaskRecord) -> str:
    """Remove the ``task`` span."""
    check_range(content, task)
    lines, newline = _split(content)
    return newline.join(lines[: task.start_line] + lines[task.end_line + 1:])


def unrecognized_lines(content: str, task: TaskRecord) -> List[str]:
    """Metadata lines of ``task`` whose key doesn't map to a record field."""
    kept = []
    for line in _block_lines(content, task):
        key, _ = parse_metadata_line(line)
        if key is not None and key not in RECOGNIZED_KEYS:
            kept.append(line)
    return kept


def toggle_block(
    content: str,
    task: TaskRecord,
    today: str,
    dialect: str = INLINE_DIALECT,
) -> str:
    """
    Flip the done state of ``task`` in place.

    Only the checkbox character and the ``completed``/``status`` lines are
    touched; the title and every other metadata line stay as written.
    Marking done stamps ``completed`` with ``today``; un-marking drops it
    and resets status to todo. Rewritten lines keep their own dialect, and
    missing ones are appended in ``dialect``.
    """
    check_range(content, task)
    lines, newline = _split(content)
    done = not task.is_done
    status = "done" if done else "todo"

    first = _CHECKBOX.sub(
        lambda m: f"{m.group(1)}{'x' if done else ' '}{m.group(2)}",
        lines[task.start_line],
        count=1,
    )

    body: List[str] = []
    seen = set()
    for line in _block_lines(content, task):
        key, _ = parse_metadata_line(line)
        if key in ("completed", "status"):
            seen.add(key)
            if key == "completed" and not done:
                continue
            own = BULLET_DIALECT if line.lstrip().startswith("-") else INLINE_DIALECT
            line = render_field(key, today if key == "completed" else status, own)
        body.append(line)

    if done and "completed" not in seen:
        body.append(render_field("completed", today, dialect))
    if "status" not in seen:
        body.append(render_field("status", status, dialect))

    new_lines = lines[: task.start_line] + [first] + body + lines[task.end_line + 1:]
    return newline.join(new_lines)
