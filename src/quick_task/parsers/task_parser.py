"""
Parser for checklist task blocks embedded in markdown documents.

Main API:
    parse_tasks(content)  → List[TaskRecord]

A task block is a checklist line followed by zero or more indented metadata
lines:

    - [ ] Title #tag1 #tag2 🔺
      created:: 2026-01-08
      due:: 2026-01-10
      - Description: free text
      - more free text

Both metadata dialects (``key:: value`` and ``- Key: value``) are accepted
regardless of which one the serializer is configured to write.

The parser is a single forward pass. It never raises on malformed input:
lines that don't look like tasks are skipped, and the first line that doesn't
look like metadata ends the current block.
"""

import re
from typing import Dict, List, Optional, Tuple

from quick_task.models.task import UNTITLED_TASK, TaskRecord
from quick_task.utils.formatting import (
    KEY_PREFIX,
    PRIORITY_GLYPH,
    PRIORITY_MARKER,
    PRIORITY_TO_EMOJI,
    TAG,
    TASK_LINE,
    TRAILING_STATUS,
    normalize_priority,
    normalize_status,
)

_LINE_BREAK = re.compile(r"\r?\n")
_PRIORITY_MARKERS: Dict[str, "re.Pattern[str]"] = {
    name: re.compile(rf"\b(?:priority|p)\s*::?\s*{name}\b", re.IGNORECASE)
    for name in PRIORITY_TO_EMOJI
}

_IN_PROGRESS = re.compile(r"in[-\s]*progress", re.IGNORECASE)
_CANCEL = re.compile(r"cancel", re.IGNORECASE)

_INLINE_FIELD = re.compile(r"^\s+([A-Za-z0-9_-]+)::\s*(.*)$")

_CHECKBOX_STATE = {
    "x": "done",
    "-": "cancelled",
}

# Metadata keys that feed record fields; anything else is dropped.
RECOGNIZED_KEYS = frozenset(
    {"created", "due", "completed", "priority", "status", "description"}
)


# ---------------------------------------------------------------------------
# Checklist line
# ---------------------------------------------------------------------------

def parse_checkbox_state(char: str) -> str:
    return _CHECKBOX_STATE.get(char.lower(), "open")


def parse_task_line(line: str) -> Optional[Tuple[str, str]]:
    """Return (checkbox char, trimmed remainder) or None if line is not a task."""
    m = TASK_LINE.match(line)
    if not m:
        return None
    return m.group(1), m.group(2).strip()


def extract_tags(text: str) -> List[str]:
    """Collect ``#tag`` tokens in first-seen order, without duplicates."""
    seen: Dict[str, None] = {}
    for m in TAG.finditer(text):
        seen.setdefault(m.group(), None)
    return list(seen)


def detect_priority(text: str) -> Optional[str]:
    """
    Find the inline priority marker in a checklist remainder.

    Checked High → Medium → Low; each level matches either its reserved glyph
    or a textual ``priority: X`` / ``P:X`` marker. At most one priority is
    returned.
    """
    for name, glyph in PRIORITY_TO_EMOJI.items():
        if glyph in text or _PRIORITY_MARKERS[name].search(text):
            return name
    return None


def derive_status(checkbox: str, text: str) -> str:
    """
    Derive status from the checkbox char, then let keywords override it.

    Precedence, lowest to highest: checkbox, "cancel", "in progress".
    """
    status = "done" if checkbox.lower() == "x" else "todo"
    if _CANCEL.search(text):
        status = "cancelled"
    if _IN_PROGRESS.search(text):
        status = "in-progress"
    return status


def clean_title(text: str) -> str:
    """
    Strip tags, priority markers and trailing status keywords from ``text``.

    Repeats until nothing more is stripped, so the result never contains a
    marker of its own. Falls back to UNTITLED_TASK when nothing is left.
    """
    title = text
    previous = None
    while title != previous:
        previous = title
        title = TAG.sub(" ", title)
        title = PRIORITY_GLYPH.sub(" ", title)
        title = PRIORITY_MARKER.sub(" ", title)
        title = TRAILING_STATUS.sub("", " ".join(title.split()))

    return title.strip() or UNTITLED_TASK


# ---------------------------------------------------------------------------
# Metadata block
# ---------------------------------------------------------------------------

def is_metadata_line(line: str) -> bool:
    """
    True if ``line`` continues the current task block.

    Metadata lines are non-blank and indented by at least two spaces (a tab
    counts as four). An indented checklist line is a task of its own.
    """
    if not line.strip():
        return False
    indent = line[: len(line) - len(line.lstrip())]
    if len(indent.replace("\t", "    ")) < 2:
        return False
    return TASK_LINE.match(line) is None


def parse_metadata_line(line: str) -> Tuple[Optional[str], str]:
    """
    Split a metadata line into (key, value).

    Returns (None, text) for a description line without a key prefix, and
    (None, "") for an empty bullet.
    """
    m = _INLINE_FIELD.match(line)
    if m:
        return m.group(1).lower(), m.group(2).strip()

    body = line.strip()
    if body == "-":
        return None, ""
    if body.startswith("- "):
        body = body[2:].strip()

    m = KEY_PREFIX.match(body)
    if m:
        return m.group(1).lower(), m.group(2).strip()
    return None, body


def _consume_metadata(lines: List[str], start: int) -> Tuple[Dict[str, str], int]:
    """
    Read metadata lines beginning at ``start``.

    Returns:
        (metadata map keyed by lower-case field name, index of the first
        line that is not part of the block)
    """
    meta: Dict[str, str] = {}
    j = start
    while j < len(lines) and is_metadata_line(lines[j]):
        key, value = parse_metadata_line(lines[j])
        j += 1
        if key is None:
            if value:
                existing = meta.get("description")
                meta["description"] = f"{existing}\n{value}" if existing else value
        elif key in RECOGNIZED_KEYS:
            meta[key] = value
    return meta, j


# ---------------------------------------------------------------------------
# Main parse API
# ---------------------------------------------------------------------------

def parse_tasks(content: str) -> List[TaskRecord]:
    """
    Parse every task block in ``content``.

    Args:
        content: Full document text

    Returns:
        TaskRecords in document order, with 0-based inclusive line ranges
    """
    lines = _LINE_BREAK.split(content)
    tasks: List[TaskRecord] = []

    i = 0
    while i < len(lines):
        line = lines[i]
        parsed = parse_task_line(line)
        if parsed is None:
            i += 1
            continue

        checkbox, rest = parsed
        meta, next_index = _consume_metadata(lines, i + 1)

        tasks.append(
            TaskRecord(
                start_line=i,
                end_line=next_index - 1,
                checkbox_state=parse_checkbox_state(checkbox),
                title=clean_title(rest),
                tags=extract_tags(rest),
                priority=normalize_priority(meta.get("priority")) or detect_priority(rest),
                status=normalize_status(meta.get("status")) or derive_status(checkbox, rest),
                description=meta.get("description") or None,
                created=meta.get("created") or None,
                due=meta.get("due") or None,
                completed=meta.get("completed") or None,
                raw_line=line,
            )
        )
        i = next_index

    return tasks
