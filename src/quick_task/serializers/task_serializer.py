"""
Serializer for checklist task blocks.

Main API:
    serialize_task(payload, dialect="inline")  → str
    TaskSerializer(dialect).serialize(payload)  → str

The serializer always regenerates a whole block; callers replace the
[start_line, end_line] span of a previously parsed task with the result.
The output has no trailing newline.

Rendering rules:
- Checklist line: ``- [ ] Title #tag1 #tag2 🔺``. Checkbox glyphs are binary:
  ``[x]`` for done, ``[ ]`` for everything else.
- Status is never written as a tag on the checklist line. It is always
  written as a metadata line (derived from the checkbox when the payload has
  none), so the parser's metadata override pins it regardless of keywords in
  the title.
- Metadata lines follow in utils.formatting.METADATA_KEYS order, rendered
  in the serializer's dialect. Extra description lines are written as
  plain bullets, which both dialects read back as description text.

Payload text the parser would read back as something else is rejected with
InvalidTaskPayload rather than written: tags, priority markers or trailing
status words inside the title, and description lines that look like a
``key: value`` field or a checklist line.
"""

from typing import Any, List, Mapping, Optional, Union

from quick_task.models.task import (
    CHECKBOX_STATES,
    UNTITLED_TASK,
    InvalidTaskPayload,
    TaskFields,
    TaskRecord,
)
from quick_task.utils.formatting import (
    DIALECTS,
    INLINE_DIALECT,
    KEY_PREFIX,
    METADATA_KEYS,
    PRIORITY_GLYPH,
    PRIORITY_MARKER,
    PRIORITY_TO_EMOJI,
    TAG,
    TASK_LINE,
    TRAILING_STATUS,
    normalize_priority,
    normalize_status,
    render_continuation,
    render_field,
)

Payload = Union[TaskFields, TaskRecord, Mapping[str, Any]]


def _coerce(payload: Payload) -> TaskFields:
    if isinstance(payload, TaskFields):
        return payload
    if isinstance(payload, TaskRecord):
        return payload.to_fields()
    if isinstance(payload, Mapping):
        return TaskFields.from_mapping(payload)
    raise InvalidTaskPayload(f"Unsupported task payload type: {type(payload).__name__}")


def _single_line(name: str, value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidTaskPayload(f"Task {name} must be a string")
    if "\n" in value or "\r" in value:
        raise InvalidTaskPayload(f"Task {name} must be a single line")
    return value.strip() or None


def _normalize_title(title: Any) -> str:
    """
    Return the title text to write after the checkbox.

    Whitespace runs collapse to one space. UNTITLED_TASK renders as no text,
    which the parser reads back as UNTITLED_TASK.
    """
    if not isinstance(title, str) or not title.strip():
        raise InvalidTaskPayload("Task title is required")
    title = " ".join(_single_line("title", title).split())
    if title == UNTITLED_TASK:
        return ""
    if TAG.search(title):
        raise InvalidTaskPayload(f"Task title {title!r} contains a tag; pass tags separately")
    if PRIORITY_GLYPH.search(title) or PRIORITY_MARKER.search(title):
        raise InvalidTaskPayload(
            f"Task title {title!r} contains a priority marker; pass priority separately"
        )
    if TRAILING_STATUS.search(title):
        raise InvalidTaskPayload(
            f"Task title {title!r} ends with a status keyword; pass status separately"
        )
    return title


def _normalize_tags(tags: Optional[List[str]]) -> List[str]:
    """Prefix bare tags with '#', drop duplicates, reject tags that won't re-parse."""
    result: List[str] = []
    for raw in tags or []:
        if not isinstance(raw, str):
            raise InvalidTaskPayload(f"Invalid tag: {raw!r}")
        tag = raw.strip()
        if not tag:
            continue
        if not tag.startswith("#"):
            tag = f"#{tag}"
        if not TAG.fullmatch(tag):
            raise InvalidTaskPayload(f"Invalid tag: {raw!r}")
        if tag not in result:
            result.append(tag)
    return result


def _description_lines(description: Optional[str]) -> List[str]:
    """
    Split a description into the lines to write.

    The first line becomes the description field; the rest become plain
    bullets, which must not look like a field or a checklist line.
    """
    if description is None:
        return []
    if not isinstance(description, str):
        raise InvalidTaskPayload("Task description must be a string")
    lines = [line.strip() for line in description.strip().splitlines()]
    if any(not line for line in lines):
        raise InvalidTaskPayload("Task description must not contain blank lines")
    for line in lines[1:]:
        if KEY_PREFIX.match(line) or TASK_LINE.match(render_continuation(line)):
            raise InvalidTaskPayload(
                f"Description line {line!r} would be read back as a field or a task; "
                "start it with '- ' to keep it as text"
            )
    return lines


class TaskSerializer:
    """
    Renders task payloads in a fixed metadata dialect.

    The dialect is chosen once at construction; the parser reads both.
    """

    def __init__(self, dialect: str = INLINE_DIALECT) -> None:
        if dialect not in DIALECTS:
            raise ValueError(f"Unknown metadata dialect '{dialect}'; expected one of {DIALECTS}")
        self.dialect = dialect

    def serialize_lines(self, payload: Payload) -> List[str]:
        """Render ``payload`` as a list of lines (checklist line first)."""
        fields = _coerce(payload)

        title = _normalize_title(fields.title)
        tags = _normalize_tags(fields.tags)

        priority = None
        if fields.priority:
            priority = normalize_priority(fields.priority)
            if priority is None:
                raise InvalidTaskPayload(f"Unknown priority '{fields.priority}'")

        status = None
        if fields.status:
            status = normalize_status(fields.status)
            if status is None:
                raise InvalidTaskPayload(f"Unknown status '{fields.status}'")

        if fields.checkbox is not None and fields.checkbox not in CHECKBOX_STATES:
            raise InvalidTaskPayload(f"Unknown checkbox state '{fields.checkbox}'")
        if fields.checkbox is None:
            checked = status == "done"
        else:
            checked = fields.checkbox == "done"
        checkbox = "[x]" if checked else "[ ]"

        if status is None:
            if checked:
                status = "done"
            elif fields.checkbox == "cancelled":
                status = "cancelled"
            else:
                status = "todo"

        first_line = " ".join(part for part in (f"- {checkbox}", title, *tags) if part)
        if priority:
            first_line += f" {PRIORITY_TO_EMOJI[priority]}"

        description = _description_lines(fields.description)
        values = {
            "description": description[0] if description else None,
            "created": _single_line("created", fields.created),
            "due": _single_line("due", fields.due),
            "completed": _single_line("completed", fields.completed),
            "priority": priority,
            "status": status,
        }

        lines = [first_line]
        for key in METADATA_KEYS:
            value = values[key]
            if not value:
                continue
            lines.append(render_field(key, value, self.dialect))
            if key == "description":
                lines.extend(render_continuation(extra) for extra in description[1:])
        return lines

    def serialize(self, payload: Payload) -> str:
        """Render ``payload`` as a newline-joined block."""
        return "\n".join(self.serialize_lines(payload))


def serialize_task(payload: Payload, dialect: str = INLINE_DIALECT) -> str:
    """
    Render a task payload as a multi-line block.

    Args:
        payload: TaskFields, TaskRecord, or a mapping of TaskFields names
        dialect: "inline" (``key:: value``) or "bullet" (``- Key: value``)

    Returns:
        The block text, without a trailing newline

    Raises:
        InvalidTaskPayload: if the title is blank, a field can't be rendered,
            or some text would not read back as the same field
    """
    return TaskSerializer(dialect).serialize(payload)
