"""
Core task data models.

TaskRecord is what the parser produces: a snapshot of one task block together
with the line range it occupied in the text it was parsed from. TaskFields is
the edit payload the serializer consumes. Only the title is required there;
everything else is optional and omitted from the rendered block when absent.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, List, Literal, Mapping, Optional

Priority = Literal["Low", "Medium", "High"]
Status = Literal["todo", "in-progress", "done", "cancelled"]
CheckboxState = Literal["open", "done", "cancelled"]

PRIORITIES = ("Low", "Medium", "High")
STATUSES = ("todo", "in-progress", "done", "cancelled")
CHECKBOX_STATES = ("open", "done", "cancelled")

# Title used when a checklist line carries nothing but tags and markers.
UNTITLED_TASK = "<untitled task>"


class QuickTaskError(Exception):
    """Base class for task-level errors."""


class InvalidTaskPayload(QuickTaskError, ValueError):
    """Raised when an edit payload cannot be rendered into a task block."""


class TaskNotFound(QuickTaskError, LookupError):
    """Raised when no task starts at the requested line."""


class StaleTaskError(QuickTaskError):
    """Raised when the document changed under a previously parsed task."""


@dataclass
class TaskRecord:
    """
    A single task block parsed from a document.

    start_line/end_line are 0-based and inclusive. They are only valid
    against the exact text the record was parsed from; any structural edit
    elsewhere in the document requires a re-parse.
    """

    start_line: int
    end_line: int
    checkbox_state: CheckboxState
    title: str
    tags: List[str] = field(default_factory=list)
    priority: Optional[Priority] = None
    status: Status = "todo"
    description: Optional[str] = None
    created: Optional[str] = None
    due: Optional[str] = None
    completed: Optional[str] = None
    raw_line: str = ""

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1

    @property
    def is_done(self) -> bool:
        """True if the checkbox is ticked."""
        return self.checkbox_state == "done"

    def to_fields(self) -> TaskFields:
        """Return an edit payload carrying every field of this record."""
        return TaskFields(
            title=self.title,
            checkbox=self.checkbox_state,
            tags=list(self.tags),
            priority=self.priority,
            status=self.status,
            description=self.description,
            created=self.created,
            due=self.due,
            completed=self.completed,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-serializable dict."""
        return asdict(self)


@dataclass
class TaskFields:
    """Payload for rendering a task block. Only ``title`` is required."""

    title: str
    checkbox: Optional[CheckboxState] = None
    tags: List[str] = field(default_factory=list)
    priority: Optional[Priority] = None
    status: Optional[Status] = None
    description: Optional[str] = None
    created: Optional[str] = None
    due: Optional[str] = None
    completed: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TaskFields:
        """
        Build a payload from a plain mapping.

        Raises:
            InvalidTaskPayload: on unknown keys or a missing title
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidTaskPayload(f"Unknown task field(s): {', '.join(unknown)}")
        if "title" not in data:
            raise InvalidTaskPayload("Task title is required")
        values = dict(data)
        values["tags"] = list(values.get("tags") or [])
        return cls(**values)

    def replace(self, **changes: Any) -> TaskFields:
        """Return a copy with the given fields changed."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
