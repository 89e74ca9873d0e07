from .task import (
    CHECKBOX_STATES,
    PRIORITIES,
    STATUSES,
    UNTITLED_TASK,
    CheckboxState,
    InvalidTaskPayload,
    Priority,
    QuickTaskError,
    StaleTaskError,
    Status,
    TaskFields,
    TaskNotFound,
    TaskRecord,
)

__all__ = [
    "CHECKBOX_STATES",
    "PRIORITIES",
    "STATUSES",
    "UNTITLED_TASK",
    "CheckboxState",
    "InvalidTaskPayload",
    "Priority",
    "QuickTaskError",
    "StaleTaskError",
    "Status",
    "TaskFields",
    "TaskNotFound",
    "TaskRecord",
]
