"""
quick-task: checklist tasks embedded in plain-text documents.

Main API:
    from quick_task import parse_tasks, serialize_task, TaskFields

    tasks = parse_tasks(text)
    block = serialize_task(TaskFields(title="Buy milk", tags=["#home"]))
"""

from .models import (
    UNTITLED_TASK,
    InvalidTaskPayload,
    QuickTaskError,
    StaleTaskError,
    TaskFields,
    TaskNotFound,
    TaskRecord,
)
from .parsers import parse_tasks
from .serializers import TaskSerializer, serialize_task

__version__ = "0.1.0"

__all__ = [
    # Models
    "TaskRecord",
    "TaskFields",
    "UNTITLED_TASK",
    # Main API
    "parse_tasks",
    "serialize_task",
    "TaskSerializer",
    # Errors
    "QuickTaskError",
    "InvalidTaskPayload",
    "TaskNotFound",
    "StaleTaskError",
]
