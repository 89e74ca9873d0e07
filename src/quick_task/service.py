"""
Task service: the editing surface behind the CLI, MCP tools and REST API.

Each mutation is one read-modify-write through DocumentStore.edit:
parse the current text, locate the target task by its start line, splice
in the new block (toggle edits the old one in place), write, and re-parse
to hand back the fresh record. Line ranges a caller obtained earlier are
only trusted after the target line is re-located in the current text.
When the caller also passes ``expected_raw`` (the raw_line it saw), a
mismatch raises StaleTaskError instead of editing a different task that
happens to start on that line.
"""

import logging
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Union

from quick_task.editing.document import (
    delete_block,
    insert_block,
    replace_block,
    toggle_block,
    unrecognized_lines,
)
from quick_task.models.task import (
    StaleTaskError,
    TaskFields,
    TaskNotFound,
    TaskRecord,
)
from quick_task.parsers.task_parser import parse_tasks
from quick_task.serializers.task_serializer import TaskSerializer
from quick_task.settings import SettingsStore
from quick_task.store.document_store import DocumentStore
from quick_task.utils.dates import today_iso
from quick_task.utils.formatting import INLINE_DIALECT

log = logging.getLogger(__name__)

PathLike = Union[str, Path]
FieldsLike = Union[TaskFields, Mapping[str, Any]]


def _find(tasks: List[TaskRecord], start_line: int) -> TaskRecord:
    for task in tasks:
        if task.start_line == start_line:
            return task
    raise TaskNotFound(f"No task starts at line {start_line}")


def _locate(text: str, start_line: int, expected_raw: Optional[str]) -> TaskRecord:
    task = _find(parse_tasks(text), start_line)
    if expected_raw is not None and task.raw_line != expected_raw:
        raise StaleTaskError(
            f"Task at line {start_line} changed: expected {expected_raw!r}, found {task.raw_line!r}"
        )
    return task


def _as_fields(fields: FieldsLike) -> TaskFields:
    if isinstance(fields, TaskFields):
        return fields
    return TaskFields.from_mapping(fields)


class TaskService:
    """
    Ties together the document store, settings and the parser/serializer.

    Usage:
        service = TaskService(DocumentStore(root), SettingsStore(path), dialect="bullet")
        record = service.add_task("today.md", TaskFields(title="Buy milk"))
        service.toggle_task("today.md", record.start_line, expected_raw=record.raw_line)
    """

    def __init__(
        self,
        store: DocumentStore,
        settings: SettingsStore,
        dialect: str = INLINE_DIALECT,
        today: Callable[[], str] = today_iso,
    ) -> None:
        self.store = store
        self.settings = settings
        self.serializer = TaskSerializer(dialect)
        self._today = today

    @property
    def dialect(self) -> str:
        return self.serializer.dialect

    def doc_key(self, path: PathLike) -> str:
        """Stable settings key for a document: root-relative when a root is set."""
        full = self.store.resolve(path)
        if self.store.root is not None:
            return full.relative_to(self.store.root).as_posix()
        return full.as_posix()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_tasks(self, path: PathLike) -> List[TaskRecord]:
        return parse_tasks(self.store.read(path))

    def get_task(self, path: PathLike, start_line: int) -> TaskRecord:
        return _find(self.list_tasks(path), start_line)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_task(
        self,
        path: PathLike,
        fields: FieldsLike,
        at_line: Optional[int] = None,
    ) -> TaskRecord:
        """
        Add a task block to a document, creating the document if needed.

        ``created`` defaults to today and the document's default tags are
        appended after the payload's own tags.
        """
        payload = _as_fields(fields)
        if not payload.created:
            payload = payload.replace(created=self._today())
        defaults = self.get_default_tags(path)
        if defaults:
            payload = payload.replace(
                tags=list(payload.tags) + [t for t in defaults if t not in payload.tags]
            )
        block = self.serializer.serialize(payload)

        def apply(text: str):
            new_text, start = insert_block(text, block, at_line)
            return new_text, _find(parse_tasks(new_text), start)

        record = self.store.edit(path, apply, missing_ok=True)
        log.info("Added task '%s' to %s at line %d", record.title, path, record.start_line)
        return record

    def update_task(
        self,
        path: PathLike,
        start_line: int,
        fields: FieldsLike,
        expected_raw: Optional[str] = None,
    ) -> TaskRecord:
        """
        Replace the task block starting at ``start_line`` with ``fields``.

        ``created`` is kept from the existing task when the payload omits it,
        and so is the checkbox when the payload sets neither checkbox nor
        status. Metadata lines with keys the parser doesn't map to a field
        are carried over below the new block.
        """
        payload = _as_fields(fields)

        def apply(text: str):
            task = _locate(text, start_line, expected_raw)
            new_payload = payload
            if not new_payload.created and task.created:
                new_payload = new_payload.replace(created=task.created)
            if new_payload.checkbox is None and new_payload.status is None:
                new_payload = new_payload.replace(checkbox=task.checkbox_state)
            block = "\n".join(
                [self.serializer.serialize(new_payload)] + unrecognized_lines(text, task)
            )
            new_text = replace_block(text, task, block)
            return new_text, _find(parse_tasks(new_text), start_line)

        record = self.store.edit(path, apply)
        log.info("Updated task at %s:%d", path, start_line)
        return record

    def delete_task(
        self,
        path: PathLike,
        start_line: int,
        expected_raw: Optional[str] = None,
    ) -> TaskRecord:
        """Remove the task block starting at ``start_line``; returns the removed record."""

        def apply(text: str):
            task = _locate(text, start_line, expected_raw)
            return delete_block(text, task), task

        record = self.store.edit(path, apply)
        log.info("Deleted task '%s' from %s", record.title, path)
        return record

    def toggle_task(
        self,
        path: PathLike,
        start_line: int,
        expected_raw: Optional[str] = None,
    ) -> TaskRecord:
        """Flip the done state of the task starting at ``start_line``, editing it in place."""

        def apply(text: str):
            task = _locate(text, start_line, expected_raw)
            new_text = toggle_block(text, task, self._today(), self.dialect)
            return new_text, _find(parse_tasks(new_text), start_line)

        record = self.store.edit(path, apply)
        log.info("Toggled task at %s:%d → %s", path, start_line, record.status)
        return record

    # ------------------------------------------------------------------
    # Per-document defaults
    # ------------------------------------------------------------------

    def get_default_tags(self, path: PathLike) -> List[str]:
        return self.settings.get_default_tags(self.doc_key(path))

    def set_default_tags(self, path: PathLike, tags: List[str]) -> List[str]:
        return self.settings.set_default_tags(self.doc_key(path), tags)
