"""REST API routes for task operations."""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from quick_task.models.task import InvalidTaskPayload, StaleTaskError, TaskNotFound
from quick_task.tools.task_tools import (
    handle_defaults_get,
    handle_defaults_set,
    handle_task_add,
    handle_task_delete,
    handle_task_get,
    handle_task_list,
    handle_task_toggle,
    handle_task_update,
)


# ---------------------------------------------------------------------------
# Request body models
# ---------------------------------------------------------------------------


class TaskAddBody(BaseModel):
    file_path: str
    title: str
    description: Optional[str] = None
    due: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    priority: Optional[str] = None
    status: Optional[str] = None
    at_line: Optional[int] = None


class TaskUpdateBody(BaseModel):
    file_path: str
    title: str
    description: Optional[str] = None
    due: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    priority: Optional[str] = None
    status: Optional[str] = None
    created: Optional[str] = None
    expected_raw: Optional[str] = None


class TaskToggleBody(BaseModel):
    file_path: str
    expected_raw: Optional[str] = None


class DefaultsBody(BaseModel):
    file_path: str
    tags: List[str] = Field(default_factory=list)


def _call(fn, **kwargs):
    """Run a handler, mapping domain errors onto HTTP status codes."""
    try:
        return fn(**kwargs)
    except (TaskNotFound, FileNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StaleTaskError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InvalidTaskPayload as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))


# ---------------------------------------------------------------------------
# Route registration
# ---------------------------------------------------------------------------


def register_routes(app_router: APIRouter, service) -> None:
    """Attach task REST routes that use the shared TaskService."""

    @app_router.get("/tasks")
    def list_tasks(
        file_path: str = Query(...),
        status: Optional[str] = Query(None),
        tag: Optional[str] = Query(None),
    ):
        return _call(handle_task_list, service=service, file_path=file_path, status=status, tag=tag)

    @app_router.get("/tasks/{start_line}")
    def get_task(start_line: int, file_path: str = Query(...)):
        return _call(handle_task_get, service=service, file_path=file_path, start_line=start_line)

    @app_router.post("/tasks", status_code=201)
    def add_task(body: TaskAddBody):
        return _call(handle_task_add, service=service, **body.model_dump())

    @app_router.put("/tasks/{start_line}")
    def update_task(start_line: int, body: TaskUpdateBody):
        return _call(handle_task_update, service=service, start_line=start_line, **body.model_dump())

    @app_router.delete("/tasks/{start_line}")
    def delete_task(
        start_line: int,
        file_path: str = Query(...),
        expected_raw: Optional[str] = Query(None),
    ):
        return _call(
            handle_task_delete,
            service=service,
            file_path=file_path,
            start_line=start_line,
            expected_raw=expected_raw,
        )

    @app_router.post("/tasks/{start_line}/toggle")
    def toggle_task(start_line: int, body: TaskToggleBody):
        return _call(handle_task_toggle, service=service, start_line=start_line, **body.model_dump())

    @app_router.get("/defaults")
    def get_defaults(file_path: str = Query(...)):
        return _call(handle_defaults_get, service=service, file_path=file_path)

    @app_router.put("/defaults")
    def set_defaults(body: DefaultsBody):
        return _call(handle_defaults_set, service=service, **body.model_dump())
