"""Task endpoints."""

from typing import Any

from fastapi import APIRouter, Query, status

from src.domain.task import TaskAssign, TaskCreate, TaskUpdate
from src.services import task_service


router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(body: TaskCreate) -> dict[str, Any]:
    """Create a new task, optionally registering it with a user."""
    task = await task_service.create_task(
        name=body.name,
        description=body.description,
        status=body.status,
        user_name=body.user_name,
    )
    return {"task": task, "message": "Create task successfully!"}


@router.get("")
async def get_tasks(
    page: int = Query(default=1, ge=1),
    filter: str = Query(default="", description='Filter expression, e.g. status = "pending"'),  # noqa: A002
    limit: int | None = Query(default=None, ge=1),
) -> dict[str, Any]:
    """Get a page of tasks that are not soft-deleted."""
    result = await task_service.get_tasks(page=page, filter_query=filter, limit=limit)
    return {**result, "message": "Get all tasks successfully!"}


@router.get("/{task_id}")
async def get_single_task(task_id: str) -> dict[str, Any]:
    """Get a task by id."""
    task = await task_service.get_single_task(task_id=task_id)
    return {"task": task, "message": "Get task successfully!"}


@router.put("/{task_id}")
async def update_task(task_id: str, body: TaskUpdate) -> dict[str, Any]:
    """Update a task; a body with only user_name reassigns it instead."""
    if body.is_assignment_only():
        task = await task_service.assign_task(task_id=task_id, user_name=body.user_name)
        return {"task": task, "message": "Assign task successfully!"}

    task = await task_service.update_task(task_id=task_id, data=body.changes())
    return {"task": task, "message": "Update task successfully!"}


@router.put("/{task_id}/assign")
async def assign_task(task_id: str, body: TaskAssign) -> dict[str, Any]:
    """Assign a task to a user."""
    task = await task_service.assign_task(task_id=task_id, user_name=body.user_name)
    return {"task": task, "message": "Assign task successfully!"}


@router.delete("/{task_id}")
async def delete_task(task_id: str) -> dict[str, Any]:
    """Soft-delete a task."""
    task = await task_service.delete_task(task_id=task_id)
    return {"task": task, "message": "Delete task successfully!"}
