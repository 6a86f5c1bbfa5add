"""Task service: validated CRUD operations, assignment and soft delete."""

import logging
from typing import Any

from src.core import db_client
from src.core.config import constants, settings
from src.core.errors import AppError, ErrorMessage, ErrorType
from src.core.logging import span
from src.core.object_id import is_valid_object_id
from src.domain.task import Task, TaskStatus


logger = logging.getLogger(__name__)

COLLECTION = "tasks"
USERS_COLLECTION = "users"

# Fields every stored task must keep as strings
_REQUIRED_FIELDS = ("name", "description", "status")


def _serialize(record: dict[str, Any]) -> dict[str, Any]:
    """Shape a stored task document for a JSON response."""
    return Task.model_validate(record).model_dump(mode="json", by_alias=True)


def _require_task_id(task_id: str) -> None:
    """Guard: task id is present and in ObjectId form."""
    if not task_id:
        raise AppError(constants.HTTP_NOT_FOUND, ErrorType.NOT_FOUND, ErrorMessage.MISSING_DATA)

    if not is_valid_object_id(task_id):
        raise AppError(constants.HTTP_BAD_REQUEST, ErrorType.BAD_REQUEST, ErrorMessage.INVALID_TASK_ID)


async def _get_active_task(task_id: str) -> dict[str, Any]:
    """Fetch a task that exists and is not soft-deleted.

    Missing tasks are reported with a 500 status, matching the rest of the API.
    """
    _require_task_id(task_id)

    try:
        task = await db_client.get_record(collection=COLLECTION, record_id=task_id)
    except db_client.RecordNotFoundError:
        task = None

    if not task or task.get("isDeleted"):
        raise AppError(constants.HTTP_SERVER_ERROR, ErrorType.NOT_FOUND, ErrorMessage.TASK_NOT_FOUND)

    return task


async def _populate_users(tasks: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Replace each task's user_name id with the user document when it resolves."""
    users: dict[str, dict[str, Any] | None] = {}
    populated = []

    for task in tasks:
        user_id = task.get("user_name")
        if is_valid_object_id(user_id):
            if user_id not in users:
                try:
                    users[user_id] = await db_client.get_record(collection=USERS_COLLECTION, record_id=user_id)
                except db_client.RecordNotFoundError:
                    users[user_id] = None
            if users[user_id] is not None:
                task = {**task, "user_name": users[user_id]}
        populated.append(task)

    return populated


async def _register_with_user(*, task_id: str, user_id: str) -> None:
    """Add the task to the user's task set; unknown or malformed user ids are skipped."""
    if not is_valid_object_id(user_id):
        logger.warning("Skipping assignment of task %s: user id %r is not an ObjectId", task_id, user_id)
        return

    try:
        await db_client.add_to_set(collection=USERS_COLLECTION, record_id=user_id, field="tasks", value=task_id)
    except db_client.RecordNotFoundError:
        logger.warning("Skipping assignment of task %s: user %s does not exist", task_id, user_id)
        return

    logger.info("Registered task %s with user %s", task_id, user_id)


async def create_task(
    *,
    name: str | None,
    description: str | None,
    status: str | None,
    user_name: str | None = None,
) -> dict[str, Any]:
    """Create a task.

    Args:
        name: Task name
        description: Task description
        status: Initial status, one of TaskStatus
        user_name: Optional id of the user the task is registered with

    Returns:
        Created task

    Raises:
        AppError: 402 if required data is missing or the status is invalid
        db_client.DatabaseError: If database operation fails
    """
    with span("task_service.create_task"):
        # Guard: Required data
        if not name or not description or not status:
            raise AppError(constants.HTTP_PAYMENT_REQUIRED, ErrorType.BAD_REQUEST, ErrorMessage.MISSING_CREATE_DATA)

        # Guard: Valid status
        if not TaskStatus.is_valid(status):
            raise AppError(constants.HTTP_PAYMENT_REQUIRED, ErrorType.BAD_REQUEST, ErrorMessage.INVALID_TASK_STATUS)

        # Duplicate names are allowed; only note them
        existing = await db_client.get_first_record(collection=COLLECTION, field="name", value=name)
        if existing:
            logger.warning("Task named %r already exists (%s); creating another", name, existing["id"])

        task_data = {
            "name": name,
            "description": description,
            "status": status,
            "user_name": user_name,
            "isDeleted": False,
        }
        record = await db_client.create_record(collection=COLLECTION, data=task_data)
        logger.info("Created task %s (%s)", record["id"], name)

        if user_name:
            await _register_with_user(task_id=record["id"], user_id=user_name)

        return _serialize(record)


async def get_tasks(
    *,
    page: int = constants.DEFAULT_PAGE,
    filter_query: str = "",
    limit: int | None = None,
) -> dict[str, Any]:
    """List tasks that are not soft-deleted, one page at a time.

    The full filtered set is fetched and deleted tasks are dropped before slicing,
    so ``total`` is the size of the returned page, not of the whole set.

    Args:
        page: 1-indexed page number
        filter_query: Filter expression, e.g. 'status = "pending"'
        limit: Page size, defaults to settings.default_page_limit

    Returns:
        Dict with tasks, page and total

    Raises:
        AppError: 400 if the filter expression is malformed
        db_client.DatabaseError: If database operation fails
    """
    with span("task_service.get_tasks"):
        page_size = limit if limit is not None else settings.default_page_limit
        skip = (page - 1) * page_size

        try:
            tasks = await db_client.get_full_list(collection=COLLECTION, filter_query=filter_query)
        except ValueError as e:
            raise AppError(constants.HTTP_BAD_REQUEST, ErrorType.BAD_REQUEST, str(e)) from e

        active = [task for task in tasks if not task.get("isDeleted")]
        result = await _populate_users(active[skip : skip + page_size])

        return {
            "tasks": [_serialize(task) for task in result],
            "page": page,
            "total": len(result),
        }


async def get_single_task(*, task_id: str) -> dict[str, Any]:
    """Get a task by ID, with its assigned user populated.

    Raises:
        AppError: 404 if the id is empty, 400 if it is not an ObjectId,
            500 if the task does not exist or is soft-deleted
    """
    with span("task_service.get_single_task"):
        task = await _get_active_task(task_id)
        populated = await _populate_users([task])
        return _serialize(populated[0])


async def update_task(*, task_id: str, data: dict[str, Any]) -> dict[str, Any]:
    """Update a task's fields after checking the status workflow.

    A task in "done" can only move to "archive".

    Args:
        task_id: Task ObjectId
        data: Fields to merge into the task; must include a valid status.
            A null name or description is ignored rather than stored.

    Returns:
        Updated task

    Raises:
        AppError: 404/400/500 for id problems, 500 for an invalid status or transition
    """
    with span("task_service.update_task"):
        task = await _get_active_task(task_id)
        data = {key: value for key, value in data.items() if key not in _REQUIRED_FIELDS or value is not None}
        status = data.get("status")

        # Guard: Valid status
        if not TaskStatus.is_valid(status):
            raise AppError(message=ErrorMessage.INVALID_TASK_STATUS)

        # Guard: Completed tasks can only be archived
        if task["status"] == TaskStatus.DONE and status != TaskStatus.ARCHIVE:
            logger.warning("Rejected transition of task %s from done to %s", task_id, status)
            raise AppError(message=ErrorMessage.DONE_ONLY_ARCHIVE)

        updated_record = await db_client.update_record(collection=COLLECTION, record_id=task_id, data=data)
        logger.info("Updated task %s (status %s -> %s)", task_id, task["status"], status)

        return _serialize(updated_record)


async def assign_task(*, task_id: str, user_name: str | None) -> dict[str, Any]:
    """Point a task at a user. The target user is not checked for existence.

    Raises:
        AppError: 404/400/500 for id problems
    """
    with span("task_service.assign_task"):
        await _get_active_task(task_id)

        updated_record = await db_client.update_record(
            collection=COLLECTION,
            record_id=task_id,
            data={"user_name": user_name},
        )
        logger.info("Assigned task %s to %s", task_id, user_name)

        return _serialize(updated_record)


async def delete_task(*, task_id: str) -> dict[str, Any]:
    """Soft-delete a task; the record stays in the store with isDeleted set.

    Raises:
        AppError: 404/400/500 for id problems
    """
    with span("task_service.delete_task"):
        await _get_active_task(task_id)

        deleted_record = await db_client.update_record(
            collection=COLLECTION,
            record_id=task_id,
            data={"isDeleted": True},
        )
        logger.info("Soft-deleted task %s", task_id)

        return _serialize(deleted_record)
