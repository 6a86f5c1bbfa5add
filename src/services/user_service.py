"""User service for creating, reading, editing and deleting users."""

import logging
from typing import Any

from src.core import db_client
from src.core.config import constants, settings
from src.core.errors import AppError, ErrorMessage, ErrorType
from src.core.logging import span
from src.core.object_id import is_valid_object_id
from src.domain.user import User


logger = logging.getLogger(__name__)

COLLECTION = "users"


def _serialize(record: dict[str, Any]) -> dict[str, Any]:
    return User.model_validate(record).model_dump(mode="json")


def _unique(items: list[str]) -> list[str]:
    """De-duplicate while keeping first-seen order."""
    return list(dict.fromkeys(items))


async def _get_existing_user(user_id: str) -> dict[str, Any]:
    """Fetch a user by id, applying the same guards as task lookups."""
    if not user_id:
        raise AppError(constants.HTTP_NOT_FOUND, ErrorType.NOT_FOUND, ErrorMessage.MISSING_DATA)

    if not is_valid_object_id(user_id):
        raise AppError(constants.HTTP_BAD_REQUEST, ErrorType.BAD_REQUEST, ErrorMessage.INVALID_USER_ID)

    try:
        return await db_client.get_record(collection=COLLECTION, record_id=user_id)
    except db_client.RecordNotFoundError as e:
        raise AppError(constants.HTTP_SERVER_ERROR, ErrorType.NOT_FOUND, ErrorMessage.USER_NOT_FOUND) from e


async def create_user(*, name: str | None) -> dict[str, Any]:
    """Create a user with an empty task set.

    Args:
        name: Display name

    Returns:
        Created user record

    Raises:
        AppError: 402 if the name is missing
        db_client.DatabaseError: If database operation fails
    """
    with span("user_service.create_user"):
        if not name:
            raise AppError(constants.HTTP_PAYMENT_REQUIRED, ErrorType.BAD_REQUEST, ErrorMessage.MISSING_CREATE_DATA)

        record = await db_client.create_record(collection=COLLECTION, data={"name": name, "tasks": []})
        logger.info("Created user %s (%s)", record["id"], name)

        return _serialize(record)


async def get_users(
    *,
    name: str | None = None,
    page: int = constants.DEFAULT_PAGE,
    limit: int | None = None,
) -> dict[str, Any]:
    """List users, optionally only those with an exact name.

    Pagination slices the fetched list the same way task listing does.
    """
    with span("user_service.get_users"):
        page_size = limit if limit is not None else settings.default_page_limit
        skip = (page - 1) * page_size

        users = await db_client.get_full_list(collection=COLLECTION)
        if name is not None:
            users = [user for user in users if user.get("name") == name]

        result = users[skip : skip + page_size]
        return {
            "users": [_serialize(user) for user in result],
            "page": page,
            "total": len(result),
        }


async def get_user_by_id(*, user_id: str) -> dict[str, Any]:
    """Get user by ID.

    Raises:
        AppError: 404 if the id is empty, 400 if it is not an ObjectId, 500 if no such user
    """
    with span("user_service.get_user_by_id"):
        return _serialize(await _get_existing_user(user_id))


async def get_user_by_name(*, name: str) -> dict[str, Any]:
    """Get the first user with the given name.

    Raises:
        AppError: 404 if the name is empty, 500 if no user has that name
    """
    with span("user_service.get_user_by_name"):
        if not name:
            raise AppError(constants.HTTP_NOT_FOUND, ErrorType.NOT_FOUND, ErrorMessage.MISSING_DATA)

        match = await db_client.get_first_record(collection=COLLECTION, field="name", value=name)
        if match is None:
            raise AppError(constants.HTTP_SERVER_ERROR, ErrorType.NOT_FOUND, ErrorMessage.USER_NOT_FOUND)

        return _serialize(match)


async def edit_user(*, user_id: str, data: dict[str, Any]) -> dict[str, Any]:
    """Merge fields into a user record; a tasks list is stored as a set.

    Raises:
        AppError: id problems as in get_user_by_id, 402 if there is nothing to update
    """
    with span("user_service.edit_user"):
        await _get_existing_user(user_id)

        changes = {key: value for key, value in data.items() if value is not None}
        if not changes:
            raise AppError(constants.HTTP_PAYMENT_REQUIRED, ErrorType.BAD_REQUEST, ErrorMessage.MISSING_DATA)

        if "tasks" in changes:
            changes["tasks"] = _unique(changes["tasks"])

        updated_record = await db_client.update_record(collection=COLLECTION, record_id=user_id, data=changes)
        logger.info("Updated user %s: %s", user_id, sorted(changes))

        return _serialize(updated_record)


async def delete_user(*, user_id: str) -> dict[str, Any]:
    """Remove a user record and return what was deleted.

    Tasks that reference the user keep their user_name value.

    Raises:
        AppError: id problems as in get_user_by_id
    """
    with span("user_service.delete_user"):
        user = await _get_existing_user(user_id)

        await db_client.delete_record(collection=COLLECTION, record_id=user_id)
        logger.info("Deleted user %s", user_id)

        return _serialize(user)
