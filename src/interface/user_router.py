"""User endpoints."""

from typing import Any

from fastapi import APIRouter, Query, status

from src.domain.user import UserCreate, UserUpdate
from src.services import user_service


router = APIRouter(prefix="/users", tags=["users"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate) -> dict[str, Any]:
    """Create a new user. The name must be a string."""
    user = await user_service.create_user(name=body.name)
    return {"user": user, "message": "Create user successfully!"}


@router.get("")
async def get_users(
    name: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
) -> dict[str, Any]:
    """Get a page of users, optionally filtered by exact name."""
    result = await user_service.get_users(name=name, page=page, limit=limit)
    return {**result, "message": "Get all users successfully!"}


# Name lookup gets its own path segment; a second GET /{param} would never match.
@router.get("/name/{name}")
async def get_single_user_by_name(name: str) -> dict[str, Any]:
    """Get a user by name."""
    user = await user_service.get_user_by_name(name=name)
    return {"user": user, "message": "Get user successfully!"}


@router.get("/{user_id}")
async def get_single_user_by_id(user_id: str) -> dict[str, Any]:
    """Get a user by id."""
    user = await user_service.get_user_by_id(user_id=user_id)
    return {"user": user, "message": "Get user successfully!"}


@router.put("/{user_id}")
async def edit_user(user_id: str, body: UserUpdate) -> dict[str, Any]:
    """Update a user's name or task set."""
    user = await user_service.edit_user(user_id=user_id, data=body.model_dump(exclude_unset=True))
    return {"user": user, "message": "Update user successfully!"}


@router.delete("/{user_id}")
async def delete_user(user_id: str) -> dict[str, Any]:
    """Delete a user by id."""
    user = await user_service.delete_user(user_id=user_id)
    return {"user": user, "message": "Delete user successfully!"}
