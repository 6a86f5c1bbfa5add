"""Task domain models and enums."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TaskStatus(StrEnum):
    """Task workflow status."""

    PENDING = "pending"
    WORKING = "working"
    REVIEW = "review"
    DONE = "done"
    ARCHIVE = "archive"

    @classmethod
    def is_valid(cls, value: object) -> bool:
        """Return True if value names one of the statuses."""
        return isinstance(value, str) and value in cls._value2member_map_


class Task(BaseModel):
    """Task data transfer object."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="ObjectId of the task")
    created: str = Field(..., description="Creation timestamp (ISO format)")
    updated: str = Field(..., description="Last update timestamp (ISO format)")
    name: str = Field(..., description="Task name")
    description: str = Field(..., description="Detailed task description")
    status: TaskStatus = Field(..., description="Current workflow status")
    user_name: str | dict[str, Any] | None = Field(
        default=None, description="Assigned user id, or the user document once populated"
    )
    is_deleted: bool = Field(default=False, alias="isDeleted", description="Soft-delete flag")


class TaskCreate(BaseModel):
    """Request body for creating a task.

    Fields are optional here so the service can answer missing data with its own error.
    """

    name: str | None = None
    description: str | None = None
    status: str | None = None
    user_name: str | None = None


class TaskUpdate(BaseModel):
    """Request body for updating a task."""

    name: str | None = None
    description: str | None = None
    status: str | None = None
    user_name: str | None = None

    def changes(self) -> dict[str, Any]:
        """Return only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)

    def is_assignment_only(self) -> bool:
        """Return True when the body carries nothing but a user_name."""
        return set(self.model_fields_set) == {"user_name"}


class TaskAssign(BaseModel):
    """Request body for assigning a task to a user."""

    user_name: str | None = None
