"""User domain models."""

from pydantic import BaseModel, Field, StrictStr


class User(BaseModel):
    """User data transfer object."""

    id: str = Field(..., description="ObjectId of the user")
    created: str = Field(..., description="Creation timestamp (ISO format)")
    updated: str = Field(..., description="Last update timestamp (ISO format)")
    name: str = Field(..., description="Display name of the user")
    tasks: list[str] = Field(default_factory=list, description="Ids of the tasks owned by the user")


class UserCreate(BaseModel):
    """Request body for creating a user; name must be a JSON string when present."""

    name: StrictStr | None = None


class UserUpdate(BaseModel):
    """Request body for editing a user."""

    name: StrictStr | None = None
    tasks: list[str] | None = None
