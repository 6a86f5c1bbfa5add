"""Domain models and DTOs."""

from src.domain.task import Task, TaskAssign, TaskCreate, TaskStatus, TaskUpdate
from src.domain.user import User, UserCreate, UserUpdate


__all__ = [
    "Task",
    "TaskAssign",
    "TaskCreate",
    "TaskStatus",
    "TaskUpdate",
    "User",
    "UserCreate",
    "UserUpdate",
]
