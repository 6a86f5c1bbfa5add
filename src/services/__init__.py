from src.services import task_service, user_service


__all__ = [
    "task_service",
    "user_service",
]
