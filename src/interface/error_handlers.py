"""Exception handlers that turn raised errors into JSON error bodies."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.core.config import constants
from src.core.db_client import DatabaseError
from src.core.errors import AppError, ErrorDetail, ErrorResponse, ErrorType


logger = logging.getLogger(__name__)


def _error_response(status_code: int, error_type: str, message: str) -> JSONResponse:
    body = ErrorResponse(errors=ErrorDetail(message=message), message=error_type)
    return JSONResponse(content=body.model_dump(), status_code=status_code)


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError with its own status code."""
    logger.warning(
        "request_failed",
        extra={"path": request.url.path, "status_code": exc.status_code, "error": exc.message},
    )
    return JSONResponse(content=ErrorResponse.from_app_error(exc).model_dump(), status_code=exc.status_code)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures (bad field types, bad query params) as 400."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    logger.warning("request_validation_failed", extra={"path": request.url.path, "error": details})
    return _error_response(constants.HTTP_BAD_REQUEST, ErrorType.VALIDATION_ERROR, details)


async def handle_database_error(request: Request, exc: DatabaseError) -> JSONResponse:
    """Render store failures as 500."""
    logger.error("database_error", extra={"path": request.url.path, "error": str(exc)})
    return _error_response(constants.HTTP_SERVER_ERROR, ErrorType.INTERNAL_SERVER_ERROR, str(exc))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Render anything else as a generic 500."""
    logger.exception("unhandled_error", extra={"path": request.url.path, "error": str(exc)})
    return _error_response(constants.HTTP_SERVER_ERROR, ErrorType.INTERNAL_SERVER_ERROR, "Internal Server Error")


def register_error_handlers(app: FastAPI) -> None:
    """Attach the error handlers to the application."""
    app.add_exception_handler(AppError, handle_app_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(DatabaseError, handle_database_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected_error)
