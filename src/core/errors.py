"""Application error type and the JSON error body it is rendered into."""

from pydantic import BaseModel, Field

from src.core.config import constants


class ErrorType:
    """Short error labels returned in the top-level ``message`` of error bodies."""

    BAD_REQUEST = "Bad Request"
    NOT_FOUND = "Not Found"
    VALIDATION_ERROR = "Validation Error"
    INTERNAL_SERVER_ERROR = "Internal Server Error"


class ErrorMessage:
    """Detail messages for specific error conditions."""

    MISSING_CREATE_DATA = "Error: Missing required data!"
    MISSING_DATA = "Missing required data!"
    INVALID_TASK_STATUS = "Task status is not valid!"
    INVALID_TASK_ID = "Task id must be ObjectID!"
    TASK_NOT_FOUND = "Task does not exist!"
    DONE_ONLY_ARCHIVE = "Completed tasks can only be archived"
    INVALID_USER_ID = "User id must be ObjectID!"
    USER_NOT_FOUND = "User does not exist!"


class AppError(Exception):
    """Error raised by services and translated into an HTTP response by the error handlers.

    Attributes:
        status_code: HTTP status code of the response
        error_type: Short label for the error category
        message: Human-readable detail
    """

    def __init__(
        self,
        status_code: int = constants.HTTP_SERVER_ERROR,
        error_type: str = ErrorType.INTERNAL_SERVER_ERROR,
        message: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_type = error_type
        self.message = message

    def __repr__(self) -> str:
        return f"AppError(status_code={self.status_code}, error_type={self.error_type!r}, message={self.message!r})"


class ErrorDetail(BaseModel):
    """Inner error payload."""

    message: str


class ErrorResponse(BaseModel):
    """Structured error response body."""

    success: bool = Field(default=False, description="Always False for error bodies")
    errors: ErrorDetail
    message: str = Field(..., description="Error type label")

    @classmethod
    def from_app_error(cls, error: AppError) -> "ErrorResponse":
        """Build the response body for an AppError."""
        return cls(errors=ErrorDetail(message=error.message), message=error.error_type)
