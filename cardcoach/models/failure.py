"""
Failure taxonomy for set and account operations.

Every failure surfaced by the core is one of a small, fixed set of kinds.
The HTTP layer renders them through a single exception handler, so
routers never translate store errors themselves.

Kinds:
- validation_error: caller-supplied data malformed, raised before any store access
- not_found: referenced set is absent (or has no cards)
- unauthorized: set exists but belongs to someone else, or no valid identity
- conflict: unique account field already taken
- internal_error: store failure inside a transaction, always after rollback
"""

from enum import Enum

from fastapi import status
from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    INTERNAL_ERROR = "internal_error"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )


class ErrorResponse(BaseModel):
    """Error body returned for every classified failure."""

    error: FailureDetail


# Fixed message for store failures. The underlying cause is logged, never returned.
INTERNAL_ERROR_MESSAGE = "The operation could not be completed. No changes were saved."


class SetError(Exception):
    """
    Base class for failures the core knows how to explain.

    Subclasses pin the kind and the HTTP status code.
    """

    kind: FailureKind = FailureKind.INTERNAL_ERROR
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to an ErrorResponse."""
        return ErrorResponse(error=FailureDetail(kind=self.kind, message=self.message))


class ValidationError(SetError):
    """Caller-supplied data is malformed."""

    kind = FailureKind.VALIDATION_ERROR
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotFoundError(SetError):
    """Referenced set does not exist or contains no cards."""

    kind = FailureKind.NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND


class UnauthorizedError(SetError):
    """Requester is not the owner of the referenced set."""

    kind = FailureKind.UNAUTHORIZED
    status_code = status.HTTP_401_UNAUTHORIZED


class ConflictError(SetError):
    """
    A unique field is already taken.

    ``field`` names the offending request field so registration can report
    it the same way as other per-field validation errors.
    """

    kind = FailureKind.CONFLICT
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str, field: str):
        self.field = field
        super().__init__(message)


class InternalError(SetError):
    """
    A store failure aborted a transaction.

    The transaction has already been rolled back when this is raised.
    The message is fixed and does not carry the underlying cause.
    """

    kind = FailureKind.INTERNAL_ERROR
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = INTERNAL_ERROR_MESSAGE):
        super().__init__(message)
