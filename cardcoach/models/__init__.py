from cardcoach.models.card import (
    CardDiff,
    CardFields,
    ExistingCard,
    NewCard,
    SetDetail,
    SetSummary,
    SubmittedCard,
)
from cardcoach.models.failure import (
    INTERNAL_ERROR_MESSAGE,
    ConflictError,
    ErrorResponse,
    FailureDetail,
    FailureKind,
    InternalError,
    NotFoundError,
    SetError,
    UnauthorizedError,
    ValidationError,
)

__all__ = [
    "INTERNAL_ERROR_MESSAGE",
    "CardDiff",
    "CardFields",
    "ConflictError",
    "ErrorResponse",
    "ExistingCard",
    "FailureDetail",
    "FailureKind",
    "InternalError",
    "NewCard",
    "NotFoundError",
    "SetDetail",
    "SetError",
    "SetSummary",
    "SubmittedCard",
    "UnauthorizedError",
    "ValidationError",
]
