"""
CardCoach services.

Business logic for study sets and accounts.
"""

from cardcoach.services.auth import (
    InvalidTokenError,
    TokenService,
    TokenUser,
    hash_password,
    verify_password,
)
from cardcoach.services.card_diff import diff_cards
from cardcoach.services.ownership import authorize_set_owner, load_owned_set
from cardcoach.services.set_coordinator import (
    SetCoordinator,
    validate_cards,
    validate_new_set,
)
from cardcoach.services.users import (
    Account,
    FieldErrors,
    UserService,
    validate_registration,
)

__all__ = [
    "Account",
    "FieldErrors",
    "InvalidTokenError",
    "SetCoordinator",
    "TokenService",
    "TokenUser",
    "UserService",
    "authorize_set_owner",
    "diff_cards",
    "hash_password",
    "load_owned_set",
    "validate_cards",
    "validate_new_set",
    "validate_registration",
    "verify_password",
]
