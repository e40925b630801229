"""
Account registration and login.

Validation reports problems per request field as ``{field: message}`` so
clients can show them next to the matching input.
"""

import logging
import re
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from cardcoach.config import MAX_USERNAME_LENGTH, MIN_PASSWORD_LENGTH, Settings
from cardcoach.db.database import Database
from cardcoach.db.operations import create_user, get_user_by_email, get_user_by_username
from cardcoach.models.failure import ConflictError, InternalError
from cardcoach.services.auth import hash_password, verify_password

logger = logging.getLogger(__name__)

_ALPHANUMERIC = re.compile(r"^[a-z0-9]+$", re.IGNORECASE)
_EMAIL = re.compile(r"\S+@\S+\.\S+")


class FieldErrors(Exception):
    """Per-field validation failures for a registration or login request."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__(", ".join(f"{k}: {v}" for k, v in errors.items()))


@dataclass(frozen=True)
class Account:
    """A user as returned to clients."""

    id: int
    username: str
    email: str


def validate_registration(
    username: str | None,
    email: str | None,
    password: str | None,
    confirm_password: str | None,
) -> dict[str, str]:
    """Return field errors for a registration request (empty if valid)."""
    errors: dict[str, str] = {}

    if not username:
        errors["username"] = "Username is required"
    elif not _ALPHANUMERIC.match(username):
        errors["username"] = "Username must contain alphanumeric characters only"
    elif len(username) > MAX_USERNAME_LENGTH:
        errors["username"] = f"Username cannot be more than {MAX_USERNAME_LENGTH} characters"

    if not email:
        errors["email"] = "Email is required"
    elif not _EMAIL.search(email):
        errors["email"] = "Email is invalid"

    if not password:
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = (
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )

    if not confirm_password:
        errors["confirmPassword"] = "Confirm password is required"
    elif password != confirm_password:
        errors["confirmPassword"] = "Passwords do not match"

    return errors


class UserService:
    """Registers and authenticates users."""

    def __init__(self, database: Database, settings: Settings):
        self._database = database
        self._bcrypt_rounds = settings.bcrypt_rounds

    async def register(
        self,
        username: str | None,
        email: str | None,
        password: str | None,
        confirm_password: str | None,
    ) -> Account:
        """
        Create an account.

        Raises:
            FieldErrors: Invalid input
            ConflictError: Username or email already taken
            InternalError: Store failure
        """
        errors = validate_registration(username, email, password, confirm_password)
        if errors or username is None or email is None or password is None:
            raise FieldErrors(errors)

        hashed = hash_password(password, self._bcrypt_rounds)

        async with self._database.session() as session:
            try:
                async with session.begin():
                    if await get_user_by_username(session, username) is not None:
                        raise ConflictError("Username already taken", field="username")
                    if await get_user_by_email(session, email) is not None:
                        raise ConflictError("Email already taken", field="email")
                    user = await create_user(session, username, email, hashed)
                    account = Account(id=user.id, username=user.username, email=user.email)
            except IntegrityError as e:
                # Lost a race with a concurrent registration
                raise ConflictError("Username or email already taken", field="username") from e
            except SQLAlchemyError as e:
                logger.exception("Registration failed for %s", username)
                raise InternalError("Unable to register user") from e

        logger.info("Registered user %d (%s)", account.id, account.username)
        return account

    async def authenticate(self, username: str | None, password: str | None) -> Account:
        """
        Check login credentials.

        Raises:
            FieldErrors: Missing fields, unknown username, or wrong password
        """
        if not username or not password:
            errors: dict[str, str] = {}
            if not username:
                errors["username"] = "Username is required"
            if not password:
                errors["password"] = "Password is required"
            raise FieldErrors(errors)

        async with self._database.session() as session:
            user = await get_user_by_username(session, username)

        if user is None:
            raise FieldErrors({"username": "Unknown username"})

        if not verify_password(password, user.hashed_password):
            logger.info("Rejected login for %s: wrong password", username)
            raise FieldErrors({"password": "Password is incorrect"})

        return Account(id=user.id, username=user.username, email=user.email)
