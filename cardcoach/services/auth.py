"""
Password hashing and session tokens.

Tokens are HS256 JWTs carrying ``{"id", "username"}``. They travel in an
httpOnly cookie as ``bearer <jwt>``.
"""

import logging
from dataclasses import dataclass

import bcrypt
from jose import JWTError, jwt

from cardcoach.config import Settings

logger = logging.getLogger(__name__)

TOKEN_SCHEME = "bearer"


class InvalidTokenError(Exception):
    """Token is missing, malformed, or fails verification."""


@dataclass(frozen=True)
class TokenUser:
    """Identity carried by a verified token."""

    id: int
    username: str


def hash_password(password: str, rounds: int) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


class TokenService:
    """Issues and verifies session tokens using the configured secret."""

    def __init__(self, settings: Settings):
        self._secret = settings.jwt_secret
        self._algorithm = settings.jwt_algorithm

    def issue(self, user: TokenUser) -> str:
        """Return the cookie value for a user: ``bearer <jwt>``."""
        token = jwt.encode(
            {"id": user.id, "username": user.username},
            self._secret,
            algorithm=self._algorithm,
        )
        return f"{TOKEN_SCHEME} {token}"

    def verify(self, cookie_value: str | None) -> TokenUser:
        """
        Decode a ``bearer <jwt>`` cookie value.

        The scheme is matched case-insensitively.

        Raises:
            InvalidTokenError: Missing value, wrong scheme, bad signature or payload
        """
        if not cookie_value:
            raise InvalidTokenError("Missing token")

        parts = cookie_value.split(" ")
        if len(parts) != 2 or parts[0].lower() != TOKEN_SCHEME:
            raise InvalidTokenError("Malformed token")

        try:
            payload = jwt.decode(parts[1], self._secret, algorithms=[self._algorithm])
        except JWTError as e:
            logger.debug("Token verification failed: %s", e)
            raise InvalidTokenError("Invalid or expired token") from e

        user_id = payload.get("id")
        username = payload.get("username")
        if not isinstance(user_id, int) or not isinstance(username, str):
            raise InvalidTokenError("Token payload is incomplete")

        return TokenUser(id=user_id, username=username)
