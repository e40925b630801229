"""
Shared FastAPI dependencies.

Everything is resolved from ``app.state``, which the application factory
populates. Nothing here reads module-level connection state.
"""

import logging
from typing import Annotated

from fastapi import Cookie, Depends, HTTPException, Request, status

from cardcoach.config import Settings
from cardcoach.db.database import Database, get_database
from cardcoach.services.auth import InvalidTokenError, TokenService, TokenUser
from cardcoach.services.set_coordinator import SetCoordinator
from cardcoach.services.users import UserService

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def get_token_service(request: Request) -> TokenService:
    token_service: TokenService = request.app.state.token_service
    return token_service


def get_set_coordinator(
    database: Annotated[Database, Depends(get_database)],
) -> SetCoordinator:
    return SetCoordinator(database)


def get_user_service(
    database: Annotated[Database, Depends(get_database)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> UserService:
    return UserService(database, settings)


async def get_current_user(
    token_service: Annotated[TokenService, Depends(get_token_service)],
    token: Annotated[str | None, Cookie()] = None,
) -> TokenUser:
    """
    Resolve the requester from the ``token`` cookie.

    Raises 401 if the cookie is missing or does not verify.
    """
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized - Missing JWT",
        )

    try:
        return token_service.verify(token)
    except InvalidTokenError as e:
        logger.info("Rejected request with invalid token: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized - invalid or expired JWT",
        ) from e


CurrentUser = Annotated[TokenUser, Depends(get_current_user)]
