"""
Account API endpoints.

Registration, login, login status and logout. Field-level failures are
returned as ``{field: message}`` with status 422, or 409 for taken
usernames and emails.
"""

from typing import Annotated

from fastapi import APIRouter, Cookie, Depends, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from cardcoach.api.deps import get_settings, get_token_service, get_user_service
from cardcoach.config import TOKEN_COOKIE_NAME, Settings
from cardcoach.models.failure import ConflictError
from cardcoach.services.auth import InvalidTokenError, TokenService, TokenUser
from cardcoach.services.users import FieldErrors, UserService

router = APIRouter(prefix="/users", tags=["users"])


class RegisterRequest(BaseModel):
    """Request model for registration. Presence is checked by the service."""

    model_config = ConfigDict(populate_by_name=True)

    username: str | None = None
    email: str | None = None
    password: str | None = None
    confirm_password: str | None = Field(default=None, alias="confirmPassword")


class LoginRequest(BaseModel):
    username: str | None = None
    password: str | None = None


class RegisterResponse(BaseModel):
    id: int
    username: str


class AccountResponse(BaseModel):
    id: int
    username: str
    email: str


class LoginStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    logged_in: bool = Field(..., alias="loggedIn")
    id: int | None = None
    username: str | None = None


def _set_token_cookie(response: Response, value: str, settings: Settings) -> None:
    response.set_cookie(
        TOKEN_COOKIE_NAME,
        value,
        httponly=True,
        max_age=settings.token_max_age_days * 24 * 60 * 60,
    )


@router.post(
    "",
    response_model=RegisterResponse,
    responses={status.HTTP_409_CONFLICT: {}, status.HTTP_422_UNPROCESSABLE_ENTITY: {}},
)
async def register(
    request: RegisterRequest,
    response: Response,
    users: Annotated[UserService, Depends(get_user_service)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RegisterResponse | JSONResponse:
    """
    Register a new user and log them in.

    On success sets the httpOnly ``token`` cookie.
    """
    try:
        account = await users.register(
            request.username, request.email, request.password, request.confirm_password
        )
    except FieldErrors as e:
        return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=e.errors)
    except ConflictError as e:
        return JSONResponse(status_code=e.status_code, content={e.field: e.message})

    token = token_service.issue(TokenUser(id=account.id, username=account.username))
    _set_token_cookie(response, token, settings)
    return RegisterResponse(id=account.id, username=account.username)


@router.get("/login", response_model=LoginStatusResponse, response_model_exclude_none=True)
async def login_status(
    token_service: Annotated[TokenService, Depends(get_token_service)],
    token: Annotated[str | None, Cookie()] = None,
) -> LoginStatusResponse | JSONResponse:
    """Report whether the request carries a valid session cookie."""
    if token is None:
        return LoginStatusResponse(logged_in=False)

    try:
        user = token_service.verify(token)
    except InvalidTokenError:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"error": "invalid user token"},
        )

    return LoginStatusResponse(logged_in=True, id=user.id, username=user.username)


@router.post("/login", response_model=AccountResponse)
async def login(
    request: LoginRequest,
    response: Response,
    users: Annotated[UserService, Depends(get_user_service)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AccountResponse | JSONResponse:
    """
    Log a user in.

    On success sets the httpOnly ``token`` cookie.
    """
    try:
        account = await users.authenticate(request.username, request.password)
    except FieldErrors as e:
        return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=e.errors)

    token = token_service.issue(TokenUser(id=account.id, username=account.username))
    _set_token_cookie(response, token, settings)
    return AccountResponse(id=account.id, username=account.username, email=account.email)


@router.delete("/logout")
async def logout(response: Response) -> None:
    """Clear the session cookie."""
    response.delete_cookie(TOKEN_COOKIE_NAME)
