from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cardcoach.api import health_router, sets_router, users_router
from cardcoach.config import Settings, settings
from cardcoach.db.database import Database
from cardcoach.models.failure import SetError
from cardcoach.services.auth import TokenService


async def handle_set_error(_request: Request, exc: SetError) -> JSONResponse:
    """Render a classified failure as ``{"error": {"kind", "message"}}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json"),
    )


def create_app(app_settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """
    Build the application.

    The Database is created here (or passed in by tests) and stored on
    ``app.state``; request handlers receive it through dependencies.
    """
    app_settings = app_settings or settings
    database = database or Database.from_url(app_settings.database_url, echo=app_settings.debug)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler for startup/shutdown."""
        await database.init()
        yield
        await database.dispose()

    app = FastAPI(
        title=app_settings.app_name,
        version=pkg_version("cardcoach"),
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.database = database
    app.state.token_service = TokenService(app_settings)

    app.exception_handler(SetError)(handle_set_error)

    app.include_router(health_router)
    app.include_router(sets_router)
    app.include_router(users_router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app


app = create_app()
