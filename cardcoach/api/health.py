"""
Liveness and readiness checks.

``/health`` answers as long as the process serves requests. ``/ready``
also opens a connection from the application's pool, so a deployment can
hold traffic back until the store is reachable.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from cardcoach.api.deps import get_settings
from cardcoach.config import Settings
from cardcoach.db.database import Database, get_database

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check result. ``database`` is only reported by the readiness check."""

    status: str
    service: str
    database: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health(settings: Annotated[Settings, Depends(get_settings)]) -> HealthResponse:
    """Liveness check. Never touches the store."""
    return HealthResponse(status="healthy", service=settings.app_name)


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    database: Annotated[Database, Depends(get_database)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """
    Readiness check.

    Checks out a pooled connection and runs a trivial query. Responds 503
    when the store cannot be reached.
    """
    try:
        async with database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Readiness check failed: %s", e)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", service=settings.app_name, database="unreachable")

    return HealthResponse(status="ready", service=settings.app_name, database="connected")
