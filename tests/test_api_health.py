"""Tests for health endpoints and app construction."""

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from cardcoach.config import Settings
from cardcoach.db.database import Database
from cardcoach.main import create_app


def test_app_imports() -> None:
    """Verify the app can be imported without errors."""
    from cardcoach.main import app

    assert app.title == "CardCoach"


async def test_health(client: AsyncClient) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "CardCoach", "database": None}


async def test_ready(client: AsyncClient) -> None:
    response = await client.get("/ready")

    assert response.status_code == 200
    assert response.json()["database"] == "connected"


async def test_ready_reports_unreachable_store(test_settings: Settings) -> None:
    """A store that cannot be opened makes the readiness check answer 503."""
    database = Database(create_async_engine("sqlite+aiosqlite:////nonexistent-dir/cardcoach.db"))
    app = create_app(test_settings, database)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/ready")

    await database.dispose()
    assert response.status_code == 503
    assert response.json() == {
        "status": "not ready",
        "service": "CardCoach",
        "database": "unreachable",
    }
