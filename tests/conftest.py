from collections.abc import Awaitable, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from cardcoach.config import Settings
from cardcoach.db.database import Database
from cardcoach.db.operations import create_user
from cardcoach.main import create_app
from cardcoach.models.db import Base
from cardcoach.services.auth import TokenService, TokenUser


@pytest.fixture
def test_settings() -> Settings:
    """Settings with a fixed secret and the cheapest bcrypt cost."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
    )


@pytest.fixture
async def database():
    """Create an in-memory SQLite database for testing."""
    db = Database(create_async_engine("sqlite+aiosqlite:///:memory:", echo=False))
    await db.init()
    yield db
    await db.drop()
    await db.dispose()


@pytest.fixture
async def session(database: Database) -> AsyncSession:
    """Provide a database session for tests."""
    async with database.session() as session:
        yield session


async def _add_user(database: Database, username: str) -> int:
    async with database.session() as session:
        user = await create_user(session, username, f"{username}@example.com", "unused-hash")
        await session.commit()
        return user.id


@pytest.fixture
async def owner_id(database: Database) -> int:
    return await _add_user(database, "alice")


@pytest.fixture
async def other_user_id(database: Database) -> int:
    return await _add_user(database, "bob")


@pytest.fixture
def row_count(database: Database) -> Callable[[type[Base]], Awaitable[int]]:
    """Count rows of a table in a fresh session."""

    async def _count(model: type[Base]) -> int:
        async with database.session() as session:
            result = await session.execute(select(func.count()).select_from(model))
            return int(result.scalar_one())

    return _count


@pytest.fixture
def token_service(test_settings: Settings) -> TokenService:
    return TokenService(test_settings)


@pytest.fixture
def auth_cookie(token_service: TokenService) -> Callable[[int, str], dict[str, str]]:
    """Build a Cookie header for a user id."""

    def _cookie(user_id: int, username: str = "alice") -> dict[str, str]:
        token = token_service.issue(TokenUser(id=user_id, username=username))
        return {"Cookie": f"token={token}"}

    return _cookie


@pytest.fixture
async def client(database: Database, test_settings: Settings):
    """Provide an async test client bound to the test database."""
    app = create_app(test_settings, database)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
