"""
Database engine and session management.

The Database handle owns the async engine and session factory. It is built
once by the application factory and injected wherever sessions are needed.
"""

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from cardcoach.models.db import Base


class Database:
    """
    Connection pool plus session factory.

    Each call to ``session()`` checks out an independent AsyncSession;
    sessions are never shared between concurrent operations.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_url(cls, url: str, echo: bool = False) -> "Database":
        """Create a handle with its own engine."""
        return cls(create_async_engine(url, echo=echo, pool_pre_ping=True))

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def init(self) -> None:
        """
        Initialize database tables.

        Creates all tables defined in the ORM models.
        Should be called once at application startup.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop(self) -> None:
        """
        Drop all database tables.

        WARNING: Destroys all data. Use only for testing.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    """Dependency returning the Database attached to the running app."""
    database: Database = request.app.state.database
    return database

