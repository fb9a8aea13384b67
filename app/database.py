"""
Database Connection Module
Handles the store connection using the SQLAlchemy async engine.

The engine is created once per application (see app.main.create_app) and
handed to request handlers through the get_db dependency.
"""

from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase


# Base class for all our models
class Base(DeclarativeBase):
    pass


class Database:
    """Owns the async engine and the session factory for one store."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        options = {}
        if not url.startswith("sqlite"):
            options.update(pool_size=5, max_overflow=10)
        self.engine: AsyncEngine = create_async_engine(url, echo=echo, **options)
        # Objects remain accessible after commit
        self.session_maker = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        """
        Create all tables in database.
        Called once at application startup.
        """
        # Registers the tables on Base.metadata
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Dependency injection for FastAPI routes.
    Yields a database session from the application's store and ensures cleanup.
    """
    database: Database = request.app.state.database
    async with database.session_maker() as session:
        try:
            yield session
        finally:
            await session.close()
