"""Async database engine and connection pool."""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

_IN_MEMORY_SQLITE = "sqlite+aiosqlite://"


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class Database:
    """Owns one async engine and its session factory.

    Built once per application by the app factory; nothing here is
    process-global, so tests can run several apps side by side.
    """

    def __init__(self, database_url: str) -> None:
        kwargs: dict[str, Any] = {"echo": False}
        if database_url == _IN_MEMORY_SQLITE:
            # One shared connection, otherwise every checkout sees a new empty DB.
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}
        self._engine: AsyncEngine | None = create_async_engine(database_url, **kwargs)
        self._pool = async_sessionmaker(self._engine, expire_on_commit=False)

    @property
    def pool(self) -> async_sessionmaker[AsyncSession]:
        """Session factory bound to this engine."""
        return self._pool

    async def create_tables(self) -> None:
        """Create all tables from registered models."""
        import tracker_server.models

        _ = tracker_server.models  # Ensure model metadata is registered with Base
        assert self._engine is not None, "database already closed"
        async with self._engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Dispose the engine and release pooled connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
