"""Data access for the User model."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tracker_server.models.user import User

# Module-private: tracks the active connection for the current unit of work.
_active_conn: ContextVar[AsyncSession] = ContextVar("_dao_conn")


class UserDAO:
    """Data access built once at startup with the connection pool.

    Use transaction() to wrap a group of operations in one unit of work.
    """

    def __init__(self, pool: async_sessionmaker[AsyncSession]) -> None:
        self._pool = pool

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Open a unit of work. All DAO calls inside share one connection."""
        async with self._pool() as connection:
            context_token = _active_conn.set(connection)
            try:
                yield
            finally:
                _active_conn.reset(context_token)

    def _conn(self) -> AsyncSession:
        """Return the current unit-of-work connection."""
        return _active_conn.get()

    async def find_by_email(self, email: str) -> User | None:
        """Find a user by email."""
        result = await self._conn().execute(
            select(User).where(User.email == email)
        )
        return result.scalar_one_or_none()

    async def insert_user(
        self,
        *,
        email: str,
        subject: str | None,
        name: str | None,
        given_name: str | None,
        family_name: str | None,
        picture: str | None,
    ) -> User:
        """Insert a new user and flush so constraint violations surface here.

        Raises:
            sqlalchemy.exc.IntegrityError: If a user with this email exists.
        """
        user = User(
            email=email,
            subject=subject,
            name=name,
            given_name=given_name,
            family_name=family_name,
            picture=picture,
            admin=False,
        )
        self._conn().add(user)
        await self._conn().flush()
        return user

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self._conn().commit()

    async def rollback(self) -> None:
        """Roll back the current transaction."""
        await self._conn().rollback()
