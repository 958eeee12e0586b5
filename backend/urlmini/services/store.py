"""Persistence contract used by the authentication core, and its SQLAlchemy implementation."""

from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from urlmini.core.database import DATABASE_ERRORS, async_session_maker, rollback_quietly
from urlmini.models.session import Session
from urlmini.models.user import User


class StoreError(Exception):
    """Base persistence error."""


class NotFoundError(StoreError):
    """Requested record does not exist."""


class DuplicateError(StoreError):
    """A unique constraint was violated."""


class Store(Protocol):
    async def get_user_by_id(self, user_id: int) -> User: ...

    async def get_user_by_username(self, username: str) -> User: ...

    async def create_user(
        self,
        username: str,
        hashed_password: str,
        email: str,
        first_name: str,
        last_name: str,
    ) -> User: ...

    async def get_session(self, session_id: UUID) -> Session: ...

    async def create_session(
        self,
        id: UUID,
        user_id: int,
        client_ip: str,
        user_agent: str,
        refresh_token: str,
        expires_at: datetime,
        is_blocked: bool = False,
    ) -> Session: ...

    async def block_session(self, session_id: UUID) -> Session: ...

    async def list_sessions(
        self, user_id: int, limit: int, offset: int, active_only: bool = False
    ) -> list[Session]: ...


StoreFactory = Callable[[], AbstractAsyncContextManager[Store]]


class DatabaseStore:
    """Store backed by an AsyncSession.

    Session writes commit immediately so that a caller never hands out a
    refresh token whose session row is not durable.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_id(self, user_id: int) -> User:
        user = await self._scalar(select(User).where(User.id == user_id))
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    async def get_user_by_username(self, username: str) -> User:
        user = await self._scalar(select(User).where(User.username == username))
        if user is None:
            raise NotFoundError(f"User {username!r} not found")
        return user

    async def create_user(
        self,
        username: str,
        hashed_password: str,
        email: str,
        first_name: str,
        last_name: str,
    ) -> User:
        user = User(
            username=username,
            hashed_password=hashed_password,
            email=email,
            first_name=first_name,
            last_name=last_name,
        )
        self.db.add(user)
        await self._commit()
        await self._refresh(user)
        return user

    async def get_session(self, session_id: UUID) -> Session:
        session = await self._scalar(select(Session).where(Session.id == session_id))
        if session is None:
            raise NotFoundError(f"Session {session_id} not found")
        return session

    async def create_session(
        self,
        id: UUID,
        user_id: int,
        client_ip: str,
        user_agent: str,
        refresh_token: str,
        expires_at: datetime,
        is_blocked: bool = False,
    ) -> Session:
        session = Session(
            id=id,
            user_id=user_id,
            client_ip=client_ip,
            user_agent=user_agent,
            refresh_token=refresh_token,
            expires_at=expires_at,
            is_blocked=is_blocked,
        )
        self.db.add(session)
        await self._commit()
        await self._refresh(session)
        return session

    async def block_session(self, session_id: UUID) -> Session:
        """Mark a session blocked. Idempotent; the stored expiry is untouched."""
        session = await self.get_session(session_id)
        session.is_blocked = True
        await self._commit()
        return session

    async def list_sessions(
        self, user_id: int, limit: int, offset: int, active_only: bool = False
    ) -> list[Session]:
        stmt = select(Session).where(Session.user_id == user_id)
        if active_only:
            stmt = stmt.where(
                Session.expires_at > datetime.now(UTC),
                Session.is_blocked.is_(False),
            )
        stmt = stmt.order_by(Session.created_at.desc()).limit(limit).offset(offset)
        try:
            result = await self.db.execute(stmt)
        except DATABASE_ERRORS as e:
            raise StoreError("Failed to list sessions") from e
        return list(result.scalars().all())

    async def _scalar(self, stmt):
        try:
            result = await self.db.execute(stmt)
        except DATABASE_ERRORS as e:
            raise StoreError("Query failed") from e
        return result.scalar_one_or_none()

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await rollback_quietly(self.db)
            raise DuplicateError("Record violates a unique constraint") from e
        except DATABASE_ERRORS as e:
            await rollback_quietly(self.db)
            raise StoreError("Commit failed") from e

    async def _refresh(self, instance) -> None:
        try:
            await self.db.refresh(instance)
        except DATABASE_ERRORS as e:
            raise StoreError("Reload after commit failed") from e


@asynccontextmanager
async def database_store() -> AsyncIterator[Store]:
    """Open a short-lived DatabaseStore outside of the request dependency graph."""
    async with async_session_maker() as db:
        yield DatabaseStore(db)
