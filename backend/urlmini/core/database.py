"""urlmini Database Configuration - Async SQLAlchemy over asyncpg.

asyncpg reports refused, reset or timed-out connections as plain ``OSError``
subclasses that SQLAlchemy does not wrap. Anything that maps database
failures to an application error catches ``DATABASE_ERRORS`` rather than
``SQLAlchemyError`` alone.
"""

from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from urlmini.core.config import settings
from urlmini.core.logging import get_logger

logger = get_logger("database")

DATABASE_ERRORS: tuple[type[Exception], ...] = (SQLAlchemyError, OSError)

engine = create_async_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_timeout=settings.db_pool_timeout,
    pool_recycle=settings.db_pool_recycle,
    pool_pre_ping=True,
    echo=settings.debug and settings.log_level == "DEBUG",
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def rollback_quietly(session: AsyncSession) -> None:
    """Roll back after a failed statement.

    The connection may already be gone, so a failing rollback is logged and
    the original error is left to propagate from the caller.
    """
    try:
        await session.rollback()
    except DATABASE_ERRORS as e:
        logger.warning(f"Rollback failed: {e}")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get a database session for the link routes.

    Commits when the handler returns; any exception, including
    asyncio.CancelledError, rolls the request's work back.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except BaseException:
            await rollback_quietly(session)
            raise


async def check_db_connection() -> bool:
    """Check if database is reachable."""
    try:
        async with async_session_maker() as session:
            await session.execute(text("SELECT 1"))
            return True
    except DATABASE_ERRORS as e:
        logger.warning(f"Database connection check failed: {e}")
        return False
