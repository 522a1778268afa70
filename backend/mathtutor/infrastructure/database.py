"""Database Access — async engine, request sessions, and SQL error translation.

Invariants:
    - Repositories never catch SQLAlchemyError themselves: they wrap statements in
      translate_db_errors(), the one place SQL errors become DatabaseError
    - A failed statement rolls the session back before DatabaseError is raised, so the
      next statement on the same request session starts a fresh transaction
    - DatabaseError carries a fixed description per error class; the driver text
      (SQL, bound parameters) is logged, never put in the message
    - Sessions are closed when the request ends; close() discards any open transaction

Design Decisions:
    - Rollback at the failing statement, not at request end: quota checks fail open and
      the request keeps using the session (Postgres rejects every statement in an
      aborted transaction until ROLLBACK)
    - expire_on_commit=False: usage rows are read after commit in async context
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from mathtutor.core.errors import DatabaseError

logger = logging.getLogger(__name__)

# Most specific first
_ERROR_DESCRIPTIONS: tuple[tuple[type[SQLAlchemyError], str], ...] = (
    (IntegrityError, "Integrity constraint violated"),
    (OperationalError, "Connection or operational error"),
    (SQLAlchemyError, "Database operation failed"),
)


def describe_db_error(error: SQLAlchemyError) -> str:
    """Client-safe description for a SQLAlchemy error."""
    return next(
        description for error_type, description in _ERROR_DESCRIPTIONS
        if isinstance(error, error_type)
    )


@asynccontextmanager
async def translate_db_errors(
    session: AsyncSession, operation: str,
) -> AsyncGenerator[None, None]:
    """Roll back and raise DatabaseError for any SQLAlchemy error in the block."""
    try:
        yield
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(
            f"DB {operation} failed: {e}",
            extra={"error_code": "DATABASE_ERROR"},
        )
        raise DatabaseError(describe_db_error(e), operation) from e


class DatabaseSessionManager:
    """Owns the engine and hands out one session per request."""

    def __init__(
        self, database_url: str, pool_size: int = 10, max_overflow: int = 5,
    ):
        self.engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            async with translate_db_errors(session, "request"):
                yield session
        finally:
            await session.close()

    async def ping(self) -> bool:
        """True when SELECT 1 succeeds (readiness)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except (DatabaseError, OSError):
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
