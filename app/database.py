"""Database configuration and connection management."""

from collections.abc import AsyncGenerator, AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, TypeVar

import structlog
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config import settings
from app.core.exceptions import ConflictException, ServerErrorException

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def async_database_url(url: str) -> str:
    """Convert a sync PostgreSQL URL to its asyncpg form."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


def build_engine(url: str) -> AsyncEngine:
    """Create an async engine with pooling suited to the backend."""
    url = async_database_url(url)
    options: dict[str, Any] = {"echo": settings.debug, "pool_pre_ping": True}

    if url.startswith("postgresql+asyncpg://"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_recycle=3600,
            connect_args={
                "server_settings": {
                    "application_name": settings.app_name,
                },
            },
        )

    return create_async_engine(url, **options)


# Process-wide engine, disposed in the application lifespan
engine: AsyncEngine = build_engine(settings.database_url)

# Async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def transaction(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run a unit of work against the session.

    Commits when the block exits normally and rolls back on every error path.
    Integrity errors are re-raised unchanged so callers can react to unique
    constraint collisions; other storage errors become ServerErrorException.
    """
    try:
        yield db
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("transaction_failed", error=str(e), exc_info=True)
        raise ServerErrorException() from e
    except Exception:
        await db.rollback()
        raise


async def check_database_connection() -> bool:
    """Check if database connection is healthy."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


# SQLSTATE for unique_violation on PostgreSQL
UNIQUE_VIOLATION = "23505"


def is_unique_violation(error: IntegrityError) -> bool:
    """True when the integrity error comes from a unique constraint."""
    orig = error.orig
    if getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION:
        return True
    if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION:
        return True
    # SQLite: "UNIQUE constraint failed: ..."
    return "unique" in str(orig).lower()


async def retry_once_on_conflict(
    run: Callable[[], Awaitable[T]],
    conflict_message: str,
    /,
    **log_context: Any,
) -> T:
    """
    Run a transactional operation, retrying it once after a unique-constraint collision.

    Generated identifiers are not pre-checked for uniqueness, so the first
    collision is treated as bad luck and the whole operation runs again with
    fresh identifiers. A second collision becomes a ConflictException.

    Other integrity errors (foreign key, check) are not collisions: they are
    logged and surface as ServerErrorException without a retry.

    Args:
        run: Zero-argument coroutine factory performing one full attempt
        conflict_message: Message of the ConflictException after a second collision
        **log_context: Extra fields for the retry log line
    """
    try:
        return await run()
    except IntegrityError as e:
        _raise_unless_unique_violation(e, log_context)
        logger.warning("integrity_conflict_retry", error=str(e.orig), **log_context)

    try:
        return await run()
    except IntegrityError as e:
        _raise_unless_unique_violation(e, log_context)
        raise ConflictException(conflict_message) from e


def _raise_unless_unique_violation(error: IntegrityError, log_context: dict[str, Any]) -> None:
    if is_unique_violation(error):
        return
    logger.error("integrity_error", error=str(error.orig), **log_context)
    raise ServerErrorException() from error
