"""Database engine, session management, and resilience utilities."""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.exc import OperationalError, DBAPIError
from sqlalchemy.pool import StaticPool
from sqlalchemy import text
import asyncio
from .config import Settings
from .logger import logger

# Base class for ORM models
Base = declarative_base()


# ==================== Database Resilience ====================

RETRYABLE_MARKERS = (
    "connection",
    "timeout",
    "database is locked",
    "server closed the connection",
    "connection reset",
)


async def retry_on_db_error(func, max_retries: int = 3, base_delay: float = 0.5):
    """Retry database operations with exponential backoff.

    Args:
        func: Async function to retry
        max_retries: Maximum number of attempts
        base_delay: Base delay in seconds (doubles each retry)

    Returns:
        Result of the function call

    Raises:
        Last exception if all retries fail or the error is not retryable
    """
    last_exception = None

    for attempt in range(max_retries):
        try:
            return await func()
        except (OperationalError, DBAPIError) as e:
            last_exception = e

            # Connection issues are retryable, constraint violations are not
            error_msg = str(e).lower()
            is_retryable = any(marker in error_msg for marker in RETRYABLE_MARKERS)

            if not is_retryable or attempt == max_retries - 1:
                logger.error(
                    f"Database operation failed (attempt {attempt + 1}/{max_retries}): {str(e)}",
                    exc_info=True
                )
                raise

            delay = base_delay * (2 ** attempt)
            logger.warning(
                f"Database error on attempt {attempt + 1}/{max_retries}, "
                f"retrying in {delay}s: {str(e)}"
            )
            await asyncio.sleep(delay)

    raise last_exception


# ==================== Connection Pool Setup ====================


def _engine_options(settings: Settings) -> dict:
    """Build create_async_engine keyword arguments for the configured backend."""
    if settings.is_sqlite:
        # One shared connection so in-memory databases survive across sessions
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_pre_ping": True,  # Verify connections before use
        "connect_args": {
            "timeout": settings.DB_CONNECT_TIMEOUT,
            "command_timeout": settings.DB_QUERY_TIMEOUT,
        },
    }


class Database:
    """Owns the async engine and session factory for one application instance."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine = create_async_engine(
            settings.DATABASE_URL,
            echo=settings.DB_ECHO,
            **_engine_options(settings),
        )
        self.session = async_sessionmaker(self.engine, expire_on_commit=False, class_=AsyncSession)

        if settings.is_sqlite:
            logger.info("Database engine configured: sqlite (static pool)")
        else:
            logger.info(
                f"Database engine configured: pool_size={settings.DB_POOL_SIZE}, "
                f"max_overflow={settings.DB_MAX_OVERFLOW}, timeout={settings.DB_POOL_TIMEOUT}s"
            )

    async def retry(self, func):
        """Run *func* with the configured retry policy."""
        return await retry_on_db_error(
            func,
            max_retries=self.settings.DB_RETRY_MAX_ATTEMPTS,
            base_delay=self.settings.DB_RETRY_BASE_DELAY,
        )

    async def create_all(self) -> None:
        """Create any missing tables from the ORM metadata."""
        from . import models  # noqa: F401  (registers tables on Base)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    async def check_connection(self) -> bool:
        """Check if database connection is healthy.

        Returns:
            True if connection is healthy, False otherwise
        """
        async def _check():
            async with self.session() as session:
                await session.execute(text("SELECT 1"))

        try:
            await retry_on_db_error(_check, max_retries=2, base_delay=0.1)
            return True
        except (OperationalError, DBAPIError, OSError) as e:
            logger.error(f"Database health check failed: {str(e)}")
            return False

    async def dispose(self) -> None:
        """Gracefully close all database connections.

        Called during application shutdown to release the connection pool.
        """
        logger.info("Disposing database engine and closing connections")
        await self.engine.dispose()
        logger.info("Database connections closed successfully")
