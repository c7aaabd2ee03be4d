import asyncio
import logging
from functools import wraps
from typing import Callable, TypeVar, Any, AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import NullPool
from sqlalchemy.sql import text
from sqlalchemy.exc import (
    SQLAlchemyError,
    OperationalError,
    DisconnectionError,
    TimeoutError as PoolTimeoutError,
)
from asyncpg.exceptions import (
    ConnectionFailureError,
    ConnectionDoesNotExistError,
)

from .config import DATABASE_URL, DB_RETRY_ATTEMPTS, DB_RETRY_DELAY, DB_RETRY_BACKOFF_FACTOR
from .exceptions import DatabaseConnectionError, DatabaseTimeoutError

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    # SQLite (used by the test-suite) opens a fresh connection per session
    if url.startswith("sqlite"):
        return {"echo": False, "poolclass": NullPool}
    return {
        "echo": False,
        "pool_size": 20,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_recycle": 3600,
        "pool_pre_ping": True,
    }


engine = create_async_engine(DATABASE_URL, **_engine_options(DATABASE_URL))

async_session = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()

F = TypeVar("F", bound=Callable[..., Any])

RETRYABLE_ERRORS = (
    OperationalError,
    DisconnectionError,
    PoolTimeoutError,
    ConnectionFailureError,
    ConnectionDoesNotExistError,
)


def db_retry(
    max_attempts: int = None,
    delay: float = None,
    backoff_factor: float = None,
    exceptions: tuple = None,
) -> Callable[[F], F]:
    """
    Retry an idempotent database read on transient failures.

    Only wrap reads; writes are never retried.

    Args:
        max_attempts: Attempts before giving up (config default)
        delay: Initial delay between attempts (config default)
        backoff_factor: Delay multiplier
        exceptions: Exception types that trigger a retry
    """
    if max_attempts is None:
        max_attempts = DB_RETRY_ATTEMPTS

    if delay is None:
        delay = DB_RETRY_DELAY

    if backoff_factor is None:
        backoff_factor = DB_RETRY_BACKOFF_FACTOR

    if exceptions is None:
        exceptions = RETRYABLE_ERRORS

    def decorator(func: F) -> F:
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            current_delay = delay
            last_exception = None

            for attempt in range(max_attempts):
                try:
                    return await func(*args, **kwargs)

                except exceptions as e:
                    last_exception = e

                    if attempt == max_attempts - 1:
                        break

                    logger.warning(
                        f"Database operation failed (attempt {attempt + 1}/{max_attempts}): {str(e)}",
                        extra={
                            "function": func.__name__,
                            "attempt": attempt + 1,
                            "max_attempts": max_attempts,
                            "exception_type": type(e).__name__,
                        },
                    )

                    await asyncio.sleep(current_delay)
                    current_delay *= backoff_factor

            logger.error(
                f"Database operation failed after {max_attempts} attempts: {str(last_exception)}",
                extra={
                    "function": func.__name__,
                    "max_attempts": max_attempts,
                    "final_exception": str(last_exception),
                },
            )

            if isinstance(last_exception, PoolTimeoutError):
                raise DatabaseTimeoutError(func.__name__, 30)
            raise DatabaseConnectionError(
                f"Database connection failed after {max_attempts} attempts"
            )

        if not asyncio.iscoroutinefunction(func):
            raise TypeError("db_retry can only wrap coroutine functions")
        return async_wrapper

    return decorator


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped database session
    """
    session = async_session()
    try:
        yield session
    except Exception as e:
        await session.rollback()
        logger.error(f"Session error: {str(e)}")
        raise
    finally:
        await session.close()


class DatabaseManager:
    """Engine-level operations used at startup and shutdown"""

    @staticmethod
    @db_retry()
    async def create_tables():
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created successfully")
        except SQLAlchemyError as e:
            logger.error(f"Failed to create database tables: {str(e)}")
            raise

    @staticmethod
    @db_retry()
    async def check_connection():
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection check successful")
        return True

    @staticmethod
    async def close_connections():
        try:
            await engine.dispose()
            logger.info("Database connections closed successfully")
        except SQLAlchemyError as e:
            logger.error(f"Error closing database connections: {str(e)}")


db_manager = DatabaseManager()


class TransactionManager:
    """
    Commit on success, roll back on any exception.

    Usage:
        async with TransactionManager(session):
            ...
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        return self.session

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            await self.session.rollback()
            logger.warning(
                f"Transaction rolled back: {exc_type.__name__}",
                extra={"exception_type": exc_type.__name__},
            )
        else:
            await self.session.commit()
        return False


def db_operation(func: F) -> F:
    """
    Log start, completion and failure of a CRUD function
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        operation_name = func.__name__

        try:
            logger.debug(f"Starting database operation: {operation_name}")
            result = await func(*args, **kwargs)
            logger.debug(f"Database operation completed: {operation_name}")
            return result

        except SQLAlchemyError as e:
            logger.error(
                f"SQLAlchemy error in {operation_name}: {str(e)}",
                extra={"operation": operation_name, "exception_type": type(e).__name__},
            )
            raise

    return wrapper
