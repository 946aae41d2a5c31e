"""Async engine, session factory and the request-scoped session dependency."""
import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from reconstruct.core.config import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(url: str, **overrides):
    """Create the process-wide engine; pool bounds only apply to server databases."""
    settings = get_settings()
    kwargs = {"pool_pre_ping": True}
    if not url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
        )
    kwargs.update(overrides)
    return create_async_engine(url, **kwargs)


engine = build_engine(get_settings().database_url)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def get_db():
    """Yield one session per request; roll back on error, always return the connection."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def ping(bind=None) -> int:
    """Run SELECT 1 + 1 against the database and return the result."""
    async with (bind or engine).connect() as conn:
        result = await conn.execute(text("SELECT 1 + 1 AS solution"))
        return result.scalar_one()


async def wait_for_database(retries: int | None = None, delay: float | None = None) -> bool:
    """Startup connection check: retry a fixed number of times with a fixed delay."""
    settings = get_settings()
    retries = settings.db_connect_retries if retries is None else retries
    delay = settings.db_connect_retry_delay if delay is None else delay

    attempts_left = retries
    while True:
        try:
            await ping()
        except (SQLAlchemyError, OSError) as exc:
            logger.error(
                "Connection attempt failed (%d attempts left): %s", attempts_left, exc
            )
            if attempts_left <= 0:
                logger.error("All connection attempts failed; check DATABASE_URL and credentials")
                return False
            attempts_left -= 1
            logger.info("Retrying connection in %s seconds...", delay)
            await asyncio.sleep(delay)
        else:
            logger.info("Successfully connected to the database")
            return True
