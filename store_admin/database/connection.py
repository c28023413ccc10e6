"""
Database Connection Management

One async SQLAlchemy engine per process for the store database, a
session dependency for the routes, and a health probe.
"""

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from store_admin.config import get_settings

logger = structlog.get_logger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None

NOT_INITIALIZED = "Database not initialized. Call init_database() first."


async def init_database(url: Optional[str] = None) -> AsyncEngine:
    """
    Create the engine and verify that the database answers.

    Args:
        url: Async database URL; defaults to the configured one

    Returns:
        AsyncEngine: The process-wide engine
    """
    global _engine, _session_factory

    if _engine is not None:
        logger.warning("Database already initialized")
        return _engine

    db_settings = get_settings().database
    # The hosted Postgres sits behind a server-side pooler
    engine = create_async_engine(
        url or db_settings.async_url,
        echo=db_settings.echo,
        pool_pre_ping=True,
        poolclass=NullPool,
    )

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Failed to connect to database", host=db_settings.host, error=str(e))
        await engine.dispose()
        raise

    _engine = engine
    _session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    logger.info("Database connection established", host=db_settings.host, database=db_settings.name)
    return _engine


async def close_database() -> None:
    global _engine, _session_factory

    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
    logger.info("Database engine disposed")


def get_engine() -> AsyncEngine:
    """
    Raises:
        RuntimeError: If init_database() has not run
    """
    if _engine is None:
        raise RuntimeError(NOT_INITIALIZED)
    return _engine


@asynccontextmanager
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Session scoped to one unit of work.

    Commits when the block exits cleanly; otherwise rolls back and
    re-raises.

    Example:
        async with get_db() as db:
            result = await db.execute(query)
    """
    if _session_factory is None:
        raise RuntimeError(NOT_INITIALIZED)

    async with _session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error("Rolling back session", error=str(e), error_type=type(e).__name__)
            await session.rollback()
            raise


async def get_db_dependency() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency wrapping get_db().

    Example:
        @router.get("/orders")
        async def list_orders(db: AsyncSession = Depends(get_db_dependency)):
            ...
    """
    async with get_db() as session:
        yield session


async def check_database_health() -> Dict[str, Any]:
    """Round-trip a trivial query and report its latency."""
    try:
        engine = get_engine()
        start = time.perf_counter()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        latency_ms = (time.perf_counter() - start) * 1000
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}

    return {"status": "healthy", "latency_ms": round(latency_ms, 2)}
