# src/chesselo/db/session.py

"""Engine, session factory and the FastAPI session dependency."""
import logging
import os
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./chesselo.db")

# Create tables on startup instead of running migrations (local development)
AUTO_CREATE_TABLES = os.getenv("DB_AUTO_CREATE", "false").lower() == "true"


def _create_engine(url: str = DATABASE_URL) -> AsyncEngine:
    """Build the async engine for `url`.

    Pool sizing only applies to server databases; SQLite connections are
    cheap and file-locked, so the driver defaults are kept there.
    """
    echo = os.getenv("DB_ECHO", "false").lower() == "true"

    if url.startswith("sqlite"):
        return create_async_engine(url, echo=echo)

    return create_async_engine(
        url,
        pool_size=int(os.getenv("DB_POOL_SIZE", "20")),
        max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "10")),
        pool_pre_ping=True,
        pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "3600")),
        echo=echo,
    )


engine = _create_engine()

# Rating writes are conditional UPDATE statements that bypass the identity
# map, so readers re-load with populate_existing rather than relying on
# expiry after commit.
AsyncSessionLocal = async_sessionmaker(
    bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
)


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create any missing tables from the ORM metadata."""
    from chesselo.db.models import Base

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured", extra={"url": bind.url.render_as_string()})


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that provides an async database session.

    Rolls back on any exception raised by the endpoint and always closes
    the session.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            logger.error(
                "Database session error, rolling back",
                extra={"error": str(e), "error_type": type(e).__name__},
            )
            await session.rollback()
            raise
