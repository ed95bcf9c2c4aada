"""Async engine and sessions. SQLite (aiosqlite) by default, PostgreSQL (asyncpg) optional."""

import logging
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from clubber.config import get_settings

logger = logging.getLogger(__name__)

_ASYNC_DRIVERS = (
    ("sqlite://", "sqlite+aiosqlite://"),
    ("postgresql://", "postgresql+asyncpg://"),
    ("postgres://", "postgresql+asyncpg://"),
)


def to_async_url(url: str) -> str:
    """Swap a plain driver scheme for its async driver; other URLs pass through."""
    for plain, async_scheme in _ASYNC_DRIVERS:
        if url.startswith(plain):
            return async_scheme + url[len(plain):]
    return url


def engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url:
            # Every session must see the same in-memory database
            options["poolclass"] = StaticPool
        return options
    return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10, "pool_recycle": 300}


DATABASE_URL = to_async_url(get_settings().DATABASE_URL)

async_engine = create_async_engine(DATABASE_URL, echo=False, **engine_options(DATABASE_URL))

AsyncSessionLocal = async_sessionmaker(async_engine, expire_on_commit=False, autoflush=False)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with AsyncSessionLocal() as session:
        yield session


async def init_db() -> None:
    """Create missing tables."""
    import clubber.models  # noqa: F401  (registers tables on SQLModel.metadata)

    async with async_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info(f"Database ready ({async_engine.url.get_backend_name()})")


async def close_db() -> None:
    await async_engine.dispose()
    logger.info("Database connections closed")


async def check_database() -> bool:
    """`SELECT 1`; False when the database is unreachable."""
    try:
        async with async_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return False
    return True
