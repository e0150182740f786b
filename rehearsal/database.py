"""Database engine and session management."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from rehearsal.config import Settings, get_settings

settings = get_settings()


def engine_options(settings: Settings) -> dict:
    """Keyword arguments for the async engine."""
    return {
        "echo": settings.DEBUG,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        # Isolation of the read-check-insert booking transaction
        "isolation_level": settings.DB_ISOLATION_LEVEL,
    }


engine = create_async_engine(settings.database_url, **engine_options(settings))

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a database session."""
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """Database session for use outside request handling."""
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_models() -> None:
    """Create tables that do not exist yet."""
    from rehearsal.models.base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
