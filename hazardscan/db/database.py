# hazardscan/db/database.py
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine, AsyncSession
from fastapi import Request
from typing import AsyncGenerator


def create_engine(
    database_url: str,
    pool_size: int = 20,
    max_overflow: int = 10,
    echo: bool = False,
) -> AsyncEngine:
    """Create the process-wide async engine"""
    url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    kwargs = {"echo": echo}
    if not url.startswith("sqlite"):
        kwargs.update(pool_size=pool_size, max_overflow=max_overflow, pool_pre_ping=True)
    return create_async_engine(url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Database session dependency, bound to the app's session factory"""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db(engine: AsyncEngine):
    """Initialize database (create tables)"""
    from hazardscan.db.base import Base
    # Import all models to ensure they're registered
    from hazardscan.db import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db(engine: AsyncEngine):
    """Close database connections"""
    await engine.dispose()
