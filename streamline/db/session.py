"""
Async SQLAlchemy engine & session factory.

PostgreSQL (asyncpg) in deployment; SQLite (aiosqlite) for local runs and
tests, where foreign keys have to be switched on per connection.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession,
                                    async_sessionmaker, create_async_engine)

from streamline.core.config import settings


def build_engine(url: str, **overrides) -> AsyncEngine:
    engine_args: dict = {"echo": False, "pool_pre_ping": True}
    if url.startswith("postgresql"):
        engine_args.update({"pool_size": 20, "max_overflow": 10, "pool_recycle": 300})
    engine_args.update(overrides)

    new_engine = create_async_engine(url, **engine_args)

    if url.startswith("sqlite"):

        @event.listens_for(new_engine.sync_engine, "connect")
        def _sqlite_fk_pragma(dbapi_conn, _record):  # pragma: no cover - driver hook
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = build_engine(settings.DATABASE_URL)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield an AsyncSession and close it after use."""
    async with async_session_factory() as session:
        yield session
