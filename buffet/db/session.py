"""
Async SQLAlchemy engine & session factory.

PostgreSQL (asyncpg) in deployment; the pool options only apply there, so
the same module also serves the in-memory aiosqlite database used by tests.
The per-request session dependency lives in ``buffet.api.deps``.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from buffet.core.config import settings

engine_args: dict[str, object] = {"echo": False, "pool_pre_ping": True}

if settings.DATABASE_URL.startswith("postgresql"):
    # Small pool: requests hold a session only for a few single-row lookups
    engine_args.update(pool_size=10, max_overflow=5, pool_recycle=300)

engine = create_async_engine(settings.DATABASE_URL, **engine_args)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)
