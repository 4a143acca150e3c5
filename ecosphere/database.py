"""
database.py — PostgreSQL / PostGIS Async Connection
EcoSphere Seeder
"""

from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from ecosphere.config import settings
from loguru import logger


# ── Base ──────────────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    pass


# ── Engine ────────────────────────────────────────────────────────────────────
def create_engine(url: Optional[str] = None) -> AsyncEngine:
    """Build an async engine; the caller owns it and must dispose it."""
    return create_async_engine(
        url or settings.DATABASE_URL,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        echo=settings.DB_ECHO,
    )


# ── Lifecycle helpers ─────────────────────────────────────────────────────────
async def init_db(engine: AsyncEngine) -> None:
    """Create all tables (dev / test only — the application owns migrations)."""
    # Models must be registered on Base.metadata before create_all
    from ecosphere.models import db_models, user_model  # noqa: F401

    async with engine.begin() as conn:
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS postgis;"))
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS pgcrypto;"))
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised.")


async def close_db(engine: AsyncEngine) -> None:
    await engine.dispose()
    logger.info("Database connection pool closed.")
