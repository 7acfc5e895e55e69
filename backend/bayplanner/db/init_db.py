"""Database initialization utilities."""

import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from bayplanner.core.database import Base, engine

# Registers every model on Base.metadata
import bayplanner.models  # noqa: F401

logger = logging.getLogger(__name__)


async def init_db() -> None:
    """Create all database tables using SQLAlchemy metadata.

    This is a convenience function for development. In production,
    use Alembic migrations via `alembic upgrade head`.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db() -> None:
    """Drop all database tables. USE WITH CAUTION."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def check_db_connection() -> bool:
    """Verify database connectivity."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Database connection check failed: %s", exc)
        return False


async def reset_db() -> None:
    """Drop and recreate all tables. Development only."""
    await drop_db()
    await init_db()
