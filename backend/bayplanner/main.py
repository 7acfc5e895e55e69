"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bayplanner.api.v1.router import api_v1_router
from bayplanner.core.config import settings
from bayplanner.core.database import async_session_factory, close_db
from bayplanner.core.redis import close_redis, init_redis
from bayplanner.db.init_db import init_db
from bayplanner.db.seed import seed_if_empty

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle."""
    logger.info("Starting %s ...", settings.PROJECT_NAME)

    # Startup
    await init_db()
    logger.info("Database initialized")

    if settings.SEED_DEMO_DATA:
        async with async_session_factory() as session:
            result = await seed_if_empty(session)
            if result:
                await session.commit()
                logger.info("Demo data seeded: %s", result)
            else:
                logger.info("Database already has data, skipping seed")

    if await init_redis(app.state) is not None:
        logger.info("Redis connected")
    else:
        logger.info("Redis unavailable, rate limiting is per process")

    yield

    # Shutdown
    await close_redis(app.state)
    logger.info("Redis disconnected")

    await close_db()
    logger.info("Database disconnected")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-API-Key", "Accept"],
)

# Register API v1 router
app.include_router(api_v1_router, prefix="/api/v1")
