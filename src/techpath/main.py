"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from techpath.advice.router import router as advice_router
from techpath.config import get_settings
from techpath.content.router import router as content_router
from techpath.database import close_db, create_schema, get_session, init_db
from techpath.health.router import router as health_router
from techpath.middleware import setup_middleware
from techpath.progress.router import router as progress_router
from techpath.progress.seed import seed_catalogue
from techpath.redis_client import close_redis, init_redis
from techpath.social.router import router as social_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    if settings.create_schema_on_startup:
        await create_schema()

    # Course and trophy catalogue (idempotent)
    try:
        async for db in get_session():
            await seed_catalogue(db)
            break
    except SQLAlchemyError:
        logger.warning("Catalogue seeding failed (tables may not exist yet)", exc_info=True)

    # Redis only fans out notifications; run without it when unset
    if settings.redis_url:
        await init_redis(settings.redis_url)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="TechPath API",
        description="Backend API for TechPath: courses, streaks, trophies and career advice",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(content_router)
    app.include_router(progress_router)
    app.include_router(social_router)
    app.include_router(advice_router)

    return app


app = create_app()
