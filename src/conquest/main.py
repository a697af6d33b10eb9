"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from conquest.admin.router import router as admin_router
from conquest.config import get_settings
from conquest.core.id_generator import reset_id_generator
from conquest.database import close_db, init_db
from conquest.gacha.router import router as gacha_router
from conquest.health.router import router as health_router
from conquest.middleware import setup_middleware
from conquest.presents.router import router as presents_router
from conquest.redis_client import close_redis, init_redis
from conquest.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url, settings.redis_max_connections)
    reset_id_generator()
    logger.info("startup", environment=settings.environment, version=settings.app_version)

    yield

    await close_db()
    await close_redis()
    reset_id_generator()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Conquest API",
        description="Game-state API: sessions, login bonuses, presents, gacha and card leveling",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(users_router)
    app.include_router(presents_router)
    app.include_router(gacha_router)
    app.include_router(admin_router)

    return app


app = create_app()
