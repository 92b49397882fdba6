"""
CDN Sync - Main FastAPI Application

Receives content change events, purges and rewarms CDN caches on every
host that has served this deployment, and records hosts from inbound
traffic.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
import structlog

from .api.endpoints.cache import router as cache_router
from .api.endpoints.events import router as events_router
from .api.endpoints.health import router as health_router
from .constants import APP_NAME, APP_VERSION
from .core.config import get_settings
from .core.logging import configure_logging
from .middleware.cache import CacheHostMiddleware
from .services.cache.cache_manager import CacheManager

logger = structlog.get_logger()


def create_app(cache_manager: Optional[CacheManager] = None) -> FastAPI:
    """Build the application, optionally around a pre-built cache manager."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting CDN Sync", environment=settings.ENVIRONMENT)
        await app.state.cache_manager.initialize()

        yield

        logger.info("Shutting down CDN Sync")
        try:
            await app.state.cache_manager.close()
        except Exception as e:
            logger.error("Error during application shutdown", error=str(e))

    app = FastAPI(
        title=f"{APP_NAME} API",
        description="CDN cache invalidation and warming",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.cache_manager = cache_manager or CacheManager(settings)

    app.add_middleware(CacheHostMiddleware)

    app.include_router(health_router)
    app.include_router(events_router)
    app.include_router(cache_router)

    return app


app = create_app()
