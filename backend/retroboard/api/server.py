"""
FastAPI application for the RetroBoard dashboard.

This module:
- Initializes FastAPI with lifespan management (MongoDB, Logfire)
- Configures CORS so the pages can be embedded from the community site
- Owns the response cache injected into the leaderboard routes
- Provides health check endpoints
"""

import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from retroboard import __version__
from retroboard.api.routes import router
from retroboard.config import Settings, get_settings
from retroboard.observability import initialize_logfire
from retroboard.storage.cache import TTLCache
from retroboard.storage.mongo import (
    check_db_connection,
    close_db,
    get_db_info,
    init_db,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    settings: Settings = app.state.settings
    initialize_logfire(settings, app)

    logger.info(
        f"Starting RetroBoard API Server (environment={settings.environment}, "
        f"debug={settings.debug})"
    )

    await init_db(settings.mongodb)
    db_info = get_db_info()
    if await check_db_connection():
        logger.info(
            f"MongoDB connection successful ({db_info['url']}/{db_info['database']})"
        )
    else:
        logger.error(
            f"MongoDB connection failed ({db_info['url']}/{db_info['database']})"
        )

    yield

    logger.info("Shutting down RetroBoard API Server")
    await close_db()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application with its settings and cache attached to app.state."""
    settings = settings or get_settings()

    app = FastAPI(
        title="RetroBoard API",
        description="Leaderboards and game nominations for a RetroAchievements community",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.cache = TTLCache(ttl_seconds=settings.cache.ttl_seconds)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["Health"])
    async def health_check() -> Dict[str, str]:
        """
        Health check endpoint for load balancers and monitoring.

        Returns:
            dict: Health status of the application and database
        """
        db_connected = await check_db_connection()

        return {
            "status": "healthy" if db_connected else "degraded",
            "service": "retroboard-api",
            "version": __version__,
            "database": "connected" if db_connected else "disconnected",
            "environment": settings.environment,
        }

    @app.get("/", tags=["Root"])
    async def root() -> Dict[str, str]:
        """Basic API information."""
        return {
            "name": "RetroBoard API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
            "leaderboard": "/leaderboard",
            "nominations": "/nominations",
        }

    app.include_router(router)
    return app
