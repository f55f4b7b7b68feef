"""Logfire cloud observability initialization and instrumentation."""

import logging
from typing import Optional

import logfire
from fastapi import FastAPI

from retroboard import __version__
from retroboard.config import Settings

logger = logging.getLogger(__name__)


def initialize_logfire(settings: Settings, app: Optional[FastAPI] = None) -> bool:
    """
    Initialize Logfire with instrumentation for the dashboard.

    Instruments:
    - HTTPX clients (RetroAchievements API)
    - PyMongo (leaderboard and nominations queries)
    - FastAPI requests, when an app is given
    - Python logging (bridges to Logfire)

    Args:
        settings: Application settings containing Logfire token
        app: FastAPI application to instrument

    Returns:
        True if Logfire was configured, False otherwise.
    """
    if not settings.logfire_token:
        logger.warning("Logfire token not set - observability disabled")
        return False

    try:
        logfire.configure(
            token=settings.logfire_token,
            service_name="retroboard",
            service_version=__version__,
            environment=settings.environment,
        )

        logfire.instrument_httpx()
        logfire.instrument_pymongo()
        if app is not None:
            logfire.instrument_fastapi(app)

        root_logger = logging.getLogger()
        root_logger.addHandler(logfire.LogfireLoggingHandler())

        logger.info("Logfire cloud tracking initialized")
        return True

    except Exception as e:
        # Observability is optional; keep serving without it
        logger.warning(f"Failed to initialize Logfire: {e}")
        return False
