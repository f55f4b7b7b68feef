"""
FastAPI dependency injection.
Provides settings, cache, repository and service dependencies for the routes.
"""

from fastapi import Depends, Request

from retroboard.config import Settings
from retroboard.services import LeaderboardService, NominationsService
from retroboard.services.retroachievements import (
    RetroAchievementsClient,
    create_retroachievements_client,
)
from retroboard.storage.cache import TTLCache
from retroboard.storage.mongo import get_database
from retroboard.storage.repository import StatsRepository


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_cache(request: Request) -> TTLCache:
    """The application-wide response cache created in create_app()."""
    return request.app.state.cache


def get_repository() -> StatsRepository:
    return StatsRepository(get_database())


def _ra_client_factory(settings: Settings):
    ra = settings.retroachievements
    if not ra.api_key:
        return None

    def factory() -> RetroAchievementsClient:
        return create_retroachievements_client(
            username=ra.username,
            api_key=ra.api_key,
            base_url=ra.base_url,
            timeout_seconds=ra.timeout_seconds,
            max_retries=ra.max_retries,
        )

    return factory


def get_leaderboard_service(
    repository: StatsRepository = Depends(get_repository),
    cache: TTLCache = Depends(get_cache),
    settings: Settings = Depends(get_app_settings),
) -> LeaderboardService:
    return LeaderboardService(
        repository=repository,
        cache=cache,
        config=settings.leaderboard,
        site_url=settings.retroachievements.site_url,
        ra_client_factory=_ra_client_factory(settings),
    )


def get_nominations_service(
    repository: StatsRepository = Depends(get_repository),
) -> NominationsService:
    return NominationsService(repository)
