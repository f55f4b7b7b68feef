from .client import RetroAchievementsClient, create_retroachievements_client
from .config import RetroAchievementsConfig
from .exceptions import (
    RetroAchievementsAPIError,
    RetroAchievementsAuthError,
    RetroAchievementsNotFoundError,
    RetroAchievementsRateLimitError,
)
from .models import GameSummary, UserGameProgress

__all__ = [
    "RetroAchievementsClient",
    "create_retroachievements_client",
    "RetroAchievementsConfig",
    "RetroAchievementsAPIError",
    "RetroAchievementsAuthError",
    "RetroAchievementsNotFoundError",
    "RetroAchievementsRateLimitError",
    "GameSummary",
    "UserGameProgress",
]
