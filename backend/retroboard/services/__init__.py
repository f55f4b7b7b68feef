"""Services module."""

from retroboard.services.leaderboard import (
    LeaderboardService,
    StatsUnavailableError,
    rank_entries,
)
from retroboard.services.nominations import NominationsService, group_by_platform
from retroboard.services.stats_sync import sync_monthly_progress

__all__ = [
    "LeaderboardService",
    "StatsUnavailableError",
    "rank_entries",
    "NominationsService",
    "group_by_platform",
    "sync_monthly_progress",
]
