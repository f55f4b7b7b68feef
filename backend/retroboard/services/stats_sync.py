"""Pull monthly challenge progress from RetroAchievements into MongoDB."""

import logging
from typing import Optional

from retroboard.periods import month_key
from retroboard.services.leaderboard import unique_usernames
from retroboard.services.retroachievements import (
    RetroAchievementsAPIError,
    RetroAchievementsAuthError,
    RetroAchievementsClient,
)
from retroboard.storage.repository import StatsRepository

logger = logging.getLogger(__name__)


async def sync_monthly_progress(
    repository: StatsRepository,
    client: RetroAchievementsClient,
    game_id: int,
    period: Optional[str] = None,
) -> int:
    """
    Store each valid user's hardcore progress on the challenge game.

    Args:
        repository: Stats repository to write to
        client: Open RetroAchievements client
        game_id: Challenge game ID
        period: Month key (YYYY-MM); defaults to the current month

    Returns:
        Number of users whose stats were written.
    """
    period = period or month_key()
    usernames = unique_usernames(await repository.get_valid_users())
    logger.info(f"Syncing {len(usernames)} users for game {game_id} ({period})")

    updated = 0
    for username in usernames:
        try:
            progress = await client.get_user_game_progress(username, game_id)
        except RetroAchievementsAuthError:
            raise
        except RetroAchievementsAPIError as e:
            logger.warning(f"Skipping {username}: {e}")
            continue

        await repository.update_monthly_stats(
            username, period, progress.to_monthly_stats()
        )
        updated += 1

    logger.info(f"Synced progress for {updated}/{len(usernames)} users")
    return updated
