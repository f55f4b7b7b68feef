"""Monthly challenge and yearly points leaderboards."""

import logging
from datetime import datetime
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
    Union,
)

from retroboard.config import LeaderboardConfig
from retroboard.models import (
    BonusPoint,
    GameInfo,
    MonthlyEntry,
    MonthlyLeaderboard,
    YearlyEntry,
    YearlyLeaderboard,
)
from retroboard.periods import isoformat_utc, month_key, year_key
from retroboard.ranking import RankMode, compute_ranks, metric_value
from retroboard.services.retroachievements import (
    RetroAchievementsAPIError,
    RetroAchievementsClient,
)
from retroboard.storage.cache import TTLCache
from retroboard.storage.repository import StatsRepository

logger = logging.getLogger(__name__)

MONTHLY_CACHE_KEY = "leaderboard:monthly"
YEARLY_CACHE_KEY = "leaderboard:yearly"

DEFAULT_SITE_URL = "https://retroachievements.org"

Entry = TypeVar("Entry", MonthlyEntry, YearlyEntry)


class StatsUnavailableError(Exception):
    """The user stats document is missing or empty."""


def as_number(value: Any) -> Union[int, float]:
    """Coerce a stored statistic, keeping whole numbers as ints."""
    number = metric_value(value)
    return int(number) if number.is_integer() else number


def unique_usernames(usernames: Iterable[Any]) -> List[str]:
    """Drop blanks and case-insensitive duplicates, keeping first spelling."""
    seen = set()
    result = []
    for name in usernames:
        if not isinstance(name, str) or not name.strip():
            continue
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(name)
    return result


def rank_entries(
    entries: Sequence[Entry],
    mode: RankMode,
    yearly_tiebreak: bool = False,
) -> List[Entry]:
    """Order entries by competition rank and stamp each with its rank."""
    by_username = {entry.username: entry for entry in entries}
    records = compute_ranks(
        [entry.as_record() for entry in entries], mode, yearly_tiebreak
    )
    return [
        by_username[record.identifier].model_copy(update={"rank": record.rank})
        for record in records
    ]


class LeaderboardService:
    """
    Builds ranked leaderboards from the stats documents.

    Results are cached in the injected TTLCache; a miss rebuilds the
    whole leaderboard from the database.
    """

    def __init__(
        self,
        repository: StatsRepository,
        cache: TTLCache,
        config: Optional[LeaderboardConfig] = None,
        site_url: str = DEFAULT_SITE_URL,
        ra_client_factory: Optional[Callable[[], RetroAchievementsClient]] = None,
    ):
        self.repository = repository
        self.cache = cache
        self.config = config or LeaderboardConfig()
        self.site_url = site_url.rstrip("/")
        self.ra_client_factory = ra_client_factory

    def profile_image(self, username: str) -> str:
        return f"{self.site_url}/UserPic/{username}.png"

    def profile_url(self, username: str) -> str:
        return f"{self.site_url}/user/{username}"

    async def get_monthly_leaderboard(
        self, now: Optional[datetime] = None
    ) -> MonthlyLeaderboard:
        return await self.cache.get_or_fetch(
            MONTHLY_CACHE_KEY, lambda: self.build_monthly_leaderboard(now)
        )

    async def get_yearly_leaderboard(
        self, now: Optional[datetime] = None
    ) -> YearlyLeaderboard:
        return await self.cache.get_or_fetch(
            YEARLY_CACHE_KEY, lambda: self.build_yearly_leaderboard(now)
        )

    async def build_monthly_leaderboard(
        self, now: Optional[datetime] = None
    ) -> MonthlyLeaderboard:
        period = month_key(now)
        logger.info(f"Fetching fresh monthly leaderboard data for {period}")

        challenge = await self.repository.get_current_challenge()
        users_stats = _as_dict(await self.repository.get_user_stats())
        usernames = unique_usernames(await self.repository.get_valid_users())
        logger.info(f"Processing {len(usernames)} users")

        entries = []
        for username in usernames:
            user_stats = _as_dict(users_stats.get(username.lower()))
            monthly = _as_dict(_as_dict(user_stats.get("monthlyStats")).get(period))
            entries.append(
                MonthlyEntry(
                    username=username,
                    profile_image=self.profile_image(username),
                    profile_url=self.profile_url(username),
                    completed_achievements=int(
                        metric_value(monthly.get("completedAchievements"))
                    ),
                    total_achievements=int(
                        metric_value(monthly.get("totalAchievements"))
                    ),
                    completion_percentage=as_number(
                        monthly.get("completionPercentage")
                    ),
                    has_beaten_game=bool(monthly.get("hasBeatenGame", False)),
                )
            )

        active = [
            e for e in entries
            if e.completed_achievements > 0 or e.completion_percentage > 0
        ]
        ranked = rank_entries(active, RankMode.MONTHLY)
        top, rest = self._split(ranked)

        leaderboard = MonthlyLeaderboard(
            game_info=await self._game_info(challenge),
            leaderboard=top,
            additional_participants=[e.username for e in rest],
            last_updated=isoformat_utc(now),
        )
        logger.info("Successfully fetched and processed leaderboard data")
        return leaderboard

    async def build_yearly_leaderboard(
        self, now: Optional[datetime] = None
    ) -> YearlyLeaderboard:
        period = year_key(now)
        logger.info(f"Fetching fresh yearly leaderboard data for {period}")

        users_stats = await self.repository.get_user_stats()
        if not isinstance(users_stats, dict):
            raise StatsUnavailableError("No user stats found")

        usernames = unique_usernames(await self.repository.get_valid_users())

        entries = []
        for username in usernames:
            data = _as_dict(users_stats.get(username.lower()))
            bonus_points = [
                BonusPoint(
                    reason=str(bp.get("reason", "")),
                    points=as_number(bp.get("points")),
                    date=str(bp.get("date", "")),
                )
                for bp in data.get("bonusPoints") or []
                if isinstance(bp, dict) and str(bp.get("date", "")).startswith(period)
            ]
            entries.append(
                YearlyEntry(
                    username=username,
                    profile_image=self.profile_image(username),
                    profile_url=self.profile_url(username),
                    points=as_number(_as_dict(data.get("yearlyPoints")).get(period)),
                    achievements=int(metric_value(data.get("achievements"))),
                    bonus_points=bonus_points,
                )
            )

        active = [e for e in entries if e.points > 0 or e.bonus_points]
        ranked = rank_entries(
            active,
            RankMode.YEARLY,
            yearly_tiebreak=self.config.yearly_tiebreak_on_achievements,
        )
        top, rest = self._split(ranked)

        leaderboard = YearlyLeaderboard(
            leaderboard=top,
            additional_participants=[e.username for e in rest],
            last_updated=isoformat_utc(now),
        )
        logger.info("Successfully fetched and processed yearly leaderboard data")
        return leaderboard

    def _split(self, ranked: List[Entry]) -> Tuple[List[Entry], List[Entry]]:
        top_n = max(self.config.top_n, 0)
        return ranked[:top_n], ranked[top_n:]

    async def _game_info(self, challenge: Dict[str, Any]) -> GameInfo:
        """Challenge header, filled from the API when the document lacks it."""
        title = challenge.get("gameName")
        icon = challenge.get("gameIcon")
        game_id = challenge.get("gameId")

        if (not title or not icon) and game_id and self.ra_client_factory:
            try:
                async with self.ra_client_factory() as client:
                    game = await client.get_game(int(game_id))
                title = title or game.title
                icon = icon or game.image_icon
            except (RetroAchievementsAPIError, ValueError) as e:
                logger.warning(f"Could not load game {game_id} from RetroAchievements: {e}")

        return GameInfo(
            title=title or self.config.default_game_title,
            image_icon=icon or self.config.default_game_icon,
        )


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}
