"""Game nominations for the current period."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from retroboard.models import Nomination, NominationsResponse, PlatformGroup
from retroboard.periods import isoformat_utc, month_key
from retroboard.storage.repository import StatsRepository

logger = logging.getLogger(__name__)

PLATFORM_FULL_NAMES = {
    "NES": "Nintendo Entertainment System",
    "SNES": "Super Nintendo",
    "GB": "Nintendo Game Boy",
    "GBC": "Nintendo Game Boy Color",
    "GBA": "Nintendo Game Boy Advance",
    "N64": "Nintendo 64",
    "GENESIS": "Sega Genesis",
    "MASTER SYSTEM": "Sega Master System",
    "GAME GEAR": "Sega Game Gear",
    "PSX": "Sony PlayStation",
    "SATURN": "Sega Saturn",
    "NEO GEO": "SNK Neo Geo",
    "TURBOGRAFX-16": "TurboGrafx-16",
}

# Display order; platforms outside this list are not shown
PLATFORM_ORDER = [
    "NES",
    "SNES",
    "GENESIS",
    "N64",
    "PSX",
    "GB",
    "GBC",
    "GBA",
    "SATURN",
    "MASTER SYSTEM",
    "GAME GEAR",
    "NEO GEO",
    "TURBOGRAFX-16",
]


def parse_nomination(raw: Dict[str, Any]) -> Nomination:
    return Nomination(
        game=str(raw.get("game") or ""),
        platform=str(raw.get("platform") or ""),
        discord_username=str(raw.get("discordUsername") or ""),
        discord_id=str(raw.get("discordId") or ""),
    )


def group_by_platform(nominations: List[Nomination]) -> List[PlatformGroup]:
    """Group nominations in platform display order, games sorted by name."""
    grouped: Dict[str, List[Nomination]] = {}
    for nomination in nominations:
        grouped.setdefault(nomination.platform, []).append(nomination)

    groups = []
    for platform in PLATFORM_ORDER:
        if platform not in grouped:
            continue
        games = sorted(grouped[platform], key=lambda n: n.game.casefold())
        groups.append(
            PlatformGroup(
                platform=platform,
                full_name=PLATFORM_FULL_NAMES.get(platform, platform),
                nominations=games,
            )
        )
    return groups


class NominationsService:
    def __init__(self, repository: StatsRepository):
        self.repository = repository

    async def get_nominations(
        self, now: Optional[datetime] = None
    ) -> NominationsResponse:
        period = month_key(now)
        raw = await self.repository.get_nominations(period)
        nominations = [parse_nomination(n) for n in raw if isinstance(n, dict)]
        is_open = await self.repository.is_nominations_open()
        logger.info(
            f"Loaded {len(nominations)} nominations for {period} (open={is_open})"
        )
        return NominationsResponse(
            nominations=nominations,
            is_open=is_open,
            last_updated=isoformat_utc(now),
        )
