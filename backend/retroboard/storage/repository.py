"""
Stats Repository

Read access to the community collections plus the one write used by the
progress sync.

Collections:
- challenges: {_id: "current", gameName, gameIcon, gameId}
- userstats: {_id: "stats", users: {<lowercase name>: {...}}}
- users: {_id: "validUsers", users: [...]}
- nominations: {_id: "nominations", nominations: {<YYYY-MM>: [...]}}, {_id: "status", isOpen}
"""

import logging
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

logger = logging.getLogger(__name__)

CHALLENGES = "challenges"
USER_STATS = "userstats"
USERS = "users"
NOMINATIONS = "nominations"


class StatsRepository:
    """Document lookups against the community database."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def get_current_challenge(self) -> Dict[str, Any]:
        doc = await self.db[CHALLENGES].find_one({"_id": "current"})
        return doc or {}

    async def get_user_stats(self) -> Optional[Dict[str, Any]]:
        """Return the per-user stats mapping, or None when it is absent."""
        doc = await self.db[USER_STATS].find_one({"_id": "stats"})
        if not doc or doc.get("users") is None:
            return None
        return doc["users"]

    async def get_valid_users(self) -> List[str]:
        doc = await self.db[USERS].find_one({"_id": "validUsers"})
        return list((doc or {}).get("users") or [])

    async def get_nominations(self, period: str) -> List[Dict[str, Any]]:
        doc = await self.db[NOMINATIONS].find_one({"_id": "nominations"})
        by_period = (doc or {}).get("nominations") or {}
        return list(by_period.get(period) or [])

    async def is_nominations_open(self) -> bool:
        doc = await self.db[NOMINATIONS].find_one({"_id": "status"})
        return bool((doc or {}).get("isOpen", False))

    async def count_collections(self) -> Dict[str, int]:
        """Document counts for the collections the dashboard reads."""
        return {
            "challenges": await self.db[CHALLENGES].count_documents({}),
            "users": await self.db[USERS].count_documents({}),
            "userStats": await self.db[USER_STATS].count_documents({}),
        }

    async def update_monthly_stats(
        self,
        username: str,
        period: str,
        stats: Dict[str, Any],
    ) -> None:
        """Write one user's monthly stats, creating the stats document if needed."""
        field = f"users.{username.lower()}.monthlyStats.{period}"
        await self.db[USER_STATS].update_one(
            {"_id": "stats"},
            {"$set": {field: stats}},
            upsert=True,
        )
        logger.debug(f"Updated monthly stats for {username} ({period})")
