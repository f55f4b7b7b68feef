"""Tests for pulling monthly progress into the stats document."""

import asyncio

import pytest

from fakes import FakeDatabase
from retroboard.services.retroachievements import (
    RetroAchievementsAPIError,
    RetroAchievementsAuthError,
)
from retroboard.services.retroachievements.models import UserGameProgress
from retroboard.services.stats_sync import sync_monthly_progress
from retroboard.storage.repository import StatsRepository


class StubClient:
    def __init__(self, progress: dict, failures: dict | None = None):
        self.progress = progress
        self.failures = failures or {}

    async def get_user_game_progress(self, username: str, game_id: int) -> UserGameProgress:
        if username in self.failures:
            raise self.failures[username]
        awarded, total = self.progress[username]
        return UserGameProgress(
            username=username,
            game_id=game_id,
            num_achievements=total,
            num_awarded_hardcore=awarded,
            completion_percentage=awarded * 100 / total,
        )


def test_sync_writes_monthly_stats_and_skips_failures() -> None:
    db = FakeDatabase({"users": [{"_id": "validUsers", "users": ["Alice", "Bob", "Carol"]}]})
    client = StubClient(
        {"Alice": (2, 3), "Carol": (3, 3)},
        failures={"Bob": RetroAchievementsAPIError("boom", status_code=500)},
    )

    updated = asyncio.run(
        sync_monthly_progress(StatsRepository(db), client, game_id=1, period="2025-01")
    )

    assert updated == 2
    users = db["userstats"].docs["stats"]["users"]
    assert users["alice"]["monthlyStats"]["2025-01"] == {
        "completedAchievements": 2,
        "totalAchievements": 3,
        "completionPercentage": 66.67,
        "hasBeatenGame": False,
    }
    assert "bob" not in users
    assert users["carol"]["monthlyStats"]["2025-01"]["completionPercentage"] == 100.0


def test_sync_stops_on_auth_error() -> None:
    db = FakeDatabase({"users": [{"_id": "validUsers", "users": ["Alice"]}]})
    client = StubClient({}, failures={"Alice": RetroAchievementsAuthError("denied", status_code=401)})

    with pytest.raises(RetroAchievementsAuthError):
        asyncio.run(sync_monthly_progress(StatsRepository(db), client, game_id=1, period="2025-01"))
