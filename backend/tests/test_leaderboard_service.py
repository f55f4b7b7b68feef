"""Tests for monthly and yearly leaderboard assembly."""

import asyncio
from datetime import datetime, timezone

import pytest

from fakes import FakeDatabase
from retroboard.config import LeaderboardConfig
from retroboard.services.leaderboard import (
    LeaderboardService,
    StatsUnavailableError,
    unique_usernames,
)
from retroboard.services.retroachievements import RetroAchievementsAPIError
from retroboard.services.retroachievements.models import GameSummary
from retroboard.storage.cache import TTLCache
from retroboard.storage.repository import StatsRepository

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def _monthly(completed, total, pct, beaten=False) -> dict:
    return {
        "completedAchievements": completed,
        "totalAchievements": total,
        "completionPercentage": pct,
        "hasBeatenGame": beaten,
    }


def make_db(users, stats, challenge=None) -> FakeDatabase:
    collections = {
        "users": [{"_id": "validUsers", "users": users}],
        "challenges": [challenge] if challenge else [],
    }
    if stats is not None:
        collections["userstats"] = [{"_id": "stats", "users": stats}]
    return FakeDatabase(collections)


def make_service(db, **kwargs) -> LeaderboardService:
    return LeaderboardService(
        repository=StatsRepository(db),
        cache=kwargs.pop("cache", TTLCache()),
        **kwargs,
    )


def test_monthly_leaderboard_ranks_with_ties() -> None:
    db = make_db(
        ["Alice", "Bob", "Carol", "Dave"],
        {
            "alice": {"monthlyStats": {"2025-01": _monthly(5, 10, 50.0)}},
            "bob": {"monthlyStats": {"2025-01": _monthly(5, 10, 50.0)}},
            "carol": {"monthlyStats": {"2025-01": _monthly(10, 10, 100.0, True)}},
            "dave": {"monthlyStats": {"2024-12": _monthly(3, 10, 30.0)}},
        },
        {"_id": "current", "gameName": "Sonic the Hedgehog", "gameIcon": "/Images/001.png"},
    )

    board = asyncio.run(make_service(db).build_monthly_leaderboard(NOW))

    assert [(e.username, e.rank) for e in board.leaderboard] == [
        ("Carol", 1),
        ("Alice", 2),
        ("Bob", 2),
    ]
    assert board.leaderboard[0].has_beaten_game is True
    assert board.leaderboard[0].profile_image == "https://retroachievements.org/UserPic/Carol.png"
    assert board.leaderboard[0].profile_url == "https://retroachievements.org/user/Carol"
    assert board.game_info.title == "Sonic the Hedgehog"
    assert board.game_info.image_icon == "/Images/001.png"
    assert board.additional_participants == []
    assert board.last_updated == "2025-01-15T12:00:00.000Z"


def test_monthly_leaderboard_splits_top_n() -> None:
    users = [f"user{i}" for i in range(5)]
    stats = {
        name: {"monthlyStats": {"2025-01": _monthly(i + 1, 10, (i + 1) * 10)}}
        for i, name in enumerate(users)
    }
    service = make_service(make_db(users, stats), config=LeaderboardConfig(top_n=2))

    board = asyncio.run(service.build_monthly_leaderboard(NOW))

    assert [e.username for e in board.leaderboard] == ["user4", "user3"]
    assert board.additional_participants == ["user2", "user1", "user0"]


def test_monthly_leaderboard_defaults_without_challenge_or_stats() -> None:
    db = make_db(["Alice"], None)

    board = asyncio.run(make_service(db).build_monthly_leaderboard(NOW))

    assert board.leaderboard == []
    assert board.game_info.title == "Current Challenge"
    assert board.game_info.image_icon == "/Images/093950.png"


def test_monthly_leaderboard_coerces_malformed_stats() -> None:
    db = make_db(
        ["Alice", "Bob"],
        {
            "alice": {"monthlyStats": {"2025-01": _monthly("7", None, "35.5")}},
            "bob": {"monthlyStats": {"2025-01": "corrupt"}},
        },
    )

    board = asyncio.run(make_service(db).build_monthly_leaderboard(NOW))

    assert len(board.leaderboard) == 1
    entry = board.leaderboard[0]
    assert entry.completed_achievements == 7
    assert entry.total_achievements == 0
    assert entry.completion_percentage == 35.5


def test_monthly_game_info_falls_back_to_api() -> None:
    class StubClient:
        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc):
            return None

        async def get_game(self, game_id: int) -> GameSummary:
            assert game_id == 1
            return GameSummary(game_id=1, title="Sonic", image_icon="/Images/085573.png")

    db = make_db(["Alice"], {}, {"_id": "current", "gameId": "1"})
    service = make_service(db, ra_client_factory=StubClient)

    board = asyncio.run(service.build_monthly_leaderboard(NOW))

    assert board.game_info.title == "Sonic"
    assert board.game_info.image_icon == "/Images/085573.png"


def test_monthly_game_info_survives_api_errors() -> None:
    class FailingClient:
        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc):
            return None

        async def get_game(self, game_id: int) -> GameSummary:
            raise RetroAchievementsAPIError("boom", status_code=500)

    db = make_db(["Alice"], {}, {"_id": "current", "gameId": 1, "gameName": "Named"})
    service = make_service(db, ra_client_factory=FailingClient)

    board = asyncio.run(service.build_monthly_leaderboard(NOW))

    assert board.game_info.title == "Named"
    assert board.game_info.image_icon == "/Images/093950.png"


def test_yearly_leaderboard_ranks_points_and_filters_bonus() -> None:
    db = make_db(
        ["Alice", "Bob", "Carol", "Dave", "Erin"],
        {
            "alice": {"yearlyPoints": {"2025": 12, "2024": 99}, "achievements": 40},
            "bob": {"yearlyPoints": {"2025": 12}, "achievements": 80},
            "carol": {"yearlyPoints": {"2025": 20}},
            "dave": {
                "yearlyPoints": {},
                "bonusPoints": [
                    {"reason": "Event win", "points": 2, "date": "2025-01-03"},
                    {"reason": "Old", "points": 5, "date": "2024-12-30"},
                ],
            },
            "erin": {"yearlyPoints": {"2024": 50}},
        },
    )

    board = asyncio.run(make_service(db).build_yearly_leaderboard(NOW))

    assert [(e.username, e.points, e.rank) for e in board.leaderboard] == [
        ("Carol", 20, 1),
        ("Alice", 12, 2),
        ("Bob", 12, 2),
        ("Dave", 0, 4),
    ]
    dave = board.leaderboard[-1]
    assert [bp.reason for bp in dave.bonus_points] == ["Event win"]


def test_yearly_tiebreak_on_achievements_is_configurable() -> None:
    db = make_db(
        ["Alice", "Bob"],
        {
            "alice": {"yearlyPoints": {"2025": 12}, "achievements": 40},
            "bob": {"yearlyPoints": {"2025": 12}, "achievements": 80},
        },
    )
    service = make_service(
        db, config=LeaderboardConfig(yearly_tiebreak_on_achievements=True)
    )

    board = asyncio.run(service.build_yearly_leaderboard(NOW))

    assert [(e.username, e.rank) for e in board.leaderboard] == [("Bob", 1), ("Alice", 2)]


def test_yearly_leaderboard_requires_stats_document() -> None:
    db = make_db(["Alice"], None)

    with pytest.raises(StatsUnavailableError):
        asyncio.run(make_service(db).build_yearly_leaderboard(NOW))


def test_yearly_leaderboard_with_empty_stats_map_is_empty() -> None:
    db = make_db(["Alice"], {})

    board = asyncio.run(make_service(db).build_yearly_leaderboard(NOW))

    assert board.leaderboard == []
    assert board.additional_participants == []


def test_cached_leaderboard_is_reused_until_expiry() -> None:
    db = make_db(["Alice"], {"alice": {"yearlyPoints": {"2025": 5}}})
    service = make_service(db)

    async def run():
        first = await service.get_yearly_leaderboard(NOW)
        db["userstats"].docs["stats"]["users"]["alice"]["yearlyPoints"]["2025"] = 50
        second = await service.get_yearly_leaderboard(NOW)
        service.cache.clear()
        third = await service.get_yearly_leaderboard(NOW)
        return first, second, third

    first, second, third = asyncio.run(run())
    assert second is first
    assert third.leaderboard[0].points == 50


def test_unique_usernames_drops_duplicates_and_blanks() -> None:
    assert unique_usernames(["Alice", "alice", "", None, "Bob", "  "]) == ["Alice", "Bob"]


def test_leaderboard_serializes_camel_case() -> None:
    db = make_db(["Alice"], {"alice": {"monthlyStats": {"2025-01": _monthly(1, 2, 50)}}})

    board = asyncio.run(make_service(db).build_monthly_leaderboard(NOW))
    payload = board.model_dump(by_alias=True)

    assert set(payload) == {"gameInfo", "leaderboard", "additionalParticipants", "lastUpdated"}
    assert set(payload["gameInfo"]) == {"Title", "ImageIcon"}
    assert payload["leaderboard"][0]["completionPercentage"] == 50
    assert payload["leaderboard"][0]["rank"] == 1
