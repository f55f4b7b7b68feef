"""Tests for the HTTP routes with the repository dependency overridden."""

from fastapi.testclient import TestClient

from fakes import BrokenDatabase, FakeDatabase
from retroboard.api.dependencies import get_repository
from retroboard.api.server import create_app
from retroboard.config import Settings
from retroboard.models import GameInfo, MonthlyLeaderboard
from retroboard.periods import month_key, year_key
from retroboard.services.leaderboard import MONTHLY_CACHE_KEY
from retroboard.storage.repository import StatsRepository


def make_client(db) -> TestClient:
    app = create_app(Settings(_env_file=None))
    app.dependency_overrides[get_repository] = lambda: StatsRepository(db)
    return TestClient(app)


def populated_db() -> FakeDatabase:
    month, year = month_key(), year_key()
    return FakeDatabase({
        "users": [{"_id": "validUsers", "users": ["Alice", "Bob", "Carol"]}],
        "challenges": [{"_id": "current", "gameName": "Contra", "gameIcon": "/Images/1.png"}],
        "userstats": [{
            "_id": "stats",
            "users": {
                "alice": {
                    "monthlyStats": {month: {"completedAchievements": 10, "totalAchievements": 20, "completionPercentage": 50}},
                    "yearlyPoints": {year: 7},
                },
                "bob": {
                    "monthlyStats": {month: {"completedAchievements": 10, "totalAchievements": 20, "completionPercentage": 50}},
                    "yearlyPoints": {year: 7},
                },
                "carol": {
                    "monthlyStats": {month: {"completedAchievements": 4, "totalAchievements": 20, "completionPercentage": 20}},
                    "yearlyPoints": {year: 9},
                },
            },
        }],
        "nominations": [
            {"_id": "nominations", "nominations": {month: [{"game": "Contra", "platform": "NES"}]}},
            {"_id": "status", "isOpen": True},
        ],
    })


def test_monthly_leaderboard_route() -> None:
    response = make_client(populated_db()).get("/api/monthly-leaderboard")

    assert response.status_code == 200
    body = response.json()
    assert body["gameInfo"] == {"Title": "Contra", "ImageIcon": "/Images/1.png"}
    assert [(e["username"], e["rank"]) for e in body["leaderboard"]] == [
        ("Alice", 1),
        ("Bob", 1),
        ("Carol", 3),
    ]
    assert body["additionalParticipants"] == []
    assert body["lastUpdated"].endswith("Z")


def test_yearly_leaderboard_route() -> None:
    response = make_client(populated_db()).get("/api/yearly-leaderboard")

    assert response.status_code == 200
    ranks = [(e["username"], e["points"], e["rank"]) for e in response.json()["leaderboard"]]
    assert ranks == [("Carol", 9, 1), ("Alice", 7, 2), ("Bob", 7, 2)]


def test_yearly_leaderboard_without_stats_returns_error_payload() -> None:
    db = FakeDatabase({"users": [{"_id": "validUsers", "users": ["Alice"]}]})

    response = make_client(db).get("/api/yearly-leaderboard")

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to fetch yearly leaderboard data",
        "details": "No user stats found",
    }


def test_leaderboard_route_rejects_other_methods() -> None:
    response = make_client(populated_db()).post("/api/monthly-leaderboard")
    assert response.status_code == 405


def test_leaderboard_is_served_from_cache() -> None:
    db = populated_db()
    client = make_client(db)

    first = client.get("/api/yearly-leaderboard").json()
    db["userstats"].docs["stats"]["users"]["alice"]["yearlyPoints"][year_key()] = 100
    second = client.get("/api/yearly-leaderboard").json()

    assert second == first


def test_nominations_route() -> None:
    response = make_client(populated_db()).get("/api/nominations")

    assert response.status_code == 200
    body = response.json()
    assert body["isOpen"] is True
    assert body["nominations"][0]["game"] == "Contra"
    assert body["nominations"][0]["discordUsername"] == ""


def test_nominations_route_failure() -> None:
    response = make_client(BrokenDatabase()).get("/api/nominations")

    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error"}


def test_database_test_route_counts_collections() -> None:
    response = make_client(populated_db()).get("/api/test")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "connected"
    assert body["collections"] == {"challenges": 1, "users": 1, "userStats": 1}


def test_database_test_route_failure() -> None:
    response = make_client(BrokenDatabase()).get("/api/test")

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to connect to database"


def test_leaderboard_page_renders_both_modes() -> None:
    client = make_client(populated_db())

    monthly = client.get("/leaderboard")
    yearly = client.get("/leaderboard", params={"mode": "yearly"})

    assert monthly.status_code == 200
    assert "text/html" in monthly.headers["content-type"]
    assert "Contra" in monthly.text
    assert "medal-gold" in monthly.text
    assert "9 points" in yearly.text


def test_leaderboard_page_rejects_unknown_mode() -> None:
    response = make_client(populated_db()).get("/leaderboard", params={"mode": "weekly"})
    assert response.status_code == 422


def test_nominations_page() -> None:
    response = make_client(populated_db()).get("/nominations")

    assert response.status_code == 200
    assert "Nintendo Entertainment System" in response.text


def test_health_without_database() -> None:
    response = make_client(populated_db()).get("/health")

    assert response.status_code == 200
    assert response.json()["database"] == "disconnected"


def test_yearly_leaderboard_with_empty_stats_map() -> None:
    db = FakeDatabase({
        "users": [{"_id": "validUsers", "users": ["Alice"]}],
        "userstats": [{"_id": "stats", "users": {}}],
    })

    response = make_client(db).get("/api/yearly-leaderboard")

    assert response.status_code == 200
    assert response.json()["leaderboard"] == []
    assert response.json()["additionalParticipants"] == []


def test_leaderboard_page_uses_period_of_cached_board() -> None:
    client = make_client(populated_db())
    stale = MonthlyLeaderboard(
        game_info=GameInfo(title="Contra", image_icon="/Images/1.png"),
        leaderboard=[],
        last_updated="2024-02-29T23:59:00.000Z",
    )
    client.app.state.cache.set(MONTHLY_CACHE_KEY, stale)

    response = client.get("/leaderboard")

    assert response.status_code == 200
    assert "February 1st, 2024 to February 29th, 2024" in response.text
