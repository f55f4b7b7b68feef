"""Tests for nominations retrieval and platform grouping."""

import asyncio
from datetime import datetime, timezone

from fakes import FakeDatabase
from retroboard.models import Nomination
from retroboard.services.nominations import NominationsService, group_by_platform
from retroboard.storage.repository import StatsRepository

NOW = datetime(2025, 2, 3, tzinfo=timezone.utc)


def test_get_nominations_for_current_period() -> None:
    db = FakeDatabase({
        "nominations": [
            {
                "_id": "nominations",
                "nominations": {
                    "2025-02": [
                        {"game": "Contra", "platform": "NES", "discordUsername": "sam", "discordId": 123},
                        "not-a-nomination",
                    ],
                    "2025-01": [{"game": "Old", "platform": "SNES"}],
                },
            },
            {"_id": "status", "isOpen": True},
        ]
    })

    response = asyncio.run(NominationsService(StatsRepository(db)).get_nominations(NOW))

    assert [n.game for n in response.nominations] == ["Contra"]
    assert response.nominations[0].discord_id == "123"
    assert response.is_open is True
    assert response.model_dump(by_alias=True)["isOpen"] is True


def test_get_nominations_when_nothing_stored() -> None:
    response = asyncio.run(
        NominationsService(StatsRepository(FakeDatabase())).get_nominations(NOW)
    )

    assert response.nominations == []
    assert response.is_open is False


def test_group_by_platform_orders_platforms_and_games() -> None:
    nominations = [
        Nomination(game="zelda", platform="NES"),
        Nomination(game="Super Metroid", platform="SNES"),
        Nomination(game="Castlevania", platform="NES"),
        Nomination(game="Unknown Console Game", platform="VECTREX"),
        Nomination(game="Sonic", platform="GENESIS"),
    ]

    groups = group_by_platform(nominations)

    assert [g.platform for g in groups] == ["NES", "SNES", "GENESIS"]
    assert groups[0].full_name == "Nintendo Entertainment System"
    assert [n.game for n in groups[0].nominations] == ["Castlevania", "zelda"]
