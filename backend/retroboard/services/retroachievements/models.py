from __future__ import annotations

from typing import Any

from pydantic import BaseModel, field_validator

from retroboard.ranking import metric_value

BEATEN_AWARD_KINDS = {"beaten-hardcore", "mastered"}


class GameSummary(BaseModel):
    game_id: int = 0
    title: str = ""
    console_name: str = ""
    image_icon: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any], game_id: int = 0) -> GameSummary:
        return cls(
            game_id=data.get("ID", game_id) or game_id,
            title=data.get("Title") or data.get("GameTitle") or "",
            console_name=data.get("ConsoleName", "") or "",
            image_icon=data.get("ImageIcon") or data.get("GameIcon") or "",
        )


class UserGameProgress(BaseModel):
    """A user's hardcore progress on one game."""

    username: str
    game_id: int
    title: str = ""
    num_achievements: int = 0
    num_awarded_hardcore: int = 0
    completion_percentage: float = 0.0
    highest_award_kind: str | None = None

    @field_validator("completion_percentage", mode="before")
    @classmethod
    def parse_percentage(cls, v: Any) -> float:
        # API reports "42.50%"
        return metric_value(v)

    @property
    def has_beaten_game(self) -> bool:
        return self.highest_award_kind in BEATEN_AWARD_KINDS

    def to_monthly_stats(self) -> dict[str, Any]:
        """Shape stored under userstats monthlyStats[period]."""
        return {
            "completedAchievements": self.num_awarded_hardcore,
            "totalAchievements": self.num_achievements,
            "completionPercentage": round(self.completion_percentage, 2),
            "hasBeatenGame": self.has_beaten_game,
        }

    @classmethod
    def from_api(
        cls, data: dict[str, Any], username: str, game_id: int
    ) -> UserGameProgress:
        num_achievements = int(metric_value(data.get("NumAchievements")))
        awarded = int(metric_value(data.get("NumAwardedToUserHardcore")))
        completion = data.get("UserCompletionHardcore")
        if completion in (None, "") and num_achievements:
            completion = awarded * 100 / num_achievements
        return cls(
            username=username,
            game_id=game_id,
            title=data.get("Title", "") or "",
            num_achievements=num_achievements,
            num_awarded_hardcore=awarded,
            completion_percentage=completion,
            highest_award_kind=data.get("HighestAwardKind"),
        )
