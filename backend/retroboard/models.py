"""Pydantic models for leaderboards and nominations (camelCase on the wire)."""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from retroboard.ranking import ParticipantRecord

Number = Union[int, float]


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MonthlyEntry(BaseSchema):
    username: str
    profile_image: str
    profile_url: str
    completed_achievements: int = 0
    total_achievements: int = 0
    completion_percentage: Number = 0
    has_beaten_game: bool = False
    rank: Optional[int] = None

    def as_record(self) -> ParticipantRecord:
        return ParticipantRecord(
            identifier=self.username,
            primary_metric=self.completion_percentage,
            secondary_metric=self.completed_achievements,
        )


class BonusPoint(BaseSchema):
    reason: str = ""
    points: Number = 0
    date: str = ""


class YearlyEntry(BaseSchema):
    username: str
    profile_image: str
    profile_url: str
    points: Number = 0
    achievements: int = 0
    bonus_points: List[BonusPoint] = Field(default_factory=list)
    rank: Optional[int] = None

    def as_record(self) -> ParticipantRecord:
        return ParticipantRecord(
            identifier=self.username,
            primary_metric=self.points,
            secondary_metric=self.achievements,
        )


class GameInfo(BaseModel):
    """Challenge game header; keeps the RetroAchievements field casing."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(alias="Title")
    image_icon: str = Field(alias="ImageIcon")


class MonthlyLeaderboard(BaseSchema):
    game_info: GameInfo
    leaderboard: List[MonthlyEntry]
    additional_participants: List[str] = Field(default_factory=list)
    last_updated: str


class YearlyLeaderboard(BaseSchema):
    leaderboard: List[YearlyEntry]
    additional_participants: List[str] = Field(default_factory=list)
    last_updated: str


class Nomination(BaseSchema):
    game: str = ""
    platform: str = ""
    discord_username: str = ""
    discord_id: str = ""


class NominationsResponse(BaseSchema):
    nominations: List[Nomination]
    is_open: bool = False
    last_updated: str


class PlatformGroup(BaseSchema):
    platform: str
    full_name: str
    nominations: List[Nomination]


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
