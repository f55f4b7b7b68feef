"""
Rank Calculator

Turns per-participant statistics into an ordered leaderboard using
competition ranking: tied entries share a rank and the next distinct
entry's rank is its 1-based position (scores 100, 100, 90 rank 1, 1, 3).

Modes:
- monthly: completion percentage desc, then completed achievements desc
- yearly: points desc (optionally achievements desc as tie-break)
"""

import math
from enum import Enum
from typing import Any, Optional, Sequence

from pydantic import BaseModel, field_validator


class RankMode(str, Enum):
    """Scoring period a ranking is computed for."""

    MONTHLY = "monthly"
    YEARLY = "yearly"


def metric_value(value: Any) -> float:
    """Coerce a raw statistic to a number; anything unusable counts as zero."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        else:
            number = float(str(value).strip().rstrip("%"))
    except (ValueError, OverflowError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


class ParticipantRecord(BaseModel):
    """One participant's sort metrics for a period."""

    identifier: str
    primary_metric: float = 0.0
    secondary_metric: float = 0.0
    rank: Optional[int] = None

    @field_validator("primary_metric", "secondary_metric", mode="before")
    @classmethod
    def coerce_metric(cls, v: Any) -> float:
        return metric_value(v)


def uses_secondary(mode: RankMode, yearly_tiebreak: bool = False) -> bool:
    """Whether the secondary metric takes part in sorting and tie detection."""
    return RankMode(mode) is RankMode.MONTHLY or yearly_tiebreak


def ranking_key(
    record: ParticipantRecord,
    mode: RankMode,
    yearly_tiebreak: bool = False,
) -> tuple:
    """Comparison key for a record; equal keys are ties."""
    if uses_secondary(mode, yearly_tiebreak):
        return (record.primary_metric, record.secondary_metric)
    return (record.primary_metric,)


def compute_ranks(
    records: Sequence[ParticipantRecord],
    mode: RankMode,
    yearly_tiebreak: bool = False,
) -> list[ParticipantRecord]:
    """
    Sort records for the given mode and assign competition ranks.

    The sort is stable, so records with identical keys keep their input
    order. Input records are left untouched; ranked copies are returned.

    Args:
        records: Participant records with unassigned rank
        mode: monthly or yearly
        yearly_tiebreak: In yearly mode, also order and split ties by the
            secondary metric

    Returns:
        Ranked copies of the records in descending order
    """
    mode = RankMode(mode)
    keyed = [(ranking_key(r, mode, yearly_tiebreak), r) for r in records]
    keyed.sort(key=lambda item: tuple(-part for part in item[0]))

    ranked: list[ParticipantRecord] = []
    previous_key: Optional[tuple] = None
    current_rank = 1
    for index, (key, record) in enumerate(keyed):
        if index > 0 and key != previous_key:
            current_rank = index + 1
        previous_key = key
        ranked.append(record.model_copy(update={"rank": current_rank}))

    return ranked
