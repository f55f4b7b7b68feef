"""Leaderboard, nominations and embed page routes."""

import logging
from typing import Union

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, JSONResponse

from retroboard.api.dependencies import (
    get_app_settings,
    get_leaderboard_service,
    get_nominations_service,
    get_repository,
)
from retroboard.config import Settings
from retroboard.models import (
    ErrorResponse,
    MonthlyLeaderboard,
    NominationsResponse,
    YearlyLeaderboard,
)
from retroboard.periods import isoformat_utc
from retroboard.presentation import render_leaderboard_page, render_nominations_page
from retroboard.ranking import RankMode
from retroboard.services import LeaderboardService, NominationsService
from retroboard.storage.repository import StatsRepository

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=error, details=str(exc) or "Unknown error").model_dump(),
    )


# ============================================================================
# JSON API
# ============================================================================

@router.get(
    "/api/monthly-leaderboard",
    response_model=MonthlyLeaderboard,
    responses={500: {"model": ErrorResponse}},
    tags=["Leaderboard"],
)
async def monthly_leaderboard(
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """Current monthly challenge leaderboard."""
    try:
        return await service.get_monthly_leaderboard()
    except Exception as e:
        logger.exception("Monthly leaderboard request failed")
        return _error("Failed to fetch leaderboard data", e)


@router.get(
    "/api/yearly-leaderboard",
    response_model=YearlyLeaderboard,
    responses={500: {"model": ErrorResponse}},
    tags=["Leaderboard"],
)
async def yearly_leaderboard(
    service: LeaderboardService = Depends(get_leaderboard_service),
):
    """Yearly points leaderboard."""
    try:
        return await service.get_yearly_leaderboard()
    except Exception as e:
        logger.exception("Yearly leaderboard request failed")
        return _error("Failed to fetch yearly leaderboard data", e)


@router.get(
    "/api/nominations",
    response_model=NominationsResponse,
    tags=["Nominations"],
)
async def nominations(
    service: NominationsService = Depends(get_nominations_service),
):
    try:
        return await service.get_nominations()
    except Exception:
        logger.exception("Nominations request failed")
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


@router.get("/api/test", tags=["Health"])
async def database_test(repository: StatsRepository = Depends(get_repository)):
    """Count documents in every collection the dashboard reads."""
    try:
        collections = await repository.count_collections()
    except Exception as e:
        logger.exception("Database test failed")
        return _error("Failed to connect to database", e)

    return {
        "status": "connected",
        "collections": collections,
        "time": isoformat_utc(),
    }


# ============================================================================
# Embeddable pages
# ============================================================================

def _error_page(message: str) -> HTMLResponse:
    return HTMLResponse(
        content=(
            "<!DOCTYPE html><html><body style=\"background: #17254A; color: #fff\">"
            f"<div style=\"padding: 16px\">Error: {message}</div></body></html>"
        ),
        status_code=500,
    )


@router.get("/leaderboard", response_class=HTMLResponse, tags=["Embed"])
async def leaderboard_page(
    mode: RankMode = Query(RankMode.MONTHLY),
    service: LeaderboardService = Depends(get_leaderboard_service),
    settings: Settings = Depends(get_app_settings),
):
    """Tabbed monthly / yearly leaderboard for iframe embedding."""
    try:
        board: Union[MonthlyLeaderboard, YearlyLeaderboard]
        if mode is RankMode.MONTHLY:
            board = await service.get_monthly_leaderboard()
        else:
            board = await service.get_yearly_leaderboard()
    except Exception:
        logger.exception(f"Leaderboard page ({mode.value}) failed")
        return _error_page("Failed to fetch data")

    html = render_leaderboard_page(
        board,
        mode,
        # the board may be cached from the previous month
        period=board.last_updated[:7],
        challenge_rules=settings.embed.challenge_rules,
        site_url=settings.retroachievements.site_url,
        refresh_seconds=settings.embed.refresh_seconds,
    )
    return HTMLResponse(content=html)


@router.get("/nominations", response_class=HTMLResponse, tags=["Embed"])
async def nominations_page(
    service: NominationsService = Depends(get_nominations_service),
    settings: Settings = Depends(get_app_settings),
):
    """Nominations grouped by platform for iframe embedding."""
    try:
        response = await service.get_nominations()
    except Exception:
        logger.exception("Nominations page failed")
        return _error_page("Failed to fetch nominations")

    html = render_nominations_page(
        response, refresh_seconds=settings.embed.refresh_seconds
    )
    return HTMLResponse(content=html)
