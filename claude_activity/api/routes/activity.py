"""
Activity API routes
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel

from ...core.aggregator import week_project_durations
from ...core.monitor import ActivityMonitor
from ...utils import format_duration_compact
from .models import DayStatsResponse

router = APIRouter()
logger = logging.getLogger(__name__)


class ProjectDurationResponse(BaseModel):
    project: str
    durationSeconds: float
    durationFormatted: str


class TodayResponse(BaseModel):
    """Today's stats plus refresh metadata."""

    stats: DayStatsResponse
    isLoading: bool
    lastRefresh: str | None = None
    statusTitle: str


class WeekResponse(BaseModel):
    """Seven-day window, today first."""

    days: list[DayStatsResponse]
    projectDurations: list[ProjectDurationResponse]


def _monitor(request: Request) -> ActivityMonitor:
    return request.app.state.monitor


def _today_response(monitor: ActivityMonitor) -> TodayResponse:
    state = monitor.state
    refreshed = state.last_refresh
    day = (refreshed or monitor.clock()).date()
    return TodayResponse(
        stats=DayStatsResponse.from_stats(day, state.today),
        isLoading=state.is_loading,
        lastRefresh=refreshed.isoformat() if refreshed else None,
        statusTitle=monitor.status_title(),
    )


@router.get("/today")
def get_today(request: Request) -> TodayResponse:
    """Get today's session statistics"""
    return _today_response(_monitor(request))


@router.get("/week")
def get_week(request: Request) -> WeekResponse:
    """Get per-day statistics for the last seven days"""
    week = _monitor(request).state.week
    days = [
        DayStatsResponse.from_stats(day, stats)
        for day, stats in sorted(week.items(), reverse=True)
    ]
    durations = [
        ProjectDurationResponse(
            project=item.project,
            durationSeconds=item.duration,
            durationFormatted=format_duration_compact(item.duration),
        )
        for item in week_project_durations(week)
    ]
    return WeekResponse(days=days, projectDurations=durations)


@router.post("/refresh")
async def refresh(request: Request) -> TodayResponse:
    """Re-scan session logs now"""
    monitor = _monitor(request)
    started = datetime.now()
    await monitor.refresh()
    logger.info("Manual refresh took %.2fs", (datetime.now() - started).total_seconds())
    return _today_response(monitor)
