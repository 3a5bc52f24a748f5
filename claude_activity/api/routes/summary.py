"""
Day summary API routes
"""

import logging
from datetime import date, datetime

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from ...core.monitor import ActivityMonitor
from ...core.summary_service import SummaryService
from .models import SummaryResponse

router = APIRouter()
logger = logging.getLogger(__name__)


class TodaySummaryResponse(BaseModel):
    """Current summary state for today."""

    summary: SummaryResponse | None = None
    isGenerating: bool
    error: str | None = None
    hasApiKey: bool


class HistoryEntryResponse(BaseModel):
    date: str
    summary: SummaryResponse


class HistoryResponse(BaseModel):
    """Stored summaries before today, newest first."""

    entries: list[HistoryEntryResponse]


def _service(request: Request) -> SummaryService:
    return request.app.state.summary_service


def _monitor(request: Request) -> ActivityMonitor:
    return request.app.state.monitor


def _today_summary(service: SummaryService) -> TodaySummaryResponse:
    summary = service.daily_summary
    return TodaySummaryResponse(
        summary=SummaryResponse.from_summary(summary) if summary else None,
        isGenerating=service.is_generating,
        error=service.error,
        hasApiKey=service.has_api_key,
    )


@router.get("/today")
def get_today_summary(request: Request) -> TodaySummaryResponse:
    """Get the current summary for today"""
    return _today_summary(_service(request))


@router.post("/regenerate")
async def regenerate_summary(request: Request) -> TodaySummaryResponse:
    """Discard today's summary and generate a new one"""
    service = _service(request)
    monitor = _monitor(request)
    service.regenerate(monitor.state.today, today=monitor.clock().date())
    return _today_summary(service)


@router.get("/history")
def get_history(request: Request) -> HistoryResponse:
    """List stored summaries before today"""
    service = _service(request)
    entries = []
    for day in service.load_history_dates(_monitor(request).clock().date()):
        summary = service.store.load(day)
        if summary is not None:
            entries.append(
                HistoryEntryResponse(date=day.isoformat(), summary=SummaryResponse.from_summary(summary))
            )
    return HistoryResponse(entries=entries)


@router.get("/{day}")
def get_summary(day: str, request: Request) -> SummaryResponse:
    """Get the stored summary for a YYYY-MM-DD date"""
    try:
        parsed: date = datetime.strptime(day, "%Y-%m-%d").date()
    except ValueError:
        raise HTTPException(status_code=400, detail="Date must be YYYY-MM-DD")

    summary = _service(request).store.load(parsed)
    if summary is None:
        raise HTTPException(status_code=404, detail="No summary for that date")
    return SummaryResponse.from_summary(summary)
