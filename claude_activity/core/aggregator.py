"""Day and week activity statistics."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from ..utils import format_duration_long
from .sessions import SessionRecord

WEEK_DAYS = 7


@dataclass
class DayStats:
    """Aggregated activity for one calendar day."""

    total_sessions: int = 0
    total_messages: int = 0
    total_human_messages: int = 0
    total_duration: float = 0.0
    sessions: list[SessionRecord] = field(default_factory=list)
    # Ties between equal counts follow insertion order and are not meaningful
    project_breakdown: dict[str, int] = field(default_factory=dict)

    @property
    def total_duration_formatted(self) -> str:
        return format_duration_long(self.total_duration)

    @property
    def fingerprint(self) -> str:
        return session_fingerprint(self.sessions)


@dataclass
class ProjectDuration:
    project: str
    duration: float


def session_fingerprint(sessions: Iterable[SessionRecord]) -> str:
    """Order-independent identity of a set of sessions."""
    return "".join(sorted(session.id for session in sessions))


def sessions_on(sessions: Iterable[SessionRecord], day: date) -> list[SessionRecord]:
    """Sessions whose start time falls on ``day``; sessions without one never match."""
    return [
        session for session in sessions
        if session.start_time is not None and session.start_time.date() == day
    ]


def build_day_stats(sessions: list[SessionRecord]) -> DayStats:
    stats = DayStats(sessions=list(sessions))
    for session in sessions:
        stats.total_sessions += 1
        stats.total_messages += session.message_count
        stats.total_human_messages += session.human_message_count
        stats.total_duration += session.duration
        stats.project_breakdown[session.project_name] = (
            stats.project_breakdown.get(session.project_name, 0) + 1
        )
    return stats


def compute_today_stats(sessions: Iterable[SessionRecord], now: datetime | None = None) -> DayStats:
    """Stats for today with sessions newest-first."""
    today = (now or datetime.now()).date()
    matching = sessions_on(sessions, today)
    matching.sort(key=lambda session: session.start_time, reverse=True)
    return build_day_stats(matching)


def compute_week_stats(
    sessions: Iterable[SessionRecord],
    now: datetime | None = None,
    days: int = WEEK_DAYS,
) -> dict[date, DayStats]:
    """Stats for today and the preceding ``days - 1`` days, keyed by date."""
    sessions = list(sessions)
    today = (now or datetime.now()).date()
    week: dict[date, DayStats] = {}
    for offset in range(days):
        day = today - timedelta(days=offset)
        week[day] = build_day_stats(sessions_on(sessions, day))
    return week


def week_project_durations(week: dict[date, DayStats]) -> list[ProjectDuration]:
    """Active time per project across the week, longest first."""
    totals: dict[str, float] = {}
    for stats in week.values():
        for session in stats.sessions:
            totals[session.project_name] = totals.get(session.project_name, 0.0) + session.duration
    ranked = [ProjectDuration(project=name, duration=total) for name, total in totals.items()]
    ranked.sort(key=lambda item: item.duration, reverse=True)
    return ranked
