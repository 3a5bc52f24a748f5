"""Pydantic response models shared by the activity and summary routes."""

from datetime import date
from typing import Optional

from pydantic import BaseModel

from ...core.aggregator import DayStats
from ...core.sessions import SessionRecord
from ...core.summary import DailySummary


class SessionResponse(BaseModel):
    """A single parsed session."""

    sessionId: str
    projectName: str
    projectPath: str
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    durationSeconds: float
    durationFormatted: str
    messageCount: int
    humanMessageCount: int
    assistantMessageCount: int
    description: str
    humanMessages: list[str]
    assistantNotes: list[str]
    filesModified: list[str]
    commandsRun: list[str]
    summary: Optional[str] = None
    cwd: Optional[str] = None

    @classmethod
    def from_record(cls, session: SessionRecord) -> "SessionResponse":
        return cls(
            sessionId=session.id,
            projectName=session.project_name,
            projectPath=session.project_path,
            startTime=session.start_time.isoformat() if session.start_time else None,
            endTime=session.end_time.isoformat() if session.end_time else None,
            durationSeconds=session.duration,
            durationFormatted=session.duration_formatted,
            messageCount=session.message_count,
            humanMessageCount=session.human_message_count,
            assistantMessageCount=session.assistant_message_count,
            description=session.best_description,
            humanMessages=session.genuine_human_messages,
            assistantNotes=session.key_assistant_messages,
            filesModified=sorted(session.files_modified),
            commandsRun=session.commands_run,
            summary=session.summary,
            cwd=session.cwd,
        )


class DayStatsResponse(BaseModel):
    """Aggregated statistics for one day."""

    date: str
    totalSessions: int
    totalMessages: int
    totalHumanMessages: int
    totalDurationSeconds: float
    totalDurationFormatted: str
    projectBreakdown: dict[str, int]
    sessions: list[SessionResponse]

    @classmethod
    def from_stats(cls, day: date, stats: DayStats) -> "DayStatsResponse":
        return cls(
            date=day.isoformat(),
            totalSessions=stats.total_sessions,
            totalMessages=stats.total_messages,
            totalHumanMessages=stats.total_human_messages,
            totalDurationSeconds=stats.total_duration,
            totalDurationFormatted=stats.total_duration_formatted,
            projectBreakdown=stats.project_breakdown,
            sessions=[SessionResponse.from_record(session) for session in stats.sessions],
        )


class SummaryResponse(BaseModel):
    """A stored or freshly generated day summary."""

    headline: str
    narrative: str
    highlights: list[str]
    mood: str
    moodLabel: str
    fingerprint: str

    @classmethod
    def from_summary(cls, summary: DailySummary) -> "SummaryResponse":
        return cls(
            headline=summary.headline,
            narrative=summary.narrative,
            highlights=summary.highlights,
            mood=summary.mood.value,
            moodLabel=summary.mood.label,
            fingerprint=summary.fingerprint,
        )
