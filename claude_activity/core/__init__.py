"""Core business logic for claude-activity."""

from .settings import ActivitySettings, SettingsStore, resolve_api_key
from .filters import DEFAULT_FILTERS, FilterConfig
from .classifier import LogRecord, RecordType, classify
from .sessions import SessionRecord, parse_session
from .loader import SessionLoader, extract_project_name, load_all_sessions
from .aggregator import (
    DayStats,
    ProjectDuration,
    compute_today_stats,
    compute_week_stats,
    session_fingerprint,
    week_project_durations,
)
from .summary import DailySummary, DayMood, build_prompt, generate_local_summary, parse_summary_response
from .summary_store import SummaryStore
from .summary_service import SummaryService
from .monitor import ActivityMonitor, ActivityState

__all__ = [
    "ActivityMonitor",
    "ActivitySettings",
    "ActivityState",
    "DailySummary",
    "DayMood",
    "DayStats",
    "DEFAULT_FILTERS",
    "FilterConfig",
    "LogRecord",
    "ProjectDuration",
    "RecordType",
    "SessionLoader",
    "SessionRecord",
    "SettingsStore",
    "SummaryService",
    "SummaryStore",
    "build_prompt",
    "classify",
    "compute_today_stats",
    "compute_week_stats",
    "extract_project_name",
    "generate_local_summary",
    "load_all_sessions",
    "parse_session",
    "parse_summary_response",
    "resolve_api_key",
    "session_fingerprint",
    "week_project_durations",
]
