"""Day summary models, prompt construction, and the local fallback."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from .aggregator import DayStats

logger = logging.getLogger(__name__)

MAX_PROMPT_SESSIONS = 15
GENERIC_HEADLINE = "Your day with Claude"
NO_SESSIONS_HEADLINE = "No sessions today"
BACKFILL_FINGERPRINT_PREFIX = "backfill-"


class DayMood(Enum):
    """Overall tone of a day's work."""

    PRODUCTIVE = "productive"
    FOCUSED = "focused"
    EXPLORATORY = "exploratory"
    DEBUGGING = "debugging"
    CREATIVE = "creative"
    QUIET = "quiet"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: object) -> DayMood:
        """Map a raw string to a mood, defaulting to productive."""
        try:
            return cls(value)
        except (TypeError, ValueError):
            return cls.PRODUCTIVE


@dataclass
class DailySummary:
    """Generated summary for one calendar day."""

    headline: str
    narrative: str
    highlights: list[str] = field(default_factory=list)
    mood: DayMood = DayMood.PRODUCTIVE
    fingerprint: str = ""

    def to_dict(self) -> dict:
        return {
            "headline": self.headline,
            "narrative": self.narrative,
            "highlights": list(self.highlights),
            "mood": self.mood.value,
            "fingerprint": self.fingerprint,
        }

    @classmethod
    def from_dict(cls, data: dict) -> DailySummary:
        highlights = data.get("highlights")
        return cls(
            headline=_as_str(data.get("headline")),
            narrative=_as_str(data.get("narrative")),
            highlights=[item for item in highlights if isinstance(item, str)]
            if isinstance(highlights, list) else [],
            mood=DayMood.parse(data.get("mood", "productive")),
            fingerprint=_as_str(data.get("fingerprint")),
        )


def _as_str(value: object, default: str = "") -> str:
    return value if isinstance(value, str) else default


def backfill_fingerprint(day: date) -> str:
    """Fingerprint for retroactively generated days, distinct from live ones."""
    return f"{BACKFILL_FINGERPRINT_PREFIX}{day.isoformat()}"


def no_sessions_summary(fingerprint: str = "") -> DailySummary:
    return DailySummary(
        headline=NO_SESSIONS_HEADLINE,
        narrative=(
            "You haven't started any Claude Code sessions today. "
            "Take it easy or jump into some coding!"
        ),
        highlights=[],
        mood=DayMood.QUIET,
        fingerprint=fingerprint,
    )


def build_prompt(stats: DayStats) -> str:
    """Render a day's sessions into the summarisation prompt."""
    descriptions: list[str] = []

    for index, session in enumerate(stats.sessions[:MAX_PROMPT_SESSIONS]):
        if not session.genuine_human_messages and not session.key_assistant_messages:
            continue

        start = session.start_time.strftime("%H:%M") if session.start_time else "?"
        parts = [
            f"Session {index + 1} [{start}, {session.duration_formatted}] "
            f"-- Project: {session.project_name}"
        ]

        if session.genuine_human_messages:
            parts.append("  Intent:")
            parts.extend(f'    - "{msg}"' for msg in session.genuine_human_messages[:3])

        if session.files_modified:
            parts.append(f"  Files touched: {', '.join(sorted(session.files_modified)[:10])}")

        if session.commands_run:
            parts.append(f"  Commands: {'; '.join(session.commands_run[:3])}")

        if session.key_assistant_messages:
            parts.append("  Assistant notes:")
            parts.extend(f'    - "{msg}"' for msg in session.key_assistant_messages[:3])

        if session.summary:
            parts.append(f"  Session summary: {session.summary[:200]}")

        descriptions.append("\n".join(parts))

    project_list = ", ".join(
        f"{name}: {count} sessions" for name, count in stats.project_breakdown.items()
    )
    sessions_block = "\n\n".join(descriptions)

    return f"""You are a concise productivity assistant. Summarize this developer's day working with Claude Code.

CRITICAL RULES:
- ONLY describe actual coding work (features built, bugs fixed, refactors, tests written)
- NEVER mention: system prompts, MCP plugins, hooks, tool configurations, XML tags, StructuredOutput, Claude-Mem, or any meta/infrastructure content
- The "Intent" lines are what the user actually typed; use these to understand what they wanted
- The "Files touched" and "Commands" show concrete work done
- The "Assistant notes" show what Claude reported doing
- Write in natural, human-readable language as if telling a friend what you accomplished

STATS:
- Total sessions: {stats.total_sessions}
- Total time: {stats.total_duration_formatted}
- Projects: {project_list}

SESSIONS:
{sessions_block}

Respond in this exact JSON format (no markdown, no code fences):
{{
    "headline": "5-8 word headline (e.g. 'Auth refactor & API endpoints')",
    "narrative": "2-3 sentence summary of actual coding work accomplished. Warm and factual.",
    "highlights": ["concrete thing 1", "concrete thing 2", "concrete thing 3"],
    "mood": "productive|focused|exploratory|debugging|creative|quiet"
}}

Rules:
- headline = a commit message for the entire day
- narrative = what you'd tell a colleague you got done
- highlights = 2-4 specific, concrete accomplishments (max 15 words each)
- If sessions are in the same project, show the narrative thread
- Use the user's language if session content is non-English
"""


def parse_summary_response(response: str, fingerprint: str) -> DailySummary:
    """Parse the model's JSON reply; never raises.

    Code fences are stripped first. A reply that still is not a JSON object
    becomes a generic summary carrying the first 300 characters as narrative.
    """
    cleaned = response.replace("```json", "").replace("```", "").strip()
    try:
        data = json.loads(cleaned)
    except (json.JSONDecodeError, ValueError):
        data = None

    if not isinstance(data, dict):
        logger.warning("Summary reply was not valid JSON; using raw text")
        return DailySummary(
            headline=GENERIC_HEADLINE,
            narrative=response[:300],
            highlights=[],
            mood=DayMood.PRODUCTIVE,
            fingerprint=fingerprint,
        )

    summary = DailySummary.from_dict(data)
    summary.fingerprint = fingerprint
    summary.highlights = summary.highlights[:4]
    if not isinstance(data.get("headline"), str):
        summary.headline = GENERIC_HEADLINE
    return summary


def _truncate_highlight(text: str) -> str:
    return text[:77] + "..." if len(text) > 80 else text


def generate_local_summary(stats: DayStats, fingerprint: str = "") -> DailySummary:
    """Deterministic summary built from the stats alone, no API needed."""
    session_count = stats.total_sessions
    projects = stats.project_breakdown

    if session_count == 0:
        return DailySummary(
            headline=NO_SESSIONS_HEADLINE,
            narrative="Take it easy or jump into some coding!",
            highlights=[],
            mood=DayMood.QUIET,
            fingerprint=fingerprint,
        )

    top_project = max(projects, key=projects.get) if projects else "your project"
    duration = stats.total_duration_formatted

    if session_count == 1:
        headline, mood = f"Quick session on {top_project}", DayMood.FOCUSED
    elif len(projects) == 1:
        headline, mood = f"Focused work on {top_project}", DayMood.FOCUSED
    elif session_count >= 5:
        headline, mood = f"Busy day across {len(projects)} projects", DayMood.PRODUCTIVE
    else:
        headline, mood = f"Working on {' & '.join(sorted(projects)[:2])}", DayMood.EXPLORATORY

    if len(projects) == 1:
        plural = "" if session_count == 1 else "s"
        narrative = f"You had {session_count} session{plural} on {top_project}, totaling {duration}."
    else:
        ranked = sorted(projects.items(), key=lambda item: item[1], reverse=True)[:3]
        project_summary = ", ".join(f"{name} ({count})" for name, count in ranked)
        narrative = (
            f"You worked across {len(projects)} projects: {project_summary}. "
            f"Total time: {duration}."
        )

    highlights: list[str] = []
    for session in stats.sessions[:4]:
        if session.genuine_human_messages:
            highlights.append(_truncate_highlight(session.genuine_human_messages[0]))
        elif session.key_assistant_messages:
            highlights.append(_truncate_highlight(session.key_assistant_messages[0]))

    return DailySummary(
        headline=headline,
        narrative=narrative,
        highlights=highlights,
        mood=mood,
        fingerprint=fingerprint,
    )
