"""Tests for day and week aggregation."""

from datetime import date, datetime

from claude_activity.core.aggregator import (
    DayStats,
    compute_today_stats,
    compute_week_stats,
    session_fingerprint,
    week_project_durations,
)

from conftest import make_session

NOW = datetime(2026, 2, 12, 18, 0)


class TestTodayStats:
    """Tests for compute_today_stats()."""

    def test_filters_and_orders_today(self):
        """Should keep today's sessions, newest first."""
        sessions = [
            make_session("a", datetime(2026, 2, 12, 9, 0), duration=600),
            make_session("b", datetime(2026, 2, 12, 14, 0), project="web", duration=1200),
            make_session("c", datetime(2026, 2, 11, 23, 59)),
            make_session("d", None),
        ]

        stats = compute_today_stats(sessions, NOW)

        assert [session.id for session in stats.sessions] == ["b", "a"]
        assert stats.total_sessions == 2
        assert stats.total_messages == 8
        assert stats.total_duration == 1800
        assert stats.project_breakdown == {"web": 1, "acme-api": 1}

    def test_empty_day(self):
        stats = compute_today_stats([], NOW)

        assert stats.total_sessions == 0
        assert stats.sessions == []
        assert stats.fingerprint == ""

    def test_human_message_total(self):
        sessions = [
            make_session("a", datetime(2026, 2, 12, 9), messages=["one", "two"]),
            make_session("b", datetime(2026, 2, 12, 10), messages=["three"]),
        ]

        assert compute_today_stats(sessions, NOW).total_human_messages == 3


class TestFingerprint:
    """Tests for session fingerprints."""

    def test_order_independent(self):
        first = [make_session("b"), make_session("a"), make_session("c")]
        second = [make_session("c"), make_session("b"), make_session("a")]

        assert session_fingerprint(first) == session_fingerprint(second) == "abc"

    def test_day_stats_fingerprint_tracks_session_set(self):
        sessions = [make_session("x", datetime(2026, 2, 12, 9))]
        before = compute_today_stats(sessions, NOW).fingerprint

        sessions.append(make_session("y", datetime(2026, 2, 12, 10)))
        after = compute_today_stats(sessions, NOW).fingerprint

        assert before != after


class TestWeekStats:
    """Tests for compute_week_stats()."""

    def test_seven_days_keyed_by_date(self):
        sessions = [
            make_session("today", datetime(2026, 2, 12, 9)),
            make_session("six-ago", datetime(2026, 2, 6, 9)),
            make_session("seven-ago", datetime(2026, 2, 5, 9)),
        ]

        week = compute_week_stats(sessions, NOW)

        assert len(week) == 7
        assert min(week) == date(2026, 2, 6)
        assert max(week) == date(2026, 2, 12)
        assert week[date(2026, 2, 6)].total_sessions == 1
        assert date(2026, 2, 5) not in week
        assert week[date(2026, 2, 10)].total_sessions == 0

    def test_project_durations_ranked(self):
        """Should sum active time per project across the week."""
        sessions = [
            make_session("a", datetime(2026, 2, 12, 9), project="acme", duration=600),
            make_session("b", datetime(2026, 2, 10, 9), project="web", duration=3000),
            make_session("c", datetime(2026, 2, 9, 9), project="acme", duration=600),
        ]

        ranked = week_project_durations(compute_week_stats(sessions, NOW))

        assert [(item.project, item.duration) for item in ranked] == [("web", 3000), ("acme", 1200)]


class TestFormatting:
    """Tests for DayStats formatting."""

    def test_total_duration_formatted(self):
        assert DayStats(total_duration=42 * 60).total_duration_formatted == "42 min"
        assert DayStats(total_duration=65 * 60).total_duration_formatted == "1h 5m"
        assert DayStats().total_duration_formatted == "0 min"
