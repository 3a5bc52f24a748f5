"""Tests for session parsing."""

import json
from datetime import date, datetime

from claude_activity.core.sessions import SessionRecord, parse_session

from conftest import (
    assistant_line,
    progress_line,
    snapshot_line,
    summary_line,
    tool_result_line,
    ts,
    user_line,
)

LONG_NOTE = "I refactored the payment retry logic so failed charges are retried with backoff."


def _parse(lines, **kwargs):
    return parse_session("\n".join(lines), session_id="s1", project_name="acme-api", **kwargs)


class TestParseSession:
    """Tests for parse_session()."""

    def test_full_session(self):
        """Should collect counts, messages, files and commands."""
        session = _parse([
            user_line("Add retry logic to payments", ts(10, 0)),
            assistant_line(
                ts(10, 5),
                text=LONG_NOTE,
                tools=[
                    ("Edit", {"file_path": "/Users/dev/Projects/acme-api/billing/retry.py"}),
                    ("Bash", {"command": "pytest tests/billing"}),
                ],
            ),
            progress_line(ts(10, 6)),
            tool_result_line(ts(10, 7)),
        ])

        assert session is not None
        assert session.id == "s1"
        assert session.project_name == "acme-api"
        assert session.message_count == 3
        assert session.human_message_count == 1
        assert session.assistant_message_count == 1
        assert session.genuine_human_messages == ["Add retry logic to payments"]
        assert session.key_assistant_messages == [LONG_NOTE]
        assert session.files_modified == {"billing/retry.py"}
        assert session.commands_run == ["pytest tests/billing"]
        assert session.cwd == "/Users/dev/Projects/acme-api"
        assert session.start_time == datetime(2026, 2, 12, 10, 0).astimezone()
        assert session.end_time == datetime(2026, 2, 12, 10, 7).astimezone()

    def test_single_message_is_not_a_session(self):
        """Should return None for files with one message or fewer."""
        assert _parse([user_line("Add retry logic to payments", ts(10))]) is None
        assert _parse([progress_line(ts(10)), progress_line(ts(11))]) is None
        assert _parse([]) is None
        assert _parse([snapshot_line(), snapshot_line()]) is None

    def test_snapshots_are_not_counted(self):
        """Should ignore file-history-snapshot lines entirely."""
        session = _parse([user_line("Add retry logic", ts(10)), snapshot_line(), snapshot_line()])

        assert session is None

    def test_unparsed_lines_are_counted(self):
        """Should count lines that fail to decode as messages."""
        session = _parse([user_line("Add retry logic", ts(10)), "garbage {{"])

        assert session is not None
        assert session.message_count == 2
        assert session.human_message_count == 1

    def test_tool_results_are_not_human(self):
        """Should count tool results as messages but not as human input."""
        session = _parse([tool_result_line(ts(10)), tool_result_line(ts(10, 1))])

        assert session.message_count == 2
        assert session.human_message_count == 0
        assert not session.is_meaningful

    def test_first_human_messages_kept(self):
        """Should keep the first 10 genuine messages and count the rest."""
        lines = [user_line(f"Request number {i} please", ts(10, i)) for i in range(12)]

        session = _parse(lines)

        assert session.human_message_count == 12
        assert len(session.genuine_human_messages) == 10
        assert session.genuine_human_messages[0] == "Request number 0 please"
        assert session.genuine_human_messages[-1] == "Request number 9 please"

    def test_human_messages_truncated(self):
        session = _parse([user_line("a" * 500, ts(10)), user_line("b" * 10, ts(10, 1))])

        assert len(session.genuine_human_messages[0]) == 300

    def test_latest_assistant_notes_kept(self):
        """Should keep the 5 most recent substantive notes."""
        lines = [
            assistant_line(ts(10, i), text=f"Note {i}: " + "detail " * 10)
            for i in range(7)
        ]

        session = _parse(lines)

        assert session.assistant_message_count == 7
        assert len(session.key_assistant_messages) == 5
        assert session.key_assistant_messages[0].startswith("Note 2:")
        assert session.key_assistant_messages[-1].startswith("Note 6:")

    def test_assistant_notes_truncated(self):
        session = _parse([
            assistant_line(ts(10), text="z" * 400),
            assistant_line(ts(10, 1), text="short"),
        ])

        assert session.key_assistant_messages == ["z" * 200]

    def test_assistant_without_message_not_counted(self):
        """Should count the line but not as an assistant message."""
        bare = json.dumps({"type": "assistant", "timestamp": ts(10)})

        session = _parse([bare, user_line("Ship the release", ts(10, 1))])

        assert session.message_count == 2
        assert session.assistant_message_count == 0

    def test_commands_capped(self):
        """Should keep at most 5 commands."""
        lines = [
            assistant_line(ts(10, i), tools=[("Bash", {"command": f"make step{i}"})])
            for i in range(8)
        ]

        session = _parse(lines)

        assert session.commands_run == [f"make step{i}" for i in range(5)]

    def test_last_summary_wins(self):
        session = _parse([
            summary_line("First summary"),
            user_line("Add retry logic", ts(10)),
            summary_line("s" * 600),
        ])

        assert session.summary == "s" * 400

    def test_first_cwd_wins(self):
        session = _parse([
            user_line("Add retry logic", ts(10), cwd="/first"),
            user_line("And update docs", ts(10, 1), cwd="/second"),
        ])

        assert session.cwd == "/first"


class TestActiveDuration:
    """Tests for active time accumulation."""

    def test_gaps_up_to_thirty_minutes_count(self):
        """Should include a gap of exactly 30 minutes."""
        session = _parse([
            user_line("Start the work", ts(10, 0)),
            progress_line(ts(10, 5)),
            user_line("Keep going now", ts(10, 35)),
        ])

        assert session.duration == 35 * 60

    def test_long_gaps_excluded(self):
        """Should drop idle gaps longer than 30 minutes."""
        session = _parse([
            user_line("Start the work", ts(10, 0)),
            user_line("Back from lunch", ts(10, 30, 1)),
            user_line("One more thing", ts(10, 40, 1)),
        ])

        assert session.duration == 10 * 60

    def test_out_of_order_timestamps_ignored(self):
        """Should never subtract time for backwards timestamps."""
        session = _parse([
            user_line("Start the work", ts(10, 10)),
            user_line("Earlier stamp", ts(10, 0)),
            user_line("Later again", ts(10, 5)),
        ])

        assert session.duration == 5 * 60
        assert session.start_time == datetime(2026, 2, 12, 10, 10).astimezone()
        assert session.end_time == datetime(2026, 2, 12, 10, 5).astimezone()

    def test_fall_back_gap_uses_real_elapsed_time(self, new_york_tz):
        """Should count 20 real minutes across the autumn clock change."""
        session = _parse([
            user_line("Start the migration", "2026-11-01T05:50:00Z"),
            assistant_line("2026-11-01T06:10:00Z", text=LONG_NOTE),
        ])

        assert session.duration == 20 * 60
        assert session.start_time < session.end_time
        assert session.start_time.strftime("%H:%M") == "01:50"
        assert session.end_time.strftime("%H:%M") == "01:10"

    def test_spring_forward_gap_uses_real_elapsed_time(self, new_york_tz):
        """Should not treat the skipped hour as idle time."""
        session = _parse([
            user_line("Start the migration", "2026-03-08T06:50:00Z"),
            assistant_line("2026-03-08T07:10:00Z", text=LONG_NOTE),
        ])

        assert session.duration == 20 * 60
        assert session.end_time.strftime("%H:%M") == "03:10"

    def test_start_date_follows_local_calendar(self, new_york_tz):
        session = _parse([
            user_line("Late night fix", "2026-11-01T03:30:00Z"),
            user_line("Still going here", "2026-11-01T03:40:00Z"),
        ])

        assert session.start_time.date() == date(2026, 10, 31)

    def test_duration_formatted(self):
        session = SessionRecord(id="s", project_path="", project_name="", active_duration=3900)

        assert session.duration_formatted == "1h 5m"


class TestSessionRecord:
    """Tests for SessionRecord properties."""

    def test_best_description_fallbacks(self):
        session = SessionRecord(id="s", project_path="", project_name="")
        assert session.best_description == "Coding session"

        session.summary = "Summary text"
        assert session.best_description == "Summary text"

        session.key_assistant_messages = ["Assistant note"]
        assert session.best_description == "Assistant note"

        session.genuine_human_messages = ["Human request"]
        assert session.best_description == "Human request"

    def test_is_meaningful(self):
        session = SessionRecord(id="s", project_path="", project_name="")
        assert not session.is_meaningful

        session.assistant_message_count = 1
        assert not session.is_meaningful

        session.assistant_message_count = 2
        assert session.is_meaningful

        session.assistant_message_count = 0
        session.human_message_count = 1
        assert session.is_meaningful
