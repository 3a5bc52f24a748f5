"""Pytest configuration and shared fixtures."""

import json
import os
import shutil
import tempfile
import time
from datetime import datetime
from pathlib import Path

import pytest

from claude_activity.core.sessions import SessionRecord


def ts(hour: int, minute: int = 0, second: int = 0, day: int = 12) -> str:
    """Naive ISO timestamp on 2026-02-<day>, read back as local time."""
    return datetime(2026, 2, day, hour, minute, second).isoformat()


def user_line(text, timestamp, cwd="/Users/dev/Projects/acme-api"):
    return json.dumps({
        "type": "user",
        "timestamp": timestamp,
        "cwd": cwd,
        "message": {"role": "user", "content": text},
    })


def tool_result_line(timestamp):
    return json.dumps({
        "type": "user",
        "timestamp": timestamp,
        "message": {
            "role": "user",
            "content": [{"type": "tool_result", "tool_use_id": "t1", "content": "ok"}],
        },
    })


def assistant_line(timestamp, text=None, tools=()):
    content = []
    if text is not None:
        content.append({"type": "text", "text": text})
    for name, tool_input in tools:
        content.append({"type": "tool_use", "id": "t1", "name": name, "input": tool_input})
    return json.dumps({
        "type": "assistant",
        "timestamp": timestamp,
        "message": {"role": "assistant", "content": content},
    })


def progress_line(timestamp):
    return json.dumps({"type": "progress", "timestamp": timestamp, "data": {"step": 1}})


def summary_line(text):
    return json.dumps({"type": "summary", "summary": text, "leafUuid": "abc"})


def snapshot_line():
    return json.dumps({"type": "file-history-snapshot", "snapshot": {"files": {}}})


def write_session(project_dir: Path, session_id: str, lines: list[str]) -> Path:
    project_dir.mkdir(parents=True, exist_ok=True)
    path = project_dir / f"{session_id}.jsonl"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def make_session(
    session_id,
    start=None,
    project="acme-api",
    duration=600.0,
    messages=None,
    notes=None,
    message_count=4,
):
    """Build a SessionRecord directly, bypassing log parsing."""
    return SessionRecord(
        id=session_id,
        project_path=f"-Users-dev-Projects-{project}",
        project_name=project,
        start_time=start,
        end_time=start,
        message_count=message_count,
        human_message_count=len(messages or []),
        assistant_message_count=len(notes or []),
        genuine_human_messages=list(messages or []),
        key_assistant_messages=list(notes or []),
        active_duration=duration,
    )


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    path = Path(tempfile.mkdtemp())
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def new_york_tz():
    """Pin the local zone to one with DST transitions."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    previous = os.environ.get("TZ")
    os.environ["TZ"] = "America/New_York"
    time.tzset()
    yield
    if previous is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = previous
    time.tzset()


@pytest.fixture
def no_env_api_key(monkeypatch):
    """Make sure a developer's GEMINI_API_KEY never leaks into a test."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


@pytest.fixture
def mock_projects_dir(temp_dir):
    """Create a mock ~/.claude/projects tree with one real session."""
    projects_dir = temp_dir / ".claude" / "projects"
    project_dir = projects_dir / "-Users-dev-Projects-acme-api"

    write_session(project_dir, "session-001", [
        user_line("Add pagination to the orders endpoint", ts(10, 0)),
        assistant_line(
            ts(10, 2),
            text="I added cursor-based pagination to the orders endpoint and updated the tests.",
            tools=[("Edit", {"file_path": "/Users/dev/Projects/acme-api/api/orders.py"})],
        ),
        progress_line(ts(10, 3)),
        tool_result_line(ts(10, 4)),
    ])

    return projects_dir
