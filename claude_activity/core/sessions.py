"""Session log parsing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from ..utils import format_duration_short, split_lines
from .classifier import (
    LogRecord,
    RecordType,
    classify,
    extract_assistant_text,
    extract_human_text,
    extract_summary_text,
    extract_tool_activity,
    is_genuine_human_input,
    is_substantive_assistant_text,
)
from .filters import DEFAULT_FILTERS, FilterConfig

logger = logging.getLogger(__name__)

# Gaps longer than this are idle time and do not count toward activity
MAX_ACTIVE_GAP_SECONDS = 30 * 60

MAX_HUMAN_MESSAGES = 10
MAX_HUMAN_CHARS = 300
MAX_ASSISTANT_MESSAGES = 5
MAX_ASSISTANT_CHARS = 200
MAX_COMMANDS = 5
MAX_SUMMARY_CHARS = 400


@dataclass
class SessionRecord:
    """A parsed Claude Code session (one JSONL file)."""

    id: str
    project_path: str
    project_name: str
    file_path: str = ""
    start_time: datetime | None = None  # aware, local zone
    end_time: datetime | None = None
    message_count: int = 0
    human_message_count: int = 0
    assistant_message_count: int = 0
    genuine_human_messages: list[str] = field(default_factory=list)
    key_assistant_messages: list[str] = field(default_factory=list)
    files_modified: set[str] = field(default_factory=set)
    commands_run: list[str] = field(default_factory=list)
    summary: str | None = None
    cwd: str | None = None
    active_duration: float = 0.0  # seconds, idle gaps excluded

    @property
    def duration(self) -> float:
        return self.active_duration

    @property
    def duration_formatted(self) -> str:
        return format_duration_short(self.active_duration)

    @property
    def best_description(self) -> str:
        if self.genuine_human_messages and self.genuine_human_messages[0]:
            return self.genuine_human_messages[0]
        if self.key_assistant_messages and self.key_assistant_messages[0]:
            return self.key_assistant_messages[0]
        if self.summary:
            return self.summary
        return "Coding session"

    @property
    def is_meaningful(self) -> bool:
        """Whether a session carries enough activity to surface."""
        return self.human_message_count > 0 or self.assistant_message_count > 1


class SessionAccumulator:
    """Running state while a session log is replayed line by line."""

    def __init__(self, filters: FilterConfig = DEFAULT_FILTERS):
        self.filters = filters
        self.first_timestamp: datetime | None = None
        self.last_timestamp: datetime | None = None
        self.previous_timestamp: datetime | None = None
        self.active_seconds = 0.0
        self.message_count = 0
        self.human_message_count = 0
        self.assistant_message_count = 0
        self.genuine_human_messages: list[str] = []
        self.key_assistant_messages: list[str] = []
        self.files_modified: set[str] = set()
        self.commands_run: list[str] = []
        self.summary: str | None = None
        self.cwd: str | None = None

    def observe_timestamp(self, timestamp: datetime) -> None:
        if self.first_timestamp is None:
            self.first_timestamp = timestamp
        self.last_timestamp = timestamp
        if self.previous_timestamp is not None:
            gap = (timestamp - self.previous_timestamp).total_seconds()
            if 0 < gap <= MAX_ACTIVE_GAP_SECONDS:
                self.active_seconds += gap
        self.previous_timestamp = timestamp

    def feed(self, record: LogRecord) -> None:
        if record.type is RecordType.FILE_HISTORY_SNAPSHOT:
            return

        if record.is_cheap:
            if record.timestamp is not None:
                self.observe_timestamp(record.timestamp)
            return

        if record.type is RecordType.UNPARSED:
            self.message_count += 1
            return

        if record.timestamp is not None:
            self.observe_timestamp(record.timestamp)
        if self.cwd is None and record.cwd is not None:
            self.cwd = record.cwd

        self.message_count += 1
        if record.type is RecordType.USER:
            self._feed_user(record)
        elif record.type is RecordType.ASSISTANT:
            self._feed_assistant(record)
        elif record.type is RecordType.SUMMARY:
            text = extract_summary_text(record)
            if text is not None:
                # Later summary records overwrite earlier ones
                self.summary = text[:MAX_SUMMARY_CHARS]

    def _feed_user(self, record: LogRecord) -> None:
        text = extract_human_text(record.message)
        if text is None or not is_genuine_human_input(text, self.filters):
            return
        self.human_message_count += 1
        # First N genuine messages are kept; later ones are only counted
        if len(self.genuine_human_messages) < MAX_HUMAN_MESSAGES:
            self.genuine_human_messages.append(text[:MAX_HUMAN_CHARS])

    def _feed_assistant(self, record: LogRecord) -> None:
        if record.message is None:
            return
        self.assistant_message_count += 1

        text = extract_assistant_text(record.message)
        if is_substantive_assistant_text(text, self.filters):
            # Most recent N notes are kept; the oldest drops out at capacity
            if len(self.key_assistant_messages) >= MAX_ASSISTANT_MESSAGES:
                self.key_assistant_messages.pop(0)
            self.key_assistant_messages.append(text[:MAX_ASSISTANT_CHARS])

        activity = extract_tool_activity(record.message, self.filters)
        self.files_modified.update(activity.files)
        for command in activity.commands:
            if len(self.commands_run) < MAX_COMMANDS:
                self.commands_run.append(command)

    def build(
        self,
        session_id: str,
        project_path: str,
        project_name: str,
        file_path: str = "",
    ) -> SessionRecord | None:
        # Near-empty files never become sessions
        if self.message_count <= 1:
            return None
        return SessionRecord(
            id=session_id,
            project_path=project_path,
            project_name=project_name,
            file_path=file_path,
            start_time=self.first_timestamp,
            end_time=self.last_timestamp,
            message_count=self.message_count,
            human_message_count=self.human_message_count,
            assistant_message_count=self.assistant_message_count,
            genuine_human_messages=list(self.genuine_human_messages),
            key_assistant_messages=list(self.key_assistant_messages),
            files_modified=set(self.files_modified),
            commands_run=list(self.commands_run),
            summary=self.summary,
            cwd=self.cwd,
            active_duration=max(self.active_seconds, 0.0),
        )


def parse_session(
    content: str,
    session_id: str = "",
    project_path: str = "",
    project_name: str = "",
    file_path: str = "",
    filters: FilterConfig = DEFAULT_FILTERS,
) -> SessionRecord | None:
    """Parse the full text of one session log.

    Returns None when the file holds one message or fewer.
    """
    accumulator = SessionAccumulator(filters)
    for line in split_lines(content):
        accumulator.feed(classify(line))
    return accumulator.build(session_id, project_path, project_name, file_path)
