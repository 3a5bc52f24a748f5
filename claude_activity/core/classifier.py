"""Per-line classification and text extraction for Claude Code session logs.

Each JSONL line is decoded into a ``LogRecord`` whose message content is a
list of typed blocks. Decoding fails closed: a line that is not a JSON
object becomes an ``UNPARSED`` record instead of aborting the file.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from ..utils import parse_iso
from .filters import DEFAULT_FILTERS, FilterConfig

logger = logging.getLogger(__name__)

# Matched against the raw line so high-volume records skip json.loads entirely
_CHEAP_TYPE_RE = re.compile(r'"type"\s*:\s*"(progress|queue-operation)"')
_CHEAP_TIMESTAMP_RE = re.compile(r'"timestamp"\s*:\s*"([^"]*)"')

MAX_COMMAND_CHARS = 120


class RecordType(Enum):
    """Semantic type of a session log line."""

    USER = "user"
    ASSISTANT = "assistant"
    SUMMARY = "summary"
    PROGRESS = "progress"
    QUEUE_OPERATION = "queue-operation"
    FILE_HISTORY_SNAPSHOT = "file-history-snapshot"
    OTHER = "other"
    UNPARSED = "unparsed"

    @classmethod
    def from_raw(cls, value: Any) -> RecordType:
        for member in cls:
            if member.value == value and member is not cls.UNPARSED:
                return member
        return cls.OTHER


@dataclass
class TextBlock:
    text: str


@dataclass
class ToolUseBlock:
    name: str
    input: dict = field(default_factory=dict)


@dataclass
class ToolResultBlock:
    pass


@dataclass
class OtherBlock:
    type: str


ContentBlock = TextBlock | ToolUseBlock | ToolResultBlock | OtherBlock


@dataclass
class MessagePayload:
    """The ``message`` object of a log record.

    ``content`` is either plain text, an ordered list of blocks, or None when
    the payload carried something else.
    """

    role: str | None = None
    content: str | list[ContentBlock] | None = None

    @property
    def blocks(self) -> list[ContentBlock]:
        return self.content if isinstance(self.content, list) else []

    def text_blocks(self) -> list[str]:
        return [block.text for block in self.blocks if isinstance(block, TextBlock)]


@dataclass
class LogRecord:
    """One decoded line of a session log."""

    type: RecordType
    timestamp: datetime | None = None
    message: MessagePayload | None = None
    cwd: str | None = None
    summary: str | None = None

    @property
    def is_cheap(self) -> bool:
        return self.type in (RecordType.PROGRESS, RecordType.QUEUE_OPERATION)


def _decode_block(raw: Any) -> ContentBlock | None:
    if not isinstance(raw, dict):
        return None
    block_type = raw.get("type")
    if block_type == "text":
        text = raw.get("text")
        return TextBlock(text) if isinstance(text, str) else OtherBlock("text")
    if block_type == "tool_use":
        tool_input = raw.get("input")
        return ToolUseBlock(
            name=raw.get("name") if isinstance(raw.get("name"), str) else "",
            input=tool_input if isinstance(tool_input, dict) else {},
        )
    if block_type == "tool_result":
        return ToolResultBlock()
    return OtherBlock(str(block_type))


def _decode_message(raw: Any) -> MessagePayload | None:
    if not isinstance(raw, dict):
        return None
    content = raw.get("content")
    if isinstance(content, list):
        decoded = [_decode_block(item) for item in content]
        content = [block for block in decoded if block is not None]
    elif not isinstance(content, str):
        content = None
    role = raw.get("role")
    return MessagePayload(role=role if isinstance(role, str) else None, content=content)


def classify(raw_line: str) -> LogRecord:
    """Decode one JSONL line into a LogRecord.

    Progress and queue-operation lines only get their timestamp pulled out
    with a substring search; everything else is fully decoded.
    """
    cheap = _CHEAP_TYPE_RE.search(raw_line)
    if cheap:
        match = _CHEAP_TIMESTAMP_RE.search(raw_line)
        return LogRecord(
            type=RecordType.from_raw(cheap.group(1)),
            timestamp=parse_iso(match.group(1)) if match else None,
        )

    try:
        data = json.loads(raw_line)
    except (json.JSONDecodeError, ValueError):
        return LogRecord(type=RecordType.UNPARSED)
    if not isinstance(data, dict):
        return LogRecord(type=RecordType.UNPARSED)

    record_type = RecordType.from_raw(data.get("type"))
    if record_type is RecordType.FILE_HISTORY_SNAPSHOT:
        return LogRecord(type=record_type)
    if record_type in (RecordType.PROGRESS, RecordType.QUEUE_OPERATION):
        # Pretty-printed or reordered keys slipped past the cheap path
        return LogRecord(type=record_type, timestamp=parse_iso(data.get("timestamp")))

    cwd = data.get("cwd")
    summary = data.get("summary")
    return LogRecord(
        type=record_type,
        timestamp=parse_iso(data.get("timestamp")),
        message=_decode_message(data.get("message")),
        cwd=cwd if isinstance(cwd, str) else None,
        summary=summary if isinstance(summary, str) else None,
    )


def extract_human_text(message: MessagePayload | None) -> str | None:
    """Return the text a human typed, or None for tool plumbing.

    Any tool_result block disqualifies the whole message, even when text
    blocks sit next to it.
    """
    if message is None:
        return None
    if isinstance(message.content, str):
        return message.content
    if isinstance(message.content, list):
        if any(isinstance(block, ToolResultBlock) for block in message.content):
            return None
        combined = " ".join(message.text_blocks())
        return combined or None
    return None


def is_genuine_human_input(text: str, filters: FilterConfig = DEFAULT_FILTERS) -> bool:
    """Heuristically decide whether a user message was written by a person."""
    trimmed = text.strip()
    if len(trimmed) < filters.min_human_chars:
        return False
    if trimmed == filters.interruption_marker:
        return False
    if trimmed.startswith(filters.ui_boilerplate_prefixes):
        return False
    if any(pattern in trimmed for pattern in filters.noise_substrings):
        return False

    # Injected XML/JSON reads as a wall of brackets relative to its words
    special = trimmed.count("<") + trimmed.count("{")
    word_count = len(trimmed.split())
    if special > filters.structural_char_threshold and special > word_count // 2:
        return False
    return True


def extract_assistant_text(message: MessagePayload | None) -> str:
    """Return assistant prose: the string content or its joined text blocks."""
    if message is None:
        return ""
    if isinstance(message.content, str):
        return message.content.strip()
    return " ".join(message.text_blocks()).strip()


def is_substantive_assistant_text(text: str, filters: FilterConfig = DEFAULT_FILTERS) -> bool:
    """Reject short replies and "let me check"-style narration."""
    if len(text) <= filters.min_assistant_chars:
        return False
    return not text.lower().startswith(filters.low_value_assistant_prefixes)


def extract_summary_text(record: LogRecord) -> str | None:
    """First available text of a summary record."""
    if record.message is not None:
        if isinstance(record.message.content, str):
            return record.message.content
        texts = record.message.text_blocks()
        if texts:
            return texts[0]
        return None
    return record.summary


def shorten_file_path(path: str, filters: FilterConfig = DEFAULT_FILTERS) -> str | None:
    """Shorten a path to ``parent/filename``; None for non-source files."""
    components = [part for part in path.split("/") if part]
    if not components:
        return None
    filename = components[-1]
    extension = filename.rsplit(".", 1)[-1].lower()
    if extension not in filters.source_extensions:
        return None
    if len(components) >= 2:
        return f"{components[-2]}/{filename}"
    return filename


def is_interesting_command(command: str, filters: FilterConfig = DEFAULT_FILTERS) -> bool:
    """False for navigation/inspection commands like ``ls`` or ``cat``."""
    tokens = command.strip().split()
    if not tokens:
        return False
    base = tokens[0].rsplit("/", 1)[-1]
    return base.lower() not in filters.boring_commands


@dataclass
class ToolActivity:
    """Files and commands pulled from the tool_use blocks of one message."""

    files: list[str] = field(default_factory=list)
    commands: list[str] = field(default_factory=list)


def extract_tool_activity(
    message: MessagePayload | None,
    filters: FilterConfig = DEFAULT_FILTERS,
) -> ToolActivity:
    """Collect edited source files and interesting shell commands."""
    activity = ToolActivity()
    if message is None:
        return activity

    for block in message.blocks:
        if not isinstance(block, ToolUseBlock):
            continue

        file_path = block.input.get("file_path")
        if not isinstance(file_path, str):
            file_path = block.input.get("path")
        if isinstance(file_path, str):
            short = shorten_file_path(file_path, filters)
            if short:
                activity.files.append(short)

        command = block.input.get("command")
        if "bash" in block.name.lower() and isinstance(command, str):
            if is_interesting_command(command, filters):
                activity.commands.append(command[:MAX_COMMAND_CHARS])
            else:
                logger.debug("Skipping trivial command: %s", command[:40])

    return activity
