"""JSONL session log reading."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def split_lines(content: str) -> list[str]:
    """Split raw JSONL content into its non-empty lines."""
    return [line for line in content.splitlines() if line.strip()]


def read_log_text(path: Path) -> str | None:
    """Read a whole JSONL log file.

    Claude Code appends to session logs while a session is live, so the file
    is read in one go rather than streamed. Returns None if the file cannot
    be read or is not valid UTF-8.
    """
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed to read session log %s: %s", path, exc)
        return None
