"""Shared runtime storage locations."""

from __future__ import annotations

import os
import tempfile
import uuid
from pathlib import Path


def _is_writable_dir(path: Path) -> bool:
    """Return whether path exists and accepts create/write/delete operations."""
    try:
        path.mkdir(parents=True, exist_ok=True)
        probe = path / f".ca-write-probe-{uuid.uuid4().hex}"
        probe.write_text("ok")
        probe.unlink(missing_ok=True)
        return True
    except OSError:
        return False


def resolve_runtime_home() -> Path:
    """Resolve the runtime home with a writable fallback for restricted envs."""
    configured = os.environ.get("CLAUDE_ACTIVITY_HOME")
    if configured:
        path = Path(configured).expanduser()
        if _is_writable_dir(path):
            return path

    preferred = Path.home() / ".claude-activity"
    if _is_writable_dir(preferred):
        return preferred

    fallback = Path(tempfile.gettempdir()) / "claude-activity-runtime"
    fallback.mkdir(parents=True, exist_ok=True)
    return fallback


def claude_dir() -> Path:
    """Claude Code's data directory (``~/.claude`` unless overridden)."""
    configured = os.environ.get("CLAUDE_CONFIG_DIR")
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".claude"


def claude_projects_dir() -> Path:
    return claude_dir() / "projects"


def summaries_dir(base_dir: Path | None = None) -> Path:
    """Return (and create) the directory holding per-day summary files."""
    target = (base_dir or resolve_runtime_home()) / "summaries"
    target.mkdir(parents=True, exist_ok=True)
    return target


def settings_path(base_dir: Path | None = None) -> Path:
    return (base_dir or resolve_runtime_home()) / "settings.json"
