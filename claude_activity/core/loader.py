"""Session discovery with a modification-time cache."""

from __future__ import annotations

import logging
from pathlib import Path

from ..utils import read_log_text
from .filters import DEFAULT_FILTERS, FilterConfig
from .runtime import claude_projects_dir
from .sessions import SessionRecord, parse_session

logger = logging.getLogger(__name__)

LOG_SUFFIX = ".jsonl"
AGENT_PREFIX = "agent-"


def extract_project_name(
    encoded_dir: str,
    home: Path | None = None,
    filters: FilterConfig = DEFAULT_FILTERS,
) -> str:
    """Turn ``-Users-dev-Projects-acme-api`` into ``acme-api``.

    Claude Code names project directories after the absolute path with
    slashes replaced by dashes. The encoded home prefix and the first common
    parent folder are stripped; the raw name is returned if nothing is left.
    """
    encoded_home = str(home or Path.home()).replace("/", "-")
    remainder = encoded_dir
    if encoded_home and remainder.startswith(encoded_home):
        remainder = remainder[len(encoded_home):]
    remainder = remainder.lstrip("-")

    lowered = remainder.lower()
    for fragment in filters.common_parent_fragments:
        index = lowered.find(fragment.lower())
        if index >= 0:
            remainder = remainder[index + len(fragment):]
            break

    return remainder or encoded_dir


class SessionLoader:
    """Scan ``<projects_dir>/<project>/<session>.jsonl`` into SessionRecords.

    Parsed sessions are cached by absolute path and reused while the file's
    modification time is unchanged. Only one scan should run at a time.
    """

    def __init__(
        self,
        projects_dir: Path | None = None,
        filters: FilterConfig = DEFAULT_FILTERS,
        home: Path | None = None,
    ):
        self.projects_dir = projects_dir or claude_projects_dir()
        self.filters = filters
        self.home = home
        self._cache: dict[str, tuple[float, SessionRecord]] = {}

    @property
    def cached_paths(self) -> set[str]:
        return set(self._cache)

    def iter_project_dirs(self) -> list[Path]:
        """Project directories that are not excluded tooling folders."""
        try:
            entries = sorted(self.projects_dir.iterdir())
        except OSError as exc:
            logger.warning("Failed to list projects directory %s: %s", self.projects_dir, exc)
            return []
        return [
            entry for entry in entries
            if entry.is_dir() and not self.filters.is_excluded_path(entry.name)
        ]

    @staticmethod
    def iter_log_files(project_dir: Path) -> list[Path]:
        try:
            entries = sorted(project_dir.iterdir())
        except OSError as exc:
            logger.warning("Failed to list project directory %s: %s", project_dir, exc)
            return []
        return [
            entry for entry in entries
            if entry.name.endswith(LOG_SUFFIX)
            and not entry.name.startswith(AGENT_PREFIX)
            and entry.is_file()
        ]

    def load_all_sessions(self) -> list[SessionRecord]:
        """Return every retained session under the projects directory."""
        sessions: list[SessionRecord] = []
        seen: set[str] = set()
        hits = 0

        for project_dir in self.iter_project_dirs():
            project_name = extract_project_name(project_dir.name, self.home, self.filters)

            for log_file in self.iter_log_files(project_dir):
                key = str(log_file.resolve())
                seen.add(key)

                try:
                    mtime = log_file.stat().st_mtime
                except OSError as exc:
                    logger.warning("Failed to stat %s: %s", log_file, exc)
                    continue

                cached = self._cache.get(key)
                if cached and cached[0] == mtime:
                    sessions.append(cached[1])
                    hits += 1
                    continue

                session = self._parse_file(log_file, project_dir.name, project_name)
                if session is not None and session.is_meaningful:
                    self._cache[key] = (mtime, session)
                    sessions.append(session)

        for key in [path for path in self._cache if path not in seen]:
            del self._cache[key]

        logger.debug("Loaded %d sessions (%d from cache)", len(sessions), hits)
        return sessions

    def _parse_file(
        self,
        log_file: Path,
        encoded_dir: str,
        project_name: str,
    ) -> SessionRecord | None:
        content = read_log_text(log_file)
        if content is None:
            return None
        return parse_session(
            content,
            session_id=log_file.name[: -len(LOG_SUFFIX)],
            project_path=encoded_dir,
            project_name=project_name,
            file_path=str(log_file),
            filters=self.filters,
        )


def load_all_sessions(root: Path, filters: FilterConfig = DEFAULT_FILTERS) -> list[SessionRecord]:
    """One-shot scan without a persistent cache."""
    return SessionLoader(root, filters=filters).load_all_sessions()
