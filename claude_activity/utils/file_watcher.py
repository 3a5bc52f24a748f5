"""File system monitoring for live updates."""

import fnmatch
import logging
import threading
from collections.abc import Callable, Iterable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class DirectoryChangeHandler(FileSystemEventHandler):
    """Coalesce bursts of file events into a single "directory changed" signal."""

    def __init__(
        self,
        callback: Callable[[], None],
        patterns: list[str],
        excluded: Iterable[str] = (),
        debounce_ms: int = 250,
    ):
        super().__init__()
        self.callback = callback
        self.patterns = patterns
        self.excluded = tuple(fragment.lower() for fragment in excluded)
        self.debounce_ms = debounce_ms
        self._debounce_timer: threading.Timer | None = None
        self._lock = threading.Lock()

    def matches(self, path: Path) -> bool:
        """Check if path matches a watched pattern and no excluded fragment."""
        lowered = str(path).lower()
        if any(fragment in lowered for fragment in self.excluded):
            return False
        return any(fnmatch.fnmatch(path.name, pattern) for pattern in self.patterns)

    def _handle_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return

        if not self.matches(Path(str(event.src_path))):
            return

        with self._lock:
            if self._debounce_timer:
                self._debounce_timer.cancel()
            self._debounce_timer = threading.Timer(
                self.debounce_ms / 1000.0,
                self._flush,
            )
            self._debounce_timer.daemon = True
            self._debounce_timer.start()

    def _flush(self) -> None:
        with self._lock:
            self._debounce_timer = None
        try:
            self.callback()
        except Exception:
            logger.exception("Directory change callback failed")

    def cancel(self) -> None:
        with self._lock:
            if self._debounce_timer:
                self._debounce_timer.cancel()
                self._debounce_timer = None

    def on_created(self, event: FileSystemEvent) -> None:
        self._handle_event(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._handle_event(event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._handle_event(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._handle_event(event)


class DirectoryWatcher:
    """Watches a session log tree and emits opaque change signals.

    Usage:
        watcher = DirectoryWatcher(projects_dir, on_change=monitor.notify_change)
        watcher.start()
        # ... later
        watcher.stop()
    """

    def __init__(
        self,
        path: Path,
        on_change: Callable[[], None],
        patterns: list[str] | None = None,
        excluded: Iterable[str] = (),
        recursive: bool = True,
        debounce_ms: int = 250,
    ):
        self.path = path
        self.recursive = recursive
        self.handler = DirectoryChangeHandler(
            callback=on_change,
            patterns=patterns or ["*.jsonl"],
            excluded=excluded,
            debounce_ms=debounce_ms,
        )
        self._observer: Observer | None = None
        self._running = False

    def start(self) -> bool:
        """Start watching. Returns False when the directory does not exist yet."""
        if self._running:
            return True
        if not self.path.is_dir():
            logger.warning("Not watching %s: directory does not exist", self.path)
            return False

        self._observer = Observer()
        self._observer.schedule(self.handler, str(self.path), recursive=self.recursive)
        self._observer.start()
        self._running = True
        return True

    def stop(self) -> None:
        """Stop watching for changes."""
        self.handler.cancel()
        if self._observer and self._running:
            self._observer.stop()
            self._observer.join(timeout=5.0)
        self._observer = None
        self._running = False

    def is_running(self) -> bool:
        return self._running

    def __enter__(self) -> "DirectoryWatcher":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
