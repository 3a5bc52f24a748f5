"""Stateful shell: refresh loop, change debouncing, and published state."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import date, datetime

from .aggregator import DayStats, compute_today_stats, compute_week_stats
from .loader import SessionLoader
from .summary_service import SummaryService

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 3.0
SETTLE_SECONDS = 1.5
RESCAN_INTERVAL_SECONDS = 300.0
STATUS_ICON = "✦"


@dataclass(frozen=True)
class ActivityState:
    """Snapshot published after each refresh; replaced, never mutated."""

    today: DayStats = field(default_factory=DayStats)
    week: dict[date, DayStats] = field(default_factory=dict)
    is_loading: bool = False
    last_refresh: datetime | None = None


StateListener = Callable[[ActivityState], None]


class ActivityMonitor:
    """Coordinates scans and publishes ActivityState to subscribers.

    Scans run in a worker thread; everything else runs on the event loop
    that owns the monitor. Directory-change signals arrive on an asyncio
    queue so the scanning code never knows how changes are detected.
    """

    def __init__(
        self,
        loader: SessionLoader,
        summary_service: SummaryService | None = None,
        clock: Callable[[], datetime] = datetime.now,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        settle_seconds: float = SETTLE_SECONDS,
        rescan_interval_seconds: float = RESCAN_INTERVAL_SECONDS,
    ):
        self.loader = loader
        self.summary_service = summary_service
        self.clock = clock
        self.debounce_seconds = debounce_seconds
        self.settle_seconds = settle_seconds
        self.rescan_interval_seconds = rescan_interval_seconds

        self._state = ActivityState()
        self._listeners: list[StateListener] = []
        self._scan_lock = asyncio.Lock()
        self._changes: asyncio.Queue[None] = asyncio.Queue()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._last_triggered: float | None = None
        self._tasks: list[asyncio.Task] = []

    @property
    def state(self) -> ActivityState:
        return self._state

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _publish(self, state: ActivityState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Activity listener failed")

    def status_title(self) -> str:
        count = self._state.today.total_sessions
        return f" {STATUS_ICON} {count}" if count > 0 else ""

    def _scan(self, now: datetime) -> tuple[DayStats, dict[date, DayStats]]:
        sessions = self.loader.load_all_sessions()
        return compute_today_stats(sessions, now), compute_week_stats(sessions, now)

    async def refresh(self) -> ActivityState:
        """Re-scan sessions and publish a new snapshot.

        Concurrent calls are serialised so the loader cache only ever sees
        one scan at a time.
        """
        async with self._scan_lock:
            self._publish(replace(self._state, is_loading=True))
            now = self.clock()
            try:
                today, week = await asyncio.to_thread(self._scan, now)
            except Exception:
                logger.exception("Session scan failed")
                self._publish(replace(self._state, is_loading=False))
                return self._state

            state = ActivityState(today=today, week=week, is_loading=False, last_refresh=self.clock())
            self._publish(state)
            logger.info(
                "Refreshed activity: %d sessions today, %d messages",
                today.total_sessions,
                today.total_messages,
            )

        if self.summary_service is not None:
            self.summary_service.generate_summary(state.today, today=now.date())
            self.summary_service.backfill_history(state.week, today=now.date())
        return state

    # -- change notifications ---------------------------------------------

    def bind_loop(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()

    def notify_change(self) -> None:
        """Signal that the session directory changed. Safe from any thread."""
        if self._loop is None:
            logger.debug("Change signal before monitor loop was bound; ignoring")
            return
        self._loop.call_soon_threadsafe(self._changes.put_nowait, None)

    async def handle_change(self) -> bool:
        """Debounce one change signal; returns True if it triggered a refresh."""
        loop = asyncio.get_running_loop()
        now = loop.time()
        if self._last_triggered is not None and now - self._last_triggered <= self.debounce_seconds:
            return False
        self._last_triggered = now

        # Give the writer a moment to finish the line
        await asyncio.sleep(self.settle_seconds)
        await self.refresh()
        return True

    async def run_change_loop(self) -> None:
        while True:
            await self._changes.get()
            try:
                await self.handle_change()
            except Exception:
                logger.exception("Change-triggered refresh failed")
            finally:
                self._changes.task_done()

    async def run_periodic(self) -> None:
        """Safety-net re-scan in case a change signal was missed."""
        while True:
            await asyncio.sleep(self.rescan_interval_seconds)
            try:
                await self.refresh()
            except Exception:
                logger.exception("Periodic refresh failed")

    def start(self) -> None:
        """Bind to the running loop and start the background loops."""
        self.bind_loop()
        loop = asyncio.get_running_loop()
        self._tasks = [
            loop.create_task(self.run_change_loop()),
            loop.create_task(self.run_periodic()),
        ]

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks = []
