"""Day summary generation, caching, and history backfill."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import date, timedelta
from typing import Protocol

from ..agents.gemini_client import ApiError, GeminiClient, SummaryError
from .aggregator import DayStats
from .settings import ActivitySettings, SettingsStore, resolve_api_key
from .summary import (
    DailySummary,
    backfill_fingerprint,
    build_prompt,
    generate_local_summary,
    no_sessions_summary,
    parse_summary_response,
)
from .summary_store import SummaryStore, date_key

logger = logging.getLogger(__name__)

BACKFILL_DAYS = 6
BACKFILL_SETTLE_SECONDS = 5.0
BACKFILL_INTERVAL_SECONDS = 4.0
RATE_LIMIT_WAIT_SECONDS = 10.0
MAX_ATTEMPTS = 3


class TextGenerator(Protocol):
    async def agenerate(self, prompt: str) -> str: ...


def default_client_factory(api_key: str, settings: ActivitySettings) -> TextGenerator:
    return GeminiClient(
        api_key,
        model=settings.model,
        max_output_tokens=settings.max_output_tokens,
        temperature=settings.temperature,
    )


class SummaryService:
    """Owns the current day summary and the summary history.

    All state is mutated from the event loop that calls into the service;
    network calls and rate-limit waits happen inside asyncio tasks.
    """

    def __init__(
        self,
        store: SummaryStore,
        settings_store: SettingsStore | None = None,
        client_factory: Callable[[str, ActivitySettings], TextGenerator] = default_client_factory,
        backfill_settle_seconds: float = BACKFILL_SETTLE_SECONDS,
        backfill_interval_seconds: float = BACKFILL_INTERVAL_SECONDS,
        rate_limit_wait_seconds: float = RATE_LIMIT_WAIT_SECONDS,
        max_attempts: int = MAX_ATTEMPTS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.store = store
        self.settings_store = settings_store
        self.client_factory = client_factory
        self.backfill_settle_seconds = backfill_settle_seconds
        self.backfill_interval_seconds = backfill_interval_seconds
        self.rate_limit_wait_seconds = rate_limit_wait_seconds
        self.max_attempts = max_attempts
        self._sleep = sleep

        self.daily_summary: DailySummary | None = None
        self.is_generating = False
        self.error: str | None = None
        self.history_dates: list[date] = []

        self._requested_fingerprint: str | None = None
        self._generation_task: asyncio.Task | None = None
        self._backfill_task: asyncio.Task | None = None

    # -- credentials -------------------------------------------------------

    def _settings(self) -> ActivitySettings:
        return self.settings_store.load() if self.settings_store else ActivitySettings()

    @property
    def api_key(self) -> str | None:
        return resolve_api_key(self._settings())

    @property
    def has_api_key(self) -> bool:
        return self.api_key is not None

    def set_api_key(self, key: str) -> None:
        if self.settings_store is None:
            raise RuntimeError("No settings store configured")
        self.settings_store.set_api_key(key)

    def _client(self) -> TextGenerator | None:
        settings = self._settings()
        api_key = resolve_api_key(settings)
        if api_key is None:
            return None
        return self.client_factory(api_key, settings)

    # -- today -------------------------------------------------------------

    def generate_summary(self, stats: DayStats, today: date | None = None) -> asyncio.Task | None:
        """Bring ``daily_summary`` up to date with ``stats``.

        Returns the task performing the remote call, or None when the result
        was produced synchronously (or nothing needed doing).
        """
        today = today or date.today()

        if not stats.sessions:
            self._requested_fingerprint = None
            self.is_generating = False
            self.daily_summary = no_sessions_summary()
            return None

        fingerprint = stats.fingerprint
        if self.daily_summary is not None and self.daily_summary.fingerprint == fingerprint:
            return None
        if self.is_generating and self._requested_fingerprint == fingerprint:
            return self._generation_task

        if self.daily_summary is None:
            cached = self.store.load(today)
            if cached is not None and cached.fingerprint == fingerprint:
                logger.debug("Using stored summary for %s", date_key(today))
                self._requested_fingerprint = fingerprint
                self.is_generating = False
                self.daily_summary = cached
                return None

        client = self._client()
        if client is None:
            summary = generate_local_summary(stats, fingerprint=fingerprint)
            self._requested_fingerprint = fingerprint
            self.is_generating = False
            self.error = None
            self.daily_summary = summary
            self.store.save(today, summary)
            return None

        self._requested_fingerprint = fingerprint
        self.is_generating = True
        self.error = None
        prompt = build_prompt(stats)
        self._generation_task = asyncio.get_running_loop().create_task(
            self._generate_remote(client, prompt, stats, fingerprint, today)
        )
        return self._generation_task

    async def _generate_remote(
        self,
        client: TextGenerator,
        prompt: str,
        stats: DayStats,
        fingerprint: str,
        today: date,
    ) -> DailySummary:
        try:
            try:
                reply = await client.agenerate(prompt)
                summary = parse_summary_response(reply, fingerprint=fingerprint)
                error = None
            except SummaryError as exc:
                logger.warning("Summary generation failed, using local summary: %s", exc)
                summary = generate_local_summary(stats, fingerprint=fingerprint)
                error = str(exc)

            if fingerprint != self._requested_fingerprint:
                # A newer request superseded this one
                logger.debug("Discarding stale summary for fingerprint %s", fingerprint[:16])
                return summary

            self.daily_summary = summary
            self.error = error
            self.store.save(today, summary)
            return summary
        finally:
            if fingerprint == self._requested_fingerprint:
                self.is_generating = False

    def regenerate(self, stats: DayStats, today: date | None = None) -> asyncio.Task | None:
        """Drop the in-memory and stored result for today and generate again."""
        self.daily_summary = None
        self._requested_fingerprint = None
        self.is_generating = False
        today = today or date.today()
        stored = self.store.load(today)
        if stored is not None:
            stored.fingerprint = ""
            self.store.save(today, stored)
        return self.generate_summary(stats, today=today)

    # -- history -----------------------------------------------------------

    def load_history_dates(self, today: date | None = None) -> list[date]:
        self.history_dates = self.store.history_dates(today or date.today())
        return self.history_dates

    def days_needing_backfill(
        self,
        week_stats: dict[date, DayStats],
        today: date | None = None,
    ) -> list[tuple[date, DayStats]]:
        today = today or date.today()
        pending: list[tuple[date, DayStats]] = []
        for offset in range(1, BACKFILL_DAYS + 1):
            day = today - timedelta(days=offset)
            if self.store.exists(day):
                continue
            stats = week_stats.get(day)
            if stats is None or stats.total_sessions == 0:
                continue
            pending.append((day, stats))
        return pending

    def backfill_history(
        self,
        week_stats: dict[date, DayStats],
        today: date | None = None,
    ) -> asyncio.Task | None:
        """Fill in summaries for recent days that have sessions but no file.

        Without a credential this runs synchronously with local summaries.
        Otherwise an asyncio task is returned; only one runs at a time.
        """
        today = today or date.today()
        if self._backfill_task is not None and not self._backfill_task.done():
            return self._backfill_task

        pending = self.days_needing_backfill(week_stats, today)
        if not pending:
            self.load_history_dates(today)
            return None

        client = self._client()
        if client is None:
            for day, stats in pending:
                summary = generate_local_summary(stats, fingerprint=backfill_fingerprint(day))
                self.store.save(day, summary)
            self.load_history_dates(today)
            return None

        self._backfill_task = asyncio.get_running_loop().create_task(
            self._run_backfill(client, pending, today)
        )
        return self._backfill_task

    async def _run_backfill(
        self,
        client: TextGenerator,
        pending: list[tuple[date, DayStats]],
        today: date,
    ) -> None:
        # Let today's summary request go first
        await self._sleep(self.backfill_settle_seconds)

        for index, (day, stats) in enumerate(pending):
            if index > 0:
                await self._sleep(self.backfill_interval_seconds)
            await self._backfill_day(client, day, stats)

        self.load_history_dates(today)

    async def _backfill_day(self, client: TextGenerator, day: date, stats: DayStats) -> DailySummary:
        key = date_key(day)
        prompt = build_prompt(stats)
        fingerprint = backfill_fingerprint(day)

        for attempt in range(1, self.max_attempts + 1):
            try:
                reply = await client.agenerate(prompt)
            except ApiError as exc:
                if exc.is_rate_limited and attempt < self.max_attempts:
                    self.store.log_backfill(
                        f"WAIT {key}: rate limited, waiting "
                        f"{self.rate_limit_wait_seconds:g}s (attempt {attempt})"
                    )
                    await self._sleep(self.rate_limit_wait_seconds)
                    continue
                self.store.log_backfill(
                    f"FAIL {key}: {exc} (attempt {attempt}, prompt: {len(prompt)} chars)"
                )
                break
            except SummaryError as exc:
                self.store.log_backfill(f"FAIL {key}: {exc} (attempt {attempt})")
                break

            summary = parse_summary_response(reply, fingerprint=fingerprint)
            self.store.save(day, summary)
            self.store.log_backfill(f"OK {key}: AI summary saved (attempt {attempt})")
            logger.info("Backfilled summary for %s", key)
            return summary

        summary = generate_local_summary(stats, fingerprint=fingerprint)
        self.store.save(day, summary)
        logger.info("Backfilled local summary for %s", key)
        return summary
