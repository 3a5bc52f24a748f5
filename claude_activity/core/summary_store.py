"""On-disk day summaries, one JSON file per calendar date."""

import json
import logging
from datetime import date, datetime
from pathlib import Path

from .summary import DailySummary

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
BACKFILL_LOG_NAME = "backfill.log"


def date_key(day: date) -> str:
    return day.strftime(DATE_FORMAT)


class SummaryStore:
    """Persist DailySummary values keyed by date.

    Loads never raise: missing or corrupt files read as None.
    """

    def __init__(self, summaries_dir: Path):
        self.summaries_dir = summaries_dir
        self.summaries_dir.mkdir(parents=True, exist_ok=True)
        self.backfill_log_path = self.summaries_dir / BACKFILL_LOG_NAME

    def path_for(self, day: date) -> Path:
        return self.summaries_dir / f"{date_key(day)}.json"

    def exists(self, day: date) -> bool:
        return self.path_for(day).exists()

    def save(self, day: date, summary: DailySummary) -> bool:
        """Write (or fully replace) the summary for ``day``."""
        path = self.path_for(day)
        try:
            path.write_text(json.dumps(summary.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
            return True
        except OSError as exc:
            logger.warning("Failed to save summary for %s: %s", date_key(day), exc)
            return False

    def load(self, day: date) -> DailySummary | None:
        path = self.path_for(day)
        if not path.exists():
            return None
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Failed to load summary %s: %s", path, exc)
            return None
        if not isinstance(raw, dict):
            return None
        return DailySummary.from_dict(raw)

    def history_dates(self, today: date | None = None) -> list[date]:
        """Dates with a stored summary strictly before ``today``, newest first."""
        today = today or date.today()
        dates: list[date] = []
        try:
            candidates = list(self.summaries_dir.glob("*.json"))
        except OSError as exc:
            logger.warning("Failed to list summaries in %s: %s", self.summaries_dir, exc)
            return []
        for path in candidates:
            try:
                day = datetime.strptime(path.stem, DATE_FORMAT).date()
            except ValueError:
                continue
            if day < today:
                dates.append(day)
        dates.sort(reverse=True)
        return dates

    def log_backfill(self, message: str, now: datetime | None = None) -> None:
        """Append one line to the plain-text backfill log."""
        stamp = (now or datetime.now()).strftime("%H:%M:%S")
        try:
            with open(self.backfill_log_path, "a", encoding="utf-8") as handle:
                handle.write(f"[{stamp}] {message}\n")
        except OSError as exc:
            logger.warning("Failed to write backfill log: %s", exc)
