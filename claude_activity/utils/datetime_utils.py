"""Shared datetime utilities."""

from __future__ import annotations

from datetime import datetime


def parse_iso(value: str | None) -> datetime | None:
    """Parse an ISO 8601 datetime string, returning None on invalid input.

    Handles common variations:
    - With fractional seconds: 2026-02-12T10:30:00.123Z
    - Without fractional seconds: 2026-02-12T10:30:00Z
    - With timezone offset: 2026-02-12T10:30:00+00:00
    - Without timezone: 2026-02-12T10:30:00 (taken as local time)

    Returns an aware datetime in the local zone: ``.date()`` and ``strftime``
    follow the user's clock, while subtraction stays exact across DST changes.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed.astimezone()


def format_duration_short(seconds: float) -> str:
    """Format a duration as ``42m`` or ``1h 5m``."""
    minutes = int(seconds // 60)
    if minutes < 60:
        return f"{minutes}m"
    return f"{minutes // 60}h {minutes % 60}m"


def format_duration_long(seconds: float) -> str:
    """Format a day total as ``42 min`` or ``1h 5m``."""
    minutes = int(seconds // 60)
    if minutes < 60:
        return f"{minutes} min"
    return f"{minutes // 60}h {minutes % 60}m"


def format_duration_compact(seconds: float) -> str:
    """Format a duration dropping a zero minute part: ``45m``, ``2h``, ``2h 5m``."""
    minutes = int(seconds // 60)
    if minutes < 60:
        return f"{minutes}m"
    hours, rest = divmod(minutes, 60)
    return f"{hours}h {rest}m" if rest else f"{hours}h"
