"""Provide utility helpers for timestamps."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_iso(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            if not isinstance(value, str):
                value = str(value)
            value = value.strip()
            if value.endswith("Z"):
                value = value[:-1] + "+00:00"
            dt = datetime.fromisoformat(value)
        except ValueError:
            return None
    # Naive timestamps are read as UTC wall-clock time.
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _timestamp(value: datetime) -> float:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def _clock(value: datetime) -> str:
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour:02d}:{value.minute:02d} {suffix}"


def format_search_time(value: datetime) -> str:
    """Render a timestamp the way search text is matched against it.

    Example: ``Jan 12, 2026, 09:00 AM`` (the en-US short month form with the
    year). Rendering uses the timestamp's own wall-clock time.
    """
    return f"{_MONTH_ABBR[value.month - 1]} {value.day}, {value.year}, {_clock(value)}"


def format_display_time(value: datetime) -> str:
    """Card rendering without the year, e.g. ``Jan 12, 09:00 AM``."""
    return f"{_MONTH_ABBR[value.month - 1]} {value.day}, {_clock(value)}"
