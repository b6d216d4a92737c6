"""Freshness cache holding the last known good reading."""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from growlink.shared.models import CacheEntry, Reading, utc_now

logger = logging.getLogger(__name__)


def format_age(age: timedelta) -> str:
    """Human readable age, e.g. 'Just now', '12 min ago', '3h 5min ago'."""
    minutes = int(age.total_seconds() // 60)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} min ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h {minutes % 60}min ago"
    return f"{hours // 24} days ago"


class FreshnessCache:
    """Last valid Reading plus its fetch time.

    Entries older than the retention window are never returned. Each store()
    replaces the whole entry, so overlapping fetches resolve to whichever
    wrote last.
    """

    def __init__(
        self,
        retention: timedelta = timedelta(hours=24),
        stale_after: timedelta = timedelta(minutes=15),
        clock: Callable[[], datetime] = utc_now,
    ):
        self.retention = retention
        self.stale_after = stale_after
        self._clock = clock
        self._entry: Optional[CacheEntry] = None

    def store(self, reading: Reading) -> CacheEntry:
        entry = CacheEntry(reading=reading, fetched_at=self._clock())
        self._entry = entry
        return entry

    def entry(self) -> Optional[CacheEntry]:
        """Current entry, or None if empty or past the retention window."""
        entry = self._entry
        if entry is None:
            return None
        age = self._clock() - entry.fetched_at
        if age >= self.retention:
            logger.info(f"Cached reading expired ({age.total_seconds() / 3600:.1f} hours old)")
            if self._entry is entry:
                self._entry = None
            return None
        return entry

    def age(self) -> Optional[timedelta]:
        entry = self.entry()
        if entry is None:
            return None
        return self._clock() - entry.fetched_at

    def is_stale(self) -> bool:
        age = self.age()
        return age is None or age > self.stale_after

    def has_data(self) -> bool:
        return self.entry() is not None

    def clear(self) -> None:
        self._entry = None

    def describe_age(self) -> str:
        age = self.age()
        if age is None:
            return "No cached data available"
        return format_age(age)

    def status(self) -> Dict[str, Any]:
        entry = self.entry()
        if entry is None:
            return {
                "has_cached_data": False,
                "data_age": "No cached data",
                "cached_values": None,
            }
        return {
            "has_cached_data": True,
            "data_age": format_age(self._clock() - entry.fetched_at),
            "cached_values": entry.reading.to_dict(),
        }
