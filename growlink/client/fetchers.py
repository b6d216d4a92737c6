"""
Reading and history fetchers.
Every public method resolves to a value; failures fall back to the freshness
cache (latest reading) or an empty list (history) instead of raising.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from growlink.shared.logging import mask_key
from growlink.shared.models import Reading, ReadingSource, utc_now
from .access import AccessStrategyResolver
from .cache import FreshnessCache
from .credentials import CredentialCache
from .feeds import FeedFormatError, decode_feeds, reading_from_feed
from .transport import Transport, TransportError

logger = logging.getLogger(__name__)

PROTOCOL_ERRORS = {
    401: "unauthorized, check the read API key",
    404: "channel not found, check the channel id",
    429: "rate limited by the service",
}


def describe_status(status: int) -> str:
    return PROTOCOL_ERRORS.get(status, "unexpected response")


class ReadingFetcher:
    """Fetches the most recent reading with cache fallback."""

    def __init__(
        self,
        transport: Transport,
        credentials: CredentialCache,
        resolver: AccessStrategyResolver,
        cache: FreshnessCache,
        timeout: float = 10.0,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.transport = transport
        self.credentials = credentials
        self.resolver = resolver
        self.cache = cache
        self.timeout = timeout
        self._clock = clock
        self.last_source: Optional[ReadingSource] = None

    async def fetch_latest(self) -> Reading:
        reading, _ = await self.fetch_latest_with_source()
        return reading

    async def fetch_latest_with_source(self) -> Tuple[Reading, ReadingSource]:
        reading, source = await self._fetch_latest()
        self.last_source = source
        return reading, source

    async def _fetch_latest(self) -> Tuple[Reading, ReadingSource]:
        credentials = self.credentials.load()
        if not credentials.can_read():
            logger.warning("Channel id or read API key not configured; skipping fetch")
            entry = self.cache.entry()
            if entry is not None:
                return entry.reading, ReadingSource.CACHE
            return self._default_reading(), ReadingSource.UNCONFIGURED

        reading = await self._fetch_remote(credentials.channel_id, credentials.read_key)
        if reading is None:
            return self._fallback()

        if reading.is_all_zero():
            logger.warning("Latest feed has all sensor values at zero; device may be offline")
            return self._fallback()

        self.cache.store(reading)
        logger.info(
            f"Fresh reading: temp={reading.temperature} humidity={reading.humidity} "
            f"soil={reading.soil_moisture} light={reading.light_level}"
        )
        return reading, ReadingSource.FRESH

    async def _fetch_remote(self, channel_id: str, read_key: str) -> Optional[Reading]:
        """Latest parsed feed entry, or None on any failure."""
        try:
            plan = await self.resolver.resolve(channel_id, read_key, results=1)
            logger.debug(
                f"Fetching latest reading for channel {channel_id} "
                f"({plan.mode.value}, key {mask_key(read_key)})"
            )
            response = await self.transport.get(plan.url, params=plan.params, timeout=self.timeout)
            if response.status != 200:
                logger.warning(
                    f"Latest reading request failed with status {response.status}: "
                    f"{describe_status(response.status)}"
                )
                return None

            feeds = decode_feeds(response.body)
            if not feeds:
                logger.warning(f"Channel {channel_id} returned no feeds")
                return None
            return reading_from_feed(feeds[0])
        except (TransportError, FeedFormatError) as e:
            logger.warning(f"Failed to fetch latest reading: {e}")
            return None
        except Exception as e:
            logger.error(f"Unexpected error fetching latest reading: {e}")
            return None

    def _fallback(self) -> Tuple[Reading, ReadingSource]:
        entry = self.cache.entry()
        if entry is not None:
            logger.info(f"Returning cached reading ({self.cache.describe_age()})")
            return entry.reading, ReadingSource.CACHE
        return self._default_reading(), ReadingSource.DEFAULT

    def _default_reading(self) -> Reading:
        return Reading.zero(self._clock().isoformat())


class HistoryFetcher:
    """Fetches the last N readings. Never cached; fails empty."""

    def __init__(
        self,
        transport: Transport,
        credentials: CredentialCache,
        resolver: AccessStrategyResolver,
        timeout: float = 15.0,
    ):
        self.transport = transport
        self.credentials = credentials
        self.resolver = resolver
        self.timeout = timeout

    async def fetch_history(self, count: int = 10) -> List[Reading]:
        credentials = self.credentials.load()
        if not credentials.can_read():
            logger.warning("Channel id or read API key not configured; no history available")
            return []

        try:
            plan = await self.resolver.resolve(
                credentials.channel_id, credentials.read_key, results=count
            )
            response = await self.transport.get(plan.url, params=plan.params, timeout=self.timeout)
            if response.status != 200:
                logger.warning(
                    f"History request failed with status {response.status}: "
                    f"{describe_status(response.status)}"
                )
                return []
            # All-zero entries are kept; interpreting gaps is up to the consumer
            readings = [reading_from_feed(feed) for feed in decode_feeds(response.body)]
        except (TransportError, FeedFormatError) as e:
            logger.warning(f"Failed to fetch history: {e}")
            return []
        except Exception as e:
            logger.error(f"Unexpected error fetching history: {e}")
            return []

        logger.debug(f"Fetched {len(readings)} historical readings")
        return readings
