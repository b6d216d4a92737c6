"""Reads actuator state from the latest feed entry."""

import logging
from typing import Optional

from growlink.shared.models import DeviceStatus
from .access import AccessStrategyResolver
from .credentials import CredentialCache
from .feeds import FeedFormatError, decode_feeds, status_from_feed
from .transport import Transport, TransportError

logger = logging.getLogger(__name__)


class DeviceStatusReader:
    """Live device status. No cache: failures read as everything off."""

    def __init__(
        self,
        transport: Transport,
        credentials: CredentialCache,
        resolver: AccessStrategyResolver,
        timeout: float = 3.0,
    ):
        self.transport = transport
        self.credentials = credentials
        self.resolver = resolver
        self.timeout = timeout

    async def fetch_status(self) -> DeviceStatus:
        status = await self.fetch_live_status()
        return status if status is not None else DeviceStatus.all_off()

    async def fetch_live_status(self) -> Optional[DeviceStatus]:
        """Decoded status of the latest feed entry, or None if it could not be read."""
        credentials = self.credentials.load()
        if not credentials.can_read():
            logger.warning("Channel id or read API key not configured; device status unavailable")
            return None

        try:
            plan = await self.resolver.resolve(
                credentials.channel_id,
                credentials.read_key,
                results=1,
                timeout=self.timeout,
            )
            response = await self.transport.get(plan.url, params=plan.params, timeout=self.timeout)
            if response.status != 200:
                logger.warning(f"Device status request failed with status {response.status}")
                return None
            feeds = decode_feeds(response.body)
        except (TransportError, FeedFormatError) as e:
            logger.warning(f"Failed to fetch device status: {e}")
            return None
        except Exception as e:
            logger.error(f"Unexpected error fetching device status: {e}")
            return None

        if not feeds:
            return None

        status = status_from_feed(feeds[0])
        logger.debug(f"Device status: {status.to_dict()}")
        return status
