"""Decides whether a channel feed can be read without an API key."""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from growlink.shared.models import AccessMode
from .transport import Transport, TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessPlan:
    """URL and query parameters for one feed read."""
    mode: AccessMode
    url: str
    params: Dict[str, str]


def feed_url(base_url: str, channel_id: str) -> str:
    return f"{base_url.rstrip('/')}/channels/{channel_id}/feeds.json"


class AccessStrategyResolver:
    """Probes public access before falling back to the read key.

    The probe runs on every resolve() call so a channel switching between
    public and private mid-session is picked up on the next fetch.
    """

    def __init__(self, transport: Transport, base_url: str, probe_timeout: float = 5.0):
        self.transport = transport
        self.base_url = base_url
        self.probe_timeout = probe_timeout

    async def probe_public(self, channel_id: str, timeout: Optional[float] = None) -> bool:
        url = feed_url(self.base_url, channel_id)
        try:
            response = await self.transport.get(
                url,
                params={"results": "1"},
                timeout=timeout if timeout is not None else self.probe_timeout,
            )
        except TransportError as e:
            logger.info(f"Public access probe failed for channel {channel_id}: {e}")
            return False

        if response.status != 200:
            logger.info(
                f"Public access failed for channel {channel_id} (status {response.status}), using API key"
            )
            return False
        return True

    async def resolve(
        self,
        channel_id: str,
        read_key: str,
        results: int = 1,
        timeout: Optional[float] = None,
    ) -> AccessPlan:
        url = feed_url(self.base_url, channel_id)
        if await self.probe_public(channel_id, timeout):
            logger.debug(f"Using public access for channel {channel_id}")
            return AccessPlan(AccessMode.PUBLIC, url, {"results": str(results)})

        return AccessPlan(
            AccessMode.KEYED_READ,
            url,
            {"api_key": read_key, "results": str(results)},
        )
