"""HTTP transport for the ThingSpeak REST API."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import aiohttp

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Timeout, DNS or connection failure talking to the remote service."""


@dataclass(frozen=True)
class TransportResponse:
    status: int
    body: str


class Transport:
    """Thin async GET wrapper around an aiohttp session.

    The session may be shared with the caller; only a session created here is
    closed by close().
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def get(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        timeout: float = 10.0,
    ) -> TransportResponse:
        """Issue a GET and return status plus body text.

        Raises:
            TransportError: On timeout or any client/connection error.
        """
        session = self._get_session()
        try:
            async with session.get(
                url,
                params=params,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as resp:
                body = await resp.text()
                return TransportResponse(status=resp.status, body=body)
        except asyncio.TimeoutError as e:
            raise TransportError(f"GET {url} timed out after {timeout}s") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"GET {url} failed: {e}") from e

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
