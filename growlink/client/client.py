"""
Telemetry & control client.
One instance per session owns the transport, credential cache and freshness
cache, and wires the fetchers, dispatcher and status reader around them.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import aiohttp

from growlink.shared.models import (
    ControlField,
    Credentials,
    DeviceStatus,
    Reading,
    ReadingSource,
    utc_now,
)
from .access import AccessStrategyResolver, feed_url
from .cache import FreshnessCache
from .commands import CommandDispatcher
from .credentials import CredentialCache, CredentialStore, MemoryCredentialStore, YamlCredentialStore
from .fetchers import HistoryFetcher, ReadingFetcher
from .settings import ClientSettings
from .status import DeviceStatusReader
from .transport import Transport, TransportError

logger = logging.getLogger(__name__)


@dataclass
class ConnectionReport:
    """Outcome of a connectivity check; write_status is None unless a write was attempted."""
    credentials_valid: bool
    channel_id: Optional[str] = None
    is_public: bool = False
    read_status: Optional[int] = None
    write_status: Optional[int] = None
    read_body: str = ""
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "credentials_valid": self.credentials_valid,
            "channel_id": self.channel_id,
            "is_public": self.is_public,
            "read_status": self.read_status,
            "write_status": self.write_status,
            "read_body": self.read_body,
            "error": self.error,
        }


class TelemetryClient:
    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        store: Optional[CredentialStore] = None,
        transport: Optional[Transport] = None,
        session: Optional[aiohttp.ClientSession] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.settings = settings or ClientSettings()

        if store is None:
            if self.settings.credentials_file:
                store = YamlCredentialStore(self.settings.credentials_file)
            else:
                store = MemoryCredentialStore()

        self._transport = transport or Transport(session)
        self._credentials = CredentialCache(
            store,
            ttl=timedelta(minutes=self.settings.credential_cache_minutes),
            clock=clock,
        )
        self._cache = FreshnessCache(
            retention=timedelta(hours=self.settings.retention_hours),
            stale_after=timedelta(minutes=self.settings.stale_after_minutes),
            clock=clock,
        )

        self.resolver = AccessStrategyResolver(
            self._transport, self.settings.base_url, self.settings.probe_timeout
        )
        self.readings = ReadingFetcher(
            self._transport, self._credentials, self.resolver, self._cache,
            timeout=self.settings.read_timeout,
            clock=clock,
        )
        self.history = HistoryFetcher(
            self._transport, self._credentials, self.resolver,
            timeout=self.settings.history_timeout,
        )
        self.commands = CommandDispatcher(
            self._transport, self._credentials, self.settings.base_url,
            timeout=self.settings.command_timeout,
            init_timeout=self.settings.init_timeout,
        )
        self.status = DeviceStatusReader(
            self._transport, self._credentials, self.resolver,
            timeout=self.settings.status_timeout,
        )

    @property
    def cache(self) -> FreshnessCache:
        return self._cache

    # --- reads ---

    async def fetch_latest(self) -> Reading:
        return await self.readings.fetch_latest()

    async def fetch_latest_with_source(self) -> Tuple[Reading, ReadingSource]:
        return await self.readings.fetch_latest_with_source()

    @property
    def last_source(self) -> Optional[ReadingSource]:
        return self.readings.last_source

    async def fetch_history(self, count: Optional[int] = None) -> List[Reading]:
        if count is None:
            count = self.settings.history_results
        return await self.history.fetch_history(count)

    async def fetch_status(self) -> DeviceStatus:
        return await self.status.fetch_status()

    async def fetch_live_status(self) -> Optional[DeviceStatus]:
        return await self.status.fetch_live_status()

    # --- commands ---

    async def send(self, field: ControlField, value: bool) -> bool:
        return await self.commands.send(field, value)

    async def send_many(self, updates: Mapping[ControlField, bool]) -> bool:
        return await self.commands.send_many(updates)

    async def set_grow_light(self, on: bool) -> bool:
        return await self.send(ControlField.GROW_LIGHT, on)

    async def set_watering(self, on: bool) -> bool:
        return await self.send(ControlField.WATERING, on)

    async def set_auto_mode(self, enabled: bool) -> bool:
        return await self.send(ControlField.AUTO_MODE, enabled)

    async def initialize_control_fields(self) -> bool:
        return await self.commands.initialize_control_fields()

    # --- freshness ---

    def is_data_from_cache(self) -> bool:
        return self.readings.last_source == ReadingSource.CACHE

    def data_age_info(self) -> str:
        return self._cache.describe_age()

    def cache_status(self) -> Dict[str, Any]:
        return self._cache.status()

    def clear_cached_data(self) -> None:
        self._cache.clear()
        logger.info("Cleared cached reading")

    # --- credentials ---

    def load_credentials(self) -> Credentials:
        return self._credentials.load()

    def save_credentials(self, channel_id: str, read_key: str, write_key: str) -> None:
        self._credentials.save(Credentials(channel_id, read_key, write_key))

    def logout(self) -> None:
        """Forget cached data and stored credentials."""
        self._cache.clear()
        self._credentials.clear()

    # --- diagnostics ---

    async def test_connection(self, check_write: bool = False) -> ConnectionReport:
        """Check read access and, optionally, write access to the channel.

        With check_write the write key is tested by a real update that sets
        field5 to 0, which turns the grow light off. Without it the report's
        write_status stays None and no control field is touched.
        """
        credentials = self._credentials.load()
        if not credentials.can_read():
            return ConnectionReport(
                credentials_valid=False,
                channel_id=credentials.channel_id,
                error="Channel id or read API key not configured",
            )

        report = ConnectionReport(
            credentials_valid=credentials.is_configured(),
            channel_id=credentials.channel_id,
        )
        report.is_public = await self.resolver.probe_public(
            credentials.channel_id, timeout=self.settings.read_timeout
        )

        try:
            response = await self._transport.get(
                feed_url(self.settings.base_url, credentials.channel_id),
                params={"api_key": credentials.read_key, "results": "1"},
                timeout=self.settings.read_timeout,
            )
            report.read_status = response.status
            report.read_body = response.body[:200]
        except TransportError as e:
            report.error = str(e)

        if check_write:
            report.write_status = await self.commands.probe_write()
        logger.info(f"Connection test: {report.to_dict()}")
        return report

    async def diagnose_sensor_data(self) -> bool:
        """Whether the device is currently sending non-zero sensor data."""
        reading, source = await self.fetch_latest_with_source()
        if source != ReadingSource.FRESH:
            logger.warning(
                "No live sensor data; the device must send field1-field4 "
                "to the channel update endpoint"
            )
            return False
        return not reading.is_all_zero()

    # --- lifecycle ---

    async def close(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> "TelemetryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
