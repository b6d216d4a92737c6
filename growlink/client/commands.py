"""Sends actuator commands as control-field updates."""

import logging
from typing import Dict, Mapping, Optional

from growlink.shared.logging import mask_key
from growlink.shared.models import ControlField, SensorField
from .credentials import CredentialCache
from .transport import Transport, TransportError

logger = logging.getLogger(__name__)

# Known-good values used to verify the write key end to end
SAMPLE_READING = {
    SensorField.TEMPERATURE: "25.5",
    SensorField.HUMIDITY: "68.0",
    SensorField.SOIL_MOISTURE: "75.0",
    SensorField.LIGHT_LEVEL: "82.0",
}


def encode_flag(value: bool) -> str:
    return "1" if value else "0"


class CommandDispatcher:
    """Translates actuator commands into update requests.

    Only reports whether the service accepted the request. It never touches
    local state; the effect shows up on the next read.
    """

    def __init__(
        self,
        transport: Transport,
        credentials: CredentialCache,
        base_url: str,
        timeout: float = 2.0,
        init_timeout: float = 5.0,
    ):
        self.transport = transport
        self.credentials = credentials
        self.update_url = f"{base_url.rstrip('/')}/update"
        self.timeout = timeout
        self.init_timeout = init_timeout

    async def send(self, field: ControlField, value: bool) -> bool:
        return await self.send_many({field: value})

    async def send_many(self, updates: Mapping[ControlField, bool]) -> bool:
        # Fields go out in channel order whatever order the caller used
        fields = {
            control.value: encode_flag(updates[control])
            for control in ControlField
            if control in updates
        }
        return await self._update(fields, self.timeout)

    async def initialize_control_fields(self) -> bool:
        """Reset every actuator field to 0."""
        fields = {control.value: "0" for control in ControlField}
        return await self._update(fields, self.init_timeout)

    async def send_sample_reading(self) -> bool:
        """Write a fixed sample to the sensor fields to test the write key."""
        fields = {sensor.value: value for sensor, value in SAMPLE_READING.items()}
        return await self._update(fields, self.init_timeout)

    async def _update(self, fields: Dict[str, str], timeout: float) -> bool:
        credentials = self.credentials.load()
        if not credentials.can_write():
            logger.warning("Channel id or write API key not configured; command not sent")
            return False

        if not fields:
            return True

        params: Dict[str, str] = {"api_key": credentials.write_key}
        params.update(fields)
        query = "&".join(f"{name}={value}" for name, value in fields.items())
        logger.info(f"Sending update (key {mask_key(credentials.write_key)}): {query}")

        try:
            response = await self.transport.get(self.update_url, params=params, timeout=timeout)
        except TransportError as e:
            logger.error(f"Update failed: {e}")
            return False
        except Exception as e:
            logger.error(f"Unexpected error sending update: {e}")
            return False

        if response.status != 200:
            logger.error(f"Update rejected with status {response.status}")
            return False
        return True

    async def probe_write(self) -> Optional[int]:
        """Status code of a write that turns the grow light off, None on failure."""
        credentials = self.credentials.load()
        if not credentials.can_write():
            return None
        params = {"api_key": credentials.write_key, ControlField.GROW_LIGHT.value: "0"}
        try:
            response = await self.transport.get(self.update_url, params=params, timeout=self.init_timeout)
        except TransportError as e:
            logger.warning(f"Write probe failed: {e}")
            return None
        return response.status
