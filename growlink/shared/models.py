"""Core data models for channel readings and actuator state."""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional

# Values shipped in a fresh install before the user enters real credentials
PLACEHOLDER_CHANNEL_ID = "##"
PLACEHOLDER_API_KEY = "####"


class SensorField(Enum):
    """Sensor fields of the channel and their wire names."""
    TEMPERATURE = "field1"
    HUMIDITY = "field2"
    SOIL_MOISTURE = "field3"
    LIGHT_LEVEL = "field4"


class ControlField(Enum):
    """Writable actuator fields of the channel and their wire names."""
    GROW_LIGHT = "field5"
    WATERING = "field6"
    AUTO_MODE = "field7"

    @property
    def attribute(self) -> str:
        """Name of the matching DeviceStatus attribute."""
        return self.name.lower()


class AccessMode(Enum):
    """How the feed endpoint is reached for a single fetch."""
    PUBLIC = "public"
    KEYED_READ = "keyed_read"


class ReadingSource(Enum):
    """Where a Reading returned by the fetcher came from."""
    FRESH = "fresh"
    CACHE = "cache"
    DEFAULT = "default"
    UNCONFIGURED = "unconfigured"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Reading:
    """A single snapshot of the four sensor values.

    A Reading where every value is exactly zero is treated as "no real data"
    by the fetcher, not as an observation.
    """
    temperature: float
    humidity: float
    soil_moisture: float
    light_level: float
    timestamp: Optional[str] = None

    @classmethod
    def zero(cls, timestamp: Optional[str] = None) -> "Reading":
        """Zero-valued reading stamped with the current instant."""
        if timestamp is None:
            timestamp = utc_now().isoformat()
        return cls(0.0, 0.0, 0.0, 0.0, timestamp)

    def is_all_zero(self) -> bool:
        return (
            self.temperature == 0.0
            and self.humidity == 0.0
            and self.soil_moisture == 0.0
            and self.light_level == 0.0
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "temperature": self.temperature,
            "humidity": self.humidity,
            "soil_moisture": self.soil_moisture,
            "light_level": self.light_level,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class DeviceStatus:
    """Actuator state decoded from the control fields."""
    grow_light: bool = False
    watering: bool = False
    auto_mode: bool = False

    @classmethod
    def all_off(cls) -> "DeviceStatus":
        return cls(False, False, False)

    def get(self, control: ControlField) -> bool:
        return getattr(self, control.attribute)

    def replace(self, control: ControlField, value: bool) -> "DeviceStatus":
        """Return a copy with one actuator changed."""
        return replace(self, **{control.attribute: value})

    def to_dict(self) -> Dict[str, bool]:
        return {
            "grow_light": self.grow_light,
            "watering": self.watering,
            "auto_mode": self.auto_mode,
        }


@dataclass(frozen=True)
class Credentials:
    """Channel id plus read/write API keys, each None until configured."""
    channel_id: Optional[str] = None
    read_key: Optional[str] = None
    write_key: Optional[str] = None

    @staticmethod
    def _is_set(value: Optional[str], placeholder: str) -> bool:
        return bool(value) and value != placeholder

    def can_read(self) -> bool:
        return (
            self._is_set(self.channel_id, PLACEHOLDER_CHANNEL_ID)
            and self._is_set(self.read_key, PLACEHOLDER_API_KEY)
        )

    def can_write(self) -> bool:
        return (
            self._is_set(self.channel_id, PLACEHOLDER_CHANNEL_ID)
            and self._is_set(self.write_key, PLACEHOLDER_API_KEY)
        )

    def has_placeholder(self) -> bool:
        """True if any entry still holds a shipped placeholder value."""
        return (
            self.channel_id == PLACEHOLDER_CHANNEL_ID
            or self.read_key == PLACEHOLDER_API_KEY
            or self.write_key == PLACEHOLDER_API_KEY
        )

    def is_configured(self) -> bool:
        """True only when all three entries hold real values."""
        return self.can_read() and self._is_set(self.write_key, PLACEHOLDER_API_KEY)


@dataclass(frozen=True)
class CacheEntry:
    """Last known valid reading and when it was fetched."""
    reading: Reading
    fetched_at: datetime
