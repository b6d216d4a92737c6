"""Decoding of ThingSpeak feed payloads."""

import json
import logging
import math
from typing import Any, Dict, List

from growlink.shared.models import ControlField, DeviceStatus, Reading, SensorField

logger = logging.getLogger(__name__)


class FeedFormatError(ValueError):
    """Body is not valid JSON or has no usable feeds list."""


def parse_field(value: Any) -> float:
    """Parse one sensor field, falling back to 0.0.

    Missing, unparseable, non-finite and negative values all become 0.0 so that
    a bad field never discards the others.
    """
    if value is None:
        return 0.0
    try:
        parsed = float(str(value).strip())
    except ValueError:
        logger.debug(f"Unparseable sensor value {value!r}, using 0.0")
        return 0.0
    if not math.isfinite(parsed) or parsed < 0:
        logger.debug(f"Out of range sensor value {value!r}, using 0.0")
        return 0.0
    return parsed


def reading_from_feed(feed: Dict[str, Any]) -> Reading:
    return Reading(
        temperature=parse_field(feed.get(SensorField.TEMPERATURE.value)),
        humidity=parse_field(feed.get(SensorField.HUMIDITY.value)),
        soil_moisture=parse_field(feed.get(SensorField.SOIL_MOISTURE.value)),
        light_level=parse_field(feed.get(SensorField.LIGHT_LEVEL.value)),
        timestamp=feed.get("created_at"),
    )


def status_from_feed(feed: Dict[str, Any]) -> DeviceStatus:
    """Control fields are on only when the wire value is exactly "1"."""
    return DeviceStatus(
        grow_light=feed.get(ControlField.GROW_LIGHT.value) == "1",
        watering=feed.get(ControlField.WATERING.value) == "1",
        auto_mode=feed.get(ControlField.AUTO_MODE.value) == "1",
    )


def decode_feeds(body: str) -> List[Dict[str, Any]]:
    """Extract the feeds list from a feeds.json response body."""
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, TypeError) as e:
        raise FeedFormatError(f"Malformed feed JSON: {e}") from e

    if not isinstance(data, dict):
        raise FeedFormatError(f"Unexpected feed payload type: {type(data).__name__}")

    feeds = data.get("feeds")
    if not isinstance(feeds, list):
        raise FeedFormatError("Feed payload has no 'feeds' list")

    return [feed for feed in feeds if isinstance(feed, dict)]
