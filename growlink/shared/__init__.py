"""Shared utilities for Growlink services."""

from .models import (
    AccessMode,
    CacheEntry,
    ControlField,
    Credentials,
    DeviceStatus,
    Reading,
    ReadingSource,
    SensorField,
)
from .config import load_yaml_config, get_config_path
from .logging import setup_logging, mask_key

__all__ = [
    "AccessMode",
    "CacheEntry",
    "ControlField",
    "Credentials",
    "DeviceStatus",
    "Reading",
    "ReadingSource",
    "SensorField",
    "load_yaml_config",
    "get_config_path",
    "setup_logging",
    "mask_key",
]
