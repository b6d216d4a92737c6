"""Telemetry and control client for a single ThingSpeak channel."""

from .client import ConnectionReport, TelemetryClient
from .settings import ClientSettings, load_settings
from .transport import Transport, TransportError, TransportResponse

__all__ = [
    "ClientSettings",
    "ConnectionReport",
    "TelemetryClient",
    "Transport",
    "TransportError",
    "TransportResponse",
    "load_settings",
]
