"""Configuration for the telemetry and control client."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from growlink.shared.config import get_config_path, get_log_level, load_yaml_config

DEFAULT_BASE_URL = "https://api.thingspeak.com"


@dataclass
class ClientSettings:
    """Endpoints, timeouts and cache windows for the client."""

    base_url: str = DEFAULT_BASE_URL

    # Request timeouts (seconds)
    probe_timeout: float = 5.0
    read_timeout: float = 10.0
    history_timeout: float = 15.0
    command_timeout: float = 2.0
    init_timeout: float = 5.0
    status_timeout: float = 3.0

    # Freshness cache
    retention_hours: float = 24.0
    stale_after_minutes: float = 15.0
    credential_cache_minutes: float = 5.0

    # Caller layer
    poll_interval: float = 300.0  # seconds
    watering_duration: float = 180.0  # seconds
    history_results: int = 10

    credentials_file: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict) -> "ClientSettings":
        """Create settings from dictionary."""
        timeouts = data.get("timeouts", {})
        cache = data.get("cache", {})

        return cls(
            base_url=data.get("base_url", DEFAULT_BASE_URL),
            probe_timeout=timeouts.get("probe", 5.0),
            read_timeout=timeouts.get("read", 10.0),
            history_timeout=timeouts.get("history", 15.0),
            command_timeout=timeouts.get("command", 2.0),
            init_timeout=timeouts.get("init", 5.0),
            status_timeout=timeouts.get("status", 3.0),
            retention_hours=cache.get("retention_hours", 24.0),
            stale_after_minutes=cache.get("stale_after_minutes", 15.0),
            credential_cache_minutes=cache.get("credential_minutes", 5.0),
            poll_interval=data.get("poll_interval", 300.0),
            watering_duration=data.get("watering_duration", 180.0),
            history_results=data.get("history_results", 10),
            credentials_file=data.get("credentials_file"),
            log_level=get_log_level(data),
        )


def load_settings(config_path: Optional[str] = None) -> ClientSettings:
    """Load client settings from YAML file or environment.

    Args:
        config_path: Path to YAML config file. If not provided,
                    looks for GROWLINK_CONFIG env var, then the
                    environment's config-{env}.yaml, then defaults.

    Returns:
        ClientSettings instance.
    """
    load_dotenv()

    if config_path is None:
        config_path = os.environ.get("GROWLINK_CONFIG")

    if config_path is None:
        default_path = get_config_path()
        if default_path.exists():
            config_path = str(default_path)

    if config_path and Path(config_path).exists():
        settings = ClientSettings.from_dict(load_yaml_config(config_path, load_env=False))
    else:
        settings = ClientSettings()

    # Environment variable overrides
    if base_url := os.environ.get("THINGSPEAK_BASE_URL"):
        settings.base_url = base_url
    if credentials_file := os.environ.get("GROWLINK_CREDENTIALS_FILE"):
        settings.credentials_file = credentials_file
    if log_level := os.environ.get("LOG_LEVEL"):
        settings.log_level = log_level.upper()

    return settings
