"""Credential persistence with a short-lived in-memory cache."""

import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Dict, Optional, Union

import yaml

from growlink.shared.logging import mask_key
from growlink.shared.models import Credentials, utc_now

logger = logging.getLogger(__name__)

KEY_CHANNEL_ID = "thingspeak_channel_id"
KEY_READ_API_KEY = "thingspeak_read_api_key"
KEY_WRITE_API_KEY = "thingspeak_write_api_key"

CREDENTIAL_KEYS = (KEY_CHANNEL_ID, KEY_READ_API_KEY, KEY_WRITE_API_KEY)


class CredentialStore(ABC):
    """Named string entries persisted between sessions."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        pass


class MemoryCredentialStore(CredentialStore):
    def __init__(self, values: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class YamlCredentialStore(CredentialStore):
    """Stores entries as a flat mapping in a YAML file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Credentials file {self.path} is not a mapping")
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False)
        os.chmod(self.path, 0o600)

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


class CredentialCache:
    """Caches credentials loaded from a store for a short window."""

    def __init__(
        self,
        store: CredentialStore,
        ttl: timedelta = timedelta(minutes=5),
        clock: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self._ttl = ttl
        self._clock = clock
        self._cached: Optional[Credentials] = None
        self._cached_at: Optional[datetime] = None

    def load(self) -> Credentials:
        """Return cached credentials, reloading from the store once expired."""
        if self._cached is not None and self._cached_at is not None:
            if self._clock() - self._cached_at < self._ttl:
                return self._cached

        try:
            credentials = Credentials(
                channel_id=self._store.get(KEY_CHANNEL_ID),
                read_key=self._store.get(KEY_READ_API_KEY),
                write_key=self._store.get(KEY_WRITE_API_KEY),
            )
        except Exception as e:
            logger.error(f"Failed to load credentials: {e}")
            return Credentials()

        logger.debug(
            f"Loaded credentials: channel={credentials.channel_id or 'NULL'} "
            f"read={mask_key(credentials.read_key)} write={mask_key(credentials.write_key)}"
        )
        if credentials.has_placeholder():
            logger.warning("Credentials still hold placeholder values; configure the channel id and API keys")

        self._cached = credentials
        self._cached_at = self._clock()
        return credentials

    def save(self, credentials: Credentials) -> None:
        """Persist credentials and force the next load to hit the store."""
        for key, value in zip(
            CREDENTIAL_KEYS,
            (credentials.channel_id, credentials.read_key, credentials.write_key),
        ):
            if value is None:
                self._store.remove(key)
            else:
                self._store.set(key, value)
        self.invalidate()
        logger.info(f"Saved credentials for channel {credentials.channel_id}")

    def clear(self) -> None:
        """Remove stored credentials and the cached copy."""
        self.invalidate()
        for key in CREDENTIAL_KEYS:
            self._store.remove(key)
        logger.info("Cleared stored credentials")

    def invalidate(self) -> None:
        self._cached = None
        self._cached_at = None
