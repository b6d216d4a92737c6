import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Union

import pytest

from growlink.client import ClientSettings, TelemetryClient, TransportError, TransportResponse
from growlink.client.credentials import (
    KEY_CHANNEL_ID,
    KEY_READ_API_KEY,
    KEY_WRITE_API_KEY,
    MemoryCredentialStore,
)

BASE_URL = "https://api.test"
CHANNEL_ID = "123456"
READ_KEY = "READKEY1234567"
WRITE_KEY = "WRITEKEY123456"

CONFIGURED = {
    KEY_CHANNEL_ID: CHANNEL_ID,
    KEY_READ_API_KEY: READ_KEY,
    KEY_WRITE_API_KEY: WRITE_KEY,
}

PLACEHOLDERS = {
    KEY_CHANNEL_ID: "##",
    KEY_READ_API_KEY: "####",
    KEY_WRITE_API_KEY: "####",
}


@dataclass
class Call:
    url: str
    params: Dict[str, str]
    timeout: float


Result = Union[TransportResponse, Exception]


class FakeTransport:
    """Records GETs and answers them through a handler."""

    def __init__(self, handler: Optional[Callable[[str, Dict[str, str]], Result]] = None):
        self.calls: List[Call] = []
        self.handler = handler or (lambda url, params: TransportResponse(404, ""))
        self.closed = False

    async def get(self, url, params=None, timeout=10.0):
        params = dict(params or {})
        self.calls.append(Call(url, params, timeout))
        result = self.handler(url, params)
        if isinstance(result, Exception):
            raise result
        return result

    async def close(self):
        self.closed = True

    def feed_calls(self) -> List[Call]:
        return [c for c in self.calls if c.url.endswith("/feeds.json")]

    def update_calls(self) -> List[Call]:
        return [c for c in self.calls if c.url.endswith("/update")]


class FakeClock:
    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def feed_body(*feeds: Dict[str, Any]) -> str:
    return json.dumps({"channel": {"id": int(CHANNEL_ID)}, "feeds": list(feeds)})


def feed(field1=None, field2=None, field3=None, field4=None, created_at="2024-01-01T00:00:00Z", **controls):
    entry = {
        "created_at": created_at,
        "entry_id": 1,
        "field1": field1,
        "field2": field2,
        "field3": field3,
        "field4": field4,
    }
    entry.update(controls)
    return entry


def channel(
    feeds: Optional[List[Dict[str, Any]]] = None,
    public: bool = False,
    status: int = 200,
    update_status: int = 200,
    error: Optional[Exception] = None,
) -> Callable[[str, Dict[str, str]], Result]:
    """Handler imitating one channel: private unless public=True."""
    body = feed_body(*(feeds or []))

    def handler(url: str, params: Dict[str, str]) -> Result:
        if url.endswith("/update"):
            return TransportResponse(update_status, "1" if update_status == 200 else "0")
        if error is not None:
            return error
        if "api_key" not in params:
            if public:
                return TransportResponse(status, body)
            return TransportResponse(400, '{"status":"400","error":{"error_code":"error_auth_required"}}')
        return TransportResponse(status, body)

    return handler


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return ClientSettings(base_url=BASE_URL)


@pytest.fixture
def make_client(settings, clock):
    def _make(handler=None, credentials=None):
        transport = FakeTransport(handler)
        store = MemoryCredentialStore(CONFIGURED if credentials is None else credentials)
        client = TelemetryClient(settings, store=store, transport=transport, clock=clock)
        return client, transport

    return _make


@pytest.fixture
def timeout_error():
    return TransportError("GET timed out after 10s")
