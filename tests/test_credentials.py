from datetime import timedelta

import pytest

from growlink.client.credentials import (
    KEY_CHANNEL_ID,
    KEY_READ_API_KEY,
    KEY_WRITE_API_KEY,
    CredentialCache,
    MemoryCredentialStore,
    YamlCredentialStore,
)
from growlink.shared.models import Credentials


class CountingStore(MemoryCredentialStore):
    def __init__(self, values=None):
        super().__init__(values)
        self.reads = 0

    def get(self, key):
        self.reads += 1
        return super().get(key)


class BrokenStore(MemoryCredentialStore):
    def get(self, key):
        raise OSError("storage unavailable")


def test_load_is_cached_within_ttl(clock):
    store = CountingStore({KEY_CHANNEL_ID: "1", KEY_READ_API_KEY: "R", KEY_WRITE_API_KEY: "W"})
    cache = CredentialCache(store, ttl=timedelta(minutes=5), clock=clock)

    first = cache.load()
    clock.advance(minutes=4)
    second = cache.load()

    assert first == second == Credentials("1", "R", "W")
    assert store.reads == 3


def test_load_reloads_after_ttl(clock):
    store = CountingStore({KEY_CHANNEL_ID: "1"})
    cache = CredentialCache(store, clock=clock)

    cache.load()
    store.set(KEY_CHANNEL_ID, "2")
    clock.advance(minutes=5)

    assert cache.load().channel_id == "2"
    assert store.reads == 6


def test_save_invalidates_cache(clock):
    store = MemoryCredentialStore()
    cache = CredentialCache(store, clock=clock)
    assert cache.load() == Credentials()

    cache.save(Credentials("9", "R", "W"))

    assert cache.load() == Credentials("9", "R", "W")


def test_clear_removes_entries(clock):
    store = MemoryCredentialStore({KEY_CHANNEL_ID: "1", KEY_READ_API_KEY: "R"})
    cache = CredentialCache(store, clock=clock)
    cache.load()

    cache.clear()

    assert store.get(KEY_CHANNEL_ID) is None
    assert cache.load() == Credentials()


def test_store_failure_is_unconfigured(clock):
    cache = CredentialCache(BrokenStore(), clock=clock)

    credentials = cache.load()

    assert credentials == Credentials()
    assert not credentials.is_configured()


def test_placeholder_warning(clock, caplog):
    store = MemoryCredentialStore({KEY_CHANNEL_ID: "##", KEY_READ_API_KEY: "####"})

    CredentialCache(store, clock=clock).load()

    assert "placeholder" in caplog.text


def test_yaml_store_persists(tmp_path):
    path = tmp_path / "nested" / "credentials.yaml"
    store = YamlCredentialStore(path)
    assert store.get(KEY_CHANNEL_ID) is None

    store.set(KEY_CHANNEL_ID, "123456")
    store.set(KEY_READ_API_KEY, "READ")

    reopened = YamlCredentialStore(path)
    assert reopened.get(KEY_CHANNEL_ID) == "123456"
    assert reopened.get(KEY_READ_API_KEY) == "READ"

    reopened.remove(KEY_READ_API_KEY)
    assert store.get(KEY_READ_API_KEY) is None


def test_yaml_store_rejects_non_mapping(tmp_path):
    path = tmp_path / "credentials.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ValueError):
        YamlCredentialStore(path).get(KEY_CHANNEL_ID)
