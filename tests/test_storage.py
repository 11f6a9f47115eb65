"""Tests for the key-value store collaborators."""

import asyncio

import pytest

from src.personalization.exceptions import PersistenceError
from src.personalization.storage import InMemoryStore, JSONFileStore, RedisStore


class FakeRedis:
    """Minimal async stand-in for a ``redis.asyncio`` client."""

    def __init__(self, fail: bool = False):
        self.data = {}
        self.fail = fail
        self.closed = False

    async def get(self, key):
        if self.fail:
            raise ConnectionError("redis down")
        return self.data.get(key)

    async def set(self, key, value):
        if self.fail:
            raise ConnectionError("redis down")
        self.data[key] = value

    async def delete(self, key):
        self.data.pop(key, None)

    async def aclose(self):
        self.closed = True


def test_in_memory_store_round_trip():
    store = InMemoryStore()

    asyncio.run(store.set("k", "v1"))
    asyncio.run(store.set("k", "v2"))

    assert asyncio.run(store.get("k")) == "v2"
    asyncio.run(store.delete("k"))
    asyncio.run(store.delete("k"))
    assert asyncio.run(store.get("k")) is None


def test_file_store_round_trip(tmp_path):
    """Test that values survive a new store instance on the same directory."""
    directory = tmp_path / "history"
    asyncio.run(JSONFileStore(str(directory)).set("ai_messages", '["a"]'))

    reopened = JSONFileStore(str(directory))

    assert asyncio.run(reopened.get("ai_messages")) == '["a"]'
    assert (directory / "ai_messages.json").exists()


def test_file_store_missing_key(tmp_path):
    assert asyncio.run(JSONFileStore(str(tmp_path)).get("absent")) is None


def test_file_store_replaces_whole_value(tmp_path):
    store = JSONFileStore(str(tmp_path))
    asyncio.run(store.set("k", "a much longer first value"))
    asyncio.run(store.set("k", "short"))

    assert asyncio.run(store.get("k")) == "short"
    # No temporary files are left behind
    assert sorted(p.name for p in tmp_path.iterdir()) == ["k.json"]


def test_file_store_delete(tmp_path):
    store = JSONFileStore(str(tmp_path))
    asyncio.run(store.set("k", "v"))
    asyncio.run(store.delete("k"))
    asyncio.run(store.delete("k"))

    assert asyncio.run(store.get("k")) is None


def test_file_store_write_failure_raises(tmp_path):
    """Test that an unwritable location raises PersistenceError."""
    blocker = tmp_path / "blocker"
    blocker.write_text("i am a file, not a directory")
    store = JSONFileStore(str(blocker / "nested"))

    with pytest.raises(PersistenceError) as exc_info:
        asyncio.run(store.set("k", "v"))

    assert exc_info.value.details["key"] == "k"


def test_redis_store_namespaces_keys():
    client = FakeRedis()
    store = RedisStore(client, prefix="test")

    asyncio.run(store.set("ai_messages", "[]"))

    assert client.data == {"test:ai_messages": "[]"}
    assert asyncio.run(store.get("ai_messages")) == "[]"
    asyncio.run(store.delete("ai_messages"))
    assert client.data == {}


def test_redis_store_wraps_errors():
    store = RedisStore(FakeRedis(fail=True))

    with pytest.raises(PersistenceError):
        asyncio.run(store.set("k", "v"))
    with pytest.raises(PersistenceError):
        asyncio.run(store.get("k"))


def test_redis_store_close():
    client = FakeRedis()
    asyncio.run(RedisStore(client).close())

    assert client.closed
