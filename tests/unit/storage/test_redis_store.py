# tests/unit/storage/test_redis_store.py - v1
"""Tests for storage/redis_store.py with a mocked Redis client."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from shellcache.core.models import ResourceResponse

URL_A = "https://app.example.com/main.js"


def _mock_redis() -> MagicMock:
    hashes: dict[str, dict[str, str]] = {}
    index: set[str] = set()

    def hdel(name, key):
        return 1 if hashes.get(name, {}).pop(key, None) is not None else 0

    def srem(name, member):
        if member in index:
            index.discard(member)
            return 1
        return 0

    client = MagicMock()
    client.hget = lambda name, key: hashes.get(name, {}).get(key)
    client.hset = lambda name, key, value: hashes.setdefault(name, {}).__setitem__(key, value)
    client.hdel = hdel
    client.hkeys = lambda name: list(hashes.get(name, {}))
    client.delete = lambda name: hashes.pop(name, None)
    client.sadd = lambda name, member: index.add(member)
    client.srem = srem
    client.smembers = lambda name: set(index)
    return client


def _store():
    with patch("shellcache.storage.redis_store.RedisBlobStore.__init__", return_value=None):
        from shellcache.storage.redis_store import RedisBlobStore
        store = RedisBlobStore.__new__(RedisBlobStore)
        store._client = _mock_redis()
    return store


class TestRedisBlobStore:
    def test_import_error_without_redis(self):
        """Clear ImportError when redis is not available."""
        import sys
        redis_mod = sys.modules.get("redis")
        sys.modules["redis"] = None  # type: ignore[assignment]
        try:
            from shellcache.storage.redis_store import RedisBlobStore
            with pytest.raises(ImportError, match="redis"):
                RedisBlobStore(redis_url="redis://localhost")
        finally:
            if redis_mod is not None:
                sys.modules["redis"] = redis_mod
            else:
                sys.modules.pop("redis", None)

    @pytest.mark.asyncio
    async def test_put_and_get(self):
        store = _store()
        part = await store.open_partition("live")
        await part.put(URL_A, ResourceResponse(url=URL_A, status=200, body=b"\x00\xff"))
        result = await part.get(URL_A)
        assert result is not None
        assert result.body == b"\x00\xff"

    @pytest.mark.asyncio
    async def test_delete_and_keys(self):
        store = _store()
        part = await store.open_partition("live")
        await part.put(URL_A, ResourceResponse(url=URL_A, status=200))
        assert await part.keys() == [URL_A]
        assert await part.delete(URL_A) is True
        assert await part.keys() == []
        assert await part.delete(URL_A) is False

    @pytest.mark.asyncio
    async def test_partitions(self):
        store = _store()
        await store.open_partition("live")
        await store.open_partition("staging")
        assert await store.partition_names() == ["live", "staging"]
        assert await store.delete_partition("staging") is True
        assert await store.partition_names() == ["live"]
        assert await store.delete_partition("staging") is False

    @pytest.mark.asyncio
    async def test_corrupt_value_returns_none(self):
        store = _store()
        part = await store.open_partition("live")
        store._client.hset("shellcache:partition:live", URL_A, "{broken")
        assert await part.get(URL_A) is None
