# src/storage/redis_store.py - v1
"""Redis-based blob store (STORE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Each partition is a Redis hash (field = request key, value = JSON response);
a set tracks which partitions exist.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from shellcache.core.models import ResourceResponse
from shellcache.storage.base_blob_store import BaseBlobStore, BasePartition

logger = logging.getLogger(__name__)

_KEY_PREFIX = "shellcache:partition:"
_INDEX_KEY = "shellcache:partitions"


def _hash_key(name: str) -> str:
    return f"{_KEY_PREFIX}{name}"


class RedisPartition(BasePartition):
    """Partition stored as one Redis hash."""

    def __init__(self, name: str, client: Any) -> None:
        super().__init__(name)
        self._client = client

    async def get(self, key: str) -> ResourceResponse | None:
        data = self._client.hget(_hash_key(self.name), key)
        if data is None:
            return None
        try:
            return ResourceResponse.model_validate_json(data)
        except ValidationError as e:
            logger.warning("Failed to deserialize entry %s in %s: %s", key, self.name, e)
            return None

    async def put(self, key: str, response: ResourceResponse) -> None:
        self._client.hset(_hash_key(self.name), key, response.model_dump_json())
        self._client.sadd(_INDEX_KEY, self.name)

    async def delete(self, key: str) -> bool:
        return bool(self._client.hdel(_hash_key(self.name), key))

    async def keys(self) -> list[str]:
        return sorted(self._client.hkeys(_hash_key(self.name)))


class RedisBlobStore(BaseBlobStore):
    """Redis-backed blob store for shared or long-lived deployments."""

    def __init__(self, redis_url: str) -> None:
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client = redis.Redis.from_url(redis_url, decode_responses=True)

    async def open_partition(self, name: str) -> RedisPartition:
        # Empty hashes do not exist in Redis, so the index set is authoritative.
        self._client.sadd(_INDEX_KEY, name)
        return RedisPartition(name, self._client)

    async def delete_partition(self, name: str) -> bool:
        self._client.delete(_hash_key(name))
        return bool(self._client.srem(_INDEX_KEY, name))

    async def partition_names(self) -> list[str]:
        return sorted(self._client.smembers(_INDEX_KEY))

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()
