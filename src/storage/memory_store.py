# src/storage/memory_store.py - v1
"""In-process blob store (STORE_BACKEND=memory).

Nothing survives the process. Useful for tests and one-shot runs.
"""

from __future__ import annotations

from shellcache.core.models import ResourceResponse
from shellcache.storage.base_blob_store import BaseBlobStore, BasePartition


class MemoryPartition(BasePartition):
    """Partition backed by a plain dict."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self._entries: dict[str, ResourceResponse] = {}

    async def get(self, key: str) -> ResourceResponse | None:
        return self._entries.get(key)

    async def put(self, key: str, response: ResourceResponse) -> None:
        self._entries[key] = response

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def keys(self) -> list[str]:
        return list(self._entries)


class MemoryBlobStore(BaseBlobStore):
    """Blob store holding every partition in memory."""

    def __init__(self) -> None:
        self._partitions: dict[str, MemoryPartition] = {}

    async def open_partition(self, name: str) -> MemoryPartition:
        partition = self._partitions.get(name)
        if partition is None:
            partition = MemoryPartition(name)
            self._partitions[name] = partition
        return partition

    async def delete_partition(self, name: str) -> bool:
        return self._partitions.pop(name, None) is not None

    async def partition_names(self) -> list[str]:
        return sorted(self._partitions)
