# src/storage/base_blob_store.py - v1
"""Abstract blob store interface: named partitions of stored responses."""

from __future__ import annotations

from abc import ABC, abstractmethod

from shellcache.core.models import ResourceResponse


class BasePartition(ABC):
    """A named, durable collection of (request key -> stored response)."""

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    async def get(self, key: str) -> ResourceResponse | None:
        """Retrieve a stored response by request key."""

    @abstractmethod
    async def put(self, key: str, response: ResourceResponse) -> None:
        """Store a response, replacing any previous entry for the key."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove an entry. Returns True if something was deleted."""

    @abstractmethod
    async def keys(self) -> list[str]:
        """List all request keys in this partition."""


class BaseBlobStore(ABC):
    """Unified interface for partition storage backends."""

    @abstractmethod
    async def open_partition(self, name: str) -> BasePartition:
        """Open a partition, creating it if needed."""

    @abstractmethod
    async def delete_partition(self, name: str) -> bool:
        """Drop a partition and all of its entries. True if it existed."""

    @abstractmethod
    async def partition_names(self) -> list[str]:
        """List existing partitions."""

    async def has_partition(self, name: str) -> bool:
        return name in await self.partition_names()

    def close(self) -> None:
        """Release backend resources. No-op by default."""
