# src/storage/store_factory.py - v1
"""Factory for blob store instantiation."""

from __future__ import annotations

from shellcache.config.settings import Settings
from shellcache.storage.base_blob_store import BaseBlobStore


def create_blob_store(settings: Settings | None = None) -> BaseBlobStore:
    """Instantiate the configured blob store backend.

    Args:
        settings: Application settings. Defaults to an in-memory store.

    Returns:
        Configured BaseBlobStore implementation.
    """
    backend = "memory" if settings is None else settings.store_backend

    if backend == "memory":
        from shellcache.storage.memory_store import MemoryBlobStore
        return MemoryBlobStore()

    if backend == "json":
        from shellcache.storage.json_store import JsonBlobStore
        return JsonBlobStore(store_root=settings.store_root)

    if backend == "sqlite":
        from shellcache.storage.sqlite_store import SqliteBlobStore
        db_path = settings.store_root.expanduser() / "shellcache.db"
        return SqliteBlobStore(db_path=db_path)

    if backend == "redis":
        from shellcache.storage.redis_store import RedisBlobStore
        if not settings.store_redis_url:
            raise ValueError(
                "STORE_REDIS_URL must be set when STORE_BACKEND=redis"
            )
        return RedisBlobStore(redis_url=settings.store_redis_url)

    raise ValueError(f"Unsupported store backend: {backend!r}")
