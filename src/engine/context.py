# src/engine/context.py - v1
"""Worker context: everything one deployed version needs, passed explicitly.

Handlers receive this object instead of reading module-level globals, so the
serving origin and the manifest are always those of the current instance.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from shellcache.config.settings import Settings
from shellcache.core.keys import normalize_origin
from shellcache.core.models import BuildManifest, ResourceManifest
from shellcache.storage.base_blob_store import BaseBlobStore
from shellcache.transport.base_transport import BaseTransport


@dataclass(frozen=True)
class WorkerContext:
    """Immutable wiring for one deployed version."""

    manifest: ResourceManifest
    origin: str
    store: BaseBlobStore
    transport: BaseTransport
    shell: tuple[str, ...] = field(default_factory=tuple)
    entry_document: str = "index.html"
    live_partition: str = "app-cache"
    staging_partition: str = "app-temp-cache"
    manifest_partition: str = "app-manifest"
    manifest_key: str = "manifest"
    prefetch_concurrency: int = 4

    def __post_init__(self) -> None:
        object.__setattr__(self, "origin", normalize_origin(self.origin))
        object.__setattr__(self, "shell", tuple(self.shell))

    @property
    def partition_names(self) -> tuple[str, str, str]:
        return (self.live_partition, self.staging_partition, self.manifest_partition)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        build: BuildManifest,
        store: BaseBlobStore,
        transport: BaseTransport,
    ) -> WorkerContext:
        return cls(
            manifest=build.resources,
            origin=settings.origin,
            store=store,
            transport=transport,
            shell=tuple(build.shell),
            entry_document=settings.entry_document,
            live_partition=settings.live_partition,
            staging_partition=settings.staging_partition,
            manifest_partition=settings.manifest_partition,
            manifest_key=settings.manifest_key,
            prefetch_concurrency=settings.prefetch_concurrency,
        )
