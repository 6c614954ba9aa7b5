# src/engine/manifest_store.py - v1
"""Persists the manifest that was active after the last reconciliation.

The Manifest-store partition holds exactly one entry, under a fixed key,
whose body is the JSON-serialized ResourceManifest.
"""

from __future__ import annotations

import logging

from shellcache.core.errors import ManifestMissing
from shellcache.core.models import ResourceManifest, ResourceResponse
from shellcache.storage.base_blob_store import BaseBlobStore

logger = logging.getLogger(__name__)


class ManifestStore:
    """Reads and writes the reconciliation baseline."""

    def __init__(
        self,
        store: BaseBlobStore,
        partition: str = "app-manifest",
        key: str = "manifest",
    ) -> None:
        self._store = store
        self._partition = partition
        self._key = key

    async def load(self) -> ResourceManifest:
        """Return the stored manifest.

        Raises:
            ManifestMissing: Nothing stored yet (first install or after a wipe).
            ManifestCorrupt: Stored payload cannot be decoded.
        """
        partition = await self._store.open_partition(self._partition)
        entry = await partition.get(self._key)
        if entry is None:
            raise ManifestMissing(
                f"No manifest under {self._partition!r}/{self._key!r}"
            )
        return ResourceManifest.from_json(entry.body)

    async def save(self, manifest: ResourceManifest) -> None:
        """Replace the stored manifest."""
        partition = await self._store.open_partition(self._partition)
        await partition.put(
            self._key,
            ResourceResponse(
                url=self._key,
                status=200,
                headers={"content-type": "application/json"},
                body=manifest.to_json().encode("utf-8"),
            ),
        )
        logger.debug("Saved manifest with %d resources", len(manifest))

    async def clear(self) -> bool:
        """Drop the whole Manifest-store partition."""
        return await self._store.delete_partition(self._partition)
