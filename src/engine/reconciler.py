# src/engine/reconciler.py - v1
"""Reconciliation engine: switch the Live partition to a new manifest.

Runs once per activation:
  1. Open Live, Staging and Manifest-store.
  2. Cold start (no stored manifest): recreate Live from Staging only.
     Upgrade: evict every Live entry whose key left the manifest or whose
     fingerprint changed, keep the rest, then copy Staging over Live.
  3. Delete Staging.
  4. Persist the new manifest as the next baseline.

Any failure wipes all three partitions so that no mixed-generation cache is
ever served, then surfaces as ReconcileError.
"""

from __future__ import annotations

import asyncio
import logging

from shellcache.core.errors import ManifestMissing, ReconcileError
from shellcache.core.keys import stored_resource_key
from shellcache.core.models import ReconcileReport, ResourceManifest
from shellcache.engine.context import WorkerContext
from shellcache.engine.manifest_store import ManifestStore
from shellcache.storage.base_blob_store import BasePartition

logger = logging.getLogger(__name__)


class Reconciler:
    """Evicts stale entries, promotes staged shell files, persists the manifest."""

    def __init__(self, context: WorkerContext) -> None:
        self._ctx = context
        self._manifests = ManifestStore(
            context.store, context.manifest_partition, context.manifest_key
        )
        self._lock = asyncio.Lock()

    @property
    def manifest_store(self) -> ManifestStore:
        return self._manifests

    async def reconcile(self, manifest: ResourceManifest | None = None) -> ReconcileReport:
        """Reconcile Live against ``manifest`` (defaults to the context's).

        Raises:
            ReconcileError: After wiping Live, Staging and Manifest-store.
        """
        manifest = manifest if manifest is not None else self._ctx.manifest
        async with self._lock:
            try:
                report = await self._reconcile(manifest)
            except Exception as e:
                logger.error("Failed to upgrade cache, wiping all partitions: %s", e)
                await self._wipe()
                raise ReconcileError(f"Reconciliation failed: {e}") from e

        logger.info(
            "Reconciled %s: %d evicted, %d retained, %d promoted",
            "cold start" if report.cold_start else "upgrade",
            len(report.evicted), len(report.retained), len(report.promoted),
        )
        return report

    async def _reconcile(self, manifest: ResourceManifest) -> ReconcileReport:
        store = self._ctx.store
        live = await store.open_partition(self._ctx.live_partition)
        staging = await store.open_partition(self._ctx.staging_partition)

        try:
            previous = await self._manifests.load()
        except ManifestMissing:
            previous = None

        report = ReconcileReport(cold_start=previous is None, manifest_size=len(manifest))

        if previous is None:
            await store.delete_partition(self._ctx.live_partition)
            live = await store.open_partition(self._ctx.live_partition)
        else:
            diff = manifest.diff(previous)
            logger.debug(
                "Manifest diff: +%d -%d ~%d =%d",
                len(diff.added), len(diff.removed), len(diff.changed), len(diff.unchanged),
            )
            for url in await live.keys():
                key = stored_resource_key(url, self._ctx.origin)
                if key is None or manifest.fingerprint_changed(key, previous):
                    await live.delete(url)
                    report.evicted.append(url)
                else:
                    report.retained.append(url)

        report.promoted.extend(await self._promote(staging, live))

        await store.delete_partition(self._ctx.staging_partition)
        await self._manifests.save(manifest)
        return report

    async def _promote(self, staging: BasePartition, live: BasePartition) -> list[str]:
        """Copy every staged entry into Live. Staged files always win."""
        promoted: list[str] = []
        for url in await staging.keys():
            response = await staging.get(url)
            if response is None:
                logger.warning("Staged entry %s vanished before promotion", url)
                continue
            await live.put(url, response)
            promoted.append(url)
        return promoted

    async def _wipe(self) -> None:
        for name in self._ctx.partition_names:
            try:
                await self._ctx.store.delete_partition(name)
            except Exception:
                logger.exception("Failed to delete partition %s during wipe", name)
