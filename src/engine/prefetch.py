# src/engine/prefetch.py - v1
"""Shell prefetch (install phase) and offline download (prefetch-remaining)."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from shellcache.core.errors import FetchError
from shellcache.core.keys import resource_url, storage_key, stored_resource_key
from shellcache.core.models import PrefetchReport, ResourceRequest, ResourceResponse
from shellcache.engine.context import WorkerContext

logger = logging.getLogger(__name__)


class ShellPrefetcher:
    """Populates Staging with the shell set, or Live with everything missing."""

    def __init__(self, context: WorkerContext) -> None:
        self._ctx = context

    async def prefetch_shell(self, shell_keys: Iterable[str] | None = None) -> PrefetchReport:
        """Fetch every shell key with forced revalidation into Staging.

        Keys are fetched in order and each success is stored immediately, so a
        failure leaves Staging holding whatever was fetched before it.

        Raises:
            FetchError: On the first network failure or non-2xx response.
        """
        keys = list(self._ctx.shell if shell_keys is None else shell_keys)
        staging = await self._ctx.store.open_partition(self._ctx.staging_partition)
        report = PrefetchReport(partition=staging.name)

        for key in keys:
            url = resource_url(key, self._ctx.origin)
            report.requested.append(url)
            response = await self._fetch_ok(url, reload=True)
            await staging.put(url, response)
            report.stored.append(url)

        logger.info("Prefetched %d shell resources into %s", len(report.stored), staging.name)
        return report

    async def prefetch_remaining(self) -> PrefetchReport:
        """Download every manifest resource not yet present in Live.

        All fetches must succeed before anything is stored.

        Raises:
            FetchError: If any resource cannot be fetched; Live is unchanged.
        """
        live = await self._ctx.store.open_partition(self._ctx.live_partition)
        present_urls = {storage_key(url) for url in await live.keys()}
        present_keys = {stored_resource_key(url, self._ctx.origin) for url in present_urls}
        missing = [
            resource_url(key, self._ctx.origin)
            for key in self._ctx.manifest.keys()
            if key not in present_keys
            and resource_url(key, self._ctx.origin) not in present_urls
        ]
        # "a" and "/a" are distinct keys with the same URL
        missing = list(dict.fromkeys(missing))
        report = PrefetchReport(partition=live.name, requested=missing)
        if not missing:
            logger.info("Offline download: %s already complete", live.name)
            return report

        semaphore = asyncio.Semaphore(self._ctx.prefetch_concurrency)

        async def fetch_one(url: str) -> ResourceResponse:
            async with semaphore:
                return await self._fetch_ok(url)

        tasks = [asyncio.ensure_future(fetch_one(url)) for url in missing]
        try:
            responses = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        for url, response in zip(missing, responses):
            await live.put(url, response)
            report.stored.append(url)

        logger.info("Offline download stored %d resources into %s", len(report.stored), live.name)
        return report

    async def _fetch_ok(self, url: str, reload: bool = False) -> ResourceResponse:
        response = await self._ctx.transport.fetch(ResourceRequest(url=url), reload=reload)
        if not response.ok:
            raise FetchError(url, "unexpected status", status=response.status)
        return response
