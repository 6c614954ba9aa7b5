# src/engine/interceptor.py - v1
"""Fetch interceptor: decide whether and how to serve a read request.

handle() returns None (PassThrough) for anything that is not a GET of a
manifest resource; the caller then applies its default network behaviour.
The root document is served network-first, everything else cache-first.
"""

from __future__ import annotations

import logging

from shellcache.core.errors import FetchError
from shellcache.core.keys import ROOT_KEY, resource_key, storage_key
from shellcache.core.models import InterceptorStats, ResourceRequest, ResourceResponse
from shellcache.engine.context import WorkerContext
from shellcache.logging.context import set_request_context

logger = logging.getLogger(__name__)


class FetchInterceptor:
    """Applies the cache-first / network-first serving policies."""

    def __init__(self, context: WorkerContext) -> None:
        self._ctx = context
        self.stats = InterceptorStats()

    def classify(self, request: ResourceRequest) -> str | None:
        """Resource key this request is served under, or None to pass through."""
        if request.method.upper() != "GET":
            return None
        key = resource_key(request.url, self._ctx.origin, self._ctx.entry_document)
        if key is None or key not in self._ctx.manifest:
            return None
        return key

    async def handle(self, request: ResourceRequest) -> ResourceResponse | None:
        """Serve ``request`` from cache and/or network, or return None.

        Raises:
            FetchError: Network failure with no usable cached copy.
        """
        key = self.classify(request)
        if key is None:
            self.stats.pass_through += 1
            return None

        set_request_context(key)
        if key == ROOT_KEY:
            return await self.network_first(request)
        return await self.cache_first(request)

    async def cache_first(self, request: ResourceRequest) -> ResourceResponse:
        """Serve from Live; on a miss fetch and lazily fill Live on success."""
        live = await self._ctx.store.open_partition(self._ctx.live_partition)
        cache_key = storage_key(request.url)

        cached = await live.get(cache_key)
        if cached is not None:
            self.stats.cache_hits += 1
            return cached.as_cached()

        response = await self._ctx.transport.fetch(request)
        if response.ok:
            await live.put(cache_key, response)
            self.stats.network_fills += 1
        else:
            logger.debug("Not caching %s (HTTP %d)", request.url, response.status)
        return response

    async def network_first(self, request: ResourceRequest) -> ResourceResponse:
        """Prefer a fresh network copy; fall back to Live when offline."""
        live = await self._ctx.store.open_partition(self._ctx.live_partition)
        cache_key = storage_key(request.url)

        try:
            response = await self._ctx.transport.fetch(request)
        except FetchError as e:
            cached = await live.get(cache_key)
            if cached is None:
                raise
            logger.info("Network unavailable for %s, serving cached copy: %s", request.url, e)
            self.stats.offline_fallbacks += 1
            return cached.as_cached()

        self.stats.network_first_hits += 1
        if response.ok:
            await live.put(cache_key, response)
        return response
