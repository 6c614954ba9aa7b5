# src/transport/httpx_transport.py - v1
"""HTTP transport built on httpx.AsyncClient.

Timeouts are owned here; callers only ever see FetchError.
"""

from __future__ import annotations

import logging
import time

import httpx

from shellcache.core.errors import FetchError
from shellcache.core.models import ResourceRequest, ResourceResponse
from shellcache.transport.base_transport import BaseTransport

logger = logging.getLogger(__name__)

_RELOAD_HEADERS = {"Cache-Control": "no-cache", "Pragma": "no-cache"}


class HttpxTransport(BaseTransport):
    """Network transport using a shared httpx.AsyncClient."""

    def __init__(
        self,
        timeout_s: float = 30.0,
        connect_timeout_s: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_s, connect=connect_timeout_s),
            follow_redirects=True,
        )

    async def fetch(
        self, request: ResourceRequest, reload: bool = False
    ) -> ResourceResponse:
        headers = dict(request.headers)
        if reload:
            headers.update(_RELOAD_HEADERS)

        t0 = time.monotonic()
        try:
            resp = await self._client.request(request.method, request.url, headers=headers)
        except httpx.RequestError as e:
            logger.warning("Network error for %s: %s", request.url, e)
            raise FetchError(request.url, str(e) or type(e).__name__) from e
        latency = int((time.monotonic() - t0) * 1000)

        logger.debug(
            "%s %s -> %d (%d bytes, %d ms)",
            request.method, request.url, resp.status_code, len(resp.content), latency,
        )
        return ResourceResponse(
            url=request.url,
            status=resp.status_code,
            headers=dict(resp.headers),
            body=resp.content,
        )

    async def aclose(self) -> None:
        await self._client.aclose()
