# tests/integration/conftest.py - v1
"""Shared fixtures for integration tests.

Durable stores run against tmp_path; the Redis backend needs a live server
reachable through SHELLCACHE_TEST_REDIS_URL and is skipped otherwise.
HTTP goes through httpx.MockTransport serving an in-memory site.
"""

from __future__ import annotations

import os
import uuid

import httpx
import pytest
import pytest_asyncio

from shellcache.transport.httpx_transport import HttpxTransport

ORIGIN = "https://app.example.com"


def pytest_configure(config):
    config.addinivalue_line("markers", "redis: marks tests requiring a Redis server")


class StaticSite:
    """Mutable set of pages served by a mock origin, with request log."""

    def __init__(self, pages: dict[str, bytes]) -> None:
        self.pages = dict(pages)
        self.offline = False
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("network unreachable", request=request)
        body = self.pages.get(request.url.path)
        if body is None:
            return httpx.Response(404, content=b"not found")
        return httpx.Response(200, content=body, headers={"content-type": "application/octet-stream"})

    @property
    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def site() -> StaticSite:
    return StaticSite({
        "/": b"<html>v1</html>",
        "/index.html": b"<html>v1</html>",
        "/main.js": b"main-v1",
        "/assets/logo.png": b"\x89PNG-v1",
    })


@pytest_asyncio.fixture
async def http_transport(site: StaticSite):
    client = httpx.AsyncClient(transport=httpx.MockTransport(site.handler))
    transport = HttpxTransport(client=client)
    yield transport
    await transport.aclose()


@pytest.fixture
def redis_url() -> str:
    url = os.environ.get("SHELLCACHE_TEST_REDIS_URL")
    if not url:
        pytest.skip("SHELLCACHE_TEST_REDIS_URL not set")
    return url


@pytest.fixture
def unique_name() -> str:
    return f"it-{uuid.uuid4().hex[:8]}"
