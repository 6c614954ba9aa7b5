# tests/conftest.py - v1
"""Shared test fixtures for all unit and integration tests.

Provides a scripted fake transport, sample manifests and worker contexts
over an in-memory blob store. No network access.
"""

from __future__ import annotations

from typing import Callable

import pytest

from shellcache.core.errors import FetchError
from shellcache.core.models import ResourceManifest, ResourceRequest, ResourceResponse
from shellcache.engine.context import WorkerContext
from shellcache.logging.context import clear_context
from shellcache.storage.base_blob_store import BaseBlobStore
from shellcache.storage.memory_store import MemoryBlobStore
from shellcache.transport.base_transport import BaseTransport

ORIGIN = "https://app.example.com"


def url(key: str) -> str:
    """Absolute URL of a resource key under ORIGIN."""
    return f"{ORIGIN}/" if key == "/" else f"{ORIGIN}/{key}"


def make_response(target: str, body: bytes = b"", status: int = 200) -> ResourceResponse:
    return ResourceResponse(url=target, status=status, body=body or target.encode("utf-8"))


class FakeTransport(BaseTransport):
    """Serves scripted responses; unknown URLs fail like an offline network."""

    def __init__(self) -> None:
        self.routes: dict[str, ResourceResponse | Exception] = {}
        self.calls: list[tuple[str, bool]] = []

    def serve(self, target: str, body: bytes = b"", status: int = 200) -> None:
        self.routes[target] = make_response(target, body, status)

    def fail(self, target: str, reason: str = "connection refused") -> None:
        self.routes[target] = FetchError(target, reason)

    async def fetch(self, request: ResourceRequest, reload: bool = False) -> ResourceResponse:
        self.calls.append((request.url, reload))
        route = self.routes.get(request.url)
        if route is None:
            raise FetchError(request.url, "offline")
        if isinstance(route, Exception):
            raise route
        return route

    @property
    def urls(self) -> list[str]:
        return [u for u, _ in self.calls]


# === FIXTURES: Sample data ===


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture
def manifest_v1() -> ResourceManifest:
    """Three resources plus the root document."""
    return ResourceManifest(
        resources={
            "/": "root-h1",
            "index.html": "root-h1",
            "main.js": "js-h1",
            "assets/logo.png": "png-h1",
        }
    )


@pytest.fixture
def shell_keys() -> list[str]:
    return ["main.js", "index.html"]


@pytest.fixture
def store() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def make_context(
    store: MemoryBlobStore, transport: FakeTransport
) -> Callable[..., WorkerContext]:
    """Build a WorkerContext sharing the fixture store and transport."""

    def _make(
        manifest: ResourceManifest,
        shell: list[str] | None = None,
        blob_store: BaseBlobStore | None = None,
    ) -> WorkerContext:
        return WorkerContext(
            manifest=manifest,
            origin=ORIGIN,
            store=blob_store or store,
            transport=transport,
            shell=tuple(shell or ()),
        )

    return _make


async def live_keys(store: BaseBlobStore, name: str = "app-cache") -> set[str]:
    partition = await store.open_partition(name)
    return set(await partition.keys())
