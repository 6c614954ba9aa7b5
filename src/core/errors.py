# src/core/errors.py - v1
"""Domain exceptions raised by the cache engine.

PassThrough is deliberately not an exception: the interceptor returns None
to let the caller fall back to its default network handling.
"""

from __future__ import annotations


class ShellCacheError(Exception):
    """Base class for all shellcache errors."""


class ManifestMissing(ShellCacheError):
    """No previous manifest is stored. Triggers the cold-start path."""


class ManifestCorrupt(ShellCacheError):
    """A stored or delivered manifest cannot be decoded."""


class ReconcileError(ShellCacheError):
    """Reconciliation failed; all partitions have been wiped."""


class FetchError(ShellCacheError):
    """A network fetch failed or returned an unusable response."""

    def __init__(self, url: str, reason: str, status: int | None = None):
        self.url = url
        self.reason = reason
        self.status = status
        detail = f" (HTTP {status})" if status is not None else ""
        super().__init__(f"Fetch failed for {url}{detail}: {reason}")


class LifecycleError(ShellCacheError):
    """An operation was invoked in a lifecycle phase that does not allow it."""
