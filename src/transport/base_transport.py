# src/transport/base_transport.py - v1
"""Abstract network transport interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from shellcache.core.models import ResourceRequest, ResourceResponse


class BaseTransport(ABC):
    """Performs the actual network fetch of a resource."""

    @abstractmethod
    async def fetch(
        self, request: ResourceRequest, reload: bool = False
    ) -> ResourceResponse:
        """Fetch a request from the network.

        Args:
            request: Request to perform.
            reload: Bypass intermediate HTTP caches (forced revalidation).

        Returns:
            The network response, whatever its status.

        Raises:
            FetchError: On connectivity failure or timeout.
        """

    async def aclose(self) -> None:
        """Release transport resources. No-op by default."""
