# src/engine/host.py - v1
"""Host runtime boundary: the hooks this engine calls back into."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class BaseHostRuntime(ABC):
    """Operations provided by whatever runtime hosts the worker instance."""

    @abstractmethod
    async def claim_all_clients(self) -> None:
        """Hand control of currently open consumers to this instance now."""

    @abstractmethod
    async def skip_waiting_instance(self) -> None:
        """Promote this installed instance to active without waiting."""


class LocalHostRuntime(BaseHostRuntime):
    """In-process host that records the calls it receives (CLI, tests)."""

    def __init__(self) -> None:
        self.clients_claimed = 0
        self.skip_waiting_calls = 0

    async def claim_all_clients(self) -> None:
        self.clients_claimed += 1
        logger.debug("Clients claimed")

    async def skip_waiting_instance(self) -> None:
        self.skip_waiting_calls += 1
        logger.debug("Skip waiting requested")
