# src/engine/lifecycle.py - v1
"""Lifecycle coordinator: install -> activate -> serve.

Usage:
    coordinator = LifecycleCoordinator(context, host)
    await coordinator.on_install()
    await coordinator.on_activate()
    response = await coordinator.on_fetch(request)

The state lives in an explicit LifecycleState object owned by the
coordinator; the runtime's hooks (install, activate, fetch, message) map
one-to-one onto the on_* methods.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Literal

from shellcache.core.errors import FetchError, LifecycleError, ReconcileError
from shellcache.core.models import (
    PrefetchReport,
    ReconcileReport,
    ResourceRequest,
    ResourceResponse,
)
from shellcache.engine.context import WorkerContext
from shellcache.engine.host import BaseHostRuntime
from shellcache.engine.interceptor import FetchInterceptor
from shellcache.engine.prefetch import ShellPrefetcher
from shellcache.engine.reconciler import Reconciler
from shellcache.logging.context import set_worker_context

logger = logging.getLogger(__name__)

Phase = Literal["idle", "installing", "installed", "activating", "serving", "failed"]

MESSAGE_SKIP_WAITING = "skipWaiting"
MESSAGE_DOWNLOAD_OFFLINE = "downloadOffline"


@dataclass
class LifecycleState:
    """Mutable lifecycle state of one worker instance."""

    instance_id: str
    phase: Phase = "idle"
    claimed: bool = False
    skip_waiting_requested: bool = False
    last_report: ReconcileReport | None = None
    last_error: str | None = None


class LifecycleCoordinator:
    """Drives one instance through its lifecycle and routes runtime events."""

    def __init__(
        self,
        context: WorkerContext,
        host: BaseHostRuntime,
        instance_id: str | None = None,
    ) -> None:
        self.context = context
        self.host = host
        self.state = LifecycleState(instance_id=instance_id or uuid.uuid4().hex[:12])
        self.prefetcher = ShellPrefetcher(context)
        self.reconciler = Reconciler(context)
        self.interceptor = FetchInterceptor(context)

    # --- Runtime hooks ---

    async def on_install(self) -> PrefetchReport:
        """Prefetch the shell set into Staging.

        Raises:
            FetchError: Prefetch failed; the instance must not be activated.
        """
        self._require("idle", "failed", action="install")
        self._enter("installing")
        await self.host.skip_waiting_instance()
        try:
            report = await self.prefetcher.prefetch_shell()
        except FetchError as e:
            self.state.last_error = str(e)
            self._enter("failed")
            logger.error("Install failed: %s", e)
            raise
        self._enter("installed")
        return report

    async def on_activate(self) -> ReconcileReport | None:
        """Reconcile the cache and start serving.

        A reconciliation failure has already reset the cache; it is logged
        and the instance serves from an empty cache without claiming clients.
        """
        self._require("installed", action="activate")
        self._enter("activating")
        try:
            report = await self.reconciler.reconcile(self.context.manifest)
        except ReconcileError as e:
            self.state.last_error = str(e)
            self.state.last_report = None
            logger.error("Activation continued with an empty cache: %s", e)
            self._enter("serving")
            return None

        self.state.last_report = report
        self.state.last_error = None
        self._enter("serving")
        await self.host.claim_all_clients()
        self.state.claimed = True
        return report

    async def on_fetch(self, request: ResourceRequest) -> ResourceResponse | None:
        """Serve a request, or None to let the runtime handle it."""
        if self.state.phase != "serving":
            return None
        return await self.interceptor.handle(request)

    async def on_message(self, payload: Any) -> None:
        """Handle a message command. Unknown payloads are ignored."""
        if payload == MESSAGE_SKIP_WAITING:
            await self.force_activate()
        elif payload == MESSAGE_DOWNLOAD_OFFLINE:
            if self.state.phase != "serving":
                logger.warning("Ignoring %s while %s", payload, self.state.phase)
                return
            try:
                await self.prefetch_remaining()
            except FetchError as e:
                self.state.last_error = str(e)
                logger.warning("Offline download failed, Live unchanged: %s", e)
        else:
            logger.debug("Ignoring unrecognized message %r", payload)

    # --- Commands ---

    async def force_activate(self) -> None:
        """Let a waiting instance skip any deferred-activation grace period."""
        self.state.skip_waiting_requested = True
        await self.host.skip_waiting_instance()

    async def prefetch_remaining(self) -> PrefetchReport:
        """Download every manifest resource missing from Live."""
        self._require("serving", action="prefetch remaining resources")
        return await self.prefetcher.prefetch_remaining()

    def resume(self, phase: Phase = "serving") -> None:
        """Adopt the phase reached by an earlier process over the same store.

        The partitions are durable, so a fresh process may pick up an
        instance that was already installed or activated.
        """
        self._require("idle", action="resume")
        if phase not in ("installed", "serving"):
            raise LifecycleError(f"Cannot resume into {phase}")
        self._enter(phase)

    # --- Internals ---

    def _require(self, *phases: Phase, action: str) -> None:
        if self.state.phase not in phases:
            raise LifecycleError(
                f"Cannot {action} while {self.state.phase} (expected {', '.join(phases)})"
            )

    def _enter(self, phase: Phase) -> None:
        logger.debug("Phase %s -> %s", self.state.phase, phase)
        self.state.phase = phase
        set_worker_context(self.state.instance_id, phase)
