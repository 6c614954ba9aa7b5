# src/logging/context.py - v1
"""Contextual logging support: attach instance_id, phase, resource_key to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set by the lifecycle and interceptor.
_instance_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "instance_id", default=None
)
_phase: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "phase", default=None
)
_resource_key: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "resource_key", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    instance_id: str | None = None
    phase: str | None = None
    resource_key: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        instance_id=_instance_id.get(),
        phase=_phase.get(),
        resource_key=_resource_key.get(),
    )


def set_worker_context(instance_id: str, phase: str) -> None:
    """Set instance-level context (called on every phase change)."""
    _instance_id.set(instance_id)
    _phase.set(phase)


def set_request_context(resource_key: str | None) -> None:
    """Set request-level context (called per intercepted request)."""
    _resource_key.set(resource_key)


def clear_context() -> None:
    """Reset all context variables."""
    _instance_id.set(None)
    _phase.set(None)
    _resource_key.set(None)
