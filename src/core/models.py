# src/core/models.py - v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
)

from shellcache.core.errors import ManifestCorrupt
from shellcache.core.keys import normalize_key


# === MANIFEST ===


class ManifestDiff(BaseModel):
    """Key-level difference between two manifests."""

    added: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    changed: list[str] = Field(default_factory=list)
    unchanged: list[str] = Field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.changed)


class ResourceManifest(BaseModel):
    """Immutable mapping of resource key to content fingerprint.

    A deployed version delivers one manifest; a new version replaces it
    wholesale. The empty key is normalized to the root key "/". The
    mapping itself is read-only, so a manifest shared between handlers
    cannot change under them.
    """

    model_config = ConfigDict(frozen=True)

    resources: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator("resources", mode="before")
    @classmethod
    def normalize_resource_keys(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {
                normalize_key(k) if isinstance(k, str) else k: fp
                for k, fp in v.items()
            }
        return v

    @field_validator("resources", mode="after")
    @classmethod
    def freeze_resources(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(v))

    @field_serializer("resources")
    def serialize_resources(self, v: Mapping[str, str]) -> dict[str, str]:
        return dict(v)

    def __contains__(self, key: object) -> bool:
        return key in self.resources

    def __len__(self) -> int:
        return len(self.resources)

    def get(self, key: str) -> str | None:
        """Fingerprint for ``key``, or None if the key is not deployed."""
        return self.resources.get(key)

    def keys(self) -> list[str]:
        return list(self.resources)

    def fingerprint_changed(self, key: str, previous: ResourceManifest) -> bool:
        """True when ``key`` is gone from this manifest or its hash moved."""
        current = self.resources.get(key)
        return current is None or current != previous.get(key)

    def diff(self, previous: ResourceManifest) -> ManifestDiff:
        """Compare this (newer) manifest against ``previous``."""
        result = ManifestDiff()
        for key in sorted(self.resources):
            if key not in previous:
                result.added.append(key)
            elif self.resources[key] != previous.get(key):
                result.changed.append(key)
            else:
                result.unchanged.append(key)
        result.removed.extend(sorted(k for k in previous.keys() if k not in self))
        return result

    def to_json(self) -> str:
        """Serialize as a flat ``{key: fingerprint}`` JSON object."""
        return json.dumps(dict(self.resources), sort_keys=True)

    @classmethod
    def from_json(cls, data: str | bytes) -> ResourceManifest:
        """Parse a flat ``{key: fingerprint}`` JSON object.

        Raises:
            ManifestCorrupt: If the payload is not a JSON object of strings.
        """
        try:
            raw = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ManifestCorrupt(f"Manifest is not valid JSON: {e}") from e
        if not isinstance(raw, dict):
            raise ManifestCorrupt(
                f"Manifest must be a JSON object, got {type(raw).__name__}"
            )
        try:
            return cls(resources=raw)
        except ValidationError as e:
            raise ManifestCorrupt(f"Manifest has invalid entries: {e}") from e


class BuildManifest(BaseModel):
    """Output of the external build step: manifest plus shell resource set."""

    resources: ResourceManifest
    shell: list[str] = Field(default_factory=list)
    version: str | None = None


# === REQUESTS / RESPONSES ===


class ResourceRequest(BaseModel):
    """An intercepted read request."""

    url: str
    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)


class ResourceResponse(BaseModel):
    """A network response, or a copy of one stored in a partition.

    ``body`` is serialized as base64 so any backend stores it byte-exact.
    """

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    url: str
    status: int
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes = b""
    source: Literal["network", "cache"] = "network"

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def as_cached(self) -> ResourceResponse:
        return self.model_copy(update={"source": "cache"})


# === REPORTS ===


class ReconcileReport(BaseModel):
    """Outcome of one reconciliation pass."""

    cold_start: bool
    evicted: list[str] = Field(default_factory=list)
    retained: list[str] = Field(default_factory=list)
    promoted: list[str] = Field(default_factory=list)
    manifest_size: int = 0


class PrefetchReport(BaseModel):
    """Outcome of a shell prefetch or an offline download."""

    partition: str
    requested: list[str] = Field(default_factory=list)
    stored: list[str] = Field(default_factory=list)


@dataclass
class InterceptorStats:
    """Running counters kept by the fetch interceptor."""

    cache_hits: int = 0
    network_fills: int = 0
    network_first_hits: int = 0
    offline_fallbacks: int = 0
    pass_through: int = 0

    def as_dict(self) -> dict[str, int]:
        return dict(self.__dict__)
