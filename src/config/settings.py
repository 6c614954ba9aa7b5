# src/config/settings.py - v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Serving ===
    origin: str = "http://localhost:8080"
    entry_document: str = "index.html"
    manifest_path: Path = Path("build/web/resource_manifest.json")

    # === Partitions ===
    live_partition: str = "app-cache"
    staging_partition: str = "app-temp-cache"
    manifest_partition: str = "app-manifest"
    manifest_key: str = "manifest"

    # === Blob store ===
    store_backend: Literal["memory", "json", "sqlite", "redis"] = "json"
    store_root: Path = Path("~/.shellcache/store")
    store_redis_url: str = ""

    # === Transport ===
    transport_timeout_s: float = 30.0
    transport_connect_timeout_s: float = 10.0
    prefetch_concurrency: int = 4

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("origin")
    @classmethod
    def validate_origin(cls, v: str) -> str:
        """Origin must be an absolute http(s) URL; trailing slash dropped."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("origin must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("prefetch_concurrency")
    @classmethod
    def validate_prefetch_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("prefetch_concurrency must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        names = [self.live_partition, self.staging_partition, self.manifest_partition]
        if len(set(names)) != len(names):
            errors.append(
                "LIVE_PARTITION, STAGING_PARTITION and MANIFEST_PARTITION must differ"
            )

        if self.store_backend == "redis" and not self.store_redis_url:
            errors.append("STORE_REDIS_URL must be set when STORE_BACKEND=redis")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
