"""Runtime settings read from ``DEPGUARD_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"


def _env_float(key: str, default: float) -> float:
    raw = os.environ.get(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {raw!r}") from None


def _env_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{key} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    """Application settings."""

    registry_url: str = DEFAULT_REGISTRY_URL
    http_timeout: float = 10.0
    prewarm_concurrency: int = 5
    max_manifests: int = 50
    rescan_interval: float = 1800.0

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            registry_url=os.environ.get("DEPGUARD_REGISTRY_URL", DEFAULT_REGISTRY_URL).rstrip("/"),
            http_timeout=_env_float("DEPGUARD_HTTP_TIMEOUT", 10.0),
            prewarm_concurrency=_env_int("DEPGUARD_PREWARM_CONCURRENCY", 5),
            max_manifests=_env_int("DEPGUARD_MAX_MANIFESTS", 50),
            rescan_interval=_env_float("DEPGUARD_RESCAN_INTERVAL", 1800.0),
        )
