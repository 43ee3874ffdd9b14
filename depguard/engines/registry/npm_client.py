"""Async npm registry client: latest-version and bulk-advisory lookups."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from depguard.core.activity import ActivityObserver, NullActivityObserver
from depguard.core.config import DEFAULT_REGISTRY_URL
from depguard.engines.classifier.advisories import normalize_advisory
from depguard.engines.classifier.models import Advisory
from depguard.exceptions import (
    RegistryResponseError,
    RegistryStatusError,
    RegistryUnavailableError,
)

log = structlog.get_logger("depguard.registry")

ADVISORIES_BULK_PATH = "/-/npm/v1/security/advisories/bulk"

# Same set encodeURIComponent leaves alone, so "@scope/pkg" -> "%40scope%2Fpkg".
_NAME_SAFE_CHARS = "!'()*"


def latest_version_path(package_name: str) -> str:
    return f"/{quote(package_name, safe=_NAME_SAFE_CHARS)}/latest"


class NpmRegistryClient:
    """Thin async wrapper around the two npm registry endpoints DepGuard uses.

    Transient failures (unexpected status, network error, malformed body)
    raise :class:`~depguard.exceptions.RegistryError` subclasses; the query
    cache turns them into "no result" without caching them. The client
    itself never retries.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_REGISTRY_URL,
        *,
        timeout: float = 10.0,
        observer: ActivityObserver | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._observer = observer or NullActivityObserver()
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> NpmRegistryClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def fetch_latest_version(self, package_name: str) -> str | None:
        """``GET /<name>/latest``; ``None`` when the registry answers 404."""
        path = latest_version_path(package_name)
        response = await self._send("GET", path)

        if response.status_code == 404:
            log.debug("registry.not_found", package=package_name)
            return None
        if not response.is_success:
            raise RegistryStatusError(response.status_code, path)

        data = self._decode(response, path)
        version = data.get("version") if isinstance(data, dict) else None
        if not isinstance(version, str):
            raise RegistryResponseError(f"no string 'version' in response for {path}")
        return version

    async def fetch_advisories(self, package_name: str, version: str) -> list[Advisory]:
        """Bulk advisory query for a single ``package_name@version``.

        Only the entry keyed by *package_name* is read; entries for other
        packages are ignored.
        """
        response = await self._send(
            "POST", ADVISORIES_BULK_PATH, json={package_name: [version]}
        )
        if response.status_code >= 400:
            raise RegistryStatusError(response.status_code, ADVISORIES_BULK_PATH)
        if not response.content.strip():
            return []

        data = self._decode(response, ADVISORIES_BULK_PATH)
        if not isinstance(data, dict):
            raise RegistryResponseError(
                f"expected an object from {ADVISORIES_BULK_PATH}, got {type(data).__name__}"
            )

        entries = data.get(package_name)
        if not isinstance(entries, list):
            return []
        return [normalize_advisory(raw) for raw in entries if isinstance(raw, dict)]

    # ── internal ───────────────────────────────────────────────────────────

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Issue one request, signalling the activity observer around it."""
        self._signal("request_started")
        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            log.warning("registry.request_failed", method=method, path=path, error=str(exc))
            raise RegistryUnavailableError(f"{method} {path} failed: {exc}") from exc
        finally:
            self._signal("request_ended")

    def _signal(self, name: str) -> None:
        try:
            getattr(self._observer, name)()
        except Exception:
            log.debug("registry.observer_error", signal=name, exc_info=True)

    @staticmethod
    def _decode(response: httpx.Response, path: str) -> Any:
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise RegistryResponseError(f"malformed JSON from {path}: {exc}") from exc
