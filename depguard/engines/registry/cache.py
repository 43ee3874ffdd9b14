"""Process-wide memoizing cache in front of the registry client.

Entries are the fetch tasks themselves, so callers that ask for the same key
while a fetch is in flight await that one task instead of issuing another
request. Settled results, including "not found" (``None``) and "no
advisories" (``[]``), stay until :meth:`QueryCache.clear`. Transient
failures are evicted and degrade to the empty result for that caller.
"""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass
from typing import Protocol, TypeVar

import structlog

from depguard.engines.classifier.models import Advisory
from depguard.exceptions import RegistryError

log = structlog.get_logger("depguard.cache")

T = TypeVar("T")


class RegistryClient(Protocol):
    async def fetch_latest_version(self, package_name: str) -> str | None: ...

    async def fetch_advisories(self, package_name: str, version: str) -> list[Advisory]: ...


@dataclass
class CacheStats:
    hits: int = 0
    joins: int = 0  # callers that attached to an in-flight fetch
    fetches: int = 0
    evictions: int = 0


def advisory_key(package_name: str, version: str) -> str:
    return f"{package_name}@{version}"


class QueryCache:
    """Deduplicating cache for latest-version and advisory lookups."""

    def __init__(self, client: RegistryClient) -> None:
        self._client = client
        self._versions: dict[str, asyncio.Task[str | None]] = {}
        self._advisories: dict[str, asyncio.Task[list[Advisory]]] = {}
        self._stats = CacheStats()

    # ── public ─────────────────────────────────────────────────────────────

    async def get_latest_version(self, package_name: str) -> str | None:
        return await self._lookup(
            self._versions,
            package_name,
            lambda: self._client.fetch_latest_version(package_name),
            None,
        )

    async def get_vulnerabilities(self, package_name: str, version: str) -> list[Advisory]:
        advisories = await self._lookup(
            self._advisories,
            advisory_key(package_name, version),
            lambda: self._client.fetch_advisories(package_name, version),
            [],
        )
        # Hand out copies so callers cannot mutate the cached list.
        return list(advisories)

    def clear(self) -> None:
        """Drop every entry. In-flight fetches keep running."""
        dropped = len(self._versions) + len(self._advisories)
        self._versions.clear()
        self._advisories.clear()
        log.info("cache.cleared", entries=dropped)

    def stats(self) -> dict[str, int]:
        data = asdict(self._stats)
        data["versions"] = len(self._versions)
        data["advisories"] = len(self._advisories)
        return data

    # ── internal ───────────────────────────────────────────────────────────

    async def _lookup(
        self,
        store: dict[str, asyncio.Task[T]],
        key: str,
        fetch: Callable[[], Awaitable[T]],
        fallback: T,
    ) -> T:
        task = store.get(key)
        if task is None:
            self._stats.fetches += 1
            task = asyncio.ensure_future(fetch())
            store[key] = task
            task.add_done_callback(functools.partial(self._settled, store, key))
        elif task.done():
            self._stats.hits += 1
        else:
            self._stats.joins += 1

        try:
            # shield() returns a finished task as-is, so hits do not suspend.
            return await asyncio.shield(task)
        except RegistryError as exc:
            log.warning("cache.fetch_failed", key=key, error=str(exc))
            return fallback

    def _settled(
        self, store: dict[str, asyncio.Task[T]], key: str, task: asyncio.Task[T]
    ) -> None:
        failed = task.cancelled() or task.exception() is not None
        current = store.get(key)
        if failed:
            if current is task:
                del store[key]
                self._stats.evictions += 1
                log.debug("cache.evicted", key=key)
            return
        # Settled after a clear(): store into the emptied cache unless a
        # newer fetch for this key has already taken the slot.
        if current is None:
            store[key] = task
