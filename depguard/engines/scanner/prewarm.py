"""Prewarm: fill the latest-version cache for a set of packages with bounded fan-out."""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Iterable
from pathlib import Path

import structlog

from depguard.engines.manifest.workspace import collect_dependency_names, discover_manifests
from depguard.engines.registry.cache import QueryCache

log = structlog.get_logger("depguard.prewarm")

DEFAULT_CONCURRENCY = 5


async def prewarm(
    cache: QueryCache,
    names: Iterable[str],
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> None:
    """Look up the latest version of every name, at most *concurrency* at a time.

    Workers claim the next index from one shared counter, so a slow package
    never holds back a pre-assigned slice. Individual failures are logged
    and skipped. Returns once every worker has exited.
    """
    if concurrency <= 0:
        raise ValueError(f"concurrency must be positive, got {concurrency}")

    unique = list(dict.fromkeys(names))
    if not unique:
        return

    cursor = itertools.count()
    failed = 0

    async def _worker() -> None:
        nonlocal failed
        while True:
            # Claim and bounds-check without yielding in between.
            i = next(cursor)
            if i >= len(unique):
                return
            name = unique[i]
            try:
                await cache.get_latest_version(name)
            except Exception as exc:
                failed += 1
                log.warning("prewarm.package_failed", package=name, error=str(exc))

    workers = min(concurrency, len(unique))
    await asyncio.gather(*(_worker() for _ in range(workers)))
    log.info("prewarm.done", packages=len(unique), workers=workers, failed=failed)


async def prewarm_workspace(
    cache: QueryCache,
    root: Path,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    max_manifests: int = 50,
) -> list[str]:
    """Discover manifests under *root* and prewarm the union of their dependencies.

    Returns the package names that were prewarmed.
    """
    manifests = discover_manifests(root, max_results=max_manifests)
    names = collect_dependency_names(manifests)
    log.info("prewarm.workspace", root=str(root), manifests=len(manifests), packages=len(names))
    await prewarm(cache, names, concurrency=concurrency)
    return names
