"""Periodic rescan: clear the cache, prewarm the workspace, rescan open manifests."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from pathlib import Path

import structlog

from depguard.engines.registry.cache import QueryCache
from depguard.engines.scanner.documents import ManifestDocument
from depguard.engines.scanner.orchestrator import DependencyScanOrchestrator
from depguard.engines.scanner.prewarm import prewarm_workspace

logger = structlog.get_logger("depguard.scheduler")

DEFAULT_RESCAN_INTERVAL = 30 * 60


class RescanLoop:
    """Scheduling loop that wakes on trigger or timeout."""

    def __init__(
        self, run_fn: Callable[[], Awaitable[int]], interval: float = DEFAULT_RESCAN_INTERVAL
    ) -> None:
        self.run_fn = run_fn
        self.interval = interval
        self.trigger = asyncio.Event()
        self.cycles = 0
        self._task: asyncio.Task[None] | None = None

    async def loop(self) -> None:
        """Run forever, waking on trigger or after ``interval`` seconds."""
        while True:
            try:
                await asyncio.wait_for(self.trigger.wait(), timeout=self.interval)
                self.trigger.clear()
            except asyncio.TimeoutError:
                pass

            try:
                processed = await self.run_fn()
                self.cycles += 1
                logger.info("rescan.cycle", processed=processed, cycle=self.cycles)
            except Exception:
                logger.exception("rescan.error")

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self.loop(), name="depguard-rescan")
            logger.info("rescan.started", interval=self.interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)
        self._task = None
        logger.info("rescan.stopped")


class Rescanner:
    """One rescan cycle: reset the cache, prewarm, then scan every open document."""

    def __init__(
        self,
        cache: QueryCache,
        orchestrator: DependencyScanOrchestrator,
        open_documents: Callable[[], Iterable[ManifestDocument]],
        *,
        workspace_root: Path | None = None,
        concurrency: int = 5,
        max_manifests: int = 50,
    ) -> None:
        self._cache = cache
        self._orchestrator = orchestrator
        self._open_documents = open_documents
        self._workspace_root = workspace_root
        self._concurrency = concurrency
        self._max_manifests = max_manifests

    async def run_once(self) -> int:
        """Returns the number of documents scanned."""
        self._cache.clear()

        if self._workspace_root is not None:
            try:
                await prewarm_workspace(
                    self._cache,
                    self._workspace_root,
                    concurrency=self._concurrency,
                    max_manifests=self._max_manifests,
                )
            except Exception:
                logger.exception("rescan.prewarm_failed", root=str(self._workspace_root))

        documents = [d for d in self._open_documents() if not d.is_closed]
        await asyncio.gather(*(self._orchestrator.scan(d) for d in documents))
        return len(documents)
