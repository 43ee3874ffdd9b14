"""DependencyScanOrchestrator: per-document outdated and vulnerability checks."""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Awaitable
from dataclasses import dataclass

import structlog

from depguard.engines.classifier.advisories import (
    diff_to_urgency,
    highest_severity,
    severity_to_urgency,
    summarize_advisories,
)
from depguard.engines.classifier.models import Urgency
from depguard.engines.classifier.semver import (
    build_updated_version_text,
    clean_declared_version,
    diff_versions,
)
from depguard.engines.manifest.models import DependencyDeclaration
from depguard.engines.manifest.package_json import (
    is_package_json_path,
    locate_version_range,
    parse_manifest,
)
from depguard.engines.registry.cache import QueryCache
from depguard.engines.scanner.diagnostics import DiagnosticSink
from depguard.engines.scanner.documents import ManifestDocument
from depguard.engines.scanner.models import (
    DIAG_CODE_OUTDATED,
    DIAG_CODE_VULNERABLE,
    ClassificationEvent,
    Diagnostic,
    ScanPass,
)
from depguard.exceptions import ManifestParseError

log = structlog.get_logger("depguard.scanner")


@dataclass
class _ScanContext:
    document: ManifestDocument
    text: str
    version: int
    token: int
    result: ScanPass


class DependencyScanOrchestrator:
    """Run two independent checks per dependency and emit results as they settle.

    Results are appended to the sink in settle order, not declaration order.
    A result is dropped when, by the time it settles, its document has been
    closed or edited, or a newer scan of the same document has started.
    """

    def __init__(self, cache: QueryCache, sink: DiagnosticSink) -> None:
        self._cache = cache
        self._sink = sink
        self._tokens = itertools.count(1)
        self._current: dict[str, int] = {}
        self._tasks: set[asyncio.Task[ScanPass]] = set()

    # ── public ─────────────────────────────────────────────────────────────

    async def scan(self, document: ManifestDocument) -> ScanPass:
        """Scan one manifest; returns once every check has settled."""
        uri = document.uri
        if not is_package_json_path(uri):
            log.debug("scan.skipped", uri=uri, reason="not a project package.json")
            return ScanPass(uri=uri)

        text = document.text
        try:
            dependencies = parse_manifest(text)
        except ManifestParseError as exc:
            self._current.pop(uri, None)
            self._sink.delete(uri)
            log.info("scan.manifest_invalid", uri=uri, error=str(exc))
            return ScanPass(uri=uri, parse_error=str(exc))

        token = next(self._tokens)
        self._current[uri] = token
        ctx = _ScanContext(
            document=document,
            text=text,
            version=document.version,
            token=token,
            result=ScanPass(uri=uri),
        )
        self._sink.set(uri, [])

        checks: list[Awaitable[None]] = []
        for dep in dependencies:
            checks.append(self._guarded(ctx, dep, "outdated", self._check_outdated(ctx, dep)))
            checks.append(
                self._guarded(ctx, dep, "vulnerable", self._check_vulnerable(ctx, dep))
            )
        await asyncio.gather(*checks)

        log.info(
            "scan.done",
            uri=uri,
            dependencies=len(dependencies),
            events=len(ctx.result.events),
            diagnostics=len(ctx.result.diagnostics),
            stale=ctx.result.stale_dropped,
            failed=ctx.result.failed_checks,
        )
        return ctx.result

    def schedule(self, document: ManifestDocument) -> asyncio.Task[ScanPass]:
        """Start :meth:`scan` in the background and return its task."""
        task = asyncio.create_task(self.scan(document), name=f"scan-{document.uri}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for every scheduled scan to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ── checks ─────────────────────────────────────────────────────────────

    async def _check_outdated(self, ctx: _ScanContext, dep: DependencyDeclaration) -> None:
        current = clean_declared_version(dep.declared_version)
        latest = await self._cache.get_latest_version(dep.name)
        if not latest or latest == current:
            return
        if not self._still_valid(ctx, dep, "outdated"):
            return

        diff = diff_versions(current, latest)
        event = ClassificationEvent(
            kind="outdated",
            dependency=dep,
            diff=diff,
            latest=latest,
            replacement_text=build_updated_version_text(dep.declared_version, latest),
        )
        message = f"Newer version available ({diff}): {dep.declared_version} -> {latest}"
        self._emit(ctx, event, diff_to_urgency(diff), message, DIAG_CODE_OUTDATED)

    async def _check_vulnerable(self, ctx: _ScanContext, dep: DependencyDeclaration) -> None:
        current = clean_declared_version(dep.declared_version)
        advisories = await self._cache.get_vulnerabilities(dep.name, current)
        if not advisories:
            return
        if not self._still_valid(ctx, dep, "vulnerable"):
            return

        highest = highest_severity(advisories)
        event = ClassificationEvent(
            kind="vulnerable",
            dependency=dep,
            version=current,
            advisories=tuple(advisories),
            highest_severity=highest,
        )
        message = summarize_advisories(dep.name, current, advisories, highest)
        self._emit(ctx, event, severity_to_urgency(highest), message, DIAG_CODE_VULNERABLE)

    # ── internal ───────────────────────────────────────────────────────────

    async def _guarded(
        self,
        ctx: _ScanContext,
        dep: DependencyDeclaration,
        check: str,
        coro: Awaitable[None],
    ) -> None:
        try:
            await coro
        except Exception:
            ctx.result.failed_checks += 1
            log.exception("scan.check_failed", uri=ctx.result.uri, package=dep.name, check=check)

    def _still_valid(self, ctx: _ScanContext, dep: DependencyDeclaration, check: str) -> bool:
        doc = ctx.document
        if (
            doc.is_closed
            or doc.version != ctx.version
            or self._current.get(ctx.result.uri) != ctx.token
        ):
            ctx.result.stale_dropped += 1
            log.debug("scan.stale_result", uri=ctx.result.uri, package=dep.name, check=check)
            return False
        return True

    def _emit(
        self,
        ctx: _ScanContext,
        event: ClassificationEvent,
        urgency: Urgency,
        message: str,
        code: str,
    ) -> None:
        ctx.result.events.append(event)

        text_range = locate_version_range(ctx.text, event.dependency.name)
        if text_range is None:
            log.debug("scan.range_not_found", uri=ctx.result.uri, package=event.dependency.name)
            return

        diagnostic = Diagnostic(
            range=text_range, urgency=urgency, message=message, code=code, event=event
        )
        ctx.result.diagnostics.append(diagnostic)
        self._sink.append(ctx.result.uri, diagnostic)
