"""CLI entry point: depguard.

Subcommands:
    depguard scan package.json [more/package.json ...] [--json]
    depguard fix package.json [--dry-run]
    depguard prewarm /path/to/workspace
    depguard watch /path/to/workspace [--interval 1800]
"""

from __future__ import annotations

import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path

import click
import structlog

from depguard.core.activity import ActivityTracker
from depguard.core.config import Settings
from depguard.core.logging import setup_logging
from depguard.engines.manifest.workspace import discover_manifests
from depguard.engines.registry.cache import QueryCache
from depguard.engines.registry.npm_client import NpmRegistryClient
from depguard.engines.scanner.diagnostics import DiagnosticCollection
from depguard.engines.scanner.documents import TextDocument
from depguard.engines.scanner.models import Diagnostic, QuickFix, ScanPass
from depguard.engines.scanner.orchestrator import DependencyScanOrchestrator
from depguard.engines.scanner.prewarm import prewarm_workspace
from depguard.engines.scanner.quick_fix import apply_edits, quick_fixes_for
from depguard.scheduler import RescanLoop, Rescanner

log = structlog.get_logger("depguard.cli")


def _make_client(settings: Settings, tracker: ActivityTracker | None = None) -> NpmRegistryClient:
    return NpmRegistryClient(settings.registry_url, timeout=settings.http_timeout, observer=tracker)


def _diagnostic_to_dict(doc: TextDocument, diag: Diagnostic) -> dict:
    line, col = diag.range.to_line_col(doc.text)
    event = diag.event
    row = {
        "file": doc.uri,
        "line": line,
        "column": col,
        "urgency": diag.urgency,
        "code": diag.code,
        "message": diag.message,
        "package": event.dependency.name,
        "declared": event.dependency.declared_version,
    }
    if event.kind == "outdated":
        row.update(diff=event.diff, latest=event.latest, replacement=event.replacement_text)
    else:
        row.update(
            severity=event.highest_severity,
            advisories=[asdict(a) for a in event.advisories],
        )
    return row


def _format_diagnostic(doc: TextDocument, diag: Diagnostic) -> str:
    line, col = diag.range.to_line_col(doc.text)
    return f"{doc.uri}:{line}:{col}: {diag.urgency}: {diag.message}"


async def _scan_documents(settings: Settings, docs: list[TextDocument]) -> list[ScanPass]:
    async with _make_client(settings) as client:
        orchestrator = DependencyScanOrchestrator(QueryCache(client), DiagnosticCollection())
        tasks = [orchestrator.schedule(d) for d in docs]
        await orchestrator.drain()
        return [t.result() for t in tasks]


def _edit_matches(doc: TextDocument, quick_fix: QuickFix) -> bool:
    """True when the edit range still holds the declared version literal.

    The range comes from the first ``"<name>"`` in the file, which can be a
    ``peerDependencies`` entry or a script of the same name.
    """
    text_range = quick_fix.edit.range
    found = doc.text[text_range.start : text_range.end]
    return found == quick_fix.diagnostic.event.dependency.declared_version


async def _wait_for_interrupt() -> None:
    await asyncio.Event().wait()


def _load_documents(paths: tuple[str, ...]) -> list[TextDocument]:
    docs = []
    for p in paths:
        try:
            docs.append(TextDocument.from_path(Path(p)))
        except (OSError, UnicodeDecodeError) as exc:
            raise click.ClickException(f"cannot read {p}: {exc}") from exc
    return docs


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """DepGuard: flag outdated and vulnerable npm dependencies."""
    setup_logging("DEBUG" if verbose else None)
    try:
        ctx.obj = Settings.from_env()
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc


@main.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def scan(settings: Settings, paths: tuple[str, ...], as_json: bool) -> None:
    """Check each package.json for outdated and vulnerable dependencies."""
    docs = _load_documents(paths)
    passes = asyncio.run(_scan_documents(settings, docs))

    invalid = [p for p in passes if p.parse_error]
    for p in invalid:
        click.echo(f"{p.uri}: invalid manifest: {p.parse_error}", err=True)

    if as_json:
        rows = [
            _diagnostic_to_dict(doc, diag)
            for doc, scan_pass in zip(docs, passes)
            for diag in sorted(scan_pass.diagnostics, key=lambda d: d.range.start)
        ]
        click.echo(json.dumps(rows, indent=2))
    else:
        total = 0
        for doc, scan_pass in zip(docs, passes):
            for diag in sorted(scan_pass.diagnostics, key=lambda d: d.range.start):
                click.echo(_format_diagnostic(doc, diag))
                total += 1
        if total == 0:
            click.echo("No outdated or vulnerable dependencies found.")

    if invalid:
        sys.exit(1)


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--dry-run", is_flag=True, help="Print the updated manifest instead of writing it")
@click.pass_obj
def fix(settings: Settings, path: str, dry_run: bool) -> None:
    """Update every outdated dependency in PATH to its latest version."""
    doc = _load_documents((path,))[0]
    (scan_pass,) = asyncio.run(_scan_documents(settings, [doc]))
    if scan_pass.parse_error:
        raise click.ClickException(f"invalid manifest: {scan_pass.parse_error}")

    fixes = {}
    for quick_fix in quick_fixes_for(scan_pass.diagnostics):
        if not _edit_matches(doc, quick_fix):
            dep = quick_fix.diagnostic.event.dependency
            line, col = quick_fix.edit.range.to_line_col(doc.text)
            click.echo(
                f"Skipping {dep.name}: {path}:{line}:{col} is not its "
                f"{dep.declared_version!r} version literal",
                err=True,
            )
            continue
        fixes.setdefault(quick_fix.edit.range, quick_fix)
    if not fixes:
        click.echo("Nothing to update.", err=True)
        if dry_run:
            click.echo(doc.text, nl=False)
        return

    for quick_fix in fixes.values():
        click.echo(quick_fix.title, err=True)
    updated = apply_edits(doc.text, [f.edit for f in fixes.values()])

    if dry_run:
        click.echo(updated, nl=False)
    else:
        Path(path).write_text(updated, encoding="utf-8")
        click.echo(f"Updated {len(fixes)} dependencies in {path}", err=True)


@main.command("prewarm")
@click.argument("root", type=click.Path(exists=True, file_okay=False), default=".")
@click.pass_obj
def prewarm_cmd(settings: Settings, root: str) -> None:
    """Look up the latest version of every dependency in a workspace."""

    async def _run() -> tuple[list[str], dict[str, int]]:
        async with _make_client(settings) as client:
            cache = QueryCache(client)
            names = await prewarm_workspace(
                cache,
                Path(root),
                concurrency=settings.prewarm_concurrency,
                max_manifests=settings.max_manifests,
            )
            return names, cache.stats()

    names, stats = asyncio.run(_run())
    click.echo(f"Prewarmed {len(names)} packages ({stats['fetches']} registry lookups)")


@main.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--interval", type=float, default=None, help="Seconds between rescans")
@click.pass_obj
def watch(settings: Settings, root: str, interval: float | None) -> None:
    """Rescan every manifest in ROOT periodically until interrupted."""
    root_path = Path(root)
    open_docs: dict[str, TextDocument] = {}

    def _open_documents() -> list[TextDocument]:
        open_docs.clear()
        for p in discover_manifests(root_path, max_results=settings.max_manifests):
            try:
                doc = TextDocument.from_path(p)
            except (OSError, UnicodeDecodeError) as exc:
                click.echo(f"cannot read {p}: {exc}", err=True)
                continue
            open_docs[doc.uri] = doc
        return list(open_docs.values())

    async def _run() -> None:
        tracker = ActivityTracker()

        def _log_activity(pending: int) -> None:
            log.debug("watch.activity", pending=pending, status=tracker.status_text())

        tracker.callbacks.append(_log_activity)
        async with _make_client(settings, tracker) as client:
            cache = QueryCache(client)
            sink = DiagnosticCollection()
            orchestrator = DependencyScanOrchestrator(cache, sink)
            rescanner = Rescanner(
                cache,
                orchestrator,
                _open_documents,
                workspace_root=root_path,
                concurrency=settings.prewarm_concurrency,
                max_manifests=settings.max_manifests,
            )

            async def _cycle() -> int:
                scanned = await rescanner.run_once()
                for uri, doc in open_docs.items():
                    for diag in sorted(sink.get(uri), key=lambda d: d.range.start):
                        click.echo(_format_diagnostic(doc, diag))
                return scanned

            loop = RescanLoop(_cycle, interval or settings.rescan_interval)
            loop.start()
            loop.trigger.set()
            try:
                await _wait_for_interrupt()
            finally:
                await loop.stop()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        click.echo("Stopped.", err=True)


if __name__ == "__main__":
    main()
