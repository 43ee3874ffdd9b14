"""Shared fixtures for depguard tests. No network access required."""

from __future__ import annotations

import json

import httpx
import pytest

from depguard.engines.registry.cache import QueryCache
from depguard.engines.scanner.diagnostics import DiagnosticCollection
from depguard.engines.scanner.orchestrator import DependencyScanOrchestrator

from .fakes import FakeRegistry


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry(versions={"left-pad": "1.3.0"})


@pytest.fixture
def cache(registry: FakeRegistry) -> QueryCache:
    return QueryCache(registry)


@pytest.fixture
def sink() -> DiagnosticCollection:
    return DiagnosticCollection()


@pytest.fixture
def orchestrator(cache: QueryCache, sink: DiagnosticCollection) -> DependencyScanOrchestrator:
    return DependencyScanOrchestrator(cache, sink)


@pytest.fixture
def npm_handler():
    """Build an httpx.MockTransport handler from a latest-version and advisory map."""

    def _make(
        versions: dict[str, str] | None = None,
        advisories: dict[str, list[dict]] | None = None,
    ):
        versions = versions or {}
        advisories = advisories or {}

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                body = json.loads(request.content)
                return httpx.Response(
                    200, json={name: advisories.get(name, []) for name in body}
                )
            name = request.url.path.removeprefix("/").removesuffix("/latest")
            if name not in versions:
                return httpx.Response(404, json={"error": "Not found"})
            return httpx.Response(200, json={"name": name, "version": versions[name]})

        return handler

    return _make
