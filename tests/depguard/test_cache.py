"""Tests for QueryCache: memoization, in-flight dedup and failure eviction."""

from __future__ import annotations

import asyncio

import pytest

from depguard.engines.classifier.models import Advisory
from depguard.engines.registry.cache import QueryCache, advisory_key

from .fakes import FakeRegistry, spin

# ── Latest version ───────────────────────────────────────────────────────


class TestLatestVersionCache:
    @pytest.mark.asyncio
    async def test_second_call_is_served_from_cache(self, cache, registry):
        assert await cache.get_latest_version("left-pad") == "1.3.0"
        assert await cache.get_latest_version("left-pad") == "1.3.0"
        assert registry.latest_calls == ["left-pad"]
        assert cache.stats()["hits"] == 1

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_fetch(self, cache, registry):
        registry.gate = asyncio.Event()
        first = asyncio.create_task(cache.get_latest_version("left-pad"))
        second = asyncio.create_task(cache.get_latest_version("left-pad"))
        await spin()
        registry.gate.set()

        assert await first == "1.3.0"
        assert await second == "1.3.0"
        assert registry.latest_calls == ["left-pad"]
        assert cache.stats()["joins"] == 1

    @pytest.mark.asyncio
    async def test_many_concurrent_callers(self, cache, registry):
        registry.delays["left-pad"] = 0.01
        results = await asyncio.gather(*(cache.get_latest_version("left-pad") for _ in range(20)))
        assert set(results) == {"1.3.0"}
        assert len(registry.latest_calls) == 1

    @pytest.mark.asyncio
    async def test_not_found_is_cached(self, cache, registry):
        assert await cache.get_latest_version("no-such-pkg") is None
        assert await cache.get_latest_version("no-such-pkg") is None
        assert registry.latest_calls == ["no-such-pkg"]

    @pytest.mark.asyncio
    async def test_transient_failure_is_not_cached(self, cache, registry):
        registry.fail.add("left-pad")
        assert await cache.get_latest_version("left-pad") is None

        registry.fail.clear()
        assert await cache.get_latest_version("left-pad") == "1.3.0"
        assert registry.latest_calls == ["left-pad", "left-pad"]
        assert cache.stats()["evictions"] == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_propagates_and_is_evicted(self, cache, registry):
        registry.crash.add("left-pad")
        with pytest.raises(RuntimeError):
            await cache.get_latest_version("left-pad")

        registry.crash.clear()
        assert await cache.get_latest_version("left-pad") == "1.3.0"

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_fetch(self, cache, registry):
        registry.gate = asyncio.Event()
        first = asyncio.create_task(cache.get_latest_version("left-pad"))
        second = asyncio.create_task(cache.get_latest_version("left-pad"))
        await spin()

        first.cancel()
        registry.gate.set()

        assert await second == "1.3.0"
        assert first.cancelled()
        assert registry.latest_calls == ["left-pad"]


# ── clear() ──────────────────────────────────────────────────────────────


class TestClear:
    @pytest.mark.asyncio
    async def test_clear_forces_refetch(self, cache, registry):
        await cache.get_latest_version("left-pad")
        cache.clear()
        await cache.get_latest_version("left-pad")
        assert registry.latest_calls == ["left-pad", "left-pad"]

    @pytest.mark.asyncio
    async def test_clear_drops_advisories_too(self, cache, registry):
        await cache.get_vulnerabilities("left-pad", "1.0.0")
        cache.clear()
        await cache.get_vulnerabilities("left-pad", "1.0.0")
        assert len(registry.advisory_calls) == 2

    @pytest.mark.asyncio
    async def test_in_flight_result_lands_in_cleared_cache(self, cache, registry):
        registry.gate = asyncio.Event()
        pending = asyncio.create_task(cache.get_latest_version("left-pad"))
        await spin()

        cache.clear()
        registry.gate.set()
        assert await pending == "1.3.0"

        assert await cache.get_latest_version("left-pad") == "1.3.0"
        assert registry.latest_calls == ["left-pad"]

    @pytest.mark.asyncio
    async def test_newer_fetch_supersedes_in_flight_result(self, cache, registry):
        registry.gate = asyncio.Event()
        registry.versions["left-pad"] = "1.3.0"
        old = asyncio.create_task(cache.get_latest_version("left-pad"))
        await spin()

        cache.clear()
        registry.versions["left-pad"] = "1.4.0"
        new = asyncio.create_task(cache.get_latest_version("left-pad"))
        await spin()
        registry.gate.set()

        assert await old == "1.3.0"
        assert await new == "1.4.0"
        assert await cache.get_latest_version("left-pad") == "1.4.0"
        assert len(registry.latest_calls) == 2


# ── Advisories ───────────────────────────────────────────────────────────


class TestVulnerabilityCache:
    def test_key(self):
        assert advisory_key("lodash", "4.17.15") == "lodash@4.17.15"

    @pytest.mark.asyncio
    async def test_keyed_by_name_and_version(self):
        registry = FakeRegistry(advisories={"lodash": [Advisory(severity="high")]})
        cache = QueryCache(registry)

        await cache.get_vulnerabilities("lodash", "4.17.15")
        await cache.get_vulnerabilities("lodash", "4.17.15")
        await cache.get_vulnerabilities("lodash", "4.17.21")
        assert registry.advisory_calls == [("lodash", "4.17.15"), ("lodash", "4.17.21")]

    @pytest.mark.asyncio
    async def test_empty_result_is_cached(self, cache, registry):
        assert await cache.get_vulnerabilities("left-pad", "1.0.0") == []
        assert await cache.get_vulnerabilities("left-pad", "1.0.0") == []
        assert len(registry.advisory_calls) == 1

    @pytest.mark.asyncio
    async def test_failure_degrades_to_empty_and_retries(self, cache, registry):
        registry.fail.add("left-pad")
        assert await cache.get_vulnerabilities("left-pad", "1.0.0") == []
        assert await cache.get_vulnerabilities("left-pad", "1.0.0") == []
        assert len(registry.advisory_calls) == 2

    @pytest.mark.asyncio
    async def test_callers_get_independent_lists(self):
        registry = FakeRegistry(advisories={"lodash": [Advisory(severity="low")]})
        cache = QueryCache(registry)

        first = await cache.get_vulnerabilities("lodash", "1.0.0")
        first.clear()
        assert len(await cache.get_vulnerabilities("lodash", "1.0.0")) == 1
