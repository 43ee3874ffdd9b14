"""Test doubles for the registry client."""

from __future__ import annotations

import asyncio

from depguard.engines.classifier.models import Advisory
from depguard.exceptions import RegistryUnavailableError


class FakeRegistry:
    """In-memory stand-in for NpmRegistryClient.

    Values are read when a fetch starts, then the fetch waits on ``gate``
    (if set) or sleeps for its per-package delay.
    """

    def __init__(
        self,
        versions: dict[str, str] | None = None,
        advisories: dict[str, list[Advisory]] | None = None,
    ) -> None:
        self.versions = dict(versions or {})
        self.advisories = dict(advisories or {})
        self.delays: dict[str, float] = {}
        self.fail: set[str] = set()
        self.crash: set[str] = set()
        self.gate: asyncio.Event | None = None
        self.latest_calls: list[str] = []
        self.advisory_calls: list[tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_latest_version(self, package_name: str) -> str | None:
        self.latest_calls.append(package_name)
        value = self.versions.get(package_name)
        await self._wait(package_name)
        return value

    async def fetch_advisories(self, package_name: str, version: str) -> list[Advisory]:
        self.advisory_calls.append((package_name, version))
        value = list(self.advisories.get(package_name, []))
        await self._wait(package_name)
        return value

    async def _wait(self, package_name: str) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            else:
                await asyncio.sleep(self.delays.get(package_name, 0))
            if package_name in self.fail:
                raise RegistryUnavailableError(f"{package_name}: connection reset")
            if package_name in self.crash:
                raise RuntimeError(f"{package_name}: unexpected")
        finally:
            self.in_flight -= 1


async def spin(times: int = 5) -> None:
    """Let pending tasks run up to their next real suspension point."""
    for _ in range(times):
        await asyncio.sleep(0)
