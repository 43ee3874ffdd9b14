"""In-flight registry request tracking for progress display."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

import structlog

log = structlog.get_logger("depguard.activity")


@runtime_checkable
class ActivityObserver(Protocol):
    """Receives one signal when a registry request starts and one when it settles."""

    def request_started(self) -> None: ...

    def request_ended(self) -> None: ...


class NullActivityObserver:
    def request_started(self) -> None:
        pass

    def request_ended(self) -> None:
        pass


class ActivityTracker:
    """Count pending registry requests and notify listeners on every change.

    More "ended" than "started" signals clamp the count at zero.
    """

    def __init__(self) -> None:
        self.pending = 0
        self.callbacks: list[Callable[[int], None]] = []

    def request_started(self) -> None:
        self.pending += 1
        self._notify()

    def request_ended(self) -> None:
        self.pending = max(0, self.pending - 1)
        self._notify()

    def status_text(self) -> str:
        if self.pending > 0:
            return f"DepGuard checking ({self.pending})"
        return "DepGuard ready"

    def _notify(self) -> None:
        for cb in self.callbacks:
            try:
                cb(self.pending)
            except Exception:
                log.warning("activity.callback_failed", exc_info=True)
