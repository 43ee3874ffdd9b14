"""Data models for the classifier engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Severity = Literal["low", "moderate", "high", "critical", "unknown"]
VersionDiff = Literal["major", "minor", "patch", "unknown"]
Urgency = Literal["error", "warning", "info", "hint"]


@dataclass(frozen=True)
class Advisory:
    """A security advisory scoped to one package.

    Field names follow Python style; the registry sends
    ``vulnerable_versions`` / ``patched_versions`` with the same spelling.
    """

    severity: Severity
    id: str | None = None
    title: str | None = None
    url: str | None = None
    vulnerable_versions: str | None = None
    patched_versions: str | None = None
