"""Numeric major.minor.patch comparison of declared vs latest versions.

This is not a range resolver: a declared spec is reduced to its leading
``X.Y.Z`` after dropping one ``^`` or ``~`` prefix.
"""

from __future__ import annotations

import re

from depguard.engines.classifier.models import VersionDiff

_TRIPLE_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)")
_RANGE_PREFIX_RE = re.compile(r"^[~^]")


def clean_declared_version(raw: str) -> str:
    """Strip a single leading ``^`` or ``~``."""
    return _RANGE_PREFIX_RE.sub("", raw, count=1)


def parse_version_triple(version: str) -> tuple[int, int, int] | None:
    m = _TRIPLE_RE.match(version)
    if m is None:
        return None
    return int(m.group(1)), int(m.group(2)), int(m.group(3))


def diff_versions(current: str, latest: str) -> VersionDiff:
    """Classify how far *latest* is ahead of *current*.

    Returns ``"unknown"`` when either side does not parse or *latest* is not
    strictly newer (callers filter equal versions before asking).
    """
    cur = parse_version_triple(current)
    new = parse_version_triple(latest)
    if cur is None or new is None:
        return "unknown"

    if new[0] > cur[0]:
        return "major"
    if new[0] == cur[0] and new[1] > cur[1]:
        return "minor"
    if new[0] == cur[0] and new[1] == cur[1] and new[2] > cur[2]:
        return "patch"
    return "unknown"


def build_updated_version_text(declared: str, latest: str) -> str:
    """Keep the declared range operator: ``("^4.0.0", "4.1.2") -> "^4.1.2"``."""
    m = _RANGE_PREFIX_RE.match(declared)
    prefix = m.group(0) if m else ""
    return f"{prefix}{latest}"
