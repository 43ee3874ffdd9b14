"""Advisory normalization, severity ranking and urgency mapping."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from depguard.engines.classifier.models import Advisory, Severity, Urgency, VersionDiff

# Rank order; "unknown" is absent and so ranks below "low".
SEVERITY_ORDER: tuple[Severity, ...] = ("low", "moderate", "high", "critical")

_SEVERITY_URGENCY: dict[str, Urgency] = {
    "critical": "error",
    "high": "error",
    "moderate": "warning",
    "low": "info",
}

_DIFF_URGENCY: dict[str, Urgency] = {
    "major": "error",
    "minor": "warning",
    "patch": "info",
}


def _rank(severity: str) -> int:
    try:
        return SEVERITY_ORDER.index(severity)  # type: ignore[arg-type]
    except ValueError:
        return -1


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def normalize_severity(raw: Any) -> Severity:
    if not isinstance(raw, str):
        return "unknown"
    value = raw.strip().lower()
    if value in SEVERITY_ORDER:
        return value  # type: ignore[return-value]
    return "unknown"


def normalize_advisory(raw: Mapping[str, Any]) -> Advisory:
    """Map one wire advisory object onto :class:`Advisory`."""
    return Advisory(
        severity=normalize_severity(raw.get("severity")),
        id=_opt_str(raw.get("id")),
        title=_opt_str(raw.get("title")),
        url=_opt_str(raw.get("url")),
        vulnerable_versions=_opt_str(raw.get("vulnerable_versions")),
        patched_versions=_opt_str(raw.get("patched_versions")),
    )


def highest_severity(advisories: Iterable[Advisory]) -> Severity:
    """Fold from ``"low"``, keeping the highest-ranked severity seen.

    Callers only pass non-empty lists.
    """
    highest: Severity = "low"
    for advisory in advisories:
        if _rank(advisory.severity) > _rank(highest):
            highest = advisory.severity
    return highest


def severity_to_urgency(severity: str) -> Urgency:
    return _SEVERITY_URGENCY.get(severity, "hint")


def diff_to_urgency(diff: VersionDiff) -> Urgency:
    return _DIFF_URGENCY.get(diff, "hint")


def summarize_advisories(
    name: str, version: str, advisories: list[Advisory], highest: Severity
) -> str:
    parts = [f"Security vulnerabilities ({highest}) found in {name}@{version}."]
    titles = "; ".join(a.title for a in advisories if a.title)
    if titles:
        parts.append(titles)
    patched = ", ".join(a.patched_versions for a in advisories if a.patched_versions)
    if patched:
        parts.append(f"Patched in: {patched}")
    return " ".join(parts)
