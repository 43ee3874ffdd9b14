"""Classifier engine: version diffs and advisory severities, no I/O."""

from depguard.engines.classifier.advisories import (
    diff_to_urgency,
    highest_severity,
    normalize_advisory,
    severity_to_urgency,
    summarize_advisories,
)
from depguard.engines.classifier.models import Advisory, Severity, Urgency, VersionDiff
from depguard.engines.classifier.semver import (
    build_updated_version_text,
    clean_declared_version,
    diff_versions,
    parse_version_triple,
)

__all__ = [
    "Advisory",
    "Severity",
    "Urgency",
    "VersionDiff",
    "build_updated_version_text",
    "clean_declared_version",
    "diff_to_urgency",
    "diff_versions",
    "highest_severity",
    "normalize_advisory",
    "parse_version_triple",
    "severity_to_urgency",
    "summarize_advisories",
]
