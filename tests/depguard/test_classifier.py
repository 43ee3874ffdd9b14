"""Tests for version comparison and advisory ranking (pure functions)."""

from __future__ import annotations

import pytest

from depguard.engines.classifier.advisories import (
    diff_to_urgency,
    highest_severity,
    normalize_advisory,
    normalize_severity,
    severity_to_urgency,
    summarize_advisories,
)
from depguard.engines.classifier.models import Advisory
from depguard.engines.classifier.semver import (
    build_updated_version_text,
    clean_declared_version,
    diff_versions,
    parse_version_triple,
)

# ── Version comparator ───────────────────────────────────────────────────


class TestCleanDeclaredVersion:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("^4.0.0", "4.0.0"),
            ("~1.2.0", "1.2.0"),
            ("4.0.0", "4.0.0"),
            ("^^1.0.0", "^1.0.0"),
            (">=1.0.0", ">=1.0.0"),
            ("", ""),
        ],
    )
    def test_strips_one_prefix(self, raw, expected):
        assert clean_declared_version(raw) == expected


class TestParseVersionTriple:
    def test_plain(self):
        assert parse_version_triple("1.2.3") == (1, 2, 3)

    def test_prerelease_ignored(self):
        assert parse_version_triple("2.0.0-beta.1+build.5") == (2, 0, 0)

    def test_multi_digit(self):
        assert parse_version_triple("10.20.300") == (10, 20, 300)

    @pytest.mark.parametrize("raw", ["abc", "1.2", "v1.2.3", "^1.2.3", "latest", ""])
    def test_no_triple(self, raw):
        assert parse_version_triple(raw) is None


class TestDiffVersions:
    @pytest.mark.parametrize(
        ("current", "latest", "expected"),
        [
            ("1.2.3", "1.2.3", "unknown"),
            ("1.2.3", "1.2.4", "patch"),
            ("1.2.3", "1.3.0", "minor"),
            ("1.2.3", "2.0.0", "major"),
            ("abc", "1.0.0", "unknown"),
            ("1.0.0", "abc", "unknown"),
            ("2.0.0", "1.9.9", "unknown"),
            ("1.5.0", "1.4.9", "unknown"),
        ],
    )
    def test_diff(self, current, latest, expected):
        assert diff_versions(current, latest) == expected

    def test_major_wins_even_if_minor_lower(self):
        assert diff_versions("1.9.9", "2.0.0") == "major"


class TestBuildUpdatedVersionText:
    def test_keeps_caret(self):
        assert build_updated_version_text("^4.0.0", "4.1.2") == "^4.1.2"

    def test_keeps_tilde(self):
        assert build_updated_version_text("~1.2.0", "1.2.5") == "~1.2.5"

    def test_no_prefix(self):
        assert build_updated_version_text("1.0.0", "1.0.1") == "1.0.1"

    def test_other_operators_dropped(self):
        assert build_updated_version_text(">=1.0.0", "2.0.0") == "2.0.0"


# ── Advisory ranker ──────────────────────────────────────────────────────


class TestNormalizeAdvisory:
    def test_wire_fields(self):
        adv = normalize_advisory(
            {
                "id": 1179,
                "title": "Prototype Pollution",
                "url": "https://github.com/advisories/GHSA-xxxx",
                "severity": "High",
                "vulnerable_versions": "<4.17.12",
                "patched_versions": ">=4.17.12",
            }
        )
        assert adv == Advisory(
            severity="high",
            id="1179",
            title="Prototype Pollution",
            url="https://github.com/advisories/GHSA-xxxx",
            vulnerable_versions="<4.17.12",
            patched_versions=">=4.17.12",
        )

    def test_missing_severity_is_unknown(self):
        adv = normalize_advisory({"title": "x"})
        assert adv.severity == "unknown"
        assert adv.id is None

    @pytest.mark.parametrize("raw", ["info", "severe", 3, None, ""])
    def test_unrecognized_severity(self, raw):
        assert normalize_severity(raw) == "unknown"

    @pytest.mark.parametrize("raw", ["LOW", " moderate ", "Critical"])
    def test_case_insensitive(self, raw):
        assert normalize_severity(raw) == raw.strip().lower()


class TestHighestSeverity:
    def test_picks_critical(self):
        advisories = [Advisory(severity=s) for s in ("low", "critical", "moderate")]
        assert highest_severity(advisories) == "critical"

    def test_unknown_ranks_below_low(self):
        advisories = [Advisory(severity="unknown"), Advisory(severity="moderate")]
        assert highest_severity(advisories) == "moderate"

    def test_only_unknown_folds_to_low(self):
        assert highest_severity([Advisory(severity="unknown")]) == "low"

    def test_order_independent(self):
        a = [Advisory(severity=s) for s in ("high", "low", "moderate")]
        assert highest_severity(a) == highest_severity(list(reversed(a))) == "high"


class TestUrgency:
    @pytest.mark.parametrize(
        ("severity", "urgency"),
        [
            ("critical", "error"),
            ("high", "error"),
            ("moderate", "warning"),
            ("low", "info"),
            ("unknown", "hint"),
        ],
    )
    def test_severity(self, severity, urgency):
        assert severity_to_urgency(severity) == urgency

    @pytest.mark.parametrize(
        ("diff", "urgency"),
        [("major", "error"), ("minor", "warning"), ("patch", "info"), ("unknown", "hint")],
    )
    def test_diff(self, diff, urgency):
        assert diff_to_urgency(diff) == urgency


class TestSummarizeAdvisories:
    def test_full_message(self):
        advisories = [
            Advisory(severity="high", title="ReDoS", patched_versions=">=1.2.0"),
            Advisory(severity="low", title="Info leak", patched_versions=">=1.1.0"),
        ]
        msg = summarize_advisories("ms", "1.0.0", advisories, "high")
        assert msg == (
            "Security vulnerabilities (high) found in ms@1.0.0. "
            "ReDoS; Info leak Patched in: >=1.2.0, >=1.1.0"
        )

    def test_no_titles_or_patches(self):
        msg = summarize_advisories("ms", "1.0.0", [Advisory(severity="low")], "low")
        assert msg == "Security vulnerabilities (low) found in ms@1.0.0."
