"""Data models for the scanner engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from depguard.engines.classifier.models import Advisory, Severity, Urgency, VersionDiff
from depguard.engines.manifest.models import DependencyDeclaration, TextRange

EventKind = Literal["outdated", "vulnerable"]

DIAG_SOURCE = "DepGuard"
DIAG_CODE_OUTDATED = "depguard.outdated"
DIAG_CODE_VULNERABLE = "depguard.vulnerable"


@dataclass(frozen=True)
class ClassificationEvent:
    """Outcome of one check for one dependency.

    ``outdated`` events carry ``diff``, ``latest`` and ``replacement_text``;
    ``vulnerable`` events carry ``version``, ``advisories`` and
    ``highest_severity``.
    """

    kind: EventKind
    dependency: DependencyDeclaration
    diff: VersionDiff | None = None
    latest: str | None = None
    replacement_text: str | None = None
    version: str | None = None
    advisories: tuple[Advisory, ...] = ()
    highest_severity: Severity | None = None


@dataclass(frozen=True)
class Diagnostic:
    """A located classification, as handed to a diagnostics sink."""

    range: TextRange
    urgency: Urgency
    message: str
    code: str
    event: ClassificationEvent
    source: str = DIAG_SOURCE


@dataclass(frozen=True)
class TextEdit:
    range: TextRange
    new_text: str


@dataclass(frozen=True)
class QuickFix:
    title: str
    edit: TextEdit
    diagnostic: Diagnostic
    is_preferred: bool = True


@dataclass
class ScanPass:
    """Events produced by one scan of one document, in settle order."""

    uri: str
    events: list[ClassificationEvent] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    stale_dropped: int = 0
    failed_checks: int = 0
    parse_error: str | None = None

    def by_kind(self, kind: EventKind) -> list[ClassificationEvent]:
        return [e for e in self.events if e.kind == kind]
