"""Scanner engine: per-document checks, workspace prewarm and quick fixes."""

from depguard.engines.scanner.diagnostics import DiagnosticCollection, DiagnosticSink
from depguard.engines.scanner.documents import ManifestDocument, TextDocument
from depguard.engines.scanner.models import (
    DIAG_CODE_OUTDATED,
    DIAG_CODE_VULNERABLE,
    DIAG_SOURCE,
    ClassificationEvent,
    Diagnostic,
    QuickFix,
    ScanPass,
    TextEdit,
)
from depguard.engines.scanner.orchestrator import DependencyScanOrchestrator
from depguard.engines.scanner.prewarm import prewarm, prewarm_workspace
from depguard.engines.scanner.quick_fix import apply_edits, quick_fixes_for

__all__ = [
    "DIAG_CODE_OUTDATED",
    "DIAG_CODE_VULNERABLE",
    "DIAG_SOURCE",
    "ClassificationEvent",
    "DependencyScanOrchestrator",
    "Diagnostic",
    "DiagnosticCollection",
    "DiagnosticSink",
    "ManifestDocument",
    "QuickFix",
    "ScanPass",
    "TextDocument",
    "TextEdit",
    "apply_edits",
    "prewarm",
    "prewarm_workspace",
    "quick_fixes_for",
]
