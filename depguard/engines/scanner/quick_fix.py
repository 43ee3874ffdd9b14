"""Quick fixes: replace an outdated version literal with the latest version."""

from __future__ import annotations

from collections.abc import Iterable

from depguard.engines.classifier.semver import build_updated_version_text
from depguard.engines.scanner.models import (
    DIAG_CODE_OUTDATED,
    DIAG_SOURCE,
    Diagnostic,
    QuickFix,
    TextEdit,
)


def quick_fixes_for(diagnostics: Iterable[Diagnostic]) -> list[QuickFix]:
    """One preferred fix per DepGuard ``outdated`` diagnostic."""
    fixes: list[QuickFix] = []
    for diag in diagnostics:
        if diag.source != DIAG_SOURCE or diag.code != DIAG_CODE_OUTDATED:
            continue
        event = diag.event
        if event.latest is None:
            continue
        new_text = event.replacement_text or build_updated_version_text(
            event.dependency.declared_version, event.latest
        )
        fixes.append(
            QuickFix(
                title=f"Update {event.dependency.name} to {new_text}",
                edit=TextEdit(range=diag.range, new_text=new_text),
                diagnostic=diag,
            )
        )
    return fixes


def apply_edits(text: str, edits: Iterable[TextEdit]) -> str:
    """Apply edits right-to-left so earlier offsets stay valid.

    Raises ``ValueError`` if two edits overlap.
    """
    ordered = sorted(edits, key=lambda e: e.range.start, reverse=True)
    result = text
    prev_start: int | None = None
    for edit in ordered:
        if prev_start is not None and edit.range.end > prev_start:
            raise ValueError(f"overlapping edits at offset {edit.range.start}")
        result = result[: edit.range.start] + edit.new_text + result[edit.range.end :]
        prev_start = edit.range.start
    return result
