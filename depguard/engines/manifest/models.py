"""Data models for the manifest engine."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DependencyDeclaration:
    """One ``"name": "version"`` entry from a package.json dependency map."""

    name: str
    declared_version: str


@dataclass(frozen=True)
class TextRange:
    """Half-open ``[start, end)`` character offsets into a manifest's text."""

    start: int
    end: int

    def to_line_col(self, text: str) -> tuple[int, int]:
        """1-based line and column of ``start``."""
        before = text[: self.start]
        line = before.count("\n") + 1
        col = self.start - (before.rfind("\n") + 1) + 1
        return line, col
