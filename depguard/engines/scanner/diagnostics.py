"""Diagnostics sink collaborator: incremental append and full replace per document."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from depguard.engines.scanner.models import Diagnostic


@runtime_checkable
class DiagnosticSink(Protocol):
    def set(self, uri: str, diagnostics: list[Diagnostic]) -> None: ...

    def append(self, uri: str, diagnostic: Diagnostic) -> None: ...

    def delete(self, uri: str) -> None: ...

    def get(self, uri: str) -> list[Diagnostic]: ...


class DiagnosticCollection:
    """In-memory :class:`DiagnosticSink`. Arrival order is preserved."""

    def __init__(self) -> None:
        self._by_uri: dict[str, list[Diagnostic]] = {}

    def set(self, uri: str, diagnostics: list[Diagnostic]) -> None:
        self._by_uri[uri] = list(diagnostics)

    def append(self, uri: str, diagnostic: Diagnostic) -> None:
        self._by_uri.setdefault(uri, []).append(diagnostic)

    def delete(self, uri: str) -> None:
        self._by_uri.pop(uri, None)

    def get(self, uri: str) -> list[Diagnostic]:
        return list(self._by_uri.get(uri, []))

    def uris(self) -> list[str]:
        return list(self._by_uri)

    def __contains__(self, uri: object) -> bool:
        return uri in self._by_uri
