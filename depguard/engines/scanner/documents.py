"""Document collaborator: what the orchestrator needs to know about an open manifest."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class ManifestDocument(Protocol):
    """An open manifest.

    ``version`` must change whenever ``text`` changes; results computed
    against an older version, or after ``is_closed`` turns true, are stale.
    """

    @property
    def uri(self) -> str: ...

    @property
    def text(self) -> str: ...

    @property
    def version(self) -> int: ...

    @property
    def is_closed(self) -> bool: ...


class TextDocument:
    """In-memory :class:`ManifestDocument`."""

    def __init__(self, uri: str, text: str) -> None:
        self._uri = uri
        self._text = text
        self._version = 1
        self._closed = False

    @classmethod
    def from_path(cls, path: Path) -> TextDocument:
        return cls(str(path), path.read_text(encoding="utf-8"))

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def text(self) -> str:
        return self._text

    @property
    def version(self) -> int:
        return self._version

    @property
    def is_closed(self) -> bool:
        return self._closed

    def update(self, text: str) -> None:
        self._text = text
        self._version += 1

    def close(self) -> None:
        self._closed = True
