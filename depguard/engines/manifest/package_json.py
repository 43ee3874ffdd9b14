"""package.json parsing and version-literal location."""

from __future__ import annotations

import json
from pathlib import PurePath

from depguard.engines.manifest.models import DependencyDeclaration, TextRange
from depguard.exceptions import ManifestParseError

MANIFEST_NAME = "package.json"
_DEPENDENCY_SECTIONS = ("dependencies", "devDependencies")


def is_package_json_path(path: str | PurePath) -> bool:
    """True for a project package.json, False for anything under node_modules."""
    p = PurePath(path)
    if not str(p).endswith(MANIFEST_NAME):
        return False
    return "node_modules" not in p.parts


def parse_manifest(text: str) -> list[DependencyDeclaration]:
    """Merge ``dependencies`` and ``devDependencies``; dev wins on collisions.

    Raises :class:`ManifestParseError` for malformed JSON or a non-object
    top level. Non-string version values are skipped.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestParseError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestParseError(f"expected a JSON object, got {type(data).__name__}")

    merged: dict[str, str] = {}
    for section in _DEPENDENCY_SECTIONS:
        entries = data.get(section)
        if not isinstance(entries, dict):
            continue
        for name, value in entries.items():
            if isinstance(value, str):
                merged[name] = value

    return [DependencyDeclaration(name=n, declared_version=v) for n, v in merged.items()]


def locate_version_range(text: str, name: str) -> TextRange | None:
    """Find the version string literal for *name*.

    Only the first ``"<name>"`` occurrence is considered, then the next
    ``:`` and the two ``"`` after it::

        "react": "18.2.0"
                  ^^^^^^
    """
    key_index = text.find(f'"{name}"')
    if key_index == -1:
        return None

    colon_index = text.find(":", key_index)
    if colon_index == -1:
        return None

    first_quote = text.find('"', colon_index)
    if first_quote == -1:
        return None
    second_quote = text.find('"', first_quote + 1)
    if second_quote == -1:
        return None

    return TextRange(start=first_quote + 1, end=second_quote)
