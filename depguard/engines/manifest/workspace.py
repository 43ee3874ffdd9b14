"""Workspace discovery: find package.json files and collect dependency names."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import structlog

from depguard.engines.manifest.package_json import (
    MANIFEST_NAME,
    is_package_json_path,
    parse_manifest,
)
from depguard.exceptions import ManifestParseError

log = structlog.get_logger("depguard.workspace")


def discover_manifests(root: Path, *, max_results: int = 50) -> list[Path]:
    """Return up to *max_results* package.json files under *root*, node_modules excluded."""
    matches: list[Path] = []
    for hit in sorted(root.glob(f"**/{MANIFEST_NAME}")):
        if not hit.is_file():
            continue
        if not is_package_json_path(hit.relative_to(root)):
            continue
        matches.append(hit)
        if len(matches) >= max_results:
            log.info("workspace.manifest_limit", root=str(root), limit=max_results)
            break
    return matches


def collect_dependency_names(paths: Iterable[Path]) -> list[str]:
    """Union of dependency names across manifests, in first-seen order.

    Unreadable or malformed manifests are skipped.
    """
    names: dict[str, None] = {}
    for path in paths:
        try:
            text = path.read_text(encoding="utf-8")
            deps = parse_manifest(text)
        except (OSError, UnicodeDecodeError, ManifestParseError) as exc:
            log.warning("workspace.manifest_skipped", path=str(path), error=str(exc))
            continue
        for dep in deps:
            names.setdefault(dep.name)
    return list(names)
