"""Manifest engine: package.json parsing and workspace discovery."""

from depguard.engines.manifest.models import DependencyDeclaration, TextRange
from depguard.engines.manifest.package_json import (
    is_package_json_path,
    locate_version_range,
    parse_manifest,
)
from depguard.engines.manifest.workspace import collect_dependency_names, discover_manifests

__all__ = [
    "DependencyDeclaration",
    "TextRange",
    "collect_dependency_names",
    "discover_manifests",
    "is_package_json_path",
    "locate_version_range",
    "parse_manifest",
]
