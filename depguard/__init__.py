"""DepGuard: npm dependency freshness and vulnerability checks."""

__version__ = "0.1.0"

from depguard.engines.registry.cache import QueryCache
from depguard.engines.registry.npm_client import NpmRegistryClient
from depguard.engines.scanner.orchestrator import DependencyScanOrchestrator
from depguard.engines.scanner.prewarm import prewarm, prewarm_workspace

__all__ = [
    "DependencyScanOrchestrator",
    "NpmRegistryClient",
    "QueryCache",
    "prewarm",
    "prewarm_workspace",
]
