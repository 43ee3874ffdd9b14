"""Registry engine: npm registry access behind a deduplicating cache."""

from depguard.engines.registry.cache import QueryCache, advisory_key
from depguard.engines.registry.npm_client import NpmRegistryClient

__all__ = ["NpmRegistryClient", "QueryCache", "advisory_key"]
