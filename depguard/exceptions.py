"""Custom exceptions for DepGuard."""


class DepGuardError(Exception):
    """Base exception for all DepGuard errors."""


class RegistryError(DepGuardError):
    """Transient registry failure. Never cached; the next lookup retries."""


class RegistryStatusError(RegistryError):
    """Raised when the registry answers with an unexpected HTTP status."""

    def __init__(self, status_code: int, path: str):
        self.status_code = status_code
        self.path = path
        super().__init__(f"registry returned HTTP {status_code} for {path}")


class RegistryUnavailableError(RegistryError):
    """Raised on network errors and timeouts."""


class RegistryResponseError(RegistryError):
    """Raised when a response body cannot be parsed into the expected shape."""


class ManifestParseError(DepGuardError):
    """Raised when a package.json document is not a valid JSON object."""
