"""VibeProxy custom exception hierarchy."""

from pathlib import Path
from typing import Any


class VibeProxyError(Exception):
    """Base exception for all VibeProxy errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration
# =============================================================================


class ConfigurationError(VibeProxyError):
    """Raised when configuration is invalid or its location is unusable."""

    def __init__(
        self, message: str, path: Path | None = None, details: dict[str, Any] | None = None
    ) -> None:
        details = details or {}
        if path:
            details["path"] = str(path)
        super().__init__(message, details)
        self.path = path


class ConfigParseError(ConfigurationError):
    """Raised when an existing config file cannot be parsed."""

    pass


class ConfigWriteError(ConfigurationError):
    """Raised when the config file cannot be written."""

    pass


# =============================================================================
# Secret store
# =============================================================================


class SecretStoreError(VibeProxyError):
    """Base exception for secret store operations."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if key:
            details["key"] = key
        if operation:
            details["operation"] = operation
        super().__init__(message, details)
        self.key = key
        self.operation = operation


class SecretServiceConnectionError(SecretStoreError):
    """Raised when the secret service cannot be reached."""

    pass


class UnlockError(SecretStoreError):
    """Raised when the secret collection cannot be unlocked."""

    pass


class StoreError(SecretStoreError):
    """Raised when a secret cannot be written, read or deleted."""

    pass


class EncodingError(SecretStoreError):
    """Raised when a stored secret is not valid text."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        encoding: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if encoding:
            details["encoding"] = encoding
        super().__init__(message, key=key, operation="retrieve", details=details)
        self.encoding = encoding


# =============================================================================
# Backend client
# =============================================================================


class ClientError(VibeProxyError):
    """Base exception for backend client operations."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if url:
            details["url"] = url
        super().__init__(message, details)
        self.url = url


class BackendUnavailableError(ClientError):
    """Raised when the backend cannot be reached at all."""

    pass


class BackendTimeoutError(ClientError):
    """Raised when the backend does not answer in time."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        timeout: float | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if timeout is not None:
            details["timeout"] = timeout
        super().__init__(message, url, details)
        self.timeout = timeout


class BackendRequestError(ClientError):
    """Raised for any other backend failure (bad response, protocol error)."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, url, details)
        self.status_code = status_code


# =============================================================================
# Server lifecycle
# =============================================================================


class ServerError(VibeProxyError):
    """Base exception for server lifecycle operations."""

    pass


class ProcessSupervisorError(ServerError):
    """Raised when the backend process cannot be spawned or terminated."""

    def __init__(
        self,
        message: str,
        action: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if action:
            details["action"] = action
        super().__init__(message, details)
        self.action = action
