"""VibeProxy core - configuration, constants, and exceptions."""

from vibeproxy.core.config import (
    AppConfig,
    BackendConfig,
    ConfigStore,
    ProxyConfig,
    SLMConfig,
    TunnelConfig,
)
from vibeproxy.core.constants import SLMBackend
from vibeproxy.core.exceptions import (
    BackendRequestError,
    BackendTimeoutError,
    BackendUnavailableError,
    ClientError,
    ConfigParseError,
    ConfigurationError,
    ConfigWriteError,
    EncodingError,
    ProcessSupervisorError,
    SecretServiceConnectionError,
    SecretStoreError,
    ServerError,
    StoreError,
    UnlockError,
    VibeProxyError,
)

__all__ = [
    # Config
    "AppConfig",
    "BackendConfig",
    "ConfigStore",
    "ProxyConfig",
    "SLMConfig",
    "TunnelConfig",
    "SLMBackend",
    # Exceptions
    "VibeProxyError",
    "ConfigurationError",
    "ConfigParseError",
    "ConfigWriteError",
    "SecretStoreError",
    "SecretServiceConnectionError",
    "UnlockError",
    "StoreError",
    "EncodingError",
    "ClientError",
    "BackendUnavailableError",
    "BackendTimeoutError",
    "BackendRequestError",
    "ServerError",
    "ProcessSupervisorError",
]
