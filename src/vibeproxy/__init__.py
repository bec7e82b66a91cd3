"""VibeProxy - credential storage and backend server lifecycle.

Core services behind the VibeProxy desktop app: a Secret Service backed
credential store and a manager for the backend server's running state.
"""

__version__ = "0.1.0"

from vibeproxy.core import (
    AppConfig,
    ConfigStore,
    VibeProxyError,
)

__all__ = [
    "__version__",
    # Config
    "AppConfig",
    "ConfigStore",
    # Base exception
    "VibeProxyError",
]
