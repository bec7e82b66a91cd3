"""VibeProxy constants and default values."""

from enum import Enum
from typing import Final


class SLMBackend(str, Enum):
    """Local small-language-model server implementations."""

    VLLM = "vllm"
    MLX = "mlx"
    OLLAMA = "ollama"


# Application identity
APP_NAME: Final[str] = "vibeproxy"
APP_AUTHOR: Final[str] = "vibeproxy"

# Config file
CONFIG_FILE_NAME: Final[str] = "config.json"
CONFIG_DIR_ENV: Final[str] = "VIBEPROXY_CONFIG_DIR"

# Secret service
SECRET_SERVICE_NAME: Final[str] = APP_NAME
SECRET_CONTENT_TYPE: Final[str] = "text/plain"
SECRET_ENCODING: Final[str] = "utf-8"
ATTR_SERVICE: Final[str] = "service"
ATTR_KEY: Final[str] = "key"

# Backend defaults
DEFAULT_BACKEND_URL: Final[str] = "http://localhost"
DEFAULT_BACKEND_PORT: Final[int] = 8317
DEFAULT_BACKEND_TIMEOUT_SECS: Final[int] = 30
HEALTH_PATH: Final[str] = "/health"
STATUS_PATH: Final[str] = "/api/v1/status"

# SLM defaults
DEFAULT_SLM_URL: Final[str] = "http://localhost"
DEFAULT_SLM_PORT: Final[int] = 8318
DEFAULT_SLM_MODEL: Final[str] = "llama-3.2-3b"

# Proxy defaults
DEFAULT_PROXY_LISTEN_PORT: Final[int] = 8316
DEFAULT_THINKING_PROXY_PORT: Final[int] = 8317

# Lifecycle
DEFAULT_HEALTH_CHECK_TIMEOUT: Final[float] = 5.0
SERVER_UNAVAILABLE_MESSAGE: Final[str] = "Server unavailable"
