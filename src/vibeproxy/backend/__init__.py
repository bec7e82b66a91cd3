"""VibeProxy backend module - HTTP client and response models."""

from vibeproxy.backend.client import BackendClient, HealthProbe
from vibeproxy.backend.models import BackendStatus, Health, HealthPayload, ModelInfo

__all__ = [
    "BackendClient",
    "HealthProbe",
    "Health",
    "HealthPayload",
    "BackendStatus",
    "ModelInfo",
]
