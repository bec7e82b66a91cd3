"""Backend health and status data models."""

from dataclasses import dataclass

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class Health:
    """Result of a single backend health probe."""

    healthy: bool
    latency_ms: int
    message: str | None = None


# Pydantic models for backend responses
class HealthPayload(BaseModel):
    """Body of a backend ``/health`` response. All fields are optional."""

    status: str | None = None
    message: str | None = None

    def summary(self) -> str | None:
        """Human-readable message, preferring an explicit message."""
        return self.message or self.status


class ModelInfo(BaseModel):
    """A model served by the backend."""

    id: str
    name: str
    provider: str
    context_length: int | None = None
    supports_streaming: bool = False


class BackendStatus(BaseModel):
    """Body of a backend ``/api/v1/status`` response."""

    version: str
    uptime_secs: int = Field(0, ge=0)
    models: list[ModelInfo] = Field(default_factory=list)
    active_connections: int = Field(0, ge=0)
