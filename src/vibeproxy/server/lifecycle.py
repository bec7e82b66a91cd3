"""Server lifecycle management - start, stop, status."""

import asyncio
import logging
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable

from vibeproxy.backend.client import BackendClient, HealthProbe
from vibeproxy.backend.models import Health
from vibeproxy.core.config import BackendConfig, ConfigStore
from vibeproxy.core.constants import DEFAULT_HEALTH_CHECK_TIMEOUT, SERVER_UNAVAILABLE_MESSAGE
from vibeproxy.core.exceptions import BackendTimeoutError, BackendUnavailableError
from vibeproxy.server.supervisor import NoopProcessSupervisor, ProcessSupervisor

logger = logging.getLogger(__name__)

ClientFactory = Callable[[BackendConfig], HealthProbe]


@dataclass(frozen=True)
class ServerStatus:
    """Snapshot of backend health taken by a fresh probe."""

    running: bool
    latency_ms: int
    message: str | None = None

    def __post_init__(self) -> None:
        if self.latency_ms < 0:
            raise ValueError(f"latency_ms must be >= 0, got {self.latency_ms}")

    @classmethod
    def from_health(cls, health: Health) -> "ServerStatus":
        """Build a status from a health probe result."""
        return cls(
            running=health.healthy,
            latency_ms=health.latency_ms,
            message=health.message,
        )

    @classmethod
    def unavailable(cls) -> "ServerStatus":
        """Status reported when the backend cannot be reached."""
        return cls(running=False, latency_ms=0, message=SERVER_UNAVAILABLE_MESSAGE)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "running": self.running,
            "latency_ms": self.latency_ms,
            "message": self.message,
        }


class RunningFlag:
    """A boolean read and swapped atomically."""

    def __init__(self, value: bool = False) -> None:
        self._value = value
        self._lock = Lock()

    def get(self) -> bool:
        with self._lock:
            return self._value

    def swap(self, value: bool) -> bool:
        """Set the flag and return its previous value."""
        with self._lock:
            previous = self._value
            self._value = value
            return previous


class ServerLifecycleManager:
    """Tracks whether the backend server should be running.

    ``start`` and ``stop`` act on a cached running flag and are idempotent.
    ``status`` never consults the flag; it always probes the backend.
    The flag is never held across an await, so concurrent callers may
    probe the backend more than once.
    """

    def __init__(
        self,
        config_store: ConfigStore,
        client_factory: ClientFactory = BackendClient,
        supervisor: ProcessSupervisor | None = None,
        health_timeout: float = DEFAULT_HEALTH_CHECK_TIMEOUT,
    ) -> None:
        """
        Initialize lifecycle manager.

        Args:
            config_store: Source of the backend configuration
            client_factory: Builds a health probe from the backend config
            supervisor: Spawns/terminates the backend process
            health_timeout: Upper bound in seconds for a single health check
        """
        self._config_store = config_store
        self._client_factory = client_factory
        self._supervisor: ProcessSupervisor = supervisor or NoopProcessSupervisor()
        self._health_timeout = health_timeout
        self._running = RunningFlag()

    @property
    def health_timeout(self) -> float:
        """Get health check timeout in seconds."""
        return self._health_timeout

    def is_running(self) -> bool:
        """Check the cached running flag without probing."""
        return self._running.get()

    async def _load_backend(self) -> BackendConfig:
        config = await asyncio.to_thread(self._config_store.load)
        return config.backend

    async def _check(self, backend: BackendConfig) -> Health:
        client = self._client_factory(backend)
        try:
            health = await asyncio.wait_for(client.health_check(), self._health_timeout)
        except asyncio.TimeoutError as e:
            raise BackendTimeoutError(
                f"Health check did not complete within {self._health_timeout}s",
                url=backend.base_url,
                timeout=self._health_timeout,
            ) from e
        return health

    async def start(self) -> None:
        """
        Start the server.

        A healthy backend is adopted as-is. An unreachable or timed out
        backend is handed to the process supervisor and then assumed to be
        running. Any other client error propagates and the flag stays unset.
        """
        if self._running.get():
            logger.warning("Server is already running")
            return

        logger.info("Starting server")

        backend = await self._load_backend()
        try:
            health = await self._check(backend)
        except (BackendUnavailableError, BackendTimeoutError) as e:
            logger.info(f"Backend server is not available, starting... ({e})")
            await self._supervisor.spawn(backend)
        else:
            if health.healthy:
                logger.info(f"Backend server is already running at {backend.base_url}")
            else:
                logger.warning(
                    f"Backend server at {backend.base_url} reported unhealthy: {health.message}"
                )

        self._running.swap(True)
        logger.info("Server started successfully")

    async def stop(self) -> None:
        """Stop the server. A no-op if it is not running."""
        if not self._running.get():
            logger.warning("Server is not running")
            return

        logger.info("Stopping server")
        await self._supervisor.terminate()

        self._running.swap(False)
        logger.info("Server stopped successfully")

    async def status(self) -> ServerStatus:
        """
        Probe the backend and report its current status.

        An unreachable backend is reported as not running. Timeouts and all
        other client errors propagate.
        """
        backend = await self._load_backend()
        try:
            health = await self._check(backend)
        except BackendUnavailableError:
            return ServerStatus.unavailable()
        return ServerStatus.from_health(health)
