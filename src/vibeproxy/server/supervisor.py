"""Backend process supervision."""

import logging
from typing import Protocol

from vibeproxy.core.config import BackendConfig

logger = logging.getLogger(__name__)


class ProcessSupervisor(Protocol):
    """Spawns and terminates the backend process.

    Implementations raise ProcessSupervisorError when they fail.
    """

    async def spawn(self, config: BackendConfig) -> None: ...

    async def terminate(self) -> None: ...


class NoopProcessSupervisor:
    """Supervisor for a backend that is managed outside this application.

    Neither method touches a process; the lifecycle manager only flips its
    running flag.
    """

    async def spawn(self, config: BackendConfig) -> None:
        # TODO: launch the backend binary and wait for /health once it ships with the app
        logger.warning(
            f"Server start not yet implemented - assuming server at {config.base_url} is external"
        )

    async def terminate(self) -> None:
        logger.warning("Server stop not yet implemented - assuming server is external")
