"""VibeProxy server module - lifecycle and process supervision."""

from vibeproxy.server.lifecycle import (
    ClientFactory,
    RunningFlag,
    ServerLifecycleManager,
    ServerStatus,
)
from vibeproxy.server.supervisor import NoopProcessSupervisor, ProcessSupervisor

__all__ = [
    # Lifecycle
    "ServerLifecycleManager",
    "ServerStatus",
    "RunningFlag",
    "ClientFactory",
    # Supervision
    "ProcessSupervisor",
    "NoopProcessSupervisor",
]
