"""CLI commands for backend server management."""

import asyncio
import json
import logging
from typing import Annotated

import typer
from rich.console import Console

from vibeproxy.backend.client import BackendClient
from vibeproxy.backend.models import BackendStatus
from vibeproxy.core.config import ConfigStore
from vibeproxy.core.constants import DEFAULT_HEALTH_CHECK_TIMEOUT
from vibeproxy.core.exceptions import ClientError, VibeProxyError
from vibeproxy.server.lifecycle import ServerLifecycleManager

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

server_app = typer.Typer(help="Backend server commands")


def open_store() -> ConfigStore:
    """Open the user's config store or exit."""
    try:
        return ConfigStore()
    except VibeProxyError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def build_manager(store: ConfigStore, timeout: float) -> ServerLifecycleManager:
    """Create a lifecycle manager wired to the user's config."""
    return ServerLifecycleManager(
        store,
        client_factory=BackendClient,
        health_timeout=timeout,
    )


async def fetch_details(store: ConfigStore, timeout: float) -> BackendStatus | None:
    """Fetch the backend's status report, or None if it cannot be read."""
    config = store.load()
    try:
        return await BackendClient(config.backend, timeout=timeout).get_status()
    except ClientError as e:
        logger.debug(f"Backend status report unavailable: {e}")
        return None


@server_app.command("status")
def server_status(
    timeout: Annotated[
        float, typer.Option("--timeout", help="Health check timeout in seconds")
    ] = DEFAULT_HEALTH_CHECK_TIMEOUT,
    json_output: Annotated[
        bool, typer.Option("--json", help="Output as JSON")
    ] = False,
) -> None:
    """Probe the backend server."""
    store = open_store()
    manager = build_manager(store, timeout)

    try:
        status = asyncio.run(manager.status())
        details = None
        if status.running and not json_output:
            details = asyncio.run(fetch_details(store, timeout))
    except VibeProxyError as e:
        err_console.print(f"[red]Error checking server: {e}[/red]")
        raise typer.Exit(1)

    if json_output:
        console.print(json.dumps(status.to_dict(), indent=2))
        return

    if status.running:
        console.print("[green]Server running[/green]")
        console.print(f"  Latency: {status.latency_ms} ms")
    else:
        console.print("[yellow]Server not running[/yellow]")
    if status.message:
        console.print(f"  Message: {status.message}")
    if details is not None:
        console.print(f"  Version: {details.version}")
        console.print(f"  Uptime: {details.uptime_secs} s")
        console.print(f"  Models: {len(details.models)}")


@server_app.command("start")
def server_start(
    timeout: Annotated[
        float, typer.Option("--timeout", help="Health check timeout in seconds")
    ] = DEFAULT_HEALTH_CHECK_TIMEOUT,
) -> None:
    """Check the backend and mark it started for this process only.

    The running flag is not persisted, so it is gone when the command exits.
    When the backend is unreachable nothing is launched; the server is assumed
    to be managed externally.
    """
    store = open_store()
    manager = build_manager(store, timeout)

    try:
        asyncio.run(manager.start())
    except VibeProxyError as e:
        err_console.print(f"[red]Error starting server: {e}[/red]")
        raise typer.Exit(1)

    console.print("[green]Server started[/green]")
