"""Main CLI entrypoint for VibeProxy."""

import json
import logging
import sys
from typing import Annotated

import typer
from rich.console import Console

from vibeproxy.cli.secret import secret_app
from vibeproxy.cli.server import server_app
from vibeproxy.core.config import AppConfig, ConfigStore
from vibeproxy.core.exceptions import ConfigurationError

console = Console()
err_console = Console(stderr=True)

# Create main app
app = typer.Typer(
    name="vibeproxy",
    help="VibeProxy - AI routing proxy controls",
    no_args_is_help=True,
)
config_app = typer.Typer(help="Configuration commands")

# Add subcommands
app.add_typer(config_app, name="config")
app.add_typer(server_app, name="server")
app.add_typer(secret_app, name="secret")


@app.callback()
def main(
    log_level: Annotated[
        str, typer.Option("--log-level", "-l", help="Logging level")
    ] = "WARNING",
) -> None:
    """VibeProxy command-line interface."""
    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR"]
    log_level_upper = log_level.upper()
    if log_level_upper not in valid_log_levels:
        err_console.print(f"[red]Error: Invalid log level '{log_level}'[/red]")
        err_console.print(f"Valid levels: {', '.join(valid_log_levels)}")
        raise typer.Exit(1)

    logging.basicConfig(
        level=getattr(logging, log_level_upper),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def open_config_store() -> ConfigStore:
    """Create the config store or exit with an error."""
    try:
        return ConfigStore()
    except ConfigurationError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@config_app.command("path")
def config_path() -> None:
    """Print the config file location."""
    console.print(str(open_config_store().path))


@config_app.command("show")
def config_show(
    json_output: Annotated[
        bool, typer.Option("--json", help="Output as JSON")
    ] = False,
) -> None:
    """Show the effective configuration."""
    store = open_config_store()
    try:
        config = store.load()
    except ConfigurationError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    data = config.to_dict()
    if json_output:
        console.print(json.dumps(data, indent=2))
        return

    console.print(f"[bold]VibeProxy Config[/bold] ({store.path})")
    console.print("-" * 30)
    for section, values in data.items():
        console.print(f"[cyan]{section}[/cyan]")
        for name, value in values.items():
            if name == "api_key" and value:
                value = "********"
            console.print(f"  {name}: {value}")


@config_app.command("init")
def config_init() -> None:
    """Write a default config file if none exists."""
    store = open_config_store()
    if store.exists():
        console.print(f"[yellow]Config already exists at {store.path}[/yellow]")
        return

    try:
        store.save(AppConfig())
    except ConfigurationError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Wrote default config to {store.path}[/green]")


if __name__ == "__main__":
    app()
