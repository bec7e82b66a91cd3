"""CLI commands for stored credentials."""

from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from vibeproxy.core.exceptions import SecretStoreError
from vibeproxy.credentials.store import SecretStore

console = Console()
err_console = Console(stderr=True)

secret_app = typer.Typer(help="Credential commands")


def open_secret_store() -> SecretStore:
    """Connect to the secret service or exit with an error."""
    try:
        return SecretStore.connect()
    except SecretStoreError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@secret_app.command("set")
def secret_set(
    key: Annotated[str, typer.Argument(help="Secret name")],
    value: Annotated[
        Optional[str],
        typer.Option("--value", help="Secret value (prompted if omitted)"),
    ] = None,
) -> None:
    """Store a secret."""
    if value is None:
        value = typer.prompt("Value", hide_input=True)

    with open_secret_store() as store:
        try:
            store.store(key, value)
        except SecretStoreError as e:
            err_console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)

    console.print(f"[green]Stored secret '{key}'[/green]")


@secret_app.command("get")
def secret_get(
    key: Annotated[str, typer.Argument(help="Secret name")],
) -> None:
    """Print a stored secret."""
    with open_secret_store() as store:
        try:
            value = store.retrieve(key)
        except SecretStoreError as e:
            err_console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)

    if value is None:
        err_console.print(f"[yellow]Secret '{key}' not found[/yellow]")
        raise typer.Exit(1)
    console.print(value, markup=False, highlight=False)


@secret_app.command("delete")
def secret_delete(
    key: Annotated[str, typer.Argument(help="Secret name")],
) -> None:
    """Delete a stored secret."""
    with open_secret_store() as store:
        try:
            store.delete(key)
        except SecretStoreError as e:
            err_console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)

    console.print(f"[green]Deleted secret '{key}'[/green]")


@secret_app.command("list")
def secret_list() -> None:
    """List stored secret names."""
    with open_secret_store() as store:
        keys = store.list_keys()

    if not keys:
        console.print("[yellow]No secrets stored[/yellow]")
        return

    table = Table(title="Stored Secrets")
    table.add_column("Key", style="cyan")
    for key in sorted(keys):
        table.add_row(key)
    console.print(table)
