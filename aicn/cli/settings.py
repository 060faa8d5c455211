"""Content settings commands."""

from typing import List

import typer
from rich.console import Console
from rich.table import Table

from ..config import Config
from ..db import SettingsStore, get_connection
from ..errors import InvalidSettingsError
from ..models import SETTINGS_DEFAULTS

console = Console()
settings_app = typer.Typer(help="View and change content settings")


@settings_app.command("show")
def settings_show() -> None:
    """Show content settings with their defaults."""
    config = Config()
    with get_connection(config.get_db_config()) as conn:
        current = SettingsStore().get_all(conn)

    table = Table(title="Content Settings")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="bold")
    table.add_column("Default", style="dim")
    for key, default in SETTINGS_DEFAULTS.items():
        table.add_row(key, str(current.get(key)), str(default))
    console.print(table)


@settings_app.command("set")
def settings_set(
    pairs: List[str] = typer.Argument(..., help="KEY=VALUE pairs, e.g. daily_max_articles=12"),
) -> None:
    """Update one or more content settings."""
    updates = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            console.print(f"[red]Expected KEY=VALUE, got '{pair}'[/red]")
            raise typer.Exit(1)
        if key not in SETTINGS_DEFAULTS:
            console.print(f"[yellow]Ignoring unknown setting: {key}[/yellow]")
            continue
        updates[key] = value

    if not updates:
        return

    config = Config()
    try:
        with get_connection(config.get_db_config()) as conn:
            SettingsStore().update_multiple(conn, updates)
    except InvalidSettingsError as e:
        console.print(f"[red]Invalid settings: {e}[/red]")
        raise typer.Exit(1)

    for key, value in updates.items():
        console.print(f"[green]✅ {key} = {value}[/green]")
