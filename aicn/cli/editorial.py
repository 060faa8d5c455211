"""Weekly editorial commands."""

from typing import Optional

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from ..config import Config
from ..db import EditorialStore, get_connection
from ..errors import AicnError, EditorialNotFoundError
from ..generation.editorial import MIN_EDITORIAL_ARTICLES
from ..models import EditorialStatus
from .run import _orchestrator

console = Console()
editorial_app = typer.Typer(help="Generate and publish the weekly editorial")


@editorial_app.command("generate")
def editorial_generate(
    welcome: bool = typer.Option(False, "--welcome", help="Save the fixed welcome editorial instead"),
) -> None:
    """Draft last week's editorial from the past seven days of approved articles."""
    orchestrator = _orchestrator()
    try:
        outcome = orchestrator.generate_editorial(welcome=welcome)
    except AicnError as e:
        console.print(f"[red]Editorial generation failed: {e}[/red]")
        raise typer.Exit(1)

    if outcome.skipped:
        console.print(
            f"[yellow]Only {outcome.article_count} approved article(s) in the past week; "
            f"at least {MIN_EDITORIAL_ARTICLES} are needed.[/yellow]"
        )
        return

    editorial = outcome.editorial
    week = f"{editorial.week_start} to {editorial.week_end}"
    if outcome.created:
        console.print(f"[green]✅ Draft editorial #{editorial.id} for {week}: {editorial.title}[/green]")
    else:
        console.print(f"[yellow]Editorial #{editorial.id} already exists for {week}: {editorial.title}[/yellow]")


@editorial_app.command("list")
def editorial_list(
    status: Optional[EditorialStatus] = typer.Option(None, "--status", "-s", help="Only draft or published"),
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum editorials to show"),
) -> None:
    """List editorials, newest first."""
    config = Config()
    with get_connection(config.get_db_config()) as conn:
        editorials = EditorialStore().find_all(conn, status=status, limit=limit)

    if not editorials:
        console.print("[yellow]No editorials yet.[/yellow]")
        return

    table = Table(title=f"Editorials ({len(editorials)})")
    table.add_column("ID", style="dim")
    table.add_column("Week", style="green")
    table.add_column("Title", style="cyan")
    table.add_column("Status", style="magenta")
    for editorial in editorials:
        table.add_row(
            str(editorial.id),
            f"{editorial.week_start} - {editorial.week_end}",
            editorial.title[:70],
            editorial.status.value,
        )
    console.print(table)


def _find(editorial_id: int):
    config = Config()
    with get_connection(config.get_db_config()) as conn:
        editorial = EditorialStore().find_by_id(conn, editorial_id)
    if editorial is None:
        console.print(f"[red]{EditorialNotFoundError(editorial_id)}[/red]")
        raise typer.Exit(1)
    return editorial


@editorial_app.command("show")
def editorial_show(editorial_id: int = typer.Argument(..., help="Editorial ID")) -> None:
    """Print one editorial."""
    editorial = _find(editorial_id)
    console.print(Panel(
        Markdown(editorial.content),
        title=editorial.title,
        subtitle=f"{editorial.week_start} - {editorial.week_end} • {editorial.status.value}",
    ))


@editorial_app.command("publish")
def editorial_publish(editorial_id: int = typer.Argument(..., help="Editorial ID")) -> None:
    """Publish a draft editorial."""
    config = Config()
    with get_connection(config.get_db_config()) as conn:
        published = EditorialStore().publish(conn, editorial_id)
    if not published:
        console.print(f"[red]{EditorialNotFoundError(editorial_id)}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✅ Editorial #{editorial_id}: published[/green]")


@editorial_app.command("delete")
def editorial_delete(editorial_id: int = typer.Argument(..., help="Editorial ID")) -> None:
    """Delete an editorial."""
    config = Config()
    with get_connection(config.get_db_config()) as conn:
        deleted = EditorialStore().delete(conn, editorial_id)
    if not deleted:
        console.print(f"[red]{EditorialNotFoundError(editorial_id)}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✅ Editorial #{editorial_id}: deleted[/green]")
