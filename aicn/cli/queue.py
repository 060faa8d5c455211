"""Queue and review commands."""

from typing import Dict, List

import typer
from rich.console import Console
from rich.table import Table

from ..config import Config
from ..db import get_connection
from ..errors import ArticleNotFoundError
from ..review import ALL, ReviewWorkflow

console = Console()
queue_app = typer.Typer(help="Manage AI-scored articles waiting in the queue")
review_app = typer.Typer(help="Manage AI-authored articles waiting for review")

PAST = {"approve": "approved", "reject": "rejected", "delete": "deleted"}


def _article_table(title: str, rows: List[Dict], show_score: bool = True) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Category", style="magenta")
    if show_score:
        table.add_column("Score", style="yellow")
    table.add_column("Created", style="green")

    for row in rows:
        cells = [str(row["id"]), row["title"][:70], row.get("category_name") or "-"]
        if show_score:
            score = row.get("relevance_score")
            cells.append(f"{score:.1f}" if score is not None else "-")
        created = row.get("scraped_date")
        cells.append(created.strftime("%Y-%m-%d %H:%M") if created else "-")
        table.add_row(*cells)
    return table


@queue_app.command("list")
def queue_list() -> None:
    """List queued articles, most relevant first."""
    config = Config()
    with get_connection(config.get_db_config()) as conn:
        rows = ReviewWorkflow().list_queued(conn)

    if not rows:
        console.print("[yellow]The queue is empty.[/yellow]")
        return
    console.print(_article_table(f"Queued Articles ({len(rows)})", rows))


@queue_app.command("approve")
def queue_approve(
    ids: List[int] = typer.Argument(None, help="Article IDs to approve"),
    all_queued: bool = typer.Option(False, "--all", help="Approve every queued article"),
) -> None:
    """Approve queued articles."""
    if not ids and not all_queued:
        console.print("[red]Give article IDs or --all[/red]")
        raise typer.Exit(1)

    config = Config()
    with get_connection(config.get_db_config()) as conn:
        changed = ReviewWorkflow().bulk_approve(conn, ALL if all_queued else ids)
    console.print(f"[green]✅ Approved {changed} article(s)[/green]")


@queue_app.command("reject")
def queue_reject(
    ids: List[int] = typer.Argument(..., help="Article IDs to reject"),
) -> None:
    """Reject queued articles."""
    config = Config()
    with get_connection(config.get_db_config()) as conn:
        changed = ReviewWorkflow().bulk_reject(conn, ids)
    console.print(f"[green]✅ Rejected {changed} article(s)[/green]")


@review_app.command("list")
def review_list() -> None:
    """List articles waiting for human review."""
    config = Config()
    with get_connection(config.get_db_config()) as conn:
        rows = ReviewWorkflow().list_review(conn)

    if not rows:
        console.print("[yellow]Nothing to review.[/yellow]")
        return
    console.print(_article_table(f"Articles in Review ({len(rows)})", rows, show_score=False))


def _single(action: str, article_id: int) -> None:
    config = Config()
    workflow = ReviewWorkflow()
    try:
        with get_connection(config.get_db_config()) as conn:
            getattr(workflow, f"{action}_article")(conn, article_id)
    except ArticleNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✅ Article #{article_id}: {PAST[action]}[/green]")


@review_app.command("approve")
def review_approve(article_id: int = typer.Argument(..., help="Article ID")) -> None:
    """Approve one article."""
    _single("approve", article_id)


@review_app.command("reject")
def review_reject(article_id: int = typer.Argument(..., help="Article ID")) -> None:
    """Reject one article."""
    _single("reject", article_id)


@review_app.command("delete")
def review_delete(article_id: int = typer.Argument(..., help="Article ID")) -> None:
    """Delete one article and its tags."""
    _single("delete", article_id)
