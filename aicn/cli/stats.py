"""Status overview and operation history commands."""

import json

import pendulum
import typer
from rich.console import Console
from rich.table import Table

from ..admission import AdmissionLimits, plan_supplement
from ..config import Config
from ..db import ArticleStorage, OperationRunStore, SettingsStore, get_connection

console = Console()


def stats_command() -> None:
    """Show article counts and what today's AI supplement would do."""
    config = Config()
    articles = ArticleStorage()

    with get_connection(config.get_db_config()) as conn:
        counts = articles.status_counts(conn)
        today = articles.todays_counts(conn, pendulum.now("UTC").date())
        settings = SettingsStore().get_content_settings(conn)

    table = Table(title="Articles by Status")
    table.add_column("Status", style="cyan")
    table.add_column("Count", style="bold", justify="right")
    for status, count in counts.items():
        table.add_row(status, str(count))
    console.print(table)

    decision = plan_supplement(
        today,
        AdmissionLimits(
            daily_min=settings.daily_min_articles,
            daily_max=settings.daily_max_articles,
            max_ai_per_day=settings.daily_max_ai_articles,
        ),
    )
    console.print(
        f"\nToday: {today.scraped} scraped approved, {today.ai_generated} AI-authored "
        f"(min {settings.daily_min_articles}, max {settings.daily_max_articles}, "
        f"AI max {settings.daily_max_ai_articles})"
    )
    if decision.should_generate:
        console.print(f"AI supplement would generate [bold]{decision.to_generate}[/bold] article(s)")
    else:
        console.print(f"AI supplement would generate nothing ([dim]{decision.reason.value}[/dim])")


def history_command(
    limit: int = typer.Option(10, "--limit", "-l", help="Number of runs to show", min=1),
) -> None:
    """Show recent operation runs."""
    config = Config()
    with get_connection(config.get_db_config()) as conn:
        runs = OperationRunStore().get_recent_runs(conn, limit)

    if not runs:
        console.print("[yellow]No operations recorded yet.[/yellow]")
        return

    table = Table(title="Recent Operations")
    table.add_column("ID", style="dim")
    table.add_column("Operation", style="cyan")
    table.add_column("Status", style="bold")
    table.add_column("Started", style="green")
    table.add_column("Duration", style="yellow")
    table.add_column("Stats", style="dim")

    status_styles = {"completed": "green", "cancelled": "yellow", "error": "red", "running": "blue"}
    for run in runs:
        duration = "-"
        if run["finished_at"]:
            duration = f"{(run['finished_at'] - run['started_at']).total_seconds():.0f}s"
        style = status_styles.get(run["status"], "white")
        table.add_row(
            str(run["id"]),
            run["operation"],
            f"[{style}]{run['status']}[/{style}]",
            run["started_at"].strftime("%Y-%m-%d %H:%M"),
            duration,
            json.dumps(run["stats_json"])[:80] if run["stats_json"] else "-",
        )

    console.print(table)
