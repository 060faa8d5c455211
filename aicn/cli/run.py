"""Operation commands: scrape, process, supplement, refresh and generation."""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..config import Config
from ..db import get_connection, validate_connection
from ..errors import AicnError
from ..pipeline import OperationType, PipelineOrchestrator

console = Console()


def _orchestrator() -> PipelineOrchestrator:
    config = Config()
    console.print("[dim]Checking database connection...[/dim]")
    if not validate_connection(config.get_db_config()):
        console.print("[red]❌ Database connection failed![/red]")
        console.print("Please check your database configuration and ensure Postgres is running.")
        raise typer.Exit(1)
    return PipelineOrchestrator(config)


def _run_operation(operation_type: OperationType) -> None:
    orchestrator = _orchestrator()
    try:
        success = orchestrator.run(operation_type)
    except AicnError as e:
        console.print(f"[red]{operation_type.value} failed: {e}[/red]")
        raise typer.Exit(1)
    finally:
        orchestrator.coordinator.shutdown()

    if not success:
        raise typer.Exit(1)


def scrape_command() -> None:
    """Scrape all active sources (last 3 months), then classify up to 30 pending articles."""
    _run_operation(OperationType.SCRAPE)


def process_all_command() -> None:
    """Classify every pending article, sending accepted ones to the queue."""
    _run_operation(OperationType.PROCESS_ALL)


def supplement_command() -> None:
    """Generate AI-authored articles if today's counts allow."""
    _run_operation(OperationType.SUPPLEMENT)


def full_refresh_command() -> None:
    """Scrape, classify and supplement in one operation."""
    _run_operation(OperationType.FULL_REFRESH)


def process_command(
    limit: int = typer.Option(10, "--limit", "-l", help="Maximum articles to process", min=1),
    dry_run: bool = typer.Option(False, "--dry-run", help="Classify without saving changes"),
) -> None:
    """Classify a batch of pending articles, approving relevant ones directly."""
    orchestrator = _orchestrator()
    try:
        summary = orchestrator.process(limit=limit, dry_run=dry_run)
    except Exception as e:
        console.print(f"[red]Processing failed: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Processing Complete" + (" (dry run)" if dry_run else ""))
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Score", style="yellow")
    table.add_column("Status", style="bold")
    for result in summary["results"]:
        table.add_row(
            str(result["article_id"]),
            result["title"][:60],
            f"{result['relevance_score']:.1f}",
            result["status"],
        )
    console.print(table)
    console.print(
        f"Processed: {summary['processed']} • Approved: {summary['approved']} • "
        f"Rejected: {summary['rejected']} • Errors: {summary['errors']}"
    )


def reprocess_command(
    article_id: int = typer.Argument(..., help="Article ID to classify again"),
) -> None:
    """Run one article through classification again."""
    orchestrator = _orchestrator()
    try:
        result = orchestrator.reprocess(article_id)
    except Exception as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(
        f"Article #{result['article_id']}: [bold]{result['status']}[/bold] "
        f"(score {result['relevance_score']:.1f}, category {result['category_slug'] or '-'})"
    )


def auto_publish_command(
    hours: Optional[int] = typer.Option(
        None,
        "--hours",
        help="Publish AI articles in review longer than this. Default: auto_publish_hours setting",
        min=1,
    ),
) -> None:
    """Publish AI-authored articles left in review past the threshold."""
    orchestrator = _orchestrator()
    published = orchestrator.auto_publish(hours)
    console.print(f"[green]✅ Auto-published {published} article(s)[/green]")


def generate_command(
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Category slug"),
    article_type: Optional[str] = typer.Option(
        None,
        "--type",
        "-t",
        help="Article type (trend_analysis, product_launch, market_insight, regulatory_update, future_outlook)",
    ),
    all_categories: bool = typer.Option(False, "--all", help="Generate one article per category"),
) -> None:
    """Generate AI-authored articles for review, bypassing the daily limits."""
    if not category and not all_categories:
        console.print("[red]Specify --category SLUG or --all[/red]")
        raise typer.Exit(1)

    orchestrator = _orchestrator()
    config = orchestrator.config
    try:
        generator = orchestrator.build_generator()
        with get_connection(config.get_db_config()) as conn:
            if all_categories:
                results = generator.generate_for_all_categories(conn)
                generated, errors = results.generated, results.errors
            else:
                generated = [generator.generate_for_category(conn, category, article_type)]
                errors = []
    except Exception as e:
        console.print(f"[red]Generation failed: {e}[/red]")
        raise typer.Exit(1)

    for item in generated:
        console.print(f"[green]✅ #{item.id} ({item.category}) {item.title}[/green]")
    for error in errors:
        console.print(f"[red]❌ {error.category}: {error.error}[/red]")
    console.print(f"\n{len(generated)} article(s) saved for review")
    if errors:
        raise typer.Exit(1)
