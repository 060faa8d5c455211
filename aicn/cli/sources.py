"""Sources management commands."""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..config import Config, SourceConfig, load_sources
from ..db import SourceManager, get_connection
from ..ingestion import RSSFetcher

console = Console()
sources_app = typer.Typer(help="Manage RSS sources")


@sources_app.command("list")
def sources_list() -> None:
    """List all registered sources."""
    config = Config()
    with get_connection(config.get_db_config()) as conn:
        sources = SourceManager().get_sources(conn)

    if not sources:
        console.print("[yellow]No sources registered. Run 'aicn sources import' first.[/yellow]")
        return

    table = Table(title="Registered Sources")
    table.add_column("Name", style="cyan")
    table.add_column("Lang", style="magenta")
    table.add_column("Active", style="yellow")
    table.add_column("Last Scraped", style="green")
    table.add_column("Feed", style="blue")

    for source in sources:
        table.add_row(
            source.name,
            source.language,
            "✓" if source.active else "✗",
            source.last_scraped.strftime("%Y-%m-%d %H:%M") if source.last_scraped else "never",
            source.rss_feed or "-",
        )

    console.print(table)


@sources_app.command("add")
def sources_add(
    name: str = typer.Option(..., "--name", "-n", help="Source name"),
    rss_feed: str = typer.Option(..., "--feed", "-f", help="RSS feed URL"),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Homepage URL"),
    language: str = typer.Option("en", "--language", "-l", help="Language code"),
) -> None:
    """Register a new RSS source."""
    config = Config()
    manager = SourceManager()

    with get_connection(config.get_db_config()) as conn:
        if manager.get_by_name(conn, name):
            console.print(f"[red]Source '{name}' already exists.[/red]")
            raise typer.Exit(1)
        manager.sync_sources(
            conn,
            [SourceConfig(name=name, rss_feed=rss_feed, url=url, language=language)],
        )

    console.print(f"[green]✅ Added source: {name}[/green]")


def _set_active(name: str, active: bool) -> None:
    config = Config()
    with get_connection(config.get_db_config()) as conn:
        found = SourceManager().set_active(conn, name, active)

    if not found:
        console.print(f"[red]Source '{name}' not found.[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✅ {'Enabled' if active else 'Disabled'} source: {name}[/green]")


@sources_app.command("enable")
def sources_enable(name: str = typer.Argument(..., help="Source name")) -> None:
    """Include a source in scrapes."""
    _set_active(name, True)


@sources_app.command("disable")
def sources_disable(name: str = typer.Argument(..., help="Source name")) -> None:
    """Exclude a source from scrapes. Its articles are kept."""
    _set_active(name, False)


@sources_app.command("import")
def sources_import() -> None:
    """Register or update sources from sources.yaml."""
    config = Config()

    try:
        sources = load_sources(config.sources_path)
    except FileNotFoundError:
        console.print(f"[red]Sources file not found: {config.sources_path}. Run 'aicn init' first.[/red]")
        raise typer.Exit(1)

    with get_connection(config.get_db_config()) as conn:
        source_map = SourceManager().sync_sources(conn, sources)

    console.print(f"[green]✅ Imported {len(source_map)} source(s) from {config.sources_path}[/green]")


@sources_app.command("test")
def sources_test(
    name: Optional[str] = typer.Argument(None, help="Source name to test (or test all)"),
) -> None:
    """Test RSS feed connectivity."""
    config = Config()
    with get_connection(config.get_db_config()) as conn:
        sources = SourceManager().get_sources(conn)

    if name:
        sources = [s for s in sources if s.name == name]
        if not sources:
            console.print(f"[red]Source '{name}' not found.[/red]")
            raise typer.Exit(1)

    fetcher = RSSFetcher(
        timeout=config.config.scrape.timeout_seconds,
        user_agent=config.config.scrape.user_agent,
    )
    for source in sources:
        if not source.active:
            console.print(f"[yellow]⚠️  {source.name}: Disabled[/yellow]")
            continue
        if not source.rss_feed:
            console.print(f"[yellow]⚠️  {source.name}: No feed URL[/yellow]")
            continue

        result = fetcher.fetch_feed(source)
        if result.success:
            console.print(f"[green]✅ {source.name}: OK ({result.item_count} items)[/green]")
        else:
            console.print(f"[red]❌ {source.name}: Failed - {result.error}[/red]")
