"""Init command implementation."""

from pathlib import Path
from typing import List

import typer
from rich.console import Console
from rich.panel import Panel

from ..config import ConfigModel, SourceConfig, save_config, save_sources
from ..db import SourceManager, get_connection, init_database, validate_connection

console = Console()


def create_default_sources() -> List[SourceConfig]:
    """Create default AI and banking news sources."""
    return [
        SourceConfig(
            name="TechCrunch AI",
            url="https://techcrunch.com/category/artificial-intelligence/",
            rss_feed="https://techcrunch.com/category/artificial-intelligence/feed/",
        ),
        SourceConfig(
            name="VentureBeat AI",
            url="https://venturebeat.com/category/ai/",
            rss_feed="https://venturebeat.com/category/ai/feed/",
        ),
        SourceConfig(
            name="MIT Technology Review",
            url="https://www.technologyreview.com/topic/artificial-intelligence/",
            rss_feed="https://www.technologyreview.com/feed/",
        ),
        SourceConfig(
            name="Finextra",
            url="https://www.finextra.com/",
            rss_feed="https://www.finextra.com/rss/headlines.aspx",
        ),
        SourceConfig(
            name="American Banker",
            url="https://www.americanbanker.com/",
            rss_feed="https://www.americanbanker.com/feed",
        ),
        SourceConfig(
            name="Banking Dive",
            url="https://www.bankingdive.com/",
            rss_feed="https://www.bankingdive.com/feeds/news/",
        ),
        SourceConfig(
            name="Payments Dive",
            url="https://www.paymentsdive.com/",
            rss_feed="https://www.paymentsdive.com/feeds/news/",
        ),
        SourceConfig(
            name="The Financial Brand",
            url="https://thefinancialbrand.com/",
            rss_feed="https://thefinancialbrand.com/feed/",
        ),
    ]


def init_command(
    config_dir: Path = typer.Option(
        Path.home() / ".config" / "aicn",
        "--config-dir",
        "-c",
        help="Configuration directory",
    ),
    db_host: str = typer.Option("localhost", "--db-host", help="Postgres host"),
    db_port: int = typer.Option(5432, "--db-port", help="Postgres port"),
    db_name: str = typer.Option("aicn", "--db-name", help="Database name"),
    db_user: str = typer.Option("aicn_user", "--db-user", help="Database user"),
    seed_sources: bool = typer.Option(
        True,
        "--seed-sources/--no-seed-sources",
        help="Seed default news sources",
    ),
) -> None:
    """Initialize AI Credit News configuration and database."""
    console.print(Panel.fit("📰 AI Credit News - Initialization", style="bold blue"))

    config_dir.mkdir(parents=True, exist_ok=True)
    config_path = config_dir / "config.yaml"
    sources_path = config_dir / "sources.yaml"

    config = ConfigModel(
        postgres={
            "host": db_host,
            "port": db_port,
            "database": db_name,
            "user": db_user,
            "password_env": "AICN_DB_PASSWORD",
        },
    )

    save_config(config, config_path)
    console.print(f"✅ Created config: {config_path}")

    sources = create_default_sources() if seed_sources else []
    save_sources(sources, sources_path)
    if sources:
        console.print(f"✅ Created sources: {sources_path} (seeded with {len(sources)} sources)")
    else:
        console.print(f"✅ Created sources: {sources_path} (empty)")

    console.print("\n[bold]Testing database connection...[/bold]")
    db_config = config.postgres.model_dump()

    if not validate_connection(db_config):
        console.print(
            "[red]❌ Database connection failed![/red]\n"
            "Please ensure Postgres is running and credentials are correct.\n"
            "Set the password via environment variable: [bold]export AICN_DB_PASSWORD=your_password[/bold]"
        )
        raise typer.Exit(1)

    console.print("✅ Database connection successful")

    console.print("\n[bold]Initializing database schema...[/bold]")
    try:
        init_database(db_config)
        console.print("✅ Database schema initialized, categories seeded")

        if sources:
            with get_connection(db_config) as conn:
                SourceManager().sync_sources(conn, sources)
            console.print(f"✅ Registered {len(sources)} sources")
    except Exception as e:
        console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
        raise typer.Exit(1)

    console.print(
        Panel(
            f"[green]✅ AI Credit News initialized successfully![/green]\n\n"
            f"Configuration: {config_path}\n"
            f"Sources: {sources_path}\n\n"
            f"Next steps:\n"
            f"1. Set database password: [bold]export AICN_DB_PASSWORD=your_password[/bold]\n"
            f"2. Set LLM API key: [bold]export OPENAI_API_KEY=your_key[/bold]\n"
            f"3. Run: [bold]aicn full-refresh[/bold]",
            style="green",
        )
    )
