"""Main CLI application."""

from typing import Optional

import typer
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

from ..config import Config
from ..utils.logging import setup_logging
from .editorial import editorial_app
from .init import init_command
from .queue import queue_app, review_app
from .run import (
    auto_publish_command,
    full_refresh_command,
    generate_command,
    process_all_command,
    process_command,
    reprocess_command,
    scrape_command,
    supplement_command,
)
from .settings import settings_app
from .sources import sources_app
from .stats import history_command, stats_command

app = typer.Typer(
    name="aicn",
    help="AI Credit News - content pipeline for AI in credit and banking",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also write logs to this file"),
) -> None:
    """Configure logging before any command runs."""
    logging_config = Config().config.logging
    setup_logging(
        level="DEBUG" if verbose else logging_config.level,
        file_path=log_file or logging_config.file_path,
    )


# Register commands
app.command("init")(init_command)
app.command("scrape")(scrape_command)
app.command("process")(process_command)
app.command("process-all")(process_all_command)
app.command("reprocess")(reprocess_command)
app.command("supplement")(supplement_command)
app.command("full-refresh")(full_refresh_command)
app.command("auto-publish")(auto_publish_command)
app.command("generate")(generate_command)
app.command("stats")(stats_command)
app.command("history")(history_command)
app.add_typer(queue_app, name="queue", help="Manage queued articles")
app.add_typer(review_app, name="review", help="Manage articles in review")
app.add_typer(settings_app, name="settings", help="View and change content settings")
app.add_typer(sources_app, name="sources", help="Manage RSS sources")
app.add_typer(editorial_app, name="editorial", help="Generate and publish the weekly editorial")


if __name__ == "__main__":
    app()
