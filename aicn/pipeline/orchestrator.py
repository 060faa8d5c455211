"""Pipeline orchestrator that runs the operator-triggered content flows."""

import signal
import threading
import time
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Callable, Dict, List, Optional

from psycopg import Connection
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from ..admission import ContentSupplementer
from ..config import Config
from ..db import get_connection
from ..db.operations import OperationRunStore
from ..generation import ArticleGenerator, EditorialOutcome, EditorialWriter, LLMProvider, get_llm_provider
from ..ingestion import ArticleFetcher, RSSFetcher, Scraper
from ..models import ArticleStatus
from ..processing import Classifier
from ..review import ReviewWorkflow
from .operations import OperationCoordinator, OperationStatus, OperationTracker, OperationType

console = Console()

MANUAL_SCRAPE_MAX_AGE_MONTHS = 3
MANUAL_SCRAPE_PROCESS_LIMIT = 30
FULL_REFRESH_PROCESS_LIMIT = 50

# Ctrl-Z toggles pause; absent on Windows
PAUSE_SIGNAL = getattr(signal, "SIGTSTP", None)

FULL_REFRESH_STEPS = {
    1: "Step 1: Scraping RSS Feeds",
    2: "Step 2: Processing Articles with AI",
    3: "Step 3: AI Content Supplement",
}


class PipelineStage:
    """Represents a pipeline stage."""

    def __init__(self, name: str, description: str):
        self.name = name
        self.description = description
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.success = False
        self.error: Optional[str] = None
        self.stats: Dict = {}

    def start(self):
        """Mark stage as started."""
        self.start_time = time.time()

    def complete(self, stats: Optional[Dict] = None):
        """Mark stage as completed successfully."""
        self.end_time = time.time()
        self.success = True
        if stats:
            self.stats.update(stats)

    def fail(self, error: str):
        """Mark stage as failed."""
        self.end_time = time.time()
        self.success = False
        self.error = error

    @property
    def duration(self) -> float:
        """Get stage duration in seconds."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0


class PipelineOrchestrator:
    """Orchestrates scrape, process, supplement and full-refresh operations."""

    def __init__(
        self,
        config: Config,
        coordinator: Optional[OperationCoordinator] = None,
        llm: Optional[LLMProvider] = None,
        runs: Optional[OperationRunStore] = None,
    ):
        """Initialize pipeline orchestrator."""
        self.config = config
        self.coordinator = coordinator or OperationCoordinator()
        self.runs = runs or OperationRunStore()
        self._llm = llm
        self.stages: List[PipelineStage] = []
        self._previous_pause_handler: Any = None

    @property
    def llm(self) -> LLMProvider:
        """Configured LLM provider, built on first use."""
        if self._llm is None:
            self._llm = get_llm_provider(self.config.get_llm_config())
        return self._llm

    def build_scraper(self) -> Scraper:
        scrape = self.config.config.scrape
        delays = self.config.config.delays
        return Scraper(
            RSSFetcher(timeout=scrape.timeout_seconds, user_agent=scrape.user_agent),
            ArticleFetcher(
                timeout=scrape.timeout_seconds,
                user_agent=scrape.user_agent,
                max_chars=scrape.max_content_chars,
            ),
            items_per_source=scrape.items_per_source,
            min_content_chars=scrape.min_content_chars,
            max_content_chars=scrape.max_content_chars,
            source_delay=delays.between_sources,
            fetch_delay=delays.between_fetches,
        )

    def build_classifier(self) -> Classifier:
        return Classifier(self.llm, article_delay=self.config.config.delays.between_articles)

    def build_generator(self) -> ArticleGenerator:
        return ArticleGenerator(self.llm, generation_delay=self.config.config.delays.between_generations)

    def build_supplementer(self) -> ContentSupplementer:
        return ContentSupplementer(self.build_generator())

    def build_review(self) -> ReviewWorkflow:
        return ReviewWorkflow()

    def build_editorial_writer(self) -> EditorialWriter:
        return EditorialWriter(self.llm)

    def _run_stage(self, name: str, description: str, func: Callable[[], Dict]) -> Dict:
        stage = PipelineStage(name, description)
        self.stages.append(stage)
        stage.start()
        try:
            stats = func()
        except Exception as e:
            stage.fail(str(e))
            raise
        stage.complete(stats)
        return stats

    def _scrape_stage(self, conn: Connection, tracker: OperationTracker) -> Dict:
        def run() -> Dict:
            summary = self.build_scraper().run_scrape(
                conn,
                max_age_months=MANUAL_SCRAPE_MAX_AGE_MONTHS,
                tracker=tracker,
            )
            return summary.model_dump(exclude={"results", "timestamp"})

        return self._run_stage("scrape", "Scraping RSS feeds", run)

    def _process_stage(
        self,
        conn: Connection,
        tracker: OperationTracker,
        limit: Optional[int],
        queue: bool = False,
    ) -> Dict:
        def run() -> Dict:
            classifier = self.build_classifier()
            if queue:
                summary = classifier.process_all_pending(conn, tracker=tracker)
            else:
                summary = classifier.process_pending(conn, limit=limit, tracker=tracker)
            return summary.model_dump(exclude={"results"})

        return self._run_stage("process", "Processing articles with AI", run)

    def _supplement_stage(self, conn: Connection, tracker: OperationTracker) -> Dict:
        def run() -> Dict:
            result = self.build_supplementer().supplement_daily_content(conn, tracker=tracker)
            return {
                "to_generate": result.decision.to_generate,
                "generated": len(result.generated),
                "errors": len(result.errors),
                "reason": result.reason,
                "categories": result.categories,
            }

        return self._run_stage("supplement", "Generating AI articles", run)

    def scrape_flow(self, conn: Connection, tracker: OperationTracker) -> Dict:
        """Scrape recent items, then classify a batch of pending articles."""
        stats = {"scrape": self._scrape_stage(conn, tracker)}
        if tracker.checkpoint():
            stats["process"] = self._process_stage(conn, tracker, MANUAL_SCRAPE_PROCESS_LIMIT)
        return stats

    def process_all_flow(self, conn: Connection, tracker: OperationTracker) -> Dict:
        """Classify the entire pending backlog into the queue."""
        return {"process": self._process_stage(conn, tracker, None, queue=True)}

    def supplement_flow(self, conn: Connection, tracker: OperationTracker) -> Dict:
        """Top up today's content with AI-authored articles."""
        return {"supplement": self._supplement_stage(conn, tracker)}

    def full_refresh_flow(self, conn: Connection, tracker: OperationTracker) -> Dict:
        """Scrape, process and supplement in three equally weighted steps."""
        stats = {"scrape": self._scrape_stage(conn, tracker)}

        if not tracker.checkpoint():
            return stats
        tracker.set_step(2, FULL_REFRESH_STEPS[2])
        stats["process"] = self._process_stage(conn, tracker, FULL_REFRESH_PROCESS_LIMIT)

        if not tracker.checkpoint():
            return stats
        tracker.set_step(3, FULL_REFRESH_STEPS[3])
        stats["supplement"] = self._supplement_stage(conn, tracker)
        return stats

    def _flow(self, operation_type: OperationType) -> Callable[[Connection, OperationTracker], Dict]:
        return {
            OperationType.SCRAPE: self.scrape_flow,
            OperationType.PROCESS_ALL: self.process_all_flow,
            OperationType.SUPPLEMENT: self.supplement_flow,
            OperationType.FULL_REFRESH: self.full_refresh_flow,
        }[operation_type]

    def execute(self, operation_type: OperationType, tracker: OperationTracker) -> Dict:
        """Run one flow against the database and record it in operation history."""
        self.stages = []
        flow = self._flow(operation_type)

        with get_connection(self.config.get_db_config()) as conn:
            run_id = self.runs.create_run(conn, operation_type.value)
            try:
                stats = flow(conn, tracker)
            except Exception as e:
                conn.rollback()
                self.runs.finish_run(conn, run_id, OperationStatus.ERROR.value, {"error": str(e)})
                raise

            status = OperationStatus.CANCELLED if tracker.is_cancel_requested() else OperationStatus.COMPLETED
            self.runs.finish_run(conn, run_id, status.value, stats)
            return stats

    def auto_publish(self, hours_threshold: Optional[int] = None) -> int:
        """Publish AI-authored review articles past the threshold."""
        with get_connection(self.config.get_db_config()) as conn:
            return self.build_review().auto_publish_review_articles(conn, hours_threshold)

    def generate_editorial(self, welcome: bool = False) -> EditorialOutcome:
        """Draft last week's editorial, or the fixed welcome editorial."""
        writer = self.build_editorial_writer()
        with get_connection(self.config.get_db_config()) as conn:
            if welcome:
                return writer.create_welcome_editorial(conn)
            return writer.generate_weekly_editorial(conn)

    def _on_pause_signal(self, signum, frame) -> None:
        paused = self.coordinator.toggle_pause()
        if paused:
            console.print("[yellow]Pausing after the current item; press Ctrl-Z again to resume[/yellow]")
        elif paused is False:
            console.print("[green]Resuming...[/green]")

    def _install_pause_handler(self) -> bool:
        """Route Ctrl-Z to pause/resume. Signal handlers can only be set from the main thread."""
        if PAUSE_SIGNAL is None or threading.current_thread() is not threading.main_thread():
            return False
        self._previous_pause_handler = signal.signal(PAUSE_SIGNAL, self._on_pause_signal)
        return True

    def _restore_pause_handler(self) -> None:
        signal.signal(PAUSE_SIGNAL, self._previous_pause_handler or signal.SIG_DFL)

    def _print_summary(self, operation_type: OperationType, snapshot: Optional[Dict[str, Any]]):
        """Print operation summary."""
        table = Table(title=f"{operation_type.value.title()} Summary")
        table.add_column("Stage", style="cyan")
        table.add_column("Status", style="bold")
        table.add_column("Duration", style="yellow")
        table.add_column("Details", style="dim")

        for stage in self.stages:
            status = "[green]✓[/green]" if stage.success else "[red]✗[/red]"
            duration = f"{stage.duration:.1f}s" if stage.duration > 0 else "-"

            details = ""
            if stage.success:
                if stage.name == "scrape":
                    details = (
                        f"{stage.stats.get('sources_processed', 0)} sources, "
                        f"{stage.stats.get('articles_added', 0)} added, "
                        f"{stage.stats.get('articles_skipped', 0)} skipped, "
                        f"{stage.stats.get('errors', 0)} errors"
                    )
                elif stage.name == "process":
                    details = (
                        f"{stage.stats.get('approved', 0)} approved, "
                        f"{stage.stats.get('queued', 0)} queued, "
                        f"{stage.stats.get('rejected', 0)} rejected, "
                        f"{stage.stats.get('errors', 0)} errors"
                    )
                elif stage.name == "supplement":
                    if stage.stats.get("reason"):
                        details = f"nothing to generate ({stage.stats['reason']})"
                    else:
                        details = (
                            f"{stage.stats.get('generated', 0)} generated, "
                            f"{stage.stats.get('errors', 0)} errors"
                        )
            else:
                details = stage.error or "Failed"

            table.add_row(stage.name.title(), status, duration, details)

        console.print("\n")
        console.print(table)

        status = snapshot["status"] if snapshot else OperationStatus.ERROR.value
        if status == OperationStatus.COMPLETED.value:
            console.print(Panel(f"[green]✅ {operation_type.value} completed successfully![/green]", style="green"))
        elif status == OperationStatus.CANCELLED.value:
            console.print(Panel(
                f"[yellow]⏹ {operation_type.value} cancelled; partial results were kept.[/yellow]",
                style="yellow",
            ))
        else:
            error = snapshot.get("error") if snapshot else None
            console.print(Panel(
                f"[red]❌ {operation_type.value} failed![/red]\n\n"
                f"{error or 'Check logs for details.'}",
                style="red",
            ))

    def run(self, operation_type: OperationType) -> bool:
        """
        Run an operation with a live progress bar.

        Ctrl-Z pauses or resumes and Ctrl-C requests cancellation; either
        takes effect at the loop's next checkpoint.

        Returns:
            True if the operation completed or was cancelled cleanly
        """
        console.print(Panel.fit(
            f"📰 AI Credit News • {operation_type.value}",
            style="bold blue",
        ))

        future = self.coordinator.run_in_background(
            operation_type,
            lambda tracker: self.execute(operation_type, tracker),
        )
        pause_installed = self._install_pause_handler()
        if pause_installed:
            console.print("[dim]Ctrl-Z pauses or resumes, Ctrl-C cancels[/dim]")

        try:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TextColumn("{task.percentage:>3.0f}%"),
                TimeElapsedColumn(),
                console=console,
            ) as progress:
                task = progress.add_task(operation_type.value, total=100)
                while True:
                    try:
                        future.result(timeout=0.5)
                        break
                    except FutureTimeout:
                        pass
                    except KeyboardInterrupt:
                        console.print("[yellow]Cancelling, waiting for the current item to finish...[/yellow]")
                        self.coordinator.cancel()
                    except Exception:
                        break
                    finally:
                        snapshot = self.coordinator.snapshot()
                        if snapshot:
                            progress.update(
                                task,
                                completed=snapshot["progress_percent"],
                                description=f"{snapshot['step_name']} ({snapshot['status']})",
                            )
        finally:
            if pause_installed:
                self._restore_pause_handler()

        snapshot = self.coordinator.snapshot()
        self._print_summary(operation_type, snapshot)
        return bool(snapshot) and snapshot["status"] != OperationStatus.ERROR.value

    def reprocess(self, article_id: int) -> Dict:
        """Reclassify one article and return its result."""
        with get_connection(self.config.get_db_config()) as conn:
            result = self.build_classifier().reprocess_article(conn, article_id)
        return result.model_dump(mode="json")

    def process(self, limit: int = 10, dry_run: bool = False) -> Dict:
        """Classify a batch of pending articles without operation tracking."""
        with get_connection(self.config.get_db_config()) as conn:
            summary = self.build_classifier().process_pending(
                conn,
                limit=limit,
                target_status=ArticleStatus.APPROVED,
                dry_run=dry_run,
            )
        return summary.model_dump(mode="json")
