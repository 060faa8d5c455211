"""Top up the day's content with AI-authored articles."""

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING, Callable, List, Optional

import pendulum
from psycopg import Connection
from pydantic import BaseModel, Field

from ..db.articles import ArticleStorage
from ..db.settings import SettingsStore
from ..generation.generator import ArticleGenerator
from ..generation.models import GeneratedItem, GenerationError
from ..models import Category
from .policy import AdmissionDecision, AdmissionLimits, plan_supplement

if TYPE_CHECKING:
    from ..pipeline.operations import OperationTracker

logger = logging.getLogger(__name__)

CATEGORY_WINDOW_DAYS = 7


class SupplementResult(BaseModel):
    """Outcome of one daily supplement run."""

    decision: AdmissionDecision
    categories: List[str] = Field(default_factory=list)
    generated: List[GeneratedItem] = Field(default_factory=list)
    errors: List[GenerationError] = Field(default_factory=list)

    @property
    def reason(self) -> Optional[str]:
        return self.decision.reason.value if self.decision.reason else None


class ContentSupplementer:
    """Apply the admission policy and generate articles for neglected categories."""

    def __init__(
        self,
        generator: ArticleGenerator,
        articles: Optional[ArticleStorage] = None,
        settings: Optional[SettingsStore] = None,
        now: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.generator = generator
        self.articles = articles or ArticleStorage()
        self.settings = settings or SettingsStore()
        self._now = now or (lambda: pendulum.now("UTC"))

    def limits(
        self,
        conn: Connection,
        daily_min: Optional[int] = None,
        daily_max: Optional[int] = None,
        max_ai_per_day: Optional[int] = None,
    ) -> AdmissionLimits:
        """Stored settings with per-call overrides applied."""
        stored = self.settings.get_content_settings(conn)
        return AdmissionLimits(
            daily_min=stored.daily_min_articles if daily_min is None else daily_min,
            daily_max=stored.daily_max_articles if daily_max is None else daily_max,
            max_ai_per_day=stored.daily_max_ai_articles if max_ai_per_day is None else max_ai_per_day,
        )

    def select_categories(self, conn: Connection, count: int) -> List[Category]:
        """Pick the categories with the fewest approved articles this week."""
        since = self._now() - pendulum.duration(days=CATEGORY_WINDOW_DAYS)
        rows = self.articles.categories_by_recent_count(conn, since)
        return [Category(**row) for row in rows[:count]]

    def supplement_daily_content(
        self,
        conn: Connection,
        daily_min: Optional[int] = None,
        daily_max: Optional[int] = None,
        max_ai_per_day: Optional[int] = None,
        tracker: Optional["OperationTracker"] = None,
        today: Optional[date] = None,
    ) -> SupplementResult:
        """
        Generate however many AI-authored articles today's counts allow.

        Counts are read fresh on every call. Concurrent runs are not
        serialized, so two overlapping calls can both pass the caps.
        """
        limits = self.limits(conn, daily_min, daily_max, max_ai_per_day)
        counts = self.articles.todays_counts(conn, today or self._now().date())
        decision = plan_supplement(counts, limits)
        result = SupplementResult(decision=decision)

        logger.info(
            "Today: %d scraped, %d AI (limits min=%d max=%d ai=%d)",
            counts.scraped,
            counts.ai_generated,
            limits.daily_min,
            limits.daily_max,
            limits.max_ai_per_day,
        )
        if tracker:
            tracker.log(
                f"Current: {counts.scraped} scraped, {counts.ai_generated} AI-generated "
                f"(max {limits.daily_max}, AI max {limits.max_ai_per_day})"
            )

        if not decision.should_generate:
            logger.info("No generation needed: %s", result.reason)
            if tracker:
                tracker.update_ai(to_generate=0)
                tracker.log(f"No AI articles needed ({result.reason})")
            return result

        categories = self.select_categories(conn, decision.to_generate)
        result.categories = [c.slug for c in categories]
        logger.info("Generating %d article(s) for: %s", len(categories), ", ".join(result.categories))
        if tracker:
            tracker.update_ai(to_generate=len(categories), generated=0)
            tracker.log(f"Generating {len(categories)} AI article(s)")

        batch = self.generator.generate_for_categories(conn, categories, tracker)
        result.generated = batch.generated
        result.errors = batch.errors

        if tracker:
            tracker.log(f"AI supplement complete: {len(result.generated)} generated, {len(result.errors)} errors")
        return result
