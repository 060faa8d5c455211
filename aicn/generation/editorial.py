"""Weekly editorial generation."""

import logging
from datetime import date, timedelta
from typing import Callable, Optional, Tuple

import pendulum
from psycopg import Connection
from pydantic import BaseModel

from ..db.articles import ArticleStorage
from ..db.editorials import EditorialStore
from ..models import Editorial
from .llm_provider import LLMProvider
from .prompts import PUBLICATION

logger = logging.getLogger(__name__)

EDITORIAL_WINDOW_DAYS = 7
MIN_EDITORIAL_ARTICLES = 3
EDITORIAL_ARTICLE_LIMIT = 50

WELCOME_TITLE = f"Welcome to {PUBLICATION}: Your Guide to AI in Financial Services"

WELCOME_CONTENT = f"""Welcome to {PUBLICATION}, a weekly look at where artificial intelligence meets credit, lending and banking.

Machine learning now sits inside credit scoring, underwriting, fraud screening and collections. The pace of change is fast, and the questions it raises about fairness, explainability and regulation are getting harder.

Each week we cover:

- AI in credit risk assessment and scoring
- Lending automation and operational efficiency
- Fraud detection and prevention
- Regulatory developments and compliance
- Research and industry case studies

Our aim is to give risk professionals, banking leaders and fintech builders the stories that matter and the context to act on them.

Welcome aboard."""


def editorial_week(today: date) -> Tuple[date, date]:
    """The Monday-to-Sunday week before the one containing ``today``."""
    week_start = today - timedelta(days=today.weekday() + 7)
    return week_start, week_start + timedelta(days=6)


class EditorialOutcome(BaseModel):
    """Result of a weekly editorial request."""

    editorial: Optional[Editorial] = None
    created: bool = False
    article_count: int = 0

    @property
    def skipped(self) -> bool:
        return self.editorial is None


class EditorialWriter:
    """Write one draft editorial per week from recently approved articles."""

    def __init__(
        self,
        llm: LLMProvider,
        articles: Optional[ArticleStorage] = None,
        editorials: Optional[EditorialStore] = None,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self.llm = llm
        self.articles = articles or ArticleStorage()
        self.editorials = editorials or EditorialStore()
        self._today = today or (lambda: pendulum.now("UTC").date())

    def generate_weekly_editorial(self, conn: Connection) -> EditorialOutcome:
        """
        Draft last week's editorial unless it already exists.

        Nothing is written when fewer than three articles were approved in
        the past seven days. A week that already has an editorial gets that
        editorial back without another LLM call.
        """
        today = self._today()
        since = today - timedelta(days=EDITORIAL_WINDOW_DAYS)
        recent = self.articles.find_recent_approved(conn, since, EDITORIAL_ARTICLE_LIMIT)
        outcome = EditorialOutcome(article_count=len(recent))

        if len(recent) < MIN_EDITORIAL_ARTICLES:
            logger.info(
                "Only %d approved article(s) since %s; need %d for an editorial",
                len(recent),
                since,
                MIN_EDITORIAL_ARTICLES,
            )
            return outcome

        week_start, week_end = editorial_week(today)
        existing = self.editorials.find_by_week(conn, week_start)
        if existing is not None:
            logger.info("Editorial for week of %s already exists (#%s)", week_start, existing.id)
            outcome.editorial = existing
            return outcome

        logger.info("Writing editorial for %s to %s from %d articles", week_start, week_end, len(recent))
        written = self.llm.generate_editorial(recent, week_start, week_end)
        outcome.editorial, outcome.created = self._save(
            conn,
            Editorial(title=written.title, content=written.content, week_start=week_start, week_end=week_end),
        )
        return outcome

    def create_welcome_editorial(self, conn: Connection) -> EditorialOutcome:
        """Save the fixed welcome editorial for last week, if that week is free."""
        week_start, week_end = editorial_week(self._today())
        editorial, created = self._save(
            conn,
            Editorial(title=WELCOME_TITLE, content=WELCOME_CONTENT, week_start=week_start, week_end=week_end),
        )
        return EditorialOutcome(editorial=editorial, created=created)

    def _save(self, conn: Connection, editorial: Editorial) -> Tuple[Editorial, bool]:
        editorial_id = self.editorials.create(conn, editorial)
        if editorial_id is None:
            # Another run claimed the week first
            logger.info("Editorial for week of %s already exists", editorial.week_start)
            return self.editorials.find_by_week(conn, editorial.week_start), False

        logger.info("Saved draft editorial #%d: %s", editorial_id, editorial.title)
        return editorial.model_copy(update={"id": editorial_id}), True
