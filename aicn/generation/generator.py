"""AI-authored article generation."""

import logging
import random
import time
import uuid
from datetime import date
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence

import pendulum
from psycopg import Connection

from ..db.articles import ArticleStorage
from ..db.categories import CategoryStore
from ..errors import CategoryNotFoundError
from ..models import Article, ArticleStatus, Category
from .llm_provider import LLMProvider
from .models import ArticleType, GeneratedItem, GenerationError, GenerationResults
from .prompts import ARTICLE_TYPES, PUBLICATION, research_focus_for

if TYPE_CHECKING:
    from ..pipeline.operations import OperationTracker

logger = logging.getLogger(__name__)


def placeholder_url() -> str:
    """Unique URL for an article that has no upstream page."""
    return f"ai-generated-{uuid.uuid4().hex}"


class ArticleGenerator:
    """Research and write original articles, saved for human review."""

    def __init__(
        self,
        llm: LLMProvider,
        articles: Optional[ArticleStorage] = None,
        categories: Optional[CategoryStore] = None,
        rng: Optional[random.Random] = None,
        generation_delay: float = 2.0,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        """
        Initialize generator.

        Args:
            llm: LLM provider used for research and writing
            articles: Article storage
            categories: Category storage
            rng: Random source for article type and topic selection
            generation_delay: Seconds to wait between categories in a batch
            today: Clock returning the publication date
        """
        self.llm = llm
        self.articles = articles or ArticleStorage()
        self.categories = categories or CategoryStore()
        self.rng = rng or random.Random()
        self.generation_delay = generation_delay
        self._today = today or (lambda: pendulum.now("UTC").date())

    def choose_article_type(self) -> ArticleType:
        return self.rng.choice(list(ARTICLE_TYPES.values()))

    def generate(
        self,
        conn: Connection,
        category: Category,
        article_type: Optional[ArticleType] = None,
    ) -> GeneratedItem:
        """Research, write and save one article for a category."""
        article_type = article_type or self.choose_article_type()
        focus = research_focus_for(category)
        primary_topic = self.rng.choice(focus.topics)

        logger.info("Generating %s for %s: %s", article_type.name, category.slug, primary_topic)
        notes = self.llm.research_topic(focus, primary_topic, article_type)
        written = self.llm.write_article(focus, primary_topic, article_type, notes)

        article = Article(
            url=placeholder_url(),
            title=written.title,
            source=PUBLICATION,
            author=f"{PUBLICATION} Editorial Team",
            content=written.content,
            summary=written.summary,
            category_id=category.id,
            difficulty_level=written.difficulty_level,
            status=ArticleStatus.REVIEW,
            is_ai_generated=True,
            published_date=self._today(),
            tags=written.tags,
        )
        article_id = self.articles.insert_generated(conn, article)
        logger.info("Saved generated article #%d: %s", article_id, written.title)
        return GeneratedItem(id=article_id, title=written.title, category=category.slug)

    def generate_for_category(
        self,
        conn: Connection,
        category_slug: str,
        article_type: Optional[str] = None,
    ) -> GeneratedItem:
        """
        Generate one article for a category slug.

        Raises:
            CategoryNotFoundError: if no category has the slug
            ValueError: if the article type is unknown
        """
        category = self.categories.find_by_slug(conn, category_slug)
        if category is None:
            raise CategoryNotFoundError(f"Category not found: {category_slug}")

        chosen = None
        if article_type is not None:
            if article_type not in ARTICLE_TYPES:
                raise ValueError(f"Unknown article type: {article_type}")
            chosen = ARTICLE_TYPES[article_type]

        return self.generate(conn, category, chosen)

    def generate_for_categories(
        self,
        conn: Connection,
        categories: Sequence[Category],
        tracker: Optional["OperationTracker"] = None,
    ) -> GenerationResults:
        """Generate one article per category, continuing past failures."""
        results = GenerationResults()

        for index, category in enumerate(categories):
            if tracker and not tracker.checkpoint():
                break
            if tracker:
                tracker.update_ai(current_category=category.name)
                tracker.log(f"Generating article for: {category.name}")

            try:
                results.generated.append(self.generate(conn, category))
            except Exception as e:
                conn.rollback()
                logger.error("Error generating article for %s: %s", category.slug, e)
                results.errors.append(GenerationError(category=category.slug, error=str(e)))

            if tracker:
                tracker.update_ai(generated=len(results.generated), errors=len(results.errors))

            if index < len(categories) - 1:
                time.sleep(self.generation_delay)

        return results

    def generate_for_all_categories(
        self,
        conn: Connection,
        tracker: Optional["OperationTracker"] = None,
    ) -> GenerationResults:
        """Generate one article for every category."""
        categories: List[Category] = self.categories.find_all(conn)
        return self.generate_for_categories(conn, categories, tracker)
