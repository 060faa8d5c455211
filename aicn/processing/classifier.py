"""Score, categorize and route pending articles."""

import logging
import time
from typing import TYPE_CHECKING, Dict, List, Optional

from psycopg import Connection

from ..db.articles import ArticleStorage
from ..db.categories import CategoryStore, resolve_category
from ..errors import ArticleNotFoundError
from ..generation.llm_provider import LLMProvider
from ..models import ArticleStatus, Category
from .models import (
    APPROVAL_THRESHOLD,
    PREFILTER_REJECT_SCORE,
    ClassificationResult,
    ProcessingSummary,
)

if TYPE_CHECKING:
    from ..pipeline.operations import OperationTracker

logger = logging.getLogger(__name__)


class Classifier:
    """Run pending articles through the pre-filter and full LLM analysis."""

    def __init__(
        self,
        llm: LLMProvider,
        articles: Optional[ArticleStorage] = None,
        categories: Optional[CategoryStore] = None,
        article_delay: float = 1.0,
    ) -> None:
        """
        Initialize classifier.

        Args:
            llm: LLM provider
            articles: Article storage
            categories: Category storage used for slug resolution
            article_delay: Seconds to wait between articles in a batch
        """
        self.llm = llm
        self.articles = articles or ArticleStorage()
        self.categories = categories or CategoryStore()
        self.article_delay = article_delay

    def classify(self, article: Dict, categories: List[Category]) -> ClassificationResult:
        """
        Classify an article row without writing anything.

        Approved means the model judged it relevant and scored it at least 6.
        """
        title = article["title"]
        source = article.get("source") or ""

        if not self.llm.prefilter(title, source):
            logger.info("Pre-filter rejected: %s", title[:50])
            return ClassificationResult(
                article_id=article["id"],
                title=title,
                status=ArticleStatus.REJECTED,
                relevance_score=PREFILTER_REJECT_SCORE,
                category_id=article.get("category_id"),
                summary=article.get("summary"),
                prefiltered=True,
            )

        content = article.get("content") or article.get("summary") or ""
        analysis = self.llm.analyze_article(title, source, content, categories)
        match = resolve_category(analysis.category, categories)
        approved = analysis.is_relevant and analysis.relevance_score >= APPROVAL_THRESHOLD

        logger.info(
            "Score %.1f/10, relevant=%s, category=%s (%s): %s",
            analysis.relevance_score,
            analysis.is_relevant,
            analysis.category,
            match.kind.value,
            title[:50],
        )

        if approved:
            return ClassificationResult(
                article_id=article["id"],
                title=title,
                status=ArticleStatus.APPROVED,
                relevance_score=analysis.relevance_score,
                category_id=match.category_id,
                category_slug=match.category.slug if match.category else None,
                match_kind=match.kind,
                summary=analysis.summary,
                difficulty_level=analysis.difficulty_level,
                tags=analysis.tags,
                reasoning=analysis.reasoning,
            )

        return ClassificationResult(
            article_id=article["id"],
            title=title,
            status=ArticleStatus.REJECTED,
            relevance_score=analysis.relevance_score,
            category_id=match.category_id,
            category_slug=match.category.slug if match.category else None,
            match_kind=match.kind,
            summary=article.get("summary"),
            reasoning=analysis.reasoning,
        )

    def _save(self, conn: Connection, result: ClassificationResult, status: ArticleStatus) -> None:
        self.articles.apply_classification(
            conn,
            result.article_id,
            status=status,
            relevance_score=result.relevance_score,
            category_id=result.category_id,
            summary=result.summary,
            difficulty_level=result.difficulty_level.value if result.difficulty_level else None,
            tags=result.tags if result.accepted else (),
        )

    def process_article(
        self,
        conn: Connection,
        article: Dict,
        target_status: ArticleStatus = ArticleStatus.APPROVED,
        dry_run: bool = False,
        categories: Optional[List[Category]] = None,
    ) -> ClassificationResult:
        """
        Classify one article and store the outcome.

        Accepted articles go to ``target_status`` (approved or queued);
        rejected ones keep their scraped summary. Errors propagate.
        """
        if categories is None:
            categories = self.categories.find_all(conn)

        result = self.classify(article, categories)
        if result.accepted and target_status != ArticleStatus.APPROVED:
            result.status = target_status

        if dry_run:
            logger.info("[DRY RUN] Would update article #%d -> %s", result.article_id, result.status.value)
        else:
            self._save(conn, result, result.status)
            logger.info("Updated article #%d -> %s", result.article_id, result.status.value)
        return result

    def process_pending(
        self,
        conn: Connection,
        limit: Optional[int] = 10,
        target_status: ArticleStatus = ArticleStatus.APPROVED,
        dry_run: bool = False,
        tracker: Optional["OperationTracker"] = None,
    ) -> ProcessingSummary:
        """Classify pending articles, continuing past per-article failures."""
        summary = ProcessingSummary(dry_run=dry_run)
        pending = self.articles.find_by_status(conn, ArticleStatus.PENDING, limit)
        categories = self.categories.find_all(conn)

        logger.info("Found %d pending articles to process", len(pending))
        if tracker:
            tracker.update_processing(articles_to_process=len(pending), articles_processed=0)
            tracker.log(f"Found {len(pending)} pending articles to process")

        for index, article in enumerate(pending):
            if tracker and not tracker.checkpoint():
                summary.cancelled = True
                tracker.log("Processing cancelled by user")
                break
            if tracker:
                tracker.update_processing(current_article=article["title"][:50])

            try:
                result = self.process_article(conn, article, target_status, dry_run, categories)
            except Exception as e:
                conn.rollback()
                logger.error("Error processing article #%s: %s", article["id"], e)
                summary.errors += 1
                if tracker:
                    tracker.log(f"Error: {article['title'][:40]}...")
            else:
                summary.results.append(result)
                if result.status == ArticleStatus.APPROVED:
                    summary.approved += 1
                elif result.status == ArticleStatus.REJECTED:
                    summary.rejected += 1
                else:
                    summary.queued += 1
                if tracker:
                    label = "Rejected" if not result.accepted else result.status.value.capitalize()
                    tracker.log(f"{label}: {article['title'][:40]}...")

            summary.processed += 1
            if tracker:
                tracker.update_processing(
                    articles_processed=summary.processed,
                    articles_approved=summary.approved,
                    articles_rejected=summary.rejected,
                    articles_queued=summary.queued,
                    errors=summary.errors,
                )

            if index < len(pending) - 1:
                time.sleep(self.article_delay)

        logger.info(
            "Processing complete: %d approved, %d queued, %d rejected, %d errors",
            summary.approved,
            summary.queued,
            summary.rejected,
            summary.errors,
        )
        if tracker:
            tracker.log(
                f"Processing complete: {summary.approved + summary.queued} accepted, "
                f"{summary.rejected} rejected"
            )
        return summary

    def process_all_pending(
        self,
        conn: Connection,
        tracker: Optional["OperationTracker"] = None,
    ) -> ProcessingSummary:
        """Classify the whole pending backlog, sending accepted articles to the queue."""
        pending_count = self.articles.count_by_status(conn, ArticleStatus.PENDING)
        logger.info("Bulk processing %d pending articles", pending_count)

        if pending_count == 0:
            if tracker:
                tracker.log("No pending articles to process")
            return ProcessingSummary()

        return self.process_pending(
            conn,
            limit=pending_count,
            target_status=ArticleStatus.QUEUED,
            tracker=tracker,
        )

    def reprocess_article(self, conn: Connection, article_id: int) -> ClassificationResult:
        """
        Classify one article again regardless of its current status.

        Raises:
            ArticleNotFoundError: if the article does not exist
        """
        article = self.articles.find_by_id(conn, article_id)
        if article is None:
            raise ArticleNotFoundError(article_id)
        return self.process_article(conn, article)
