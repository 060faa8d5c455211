"""Scrape active sources into pending articles."""

import html
import logging
import re
import time
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Optional

import pendulum
from psycopg import Connection

from ..db.articles import ArticleStorage
from ..db.sources import SourceManager
from ..models import Article, ArticleStatus, Source
from .article_fetcher import ArticleFetcher
from .models import FeedItem, ScrapeSummary, SourceScrapeResult
from .rss_fetcher import RSSFetcher

if TYPE_CHECKING:
    from ..pipeline.operations import OperationTracker

logger = logging.getLogger(__name__)

HOURS_PER_MONTH = 24 * 30
SUMMARY_CHARS = 300

_TAG_RE = re.compile(r"<[^>]+>")


def strip_html(text: str) -> str:
    """Reduce a feed HTML fragment to plain text."""
    return " ".join(html.unescape(_TAG_RE.sub(" ", text)).split())


class Scraper:
    """Iterate active sources and insert new feed items as pending articles."""

    def __init__(
        self,
        rss_fetcher: RSSFetcher,
        article_fetcher: ArticleFetcher,
        articles: Optional[ArticleStorage] = None,
        sources: Optional[SourceManager] = None,
        items_per_source: int = 20,
        min_content_chars: int = 200,
        max_content_chars: int = 10000,
        source_delay: float = 2.0,
        fetch_delay: float = 1.0,
        now: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Initialize scraper.

        Args:
            rss_fetcher: Feed fetcher
            article_fetcher: Full-text fetcher used when feed content is short
            articles: Article storage
            sources: Source registry
            items_per_source: Max feed items considered per source
            min_content_chars: Feed content shorter than this triggers a backfill
            max_content_chars: Stored content is truncated to this length
            source_delay: Seconds to wait between sources
            fetch_delay: Seconds to wait after each full-text fetch
            now: Clock returning an aware datetime
        """
        self.rss_fetcher = rss_fetcher
        self.article_fetcher = article_fetcher
        self.articles = articles or ArticleStorage()
        self.sources = sources or SourceManager()
        self.items_per_source = items_per_source
        self.min_content_chars = min_content_chars
        self.max_content_chars = max_content_chars
        self.source_delay = source_delay
        self.fetch_delay = fetch_delay
        self._now = now or (lambda: pendulum.now("UTC"))

    def _is_too_old(
        self,
        published: datetime,
        max_age_hours: Optional[float],
        max_age_months: Optional[float],
    ) -> bool:
        hours_ago = (self._now() - published).total_seconds() / 3600
        if max_age_hours and hours_ago > max_age_hours:
            return True
        if max_age_months and hours_ago / HOURS_PER_MONTH > max_age_months:
            return True
        return False

    def process_item(
        self,
        conn: Connection,
        item: FeedItem,
        source: Source,
        max_age_hours: Optional[float] = None,
        max_age_months: Optional[float] = None,
    ) -> Optional[int]:
        """
        Save a feed item as a pending article if it is new.

        Returns:
            The new article ID, or None if the item was skipped
        """
        url = item.identity
        if not url:
            return None

        title = item.title or "Untitled"
        if self.articles.find_by_url(conn, url):
            logger.debug("Skipping (exists): %s", title[:50])
            return None

        published = item.published
        if published is None:
            published = self._now()
        elif self._is_too_old(published, max_age_hours, max_age_months):
            logger.debug("Skipping (too old): %s", title[:50])
            return None

        snippet = strip_html(item.summary) if item.summary else ""
        content = strip_html(item.content) if item.content else snippet

        if len(content) < self.min_content_chars:
            logger.info("Fetching full content for: %s", title[:40])
            fetched = self.article_fetcher.fetch_article(url)
            if fetched.fetch_success and len(fetched.text) > len(content):
                content = fetched.text
            time.sleep(self.fetch_delay)

        if len(content) > self.max_content_chars:
            content = content[: self.max_content_chars] + "..."

        article = Article(
            title=title,
            url=url,
            source=source.name,
            author=item.author,
            published_date=published.date(),
            content=content,
            summary=snippet or content[:SUMMARY_CHARS],
            status=ArticleStatus.PENDING,
            language=source.language or "en",
        )

        article_id = self.articles.insert_pending(conn, article)
        if article_id is None:
            logger.debug("Skipping (duplicate URL): %s", title[:50])
            return None

        logger.info("Added: %s", title[:50])
        return article_id

    def scrape_source(
        self,
        conn: Connection,
        source: Source,
        max_age_hours: Optional[float] = None,
        max_age_months: Optional[float] = None,
        tracker: Optional["OperationTracker"] = None,
    ) -> SourceScrapeResult:
        """Scrape one source and stamp it as scraped."""
        logger.info("Scraping: %s", source.name)
        feed = self.rss_fetcher.fetch_feed(source)
        result = SourceScrapeResult(source=source.name, total=feed.item_count, error=feed.error)

        for item in feed.items[: self.items_per_source]:
            if tracker and not tracker.checkpoint():
                break
            if self.process_item(conn, item, source, max_age_hours, max_age_months):
                result.added += 1
            else:
                result.skipped += 1

        self.sources.update_last_scraped(conn, source.id)
        return result

    def run_scrape(
        self,
        conn: Connection,
        max_age_hours: Optional[float] = None,
        max_age_months: Optional[float] = None,
        tracker: Optional["OperationTracker"] = None,
    ) -> ScrapeSummary:
        """Scrape every active source, continuing past per-source failures."""
        summary = ScrapeSummary(timestamp=self._now())

        sources = self.sources.get_active(conn)
        logger.info("Found %d active sources", len(sources))
        if tracker:
            tracker.update_scraping(total_sources=len(sources), sources_processed=0)
            tracker.log(f"Found {len(sources)} active RSS sources")

        for index, source in enumerate(sources):
            if tracker and not tracker.checkpoint():
                summary.cancelled = True
                break

            if not source.rss_feed:
                logger.info("Skipping %s - no RSS feed configured", source.name)
                continue

            if tracker:
                tracker.update_scraping(current_source=source.name)
                tracker.log(f"Scraping: {source.name}")

            try:
                result = self.scrape_source(conn, source, max_age_hours, max_age_months, tracker)
            except Exception as e:
                conn.rollback()
                logger.error("Error scraping %s: %s", source.name, e)
                result = SourceScrapeResult(source=source.name, error=str(e))

            summary.results.append(result)
            summary.sources_processed += 1
            summary.articles_added += result.added
            summary.articles_skipped += result.skipped
            if result.error:
                summary.errors += 1
                if tracker:
                    tracker.log(f"Error: {source.name} - {result.error}")

            if tracker:
                tracker.update_scraping(
                    sources_processed=summary.sources_processed,
                    articles_found=summary.articles_added + summary.articles_skipped,
                    articles_added=summary.articles_added,
                    articles_skipped=summary.articles_skipped,
                    source_errors=summary.errors,
                )

            if index < len(sources) - 1:
                time.sleep(self.source_delay)

        if tracker and tracker.is_cancel_requested():
            summary.cancelled = True

        logger.info(
            "Scrape complete: %d added, %d skipped, %d errors",
            summary.articles_added,
            summary.articles_skipped,
            summary.errors,
        )
        if tracker:
            tracker.log(
                f"Scrape complete: {summary.articles_added} added, "
                f"{summary.articles_skipped} skipped, {summary.errors} errors"
            )
        return summary
