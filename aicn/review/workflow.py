"""Queue and review workflow for human editors."""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Union

import pendulum
from psycopg import Connection

from ..db.articles import ArticleStorage
from ..db.settings import SettingsStore
from ..errors import ArticleNotFoundError
from ..models import ArticleStatus

logger = logging.getLogger(__name__)

ALL = "all"


class ReviewWorkflow:
    """Approve, reject and publish articles awaiting a decision."""

    def __init__(
        self,
        articles: Optional[ArticleStorage] = None,
        settings: Optional[SettingsStore] = None,
        now: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.articles = articles or ArticleStorage()
        self.settings = settings or SettingsStore()
        self._now = now or (lambda: pendulum.now("UTC"))

    def list_queued(self, conn: Connection) -> List[Dict]:
        return self.articles.find_queued(conn)

    def list_review(self, conn: Connection) -> List[Dict]:
        return self.articles.find_pending_review(conn)

    def status_counts(self, conn: Connection) -> Dict[str, int]:
        return self.articles.status_counts(conn)

    def bulk_update_status(self, conn: Connection, ids: Sequence[int], status: ArticleStatus) -> int:
        """
        Move listed non-terminal articles to approved or rejected.

        Returns:
            Number of articles changed; unknown IDs are ignored
        """
        if not status.is_terminal:
            raise ValueError(f"Bulk updates only approve or reject, not {status.value}")
        changed = self.articles.bulk_update_status(conn, ids, status)
        logger.info("%s %d of %d article(s)", status.value.capitalize(), changed, len(ids))
        return changed

    def bulk_approve(self, conn: Connection, ids: Union[Sequence[int], str]) -> int:
        """Approve the listed articles, or every queued one when given ``"all"``."""
        if ids == ALL:
            ids = [row["id"] for row in self.articles.find_queued(conn)]
        return self.bulk_update_status(conn, ids, ArticleStatus.APPROVED)

    def bulk_reject(self, conn: Connection, ids: Sequence[int]) -> int:
        return self.bulk_update_status(conn, ids, ArticleStatus.REJECTED)

    def _set_status(self, conn: Connection, article_id: int, status: ArticleStatus) -> None:
        if not self.articles.update_status(conn, article_id, status):
            raise ArticleNotFoundError(article_id)
        logger.info("Article #%d -> %s", article_id, status.value)

    def approve_article(self, conn: Connection, article_id: int) -> None:
        """Approve one article regardless of its current status."""
        self._set_status(conn, article_id, ArticleStatus.APPROVED)

    def reject_article(self, conn: Connection, article_id: int) -> None:
        """Reject one article regardless of its current status."""
        self._set_status(conn, article_id, ArticleStatus.REJECTED)

    def delete_article(self, conn: Connection, article_id: int) -> None:
        if not self.articles.delete(conn, article_id):
            raise ArticleNotFoundError(article_id)
        logger.info("Deleted article #%d", article_id)

    def auto_publish_review_articles(
        self,
        conn: Connection,
        hours_threshold: Optional[int] = None,
    ) -> int:
        """
        Approve AI-authored review articles older than the threshold.

        The threshold defaults to the ``auto_publish_hours`` setting.

        Returns:
            Number of articles published
        """
        if hours_threshold is None:
            hours_threshold = self.settings.get_content_settings(conn).auto_publish_hours

        cutoff = self._now() - pendulum.duration(hours=hours_threshold)
        published = self.articles.publish_stale_review(conn, cutoff)

        for row in published:
            logger.info("Auto-published #%d: %s", row["id"], row["title"][:50])
        if published:
            logger.info("Auto-published %d article(s) older than %dh", len(published), hours_threshold)
        return len(published)
