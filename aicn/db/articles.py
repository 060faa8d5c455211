"""Article storage and workflow queries."""

from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from psycopg import Connection

from ..models import NON_TERMINAL_STATUSES, Article, ArticleStatus, DailyCounts
from .tags import TagStore

ARTICLE_WITH_CATEGORY = """
    SELECT a.*, c.name AS category_name, c.slug AS category_slug
    FROM articles a
    LEFT JOIN categories c ON a.category_id = c.id
"""


class ArticleStorage:
    """Handle article storage, deduplication and status changes."""

    def __init__(self, tags: Optional[TagStore] = None) -> None:
        """Initialize article storage."""
        self.tags = tags or TagStore()

    def find_by_url(self, conn: Connection, url: str) -> Optional[Dict]:
        """Get an article by its URL."""
        with conn.cursor() as cur:
            cur.execute("SELECT * FROM articles WHERE url = %s", (url,))
            return cur.fetchone()

    def find_by_id(self, conn: Connection, article_id: int) -> Optional[Dict]:
        """Get an article with its category name and slug."""
        with conn.cursor() as cur:
            cur.execute(ARTICLE_WITH_CATEGORY + " WHERE a.id = %s", (article_id,))
            return cur.fetchone()

    def insert_pending(self, conn: Connection, article: Article) -> Optional[int]:
        """
        Insert a scraped article.

        Returns:
            The new article ID, or None when the URL already exists
        """
        with conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO articles (
                    title, url, source, author, published_date,
                    content, summary, status, language, is_ai_generated
                ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, FALSE)
                ON CONFLICT (url) DO NOTHING
                RETURNING id
                """,
                (
                    article.title,
                    article.url,
                    article.source,
                    article.author,
                    article.published_date,
                    article.content,
                    article.summary,
                    ArticleStatus.PENDING.value,
                    article.language,
                ),
            )
            row = cur.fetchone()
        conn.commit()
        return row["id"] if row else None

    def insert_generated(self, conn: Connection, article: Article) -> int:
        """Insert an AI-authored article and its tags in one transaction."""
        with conn.transaction():
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO articles (
                        title, url, source, author, content, summary,
                        category_id, status, difficulty_level, published_date,
                        language, is_ai_generated
                    ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, TRUE)
                    RETURNING id
                    """,
                    (
                        article.title,
                        article.url,
                        article.source,
                        article.author,
                        article.content,
                        article.summary,
                        article.category_id,
                        article.status.value,
                        article.difficulty_level.value if article.difficulty_level else None,
                        article.published_date,
                        article.language,
                    ),
                )
                article_id = cur.fetchone()["id"]
            self.tags.tag_article(conn, article_id, article.tags)
        conn.commit()
        return article_id

    def apply_classification(
        self,
        conn: Connection,
        article_id: int,
        *,
        status: ArticleStatus,
        relevance_score: float,
        category_id: Optional[int],
        summary: Optional[str],
        difficulty_level: Optional[str],
        tags: Sequence[str] = (),
    ) -> None:
        """Store classifier output; the update and tag links commit together."""
        with conn.transaction():
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE articles
                    SET relevance_score = %s,
                        category_id = %s,
                        summary = %s,
                        difficulty_level = %s,
                        status = %s
                    WHERE id = %s
                    """,
                    (
                        relevance_score,
                        category_id,
                        summary,
                        difficulty_level,
                        status.value,
                        article_id,
                    ),
                )
            if tags:
                self.tags.tag_article(conn, article_id, tags)
        conn.commit()

    def find_by_status(
        self,
        conn: Connection,
        status: ArticleStatus,
        limit: Optional[int] = None,
    ) -> List[Dict]:
        """Get articles in a given state, newest publication first."""
        query = ARTICLE_WITH_CATEGORY + """
            WHERE a.status = %s
            ORDER BY a.published_date DESC NULLS LAST, a.scraped_date DESC
        """
        params: list = [status.value]
        if limit is not None:
            query += " LIMIT %s"
            params.append(limit)

        with conn.cursor() as cur:
            cur.execute(query, params)
            return cur.fetchall()

    def find_recent_approved(self, conn: Connection, since: date, limit: int = 50) -> List[Dict]:
        """Get approved articles published (or scraped, if undated) on or after a day."""
        with conn.cursor() as cur:
            cur.execute(
                ARTICLE_WITH_CATEGORY
                + """
                WHERE a.status = 'approved'
                  AND COALESCE(a.published_date, a.scraped_date::date) >= %s
                ORDER BY COALESCE(a.published_date, a.scraped_date::date) DESC, a.id DESC
                LIMIT %s
                """,
                (since, limit),
            )
            return cur.fetchall()

    def find_queued(self, conn: Connection) -> List[Dict]:
        """Get queued articles, most relevant first."""
        with conn.cursor() as cur:
            cur.execute(
                ARTICLE_WITH_CATEGORY
                + """
                WHERE a.status = 'queued'
                ORDER BY a.relevance_score DESC NULLS LAST, a.scraped_date DESC
                """
            )
            return cur.fetchall()

    def find_pending_review(self, conn: Connection) -> List[Dict]:
        """Get articles awaiting human review, newest first."""
        with conn.cursor() as cur:
            cur.execute(
                ARTICLE_WITH_CATEGORY
                + """
                WHERE a.status = 'review'
                ORDER BY a.scraped_date DESC
                """
            )
            return cur.fetchall()

    def count_by_status(self, conn: Connection, status: ArticleStatus) -> int:
        """Count articles in a given state."""
        with conn.cursor() as cur:
            cur.execute(
                "SELECT COUNT(*) AS count FROM articles WHERE status = %s",
                (status.value,),
            )
            return cur.fetchone()["count"]

    def status_counts(self, conn: Connection) -> Dict[str, int]:
        """Count articles per state; absent states count zero."""
        counts = {status.value: 0 for status in ArticleStatus}
        with conn.cursor() as cur:
            cur.execute("SELECT status, COUNT(*) AS count FROM articles GROUP BY status")
            for row in cur.fetchall():
                counts[row["status"]] = row["count"]
        return counts

    def update_status(self, conn: Connection, article_id: int, status: ArticleStatus) -> bool:
        """Set the status of one article. Returns False if it does not exist."""
        with conn.cursor() as cur:
            cur.execute(
                "UPDATE articles SET status = %s WHERE id = %s",
                (status.value, article_id),
            )
            changed = cur.rowcount
        conn.commit()
        return changed > 0

    def bulk_update_status(
        self,
        conn: Connection,
        ids: Sequence[int],
        status: ArticleStatus,
    ) -> int:
        """
        Move every listed non-terminal article to a new status.

        Unknown IDs and articles already approved or rejected are left alone.

        Returns:
            Number of articles changed
        """
        if not ids:
            return 0

        with conn.cursor() as cur:
            cur.execute(
                """
                UPDATE articles
                SET status = %s
                WHERE id = ANY(%s) AND status = ANY(%s)
                """,
                (status.value, list(ids), NON_TERMINAL_STATUSES),
            )
            changed = cur.rowcount
        conn.commit()
        return changed

    def publish_stale_review(self, conn: Connection, cutoff: datetime) -> List[Dict]:
        """Approve AI-authored review articles created before the cutoff."""
        with conn.cursor() as cur:
            cur.execute(
                """
                UPDATE articles
                SET status = 'approved'
                WHERE status = 'review'
                  AND is_ai_generated = TRUE
                  AND scraped_date < %s
                RETURNING id, title
                """,
                (cutoff,),
            )
            published = cur.fetchall()
        conn.commit()
        return published

    def delete(self, conn: Connection, article_id: int) -> bool:
        """Delete an article and its tag links."""
        with conn.transaction():
            with conn.cursor() as cur:
                cur.execute("DELETE FROM article_tags WHERE article_id = %s", (article_id,))
                cur.execute("DELETE FROM articles WHERE id = %s", (article_id,))
                deleted = cur.rowcount
        conn.commit()
        return deleted > 0

    def todays_counts(self, conn: Connection, today: date) -> DailyCounts:
        """Count today's approved scraped articles and AI-authored articles."""
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT
                    COUNT(*) FILTER (
                        WHERE status = 'approved' AND is_ai_generated = FALSE
                    ) AS scraped,
                    COUNT(*) FILTER (WHERE is_ai_generated = TRUE) AS ai_generated
                FROM articles
                WHERE scraped_date::date = %s
                """,
                (today,),
            )
            row = cur.fetchone()
        return DailyCounts(scraped=row["scraped"] or 0, ai_generated=row["ai_generated"] or 0)

    def categories_by_recent_count(self, conn: Connection, since: datetime) -> List[Dict]:
        """Get categories ordered by fewest approved articles since a moment."""
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT c.id, c.slug, c.name, c.description, COUNT(a.id) AS recent_count
                FROM categories c
                LEFT JOIN articles a ON a.category_id = c.id
                    AND a.status = 'approved'
                    AND a.scraped_date >= %s
                GROUP BY c.id
                ORDER BY recent_count ASC, c.id ASC
                """,
                (since,),
            )
            return cur.fetchall()
