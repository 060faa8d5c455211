"""Shared pytest fixtures and in-memory stand-ins for the database stores."""

from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence
from unittest.mock import MagicMock

import pytest

from aicn.db.categories import CategoryMatch, resolve_category
from aicn.models import (
    NON_TERMINAL_STATUSES,
    Article,
    ArticleStatus,
    Category,
    ContentSettings,
    DailyCounts,
    Editorial,
    Source,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class FakeArticleStorage:
    """Dict-backed implementation of the ArticleStorage methods the services call."""

    def __init__(self, categories: Optional[List[Category]] = None) -> None:
        self.rows: Dict[int, Dict] = {}
        self.tags: Dict[int, List[str]] = {}
        self.categories = categories or []
        self.classified: List[Dict] = []
        self._next_id = 1

    def add(self, **fields) -> int:
        """Insert a row directly, filling defaults."""
        article_id = self._next_id
        self._next_id += 1
        row = {
            "id": article_id,
            "title": "Untitled",
            "url": f"https://example.com/{article_id}",
            "source": "Example",
            "summary": None,
            "content": None,
            "category_id": None,
            "relevance_score": None,
            "difficulty_level": None,
            "status": ArticleStatus.PENDING.value,
            "is_ai_generated": False,
            "scraped_date": NOW,
        }
        row.update(fields)
        self.rows[article_id] = row
        return article_id

    def find_by_url(self, conn, url: str) -> Optional[Dict]:
        return next((r for r in self.rows.values() if r["url"] == url), None)

    def find_by_id(self, conn, article_id: int) -> Optional[Dict]:
        return self.rows.get(article_id)

    def insert_pending(self, conn, article: Article) -> Optional[int]:
        if self.find_by_url(conn, article.url):
            return None
        return self.add(
            title=article.title,
            url=article.url,
            source=article.source,
            author=article.author,
            content=article.content,
            summary=article.summary,
            published_date=article.published_date,
            language=article.language,
        )

    def insert_generated(self, conn, article: Article) -> int:
        article_id = self.add(
            title=article.title,
            url=article.url,
            source=article.source,
            content=article.content,
            summary=article.summary,
            category_id=article.category_id,
            status=article.status.value,
            is_ai_generated=True,
            published_date=article.published_date,
        )
        self.tags[article_id] = list(article.tags)
        return article_id

    def apply_classification(self, conn, article_id: int, *, status, relevance_score, category_id,
                             summary, difficulty_level, tags: Sequence[str] = ()) -> None:
        self.classified.append({"id": article_id, "status": status, "tags": list(tags)})
        self.rows[article_id].update(
            status=status.value,
            relevance_score=relevance_score,
            category_id=category_id,
            summary=summary,
            difficulty_level=difficulty_level,
        )
        if tags:
            self.tags[article_id] = list(tags)

    def find_by_status(self, conn, status: ArticleStatus, limit: Optional[int] = None) -> List[Dict]:
        rows = [r for r in self.rows.values() if r["status"] == status.value]
        return rows[:limit] if limit is not None else rows

    def find_queued(self, conn) -> List[Dict]:
        rows = self.find_by_status(conn, ArticleStatus.QUEUED)
        return sorted(rows, key=lambda r: -(r["relevance_score"] or 0))

    def find_pending_review(self, conn) -> List[Dict]:
        return self.find_by_status(conn, ArticleStatus.REVIEW)

    def count_by_status(self, conn, status: ArticleStatus) -> int:
        return len(self.find_by_status(conn, status))

    def status_counts(self, conn) -> Dict[str, int]:
        counts = {s.value: 0 for s in ArticleStatus}
        for row in self.rows.values():
            counts[row["status"]] += 1
        return counts

    def update_status(self, conn, article_id: int, status: ArticleStatus) -> bool:
        if article_id not in self.rows:
            return False
        self.rows[article_id]["status"] = status.value
        return True

    def bulk_update_status(self, conn, ids: Sequence[int], status: ArticleStatus) -> int:
        changed = 0
        for article_id in ids:
            row = self.rows.get(article_id)
            if row and row["status"] in NON_TERMINAL_STATUSES:
                row["status"] = status.value
                changed += 1
        return changed

    def publish_stale_review(self, conn, cutoff: datetime) -> List[Dict]:
        published = []
        for row in self.rows.values():
            if row["status"] == "review" and row["is_ai_generated"] and row["scraped_date"] < cutoff:
                row["status"] = "approved"
                published.append({"id": row["id"], "title": row["title"]})
        return published

    def delete(self, conn, article_id: int) -> bool:
        self.tags.pop(article_id, None)
        return self.rows.pop(article_id, None) is not None

    def find_recent_approved(self, conn, since: date, limit: int = 50) -> List[Dict]:
        def day(row: Dict) -> date:
            return row.get("published_date") or row["scraped_date"].date()

        rows = [r for r in self.rows.values() if r["status"] == "approved" and day(r) >= since]
        return sorted(rows, key=lambda r: (day(r), r["id"]), reverse=True)[:limit]

    def todays_counts(self, conn, today: date) -> DailyCounts:
        todays = [r for r in self.rows.values() if r["scraped_date"].date() == today]
        return DailyCounts(
            scraped=sum(1 for r in todays if r["status"] == "approved" and not r["is_ai_generated"]),
            ai_generated=sum(1 for r in todays if r["is_ai_generated"]),
        )

    def categories_by_recent_count(self, conn, since: datetime) -> List[Dict]:
        def recent(category: Category) -> int:
            return sum(
                1
                for r in self.rows.values()
                if r["category_id"] == category.id and r["status"] == "approved" and r["scraped_date"] >= since
            )

        ordered = sorted(self.categories, key=lambda c: (recent(c), c.id))
        return [{**c.model_dump(), "recent_count": recent(c)} for c in ordered]


class FakeCategoryStore:
    """List-backed CategoryStore."""

    def __init__(self, categories: List[Category]) -> None:
        self.categories = categories

    def find_all(self, conn) -> List[Category]:
        return sorted(self.categories, key=lambda c: c.id)

    def find_by_slug(self, conn, slug: str) -> Optional[Category]:
        return next((c for c in self.categories if c.slug == slug), None)

    def resolve(self, conn, slug: Optional[str]) -> CategoryMatch:
        return resolve_category(slug, self.categories)


class FakeSourceManager:
    """List-backed SourceManager recording scrape stamps."""

    def __init__(self, sources: List[Source]) -> None:
        self.sources = sources
        self.scraped: List[int] = []

    def get_active(self, conn) -> List[Source]:
        return sorted((s for s in self.sources if s.active), key=lambda s: s.name)

    def update_last_scraped(self, conn, source_id: int) -> None:
        self.scraped.append(source_id)


class FakeEditorialStore:
    """Dict-backed EditorialStore keyed by week start."""

    def __init__(self) -> None:
        self.by_week: Dict[date, Editorial] = {}

    def create(self, conn, editorial: Editorial) -> Optional[int]:
        if editorial.week_start in self.by_week:
            return None
        editorial_id = len(self.by_week) + 1
        self.by_week[editorial.week_start] = editorial.model_copy(update={"id": editorial_id})
        return editorial_id

    def find_by_week(self, conn, week_start: date) -> Optional[Editorial]:
        return self.by_week.get(week_start)


class FakeSettingsStore:
    """Settings store returning fixed content settings."""

    def __init__(self, settings: Optional[ContentSettings] = None) -> None:
        self.settings = settings or ContentSettings()

    def get_content_settings(self, conn) -> ContentSettings:
        return self.settings


@pytest.fixture
def conn() -> MagicMock:
    """Connection placeholder; the fakes never touch it."""
    return MagicMock(name="conn")


@pytest.fixture
def categories() -> List[Category]:
    """The five default categories, in ID order."""
    return [
        Category(id=1, name="Credit Scoring", slug="credit-scoring"),
        Category(id=2, name="Fraud Detection", slug="fraud-detection"),
        Category(id=3, name="Income & Employment", slug="income-employment"),
        Category(id=4, name="Regulatory & Compliance", slug="regulatory-compliance"),
        Category(id=5, name="Lending Automation", slug="lending-automation"),
    ]


@pytest.fixture
def article_store(categories: List[Category]) -> FakeArticleStorage:
    return FakeArticleStorage(categories)


@pytest.fixture
def category_store(categories: List[Category]) -> FakeCategoryStore:
    return FakeCategoryStore(categories)


@pytest.fixture
def editorial_store() -> FakeEditorialStore:
    return FakeEditorialStore()


@pytest.fixture
def settings_store() -> FakeSettingsStore:
    return FakeSettingsStore()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def hours_ago():
    """Build timestamps relative to the fixed test clock."""

    def _hours_ago(hours: float) -> datetime:
        return NOW - timedelta(hours=hours)

    return _hours_ago
