"""Tests for the queue and review workflow."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from aicn.errors import ArticleNotFoundError
from aicn.models import ArticleStatus, ContentSettings
from aicn.review import ALL, ReviewWorkflow

from .conftest import NOW, FakeSettingsStore


@pytest.fixture
def workflow(article_store, settings_store) -> ReviewWorkflow:
    return ReviewWorkflow(articles=article_store, settings=settings_store, now=lambda: NOW)


class TestAutoPublish:
    """Test publishing AI articles left in review."""

    def test_publishes_only_stale_ai_articles(self, conn, workflow, article_store, hours_ago) -> None:
        """Test only AI articles older than the threshold are approved."""
        stale = article_store.add(status="review", is_ai_generated=True, scraped_date=hours_ago(49))
        fresh = article_store.add(status="review", is_ai_generated=True, scraped_date=hours_ago(47))
        human = article_store.add(status="review", is_ai_generated=False, scraped_date=hours_ago(72))

        assert workflow.auto_publish_review_articles(conn) == 1
        assert article_store.rows[stale]["status"] == "approved"
        assert article_store.rows[fresh]["status"] == "review"
        assert article_store.rows[human]["status"] == "review"

    def test_explicit_threshold(self, conn, workflow, article_store, hours_ago) -> None:
        """Test a call-level threshold overrides the setting."""
        article_id = article_store.add(status="review", is_ai_generated=True, scraped_date=hours_ago(5))

        assert workflow.auto_publish_review_articles(conn, hours_threshold=4) == 1
        assert article_store.rows[article_id]["status"] == "approved"

    def test_threshold_from_settings(self, conn, article_store, hours_ago) -> None:
        """Test the stored auto_publish_hours setting is the default threshold."""
        workflow = ReviewWorkflow(
            articles=article_store,
            settings=FakeSettingsStore(ContentSettings(auto_publish_hours=2)),
            now=lambda: NOW,
        )
        article_store.add(status="review", is_ai_generated=True, scraped_date=hours_ago(3))

        assert workflow.auto_publish_review_articles(conn) == 1


class TestBulkUpdates:
    """Test bulk approval and rejection."""

    def test_partial_and_unknown_ids(self, conn, workflow, article_store) -> None:
        """Test unknown IDs are ignored and the changed count is returned."""
        first = article_store.add(status="queued")
        second = article_store.add(status="queued")

        assert workflow.bulk_approve(conn, [first, 999]) == 1
        assert article_store.rows[first]["status"] == "approved"
        assert article_store.rows[second]["status"] == "queued"

    def test_approve_all_queued(self, conn, workflow, article_store) -> None:
        """Test "all" approves every queued article and nothing else."""
        queued = [article_store.add(status="queued") for _ in range(3)]
        pending = article_store.add(status="pending")

        assert workflow.bulk_approve(conn, ALL) == 3
        assert all(article_store.rows[i]["status"] == "approved" for i in queued)
        assert article_store.rows[pending]["status"] == "pending"

    def test_terminal_rows_untouched(self, conn, workflow, article_store) -> None:
        """Test bulk updates leave already decided articles alone."""
        approved = article_store.add(status="approved")

        assert workflow.bulk_reject(conn, [approved]) == 0
        assert article_store.rows[approved]["status"] == "approved"

    def test_non_terminal_target_refused(self, conn, workflow) -> None:
        """Test bulk updates only approve or reject."""
        with pytest.raises(ValueError):
            workflow.bulk_update_status(conn, [1], ArticleStatus.QUEUED)


class TestSingleArticle:
    """Test single-article review actions."""

    def test_approve_from_any_status(self, conn, workflow, article_store) -> None:
        """Test an individual approval overrides a rejection."""
        article_id = article_store.add(status="rejected")

        workflow.approve_article(conn, article_id)

        assert article_store.rows[article_id]["status"] == "approved"

    def test_unknown_article(self, conn, workflow) -> None:
        """Test acting on a missing article raises."""
        with pytest.raises(ArticleNotFoundError):
            workflow.approve_article(conn, 404)
        with pytest.raises(ArticleNotFoundError):
            workflow.delete_article(conn, 404)

    def test_delete(self, conn, workflow, article_store) -> None:
        """Test deleting removes the article and its tags."""
        article_id = article_store.add(status="review", is_ai_generated=True)
        article_store.tags[article_id] = ["ai"]

        workflow.delete_article(conn, article_id)

        assert article_id not in article_store.rows
        assert article_id not in article_store.tags

    def test_queue_sorted_by_score(self, conn, workflow, article_store) -> None:
        """Test the queue lists the highest scores first."""
        article_store.add(status="queued", relevance_score=6.5)
        top = article_store.add(status="queued", relevance_score=9.0)

        assert workflow.list_queued(conn)[0]["id"] == top


def test_default_clock_is_utc(conn, settings_store) -> None:
    """Test the stale-review cutoff is taken in UTC when no clock is given."""
    articles = MagicMock()
    articles.publish_stale_review.return_value = []

    ReviewWorkflow(articles=articles, settings=settings_store).auto_publish_review_articles(conn, 48)

    cutoff = articles.publish_stale_review.call_args.args[1]
    assert cutoff.utcoffset() == timedelta(0)
