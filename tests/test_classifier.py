"""Tests for article classification and routing."""

import psycopg
import pytest

from aicn.errors import ArticleNotFoundError
from aicn.generation import MockLLMProvider
from aicn.models import ArticleStatus, DifficultyLevel
from aicn.processing import Classifier

from .conftest import FakeArticleStorage


def make_classifier(article_store, category_store, **llm_options) -> Classifier:
    llm = MockLLMProvider(**llm_options)
    return Classifier(llm, articles=article_store, categories=category_store, article_delay=0)


class TestClassify:
    """Test the approval rule and what a rejection keeps."""

    def test_threshold_score_is_approved(self, conn, article_store, category_store) -> None:
        """Test a relevant article scoring exactly 6 is approved with its tags."""
        article_id = article_store.add(title="AI underwriting at scale", summary="Scraped summary")
        classifier = make_classifier(article_store, category_store, relevance_score=6.0,
                                     category="lending-automation")

        result = classifier.process_article(conn, article_store.rows[article_id])

        assert result.status == ArticleStatus.APPROVED
        row = article_store.rows[article_id]
        assert row["status"] == "approved"
        assert row["category_id"] == 5
        assert row["difficulty_level"] == DifficultyLevel.INTERMEDIATE.value
        assert row["summary"].startswith("Mock summary")
        assert article_store.tags[article_id] == ["ai", "credit"]

    def test_below_threshold_is_rejected(self, conn, article_store, category_store) -> None:
        """Test a relevant article scoring 5.9 is rejected and keeps its scraped summary."""
        article_id = article_store.add(title="Bank opens branch", summary="Scraped summary")
        classifier = make_classifier(article_store, category_store, relevance_score=5.9)

        result = classifier.process_article(conn, article_store.rows[article_id])

        assert result.status == ArticleStatus.REJECTED
        row = article_store.rows[article_id]
        assert row["status"] == "rejected"
        assert row["relevance_score"] == 5.9
        assert row["summary"] == "Scraped summary"
        assert row["difficulty_level"] is None
        assert row["category_id"] == 1
        assert article_id not in article_store.tags

    def test_high_score_but_not_relevant_is_rejected(self, conn, article_store, category_store) -> None:
        """Test the model's own relevance verdict is required for approval."""
        article_id = article_store.add(title="Crypto rally")
        classifier = make_classifier(article_store, category_store, relevance_score=9.0)
        classifier.llm.prefilter = lambda title, source: True
        classifier.llm.relevant = False

        result = classifier.process_article(conn, article_store.rows[article_id])

        assert result.status == ArticleStatus.REJECTED
        assert result.relevance_score == 9.0

    def test_prefilter_rejection_skips_analysis(self, conn, article_store, category_store) -> None:
        """Test an explicit pre-filter NO rejects with score 1 and no full analysis."""
        article_id = article_store.add(title="Celebrity gossip", summary="Scraped summary")
        classifier = make_classifier(article_store, category_store, relevant=False)

        result = classifier.process_article(conn, article_store.rows[article_id])

        assert result.prefiltered
        assert result.relevance_score == 1.0
        assert article_store.rows[article_id]["summary"] == "Scraped summary"
        assert [call[0] for call in classifier.llm.calls] == ["prefilter"]

    def test_queued_target(self, conn, article_store, category_store) -> None:
        """Test accepted articles can be routed to the review queue instead."""
        article_id = article_store.add(title="Fraud models in production")
        classifier = make_classifier(article_store, category_store)

        result = classifier.process_article(conn, article_store.rows[article_id],
                                            target_status=ArticleStatus.QUEUED)

        assert result.status == ArticleStatus.QUEUED
        assert article_store.rows[article_id]["status"] == "queued"
        assert article_store.tags[article_id] == ["ai", "credit"]

    def test_dry_run_writes_nothing(self, conn, article_store, category_store) -> None:
        """Test a dry run classifies without touching storage."""
        article_id = article_store.add(title="Open banking and AI")
        classifier = make_classifier(article_store, category_store)

        result = classifier.process_article(conn, article_store.rows[article_id], dry_run=True)

        assert result.status == ArticleStatus.APPROVED
        assert article_store.rows[article_id]["status"] == "pending"
        assert article_store.classified == []


class TestBatches:
    """Test batch processing and reprocessing."""

    def test_error_counted_and_loop_continues(self, conn, article_store, category_store) -> None:
        """Test one failing article does not stop the batch."""

        class BrokenOnce(MockLLMProvider):
            def analyze_article(self, title, source, content, categories):
                if title == "Broken":
                    raise ValueError("malformed response")
                return super().analyze_article(title, source, content, categories)

        for title in ("First", "Broken", "Third"):
            article_store.add(title=title)
        classifier = Classifier(BrokenOnce(), articles=article_store, categories=category_store,
                                article_delay=0)

        summary = classifier.process_pending(conn, limit=10)

        assert summary.processed == 3
        assert summary.errors == 1
        assert summary.approved == 2
        assert article_store.rows[2]["status"] == "pending"

    def test_database_error_rolls_back(self, conn, article_store, category_store) -> None:
        """Test a failed write rolls the connection back before the next article."""

        class RejectingStorage(FakeArticleStorage):
            def apply_classification(self, conn, article_id, **fields):
                if self.rows[article_id]["title"] == "Bad bytes":
                    raise psycopg.errors.DataError("invalid byte sequence for encoding \"UTF8\": 0x00")
                super().apply_classification(conn, article_id, **fields)

        store = RejectingStorage(article_store.categories)
        for title in ("Bad bytes", "Clean"):
            store.add(title=title)
        classifier = Classifier(MockLLMProvider(), articles=store, categories=category_store,
                                article_delay=0)

        summary = classifier.process_pending(conn)

        conn.rollback.assert_called_once()
        assert summary.errors == 1
        assert summary.approved == 1
        assert store.rows[2]["status"] == "approved"

    def test_limit_respected(self, conn, article_store, category_store) -> None:
        """Test only the requested number of pending articles is processed."""
        for i in range(5):
            article_store.add(title=f"Article {i}")

        summary = make_classifier(article_store, category_store).process_pending(conn, limit=2)

        assert summary.processed == 2
        assert article_store.count_by_status(conn, ArticleStatus.PENDING) == 3

    def test_process_all_queues_everything(self, conn, article_store, category_store) -> None:
        """Test bulk processing sends accepted articles to the queue."""
        for i in range(12):
            article_store.add(title=f"Article {i}")

        summary = make_classifier(article_store, category_store).process_all_pending(conn)

        assert summary.processed == 12
        assert summary.queued == 12
        assert article_store.count_by_status(conn, ArticleStatus.QUEUED) == 12

    def test_process_all_with_nothing_pending(self, conn, article_store, category_store) -> None:
        """Test an empty backlog returns an empty summary without calling the model."""
        classifier = make_classifier(article_store, category_store)

        summary = classifier.process_all_pending(conn)

        assert summary.processed == 0
        assert classifier.llm.calls == []

    def test_reprocess_existing(self, conn, article_store, category_store) -> None:
        """Test a rejected article can be classified again."""
        article_id = article_store.add(title="Second look", status="rejected")

        result = make_classifier(article_store, category_store).reprocess_article(conn, article_id)

        assert result.status == ArticleStatus.APPROVED
        assert article_store.rows[article_id]["status"] == "approved"

    def test_reprocess_unknown(self, conn, article_store, category_store) -> None:
        """Test reprocessing a missing article raises."""
        with pytest.raises(ArticleNotFoundError):
            make_classifier(article_store, category_store).reprocess_article(conn, 999)
