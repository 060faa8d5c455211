"""Tests for AI-authored article generation."""

import random

import psycopg
import pytest

from aicn.errors import CategoryNotFoundError
from aicn.generation import ARTICLE_TYPES, ArticleGenerator, MockLLMProvider, research_focus_for
from aicn.models import Category

from .conftest import NOW


@pytest.fixture
def generator(article_store, category_store) -> ArticleGenerator:
    return ArticleGenerator(
        MockLLMProvider(),
        articles=article_store,
        categories=category_store,
        rng=random.Random(3),
        generation_delay=0,
        today=lambda: NOW.date(),
    )


class TestGenerate:
    """Test single-article generation."""

    def test_saved_for_review(self, conn, generator, article_store) -> None:
        """Test a generated article is stored in review with its tags."""
        item = generator.generate_for_category(conn, "fraud-detection", "market_insight")

        row = article_store.rows[item.id]
        assert item.category == "fraud-detection"
        assert item.title.startswith("Market Insight: ")
        assert row["status"] == "review"
        assert row["is_ai_generated"] is True
        assert row["source"] == "AI Credit News"
        assert row["category_id"] == 2
        assert row["published_date"] == NOW.date()
        assert article_store.tags[item.id] == ["fraud detection", "ai"]

    def test_research_before_writing(self, conn, generator) -> None:
        """Test the research notes are gathered before the article is written."""
        generator.generate_for_category(conn, "credit-scoring")

        assert [call[0] for call in generator.llm.calls] == ["research", "write"]

    def test_unique_placeholder_urls(self, conn, generator, article_store) -> None:
        """Test every generated article gets its own placeholder URL."""
        first = generator.generate_for_category(conn, "credit-scoring")
        second = generator.generate_for_category(conn, "credit-scoring")

        urls = {article_store.rows[first.id]["url"], article_store.rows[second.id]["url"]}
        assert len(urls) == 2
        assert all(url.startswith("ai-generated-") for url in urls)

    def test_unknown_category(self, conn, generator) -> None:
        """Test an unknown slug raises CategoryNotFoundError."""
        with pytest.raises(CategoryNotFoundError):
            generator.generate_for_category(conn, "crypto")

    def test_unknown_article_type(self, conn, generator) -> None:
        """Test an unknown article type raises ValueError."""
        with pytest.raises(ValueError):
            generator.generate_for_category(conn, "credit-scoring", "listicle")


class TestBatches:
    """Test generation across categories."""

    def test_all_categories(self, conn, generator) -> None:
        """Test one article is generated per category."""
        results = generator.generate_for_all_categories(conn)

        assert [item.category for item in results.generated] == [
            "credit-scoring",
            "fraud-detection",
            "income-employment",
            "regulatory-compliance",
            "lending-automation",
        ]
        assert results.errors == []

    def test_database_error_rolls_back(self, conn, generator, article_store) -> None:
        """Test a failed insert rolls the connection back and the next category still runs."""
        original = article_store.insert_generated

        def insert_generated(conn, article):
            if article.category_id == 1:
                raise psycopg.errors.DataError("value too long for type character varying(500)")
            return original(conn, article)

        article_store.insert_generated = insert_generated

        results = generator.generate_for_all_categories(conn)

        conn.rollback.assert_called_once()
        assert [e.category for e in results.errors] == ["credit-scoring"]
        assert len(results.generated) == 4


class TestResearchFocus:
    """Test research focus lookup."""

    def test_known_category(self) -> None:
        """Test listed categories use their curated focus."""
        focus = research_focus_for(Category(id=1, name="Credit Scoring", slug="credit-scoring"))

        assert focus.name == "Credit Scoring"
        assert len(focus.topics) > 1

    def test_unlisted_category(self) -> None:
        """Test an unlisted category gets a focus derived from its description."""
        category = Category(id=9, name="Collections", slug="collections", description="AI in debt collection")

        focus = research_focus_for(category)

        assert focus.name == "Collections"
        assert focus.topics == ["AI in debt collection"]

    def test_article_types(self) -> None:
        """Test the five article templates are available."""
        assert set(ARTICLE_TYPES) == {
            "trend_analysis",
            "product_launch",
            "market_insight",
            "regulatory_update",
            "future_outlook",
        }
