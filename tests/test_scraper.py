"""Tests for RSS scraping into pending articles."""

from unittest.mock import MagicMock

import httpx
import psycopg
import pytest

from aicn.ingestion import ArticleContent, RSSFetcher, Scraper, parse_feed
from aicn.models import Source

from .conftest import NOW, FakeArticleStorage, FakeSourceManager

BODY = "Lenders are deploying machine learning models to score thin-file applicants. " * 4

FEED = f"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Beta News</title>
    <item>
      <title>AI credit scoring goes mainstream</title>
      <link>https://beta.example.com/ai-credit-scoring</link>
      <pubDate>Sun, 18 Oct 2026 12:00:00 GMT</pubDate>
      <description>{BODY}</description>
    </item>
    <item>
      <title>Guid only item</title>
      <guid isPermaLink="false">beta-guid-42</guid>
      <pubDate>Sun, 18 Oct 2026 10:00:00 GMT</pubDate>
      <description>{BODY}</description>
    </item>
    <item>
      <title>No identity at all</title>
      <description>{BODY}</description>
    </item>
    <item>
      <title>Old news</title>
      <link>https://beta.example.com/old</link>
      <pubDate>Mon, 18 May 2026 12:00:00 GMT</pubDate>
      <description>{BODY}</description>
    </item>
    <item>
      <title>Already stored</title>
      <link>https://beta.example.com/existing</link>
      <pubDate>Sun, 18 Oct 2026 09:00:00 GMT</pubDate>
      <description>{BODY}</description>
    </item>
    <item>
      <title>Short teaser</title>
      <link>https://beta.example.com/teaser</link>
      <pubDate>Sun, 18 Oct 2026 08:00:00 GMT</pubDate>
      <description>Read more &lt;b&gt;inside&lt;/b&gt;</description>
    </item>
  </channel>
</rss>
"""


def handler(request: httpx.Request) -> httpx.Response:
    if request.url.host == "alpha.example.com":
        return httpx.Response(500, text="boom")
    return httpx.Response(200, text=FEED, headers={"Content-Type": "application/rss+xml"})


@pytest.fixture
def sources() -> FakeSourceManager:
    return FakeSourceManager(
        [
            Source(id=1, name="Alpha", rss_feed="https://alpha.example.com/feed"),
            Source(id=2, name="Beta", rss_feed="https://beta.example.com/feed"),
            Source(id=3, name="Gamma", rss_feed="https://gamma.example.com/feed", active=False),
        ]
    )


@pytest.fixture
def article_fetcher() -> MagicMock:
    fetcher = MagicMock()
    fetcher.fetch_article.side_effect = lambda url: ArticleContent(url=url, text="Full text " * 50)
    return fetcher


@pytest.fixture
def scraper(article_store, sources, article_fetcher) -> Scraper:
    return Scraper(
        RSSFetcher(transport=httpx.MockTransport(handler)),
        article_fetcher,
        articles=article_store,
        sources=sources,
        source_delay=0,
        fetch_delay=0,
        now=lambda: NOW,
    )


class TestParseFeed:
    """Test feed parsing."""

    def test_items(self) -> None:
        """Test links, GUIDs and dates are read from the feed."""
        items = parse_feed(FEED, "Beta")

        assert len(items) == 6
        assert items[0].identity == "https://beta.example.com/ai-credit-scoring"
        assert items[0].published.year == 2026
        assert items[1].identity == "beta-guid-42"
        assert items[2].identity is None

    def test_garbage(self) -> None:
        """Test unparseable text raises."""
        with pytest.raises(ValueError):
            parse_feed("this is not a feed <", "Broken")


class TestScraper:
    """Test scraping across sources."""

    def test_run_scrape(self, conn, scraper, article_store, sources, article_fetcher) -> None:
        """Test new items are added, others skipped and a failing feed does not stop the run."""
        article_store.add(url="https://beta.example.com/existing", status="approved")

        summary = scraper.run_scrape(conn, max_age_months=3)

        added_urls = {r["url"] for r in article_store.rows.values() if r["status"] == "pending"}
        assert added_urls == {
            "https://beta.example.com/ai-credit-scoring",
            "beta-guid-42",
            "https://beta.example.com/teaser",
        }
        assert summary.articles_added == 3
        assert summary.articles_skipped == 3
        assert summary.errors == 1
        assert summary.sources_processed == 2
        assert sources.scraped == [1, 2]
        article_fetcher.fetch_article.assert_called_once_with("https://beta.example.com/teaser")

    def test_backfilled_content(self, conn, scraper, article_store) -> None:
        """Test short feed content is replaced by the fetched page text."""
        scraper.run_scrape(conn)

        teaser = article_store.find_by_url(conn, "https://beta.example.com/teaser")
        assert teaser["content"].startswith("Full text")
        assert teaser["summary"] == "Read more inside"

    def test_no_age_limit(self, conn, scraper, article_store) -> None:
        """Test old items are kept when no age limit is given."""
        scraper.run_scrape(conn)

        assert article_store.find_by_url(conn, "https://beta.example.com/old") is not None

    def test_feed_error_reported(self, conn, scraper) -> None:
        """Test a server error is recorded against the source."""
        summary = scraper.run_scrape(conn)

        alpha = next(r for r in summary.results if r.source == "Alpha")
        assert alpha.added == 0
        assert "500" in alpha.error

    def test_database_error_rolls_back(self, conn, categories, article_fetcher) -> None:
        """Test a failed insert rolls the connection back and later sources still scrape."""

        class NulRejectingStorage(FakeArticleStorage):
            def __init__(self, categories):
                super().__init__(categories)
                self.attempts = 0

            def insert_pending(self, conn, article):
                self.attempts += 1
                if self.attempts == 1:
                    raise psycopg.errors.DataError(
                        "A string literal cannot contain NUL (0x00) characters."
                    )
                return super().insert_pending(conn, article)

        def feed_handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text=FEED, headers={"Content-Type": "application/rss+xml"})

        store = NulRejectingStorage(categories)
        scraper = Scraper(
            RSSFetcher(transport=httpx.MockTransport(feed_handler)),
            article_fetcher,
            articles=store,
            sources=FakeSourceManager(
                [
                    Source(id=1, name="Alpha", rss_feed="https://alpha.example.com/feed"),
                    Source(id=2, name="Beta", rss_feed="https://beta.example.com/feed"),
                ]
            ),
            source_delay=0,
            fetch_delay=0,
            now=lambda: NOW,
        )

        summary = scraper.run_scrape(conn)

        conn.rollback.assert_called_once()
        alpha = next(r for r in summary.results if r.source == "Alpha")
        assert "NUL" in alpha.error
        assert summary.errors == 1
        assert summary.sources_processed == 2
        assert store.find_by_url(conn, "https://beta.example.com/ai-credit-scoring") is not None
