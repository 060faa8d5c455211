"""RSS ingestion, article fetching and scraping."""

from .article_fetcher import ArticleFetcher
from .models import ArticleContent, FeedItem, FeedResult, ScrapeSummary, SourceScrapeResult
from .rss_fetcher import RSSFetcher, parse_feed
from .scraper import Scraper

__all__ = [
    "ArticleContent",
    "ArticleFetcher",
    "FeedItem",
    "FeedResult",
    "RSSFetcher",
    "ScrapeSummary",
    "Scraper",
    "SourceScrapeResult",
    "parse_feed",
]
