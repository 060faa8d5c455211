"""Data models for ingestion."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class FeedItem(BaseModel):
    """Parsed RSS feed item."""

    title: Optional[str] = Field(None, description="Article title")
    link: Optional[str] = Field(None, description="Article URL")
    guid: Optional[str] = Field(None, description="Feed GUID")
    published: Optional[datetime] = Field(None, description="Publication date")
    summary: Optional[str] = Field(None, description="Feed summary/snippet")
    content: Optional[str] = Field(None, description="Full content when the feed carries it")
    author: Optional[str] = Field(None, description="Author byline")
    source_name: str = Field(..., description="Source name")

    @property
    def identity(self) -> Optional[str]:
        """URL used for deduplication: the link, else the GUID."""
        return self.link or self.guid


class FeedResult(BaseModel):
    """Result of fetching an RSS feed."""

    source_name: str = Field(..., description="Source name")
    source_url: str = Field(..., description="RSS feed URL")
    success: bool = Field(..., description="Whether fetch was successful")
    items: List[FeedItem] = Field(default_factory=list, description="Parsed feed items")
    error: Optional[str] = Field(None, description="Error message if failed")
    item_count: int = Field(0, description="Number of items fetched")


class ArticleContent(BaseModel):
    """Extracted article text."""

    url: str = Field(..., description="Requested URL")
    text: str = Field("", description="Extracted main text")
    title: Optional[str] = Field(None, description="Title found in page metadata")
    fetch_success: bool = Field(True, description="Whether fetch was successful")
    error: Optional[str] = Field(None, description="Error message if failed")


class SourceScrapeResult(BaseModel):
    """Outcome of scraping one source."""

    source: str
    added: int = 0
    skipped: int = 0
    total: int = 0
    error: Optional[str] = None


class ScrapeSummary(BaseModel):
    """Accounting for a full scrape run."""

    timestamp: datetime
    sources_processed: int = 0
    articles_added: int = 0
    articles_skipped: int = 0
    errors: int = 0
    cancelled: bool = False
    results: List[SourceScrapeResult] = Field(default_factory=list)
