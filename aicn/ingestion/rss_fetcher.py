"""RSS feed fetcher."""

import calendar
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

import feedparser
import httpx

from ..models import Source
from .models import FeedItem, FeedResult

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "AI-Credit-News-Bot/1.0 (Educational News Aggregator)"


def _parse_entry_date(entry: Any) -> Optional[datetime]:
    """Get an entry's publication time as an aware UTC datetime."""
    for field in ("published_parsed", "updated_parsed"):
        parsed = entry.get(field)
        if parsed:
            try:
                return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)
            except (OverflowError, ValueError):
                continue
    return None


def _entry_content(entry: Any) -> Optional[str]:
    contents = entry.get("content")
    if contents:
        return contents[0].get("value")
    return None


def parse_feed(text: str, source_name: str) -> List[FeedItem]:
    """Parse feed XML into items."""
    feed = feedparser.parse(text)
    if feed.bozo and not feed.entries:
        raise ValueError(f"Invalid RSS feed: {feed.bozo_exception}")

    items = []
    for entry in feed.entries:
        items.append(
            FeedItem(
                title=entry.get("title"),
                link=entry.get("link"),
                guid=entry.get("id"),
                published=_parse_entry_date(entry),
                summary=entry.get("summary"),
                content=_entry_content(entry),
                author=entry.get("author"),
                source_name=source_name,
            )
        )
    return items


class RSSFetcher:
    """Fetch and parse RSS feeds."""

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialize RSS fetcher."""
        self.timeout = timeout
        self.user_agent = user_agent
        self.transport = transport

    def fetch_feed(self, source: Source) -> FeedResult:
        """Fetch and parse a single RSS feed. Errors are reported, not raised."""
        feed_url = source.rss_feed or ""
        try:
            with httpx.Client(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
                transport=self.transport,
            ) as client:
                response = client.get(feed_url)
                response.raise_for_status()

            items = parse_feed(response.text, source.name)
            return FeedResult(
                source_name=source.name,
                source_url=feed_url,
                success=True,
                items=items,
                item_count=len(items),
            )

        except httpx.HTTPError as e:
            error = f"HTTP error: {e}"
        except Exception as e:
            error = f"Unexpected error: {e}"

        logger.error("Error fetching RSS from %s: %s", source.name, error)
        return FeedResult(
            source_name=source.name,
            source_url=feed_url,
            success=False,
            error=error,
        )
