"""Source model for RSS feed sources."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import DBModel


class Source(DBModel):
    """RSS feed source model."""

    name: str = Field(..., description="Source name")
    url: Optional[str] = Field(None, description="Homepage URL")
    rss_feed: Optional[str] = Field(None, description="RSS feed URL")
    language: str = Field("en", description="Language code of the feed")
    active: bool = Field(True, description="Whether the source is scraped")
    last_scraped: Optional[datetime] = Field(None, description="Last scrape timestamp")
