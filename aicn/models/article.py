"""Article model and workflow states."""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .base import DBModel


class ArticleStatus(str, Enum):
    """Workflow state of an article."""

    PENDING = "pending"
    QUEUED = "queued"
    REVIEW = "review"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (ArticleStatus.APPROVED, ArticleStatus.REJECTED)


NON_TERMINAL_STATUSES = [s.value for s in ArticleStatus if not s.is_terminal]


class DifficultyLevel(str, Enum):
    """Reader difficulty tier."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Article(DBModel):
    """Article model."""

    url: str = Field(..., description="Article URL, unique")
    title: str = Field(..., description="Article title")
    source: Optional[str] = Field(None, description="Source name")
    author: Optional[str] = Field(None, description="Author byline")
    content: Optional[str] = Field(None, description="Raw body text")
    summary: Optional[str] = Field(None, description="Short summary")
    language: str = Field("en", description="Original language code")
    relevance_score: Optional[float] = Field(None, description="Relevance 0-10")
    category_id: Optional[int] = Field(None, description="Foreign key to categories")
    difficulty_level: Optional[DifficultyLevel] = Field(None, description="Difficulty tier")
    status: ArticleStatus = Field(ArticleStatus.PENDING, description="Workflow state")
    is_ai_generated: bool = Field(False, description="Whether the article was AI-authored")
    published_date: Optional[date] = Field(None, description="Publication date (may be backdated)")
    scraped_date: Optional[datetime] = Field(None, description="When the article was created")
    tags: List[str] = Field(default_factory=list, description="Tag names")
    view_count: int = Field(0, description="Page views")
    helpful_count: int = Field(0, description="Helpful votes")
    not_helpful_count: int = Field(0, description="Not helpful votes")


class DailyCounts(BaseModel):
    """Today's article counts split by provenance."""

    scraped: int = Field(0, description="Approved scraped articles created today")
    ai_generated: int = Field(0, description="AI-authored articles created today, any status")

    @property
    def total(self) -> int:
        return self.scraped + self.ai_generated
