"""Weekly editorial model."""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .base import DBModel


class EditorialStatus(str, Enum):
    """Publication state of an editorial."""

    DRAFT = "draft"
    PUBLISHED = "published"


class Editorial(DBModel):
    """Editorial covering one Monday-to-Sunday week."""

    title: str = Field(..., description="Headline")
    content: str = Field(..., description="Body in Markdown")
    week_start: date = Field(..., description="Monday of the covered week")
    week_end: date = Field(..., description="Sunday of the covered week")
    status: EditorialStatus = Field(EditorialStatus.DRAFT, description="Publication state")
    ai_generated_at: Optional[datetime] = Field(None, description="When the text was generated")
    published_at: Optional[datetime] = Field(None, description="When it was published")
    created_at: Optional[datetime] = Field(None, description="Row creation time")
