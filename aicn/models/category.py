"""Category and tag models."""

from typing import Optional

from pydantic import Field

from .base import DBModel


class Category(DBModel):
    """Article category."""

    name: str = Field(..., description="Display name")
    slug: str = Field(..., description="URL slug")
    description: Optional[str] = Field(None, description="Category description")
    icon: Optional[str] = Field(None, description="Display icon")


class Tag(DBModel):
    """Free-form article tag."""

    name: str = Field(..., description="Lower-cased tag name")
