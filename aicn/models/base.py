"""Base model class for all database models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DBModel(BaseModel):
    """Base model for all database models."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = Field(None, description="Primary key")
