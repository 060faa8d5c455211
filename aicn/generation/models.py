"""Data models for LLM responses and generation results."""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..models import DifficultyLevel

MAX_TAGS = 5


def _clean_tags(value: Any) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError("tags must be a list")
    return [str(tag).strip() for tag in value if str(tag).strip()][:MAX_TAGS]


def _coerce_difficulty(value: Any) -> str:
    if isinstance(value, str) and value.strip().lower() in DifficultyLevel._value2member_map_:
        return value.strip().lower()
    return DifficultyLevel.INTERMEDIATE.value


class ArticleAnalysis(BaseModel):
    """Full-analysis response for a scraped article."""

    relevance_score: float = Field(..., description="Relevance on a 0-10 scale")
    is_relevant: bool = Field(..., description="Model's own relevance verdict")
    category: str = Field(..., description="Category slug chosen from the list")
    tags: List[str] = Field(default_factory=list, description="3-5 topical tags")
    summary: str = Field(..., description="2-3 sentence summary")
    difficulty_level: DifficultyLevel = Field(DifficultyLevel.INTERMEDIATE)
    reasoning: Optional[str] = Field(None, description="Short explanation")

    @field_validator("relevance_score", mode="before")
    @classmethod
    def clamp_score(cls, v: Any) -> float:
        return min(10.0, max(0.0, float(v)))

    @field_validator("tags", mode="before")
    @classmethod
    def limit_tags(cls, v: Any) -> List[str]:
        return _clean_tags(v)

    @field_validator("difficulty_level", mode="before")
    @classmethod
    def default_difficulty(cls, v: Any) -> str:
        return _coerce_difficulty(v)


class GeneratedArticle(BaseModel):
    """Written article returned by the generation prompt."""

    title: str = Field(..., min_length=1)
    summary: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    difficulty_level: DifficultyLevel = Field(DifficultyLevel.INTERMEDIATE)
    tags: List[str] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def limit_tags(cls, v: Any) -> List[str]:
        return _clean_tags(v)

    @field_validator("difficulty_level", mode="before")
    @classmethod
    def default_difficulty(cls, v: Any) -> str:
        return _coerce_difficulty(v)


class GeneratedEditorial(BaseModel):
    """Weekly editorial returned by the editorial prompt."""

    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)


class ResearchFocus(BaseModel):
    """What the research prompt should cover for a category."""

    name: str
    topics: List[str]
    competitors: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)


class ArticleType(BaseModel):
    """Template for a generated article."""

    key: str
    name: str
    description: str
    min_words: int
    max_words: int


class GeneratedItem(BaseModel):
    """A generated article saved for review."""

    id: int
    title: str
    category: str


class GenerationError(BaseModel):
    """A category whose generation failed."""

    category: str
    error: str


class GenerationResults(BaseModel):
    """Outcome of a batch of generations."""

    generated: List[GeneratedItem] = Field(default_factory=list)
    errors: List[GenerationError] = Field(default_factory=list)
