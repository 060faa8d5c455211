"""Classification results."""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..db.categories import MatchKind
from ..models import ArticleStatus, DifficultyLevel

APPROVAL_THRESHOLD = 6.0
PREFILTER_REJECT_SCORE = 1.0


class ClassificationResult(BaseModel):
    """Outcome of classifying one article."""

    article_id: int
    title: str
    status: ArticleStatus
    relevance_score: float
    category_id: Optional[int] = None
    category_slug: Optional[str] = None
    match_kind: Optional[MatchKind] = None
    summary: Optional[str] = None
    difficulty_level: Optional[DifficultyLevel] = None
    tags: List[str] = Field(default_factory=list)
    prefiltered: bool = Field(False, description="Rejected by the pre-filter without full analysis")
    reasoning: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.status != ArticleStatus.REJECTED


class ProcessingSummary(BaseModel):
    """Accounting for a batch of classifications."""

    processed: int = 0
    approved: int = 0
    queued: int = 0
    rejected: int = 0
    errors: int = 0
    cancelled: bool = False
    dry_run: bool = False
    results: List[ClassificationResult] = Field(default_factory=list)
