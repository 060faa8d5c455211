"""Category storage and slug resolution."""

import logging
import re
from enum import Enum
from typing import List, Optional

from psycopg import Connection
from pydantic import BaseModel

from ..models import Category

logger = logging.getLogger(__name__)


class MatchKind(str, Enum):
    """How a category was resolved from an LLM-provided slug."""

    EXACT = "exact"
    NORMALIZED = "normalized"
    FUZZY = "fuzzy"
    DEFAULT = "default"


class CategoryMatch(BaseModel):
    """Result of resolving a slug against the live category table."""

    category: Optional[Category] = None
    kind: MatchKind
    requested: Optional[str] = None

    @property
    def is_confident(self) -> bool:
        return self.kind in (MatchKind.EXACT, MatchKind.NORMALIZED)

    @property
    def category_id(self) -> Optional[int]:
        return self.category.id if self.category else None


def normalize_slug(slug: str) -> str:
    """Lower-case a slug and collapse non-alphanumeric runs to single dashes."""
    return re.sub(r"-+", "-", re.sub(r"[^a-z0-9]", "-", slug.lower()))


def resolve_category(slug: Optional[str], categories: List[Category]) -> CategoryMatch:
    """
    Resolve a slug with precedence exact, normalized, fuzzy, default.

    Fuzzy matching walks categories in ID order and takes the first whose slug
    contains or is contained in the normalized slug, or shares a dash-separated
    word with it. The default is the category with the lowest ID.
    """
    ordered = sorted(categories, key=lambda c: c.id or 0)

    if slug:
        for category in ordered:
            if category.slug == slug:
                return CategoryMatch(category=category, kind=MatchKind.EXACT, requested=slug)

        normalized = normalize_slug(slug)
        for category in ordered:
            if category.slug == normalized:
                return CategoryMatch(category=category, kind=MatchKind.NORMALIZED, requested=slug)

        search_words = set(normalized.split("-")) - {""}
        for category in ordered:
            candidate = category.slug.lower()
            if candidate in normalized or normalized in candidate:
                return CategoryMatch(category=category, kind=MatchKind.FUZZY, requested=slug)
            if search_words & set(candidate.split("-")):
                return CategoryMatch(category=category, kind=MatchKind.FUZZY, requested=slug)

    default = ordered[0] if ordered else None
    logger.warning(
        "No category matches %r; falling back to %s",
        slug,
        default.slug if default else "no category",
    )
    return CategoryMatch(category=default, kind=MatchKind.DEFAULT, requested=slug)


class CategoryStore:
    """Manage categories in database."""

    def find_all(self, conn: Connection) -> List[Category]:
        """Get all categories in ID order."""
        with conn.cursor() as cur:
            cur.execute("SELECT * FROM categories ORDER BY id")
            return [Category(**row) for row in cur.fetchall()]

    def find_by_slug(self, conn: Connection, slug: str) -> Optional[Category]:
        """Get a category by exact slug."""
        with conn.cursor() as cur:
            cur.execute("SELECT * FROM categories WHERE slug = %s", (slug,))
            row = cur.fetchone()
        return Category(**row) if row else None

    def resolve(self, conn: Connection, slug: Optional[str]) -> CategoryMatch:
        """Resolve an LLM-provided slug against the live category table."""
        return resolve_category(slug, self.find_all(conn))
