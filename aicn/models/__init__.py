"""Data models for AI Credit News."""

from .article import (
    NON_TERMINAL_STATUSES,
    Article,
    ArticleStatus,
    DailyCounts,
    DifficultyLevel,
)
from .category import Category, Tag
from .editorial import Editorial, EditorialStatus
from .settings import SETTINGS_DEFAULTS, ContentSettings
from .source import Source

__all__ = [
    "Article",
    "ArticleStatus",
    "DailyCounts",
    "DifficultyLevel",
    "NON_TERMINAL_STATUSES",
    "Category",
    "Editorial",
    "EditorialStatus",
    "Tag",
    "ContentSettings",
    "SETTINGS_DEFAULTS",
    "Source",
]
