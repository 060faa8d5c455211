"""Database management for AI Credit News."""

from .articles import ArticleStorage
from .categories import CategoryMatch, CategoryStore, MatchKind, normalize_slug, resolve_category
from .connection import close_connection_pool, get_connection, get_connection_pool
from .editorials import EditorialStore
from .init import init_database, seed_categories, validate_connection
from .operations import OperationRunStore
from .settings import SettingsStore
from .sources import SourceManager
from .tags import TagStore

__all__ = [
    "ArticleStorage",
    "CategoryMatch",
    "CategoryStore",
    "EditorialStore",
    "MatchKind",
    "OperationRunStore",
    "SettingsStore",
    "SourceManager",
    "TagStore",
    "close_connection_pool",
    "get_connection",
    "get_connection_pool",
    "init_database",
    "normalize_slug",
    "resolve_category",
    "seed_categories",
    "validate_connection",
]
