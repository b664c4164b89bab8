"""Local SQLite store for cached articles and bookmarks."""

from .articles import ArticleStore
from .bookmarks import BookmarkStore
from .connection import Database, InvalidationTracker
from .eviction import DEFAULT_KEEP_LIMIT, EvictionPolicy, EvictionResult
from .init import init_database, validate_connection
from .live import LiveQuery

__all__ = [
    "ArticleStore",
    "BookmarkStore",
    "Database",
    "DEFAULT_KEEP_LIMIT",
    "EvictionPolicy",
    "EvictionResult",
    "InvalidationTracker",
    "LiveQuery",
    "init_database",
    "validate_connection",
]
