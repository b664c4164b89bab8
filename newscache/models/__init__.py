"""Data models for the news cache."""

from .article import Article, ArticleView
from .bookmark import Bookmark
from .state import CacheState

__all__ = ["Article", "ArticleView", "Bookmark", "CacheState"]
