"""Live, windowed views over the local store."""

from .builder import PagedViewBuilder
from .config import PagingConfig
from .feed import PagedFeed
from .pager import Pager, PagingData
from .source import ArticlePagingSource, BookmarkedPagingSource, LoadResult, PagingSource

__all__ = [
    "ArticlePagingSource",
    "BookmarkedPagingSource",
    "LoadResult",
    "PagedFeed",
    "PagedViewBuilder",
    "Pager",
    "PagingConfig",
    "PagingData",
    "PagingSource",
]
