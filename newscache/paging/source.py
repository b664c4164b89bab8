"""Paging sources: offset-keyed loaders over one store query."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import FrozenSet, List, Optional

from ..db import ArticleStore, BookmarkStore
from ..models import Article


@dataclass(frozen=True)
class LoadResult:
    """One loaded page."""

    items: List[Article]
    offset: int
    next_offset: Optional[int]

    @property
    def end_reached(self) -> bool:
        return self.next_offset is None


class PagingSource(ABC):
    """Loads pages of one query. Replaced, never mutated, when data changes."""

    # Tables whose changes invalidate this source
    tables: FrozenSet[str] = frozenset()

    def load(self, offset: int, limit: int) -> LoadResult:
        items = self.fetch(offset, limit)
        next_offset = offset + len(items) if len(items) >= limit else None
        return LoadResult(items=items, offset=offset, next_offset=next_offset)

    @abstractmethod
    def fetch(self, offset: int, limit: int) -> List[Article]:
        """Fetch rows ``offset`` to ``offset + limit``."""


class ArticlePagingSource(PagingSource):
    """Category feed, newest first, optionally filtered by a search query."""

    tables = frozenset({"articles"})

    def __init__(self, store: ArticleStore, category: str, search_query: str = "") -> None:
        self.store = store
        self.category = category
        self.search_query = search_query

    def fetch(self, offset: int, limit: int) -> List[Article]:
        return self.store.query_page(self.category, self.search_query, offset, limit)


class BookmarkedPagingSource(PagingSource):
    """Bookmarked articles, most recently bookmarked first."""

    tables = frozenset({"articles", "bookmarks"})

    def __init__(self, store: BookmarkStore) -> None:
        self.store = store

    def fetch(self, offset: int, limit: int) -> List[Article]:
        return self.store.bookmarked_articles_page(offset, limit)
