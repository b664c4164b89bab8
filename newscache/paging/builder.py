"""Compose the article and bookmark stores into live paginated views."""

from typing import Callable, FrozenSet, Optional

from ..channel import StateChannel
from ..db import ArticleStore, BookmarkStore, Database
from ..models import ArticleView
from .config import PagingConfig
from .feed import PagedFeed
from .pager import Pager, PagingData
from .source import ArticlePagingSource, BookmarkedPagingSource


class PagedViewBuilder:
    """Build paged feeds over the store, the only data the read path sees."""

    def __init__(
        self,
        db: Database,
        articles: ArticleStore,
        bookmarks: BookmarkStore,
        config: Optional[PagingConfig] = None,
    ) -> None:
        self.db = db
        self.articles = articles
        self.bookmarks = bookmarks
        self.config = config or PagingConfig()

    def paged_view(
        self,
        category: str,
        search_query: str = "",
        bookmarked_ids: Optional[StateChannel[FrozenSet[str]]] = None,
    ) -> PagedFeed:
        """
        Live feed of a category, newest first, annotated with bookmark state.

        ``bookmarked_ids`` is the set used for annotation; when omitted the
        feed follows the bookmark store directly.
        """
        resources = []
        if bookmarked_ids is None:
            live = self.bookmarks.observe_ids()
            resources.append(live)
            bookmarked_ids = live.channel

        def make_pager(
            ids: FrozenSet[str],
            generation: int,
            window: int,
            emit: Callable[[PagingData], None],
        ) -> Pager:
            return Pager(
                self.db,
                lambda: ArticlePagingSource(self.articles, category, search_query),
                lambda article: ArticleView.from_article(article, article.article_id in ids),
                self.config,
                emit,
                generation=generation,
                initial_size=window,
            )

        return PagedFeed(
            ("articles", category, search_query),
            make_pager,
            bookmarked_ids,
            self.config,
            resources=resources,
        )

    def bookmarked_view(self) -> PagedFeed:
        """Live feed of bookmarked articles, most recently bookmarked first."""
        live = self.bookmarks.observe_ids()

        def make_pager(
            ids: FrozenSet[str],
            generation: int,
            window: int,
            emit: Callable[[PagingData], None],
        ) -> Pager:
            return Pager(
                self.db,
                lambda: BookmarkedPagingSource(self.bookmarks),
                lambda article: ArticleView.from_article(article, True),
                self.config,
                emit,
                generation=generation,
                initial_size=window,
            )

        return PagedFeed(
            ("bookmarks",),
            make_pager,
            live.channel,
            self.config,
            resources=[live],
        )
