"""Explicit construction of the process-wide cache components."""

from dataclasses import dataclass
from typing import List, Optional

from .config import Config
from .coordinator import BookmarksCoordinator, CacheCoordinator
from .db import ArticleStore, BookmarkStore, Database, EvictionPolicy, init_database
from .ingestion import FeedClient
from .paging import PagedViewBuilder, PagingConfig
from .sync import FeedSynchronizer


@dataclass
class Services:
    """Every long-lived component, built once at startup and passed around."""

    db: Database
    articles: ArticleStore
    bookmarks: BookmarkStore
    eviction: EvictionPolicy
    client: FeedClient
    synchronizer: FeedSynchronizer
    builder: PagedViewBuilder
    default_category: str
    categories: List[str]

    @classmethod
    def from_config(cls, config: Config) -> "Services":
        """Open the database, ensure its schema and wire the components."""
        model = config.config
        db = Database(config.database_path, wal=model.database.wal)
        init_database(db)
        articles = ArticleStore(db)
        bookmarks = BookmarkStore(db)
        eviction = EvictionPolicy(articles, keep_limit=model.cache.keep_limit)
        client = FeedClient.from_config(config.get_feed_config())
        return cls(
            db=db,
            articles=articles,
            bookmarks=bookmarks,
            eviction=eviction,
            client=client,
            synchronizer=FeedSynchronizer(client, db, articles, eviction),
            builder=PagedViewBuilder(
                db, articles, bookmarks, PagingConfig.from_settings(model.paging)
            ),
            default_category=model.default_category,
            categories=list(model.categories),
        )

    def home(self, default_category: Optional[str] = None) -> CacheCoordinator:
        return CacheCoordinator(
            self.synchronizer,
            self.builder,
            self.bookmarks,
            default_category=default_category or self.default_category,
            categories=self.categories,
        )

    def bookmarks_view(self) -> BookmarksCoordinator:
        return BookmarksCoordinator(self.builder, self.bookmarks)

    def close(self) -> None:
        self.db.close()
