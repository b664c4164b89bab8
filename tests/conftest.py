from pathlib import Path

import pytest

from newscache.db import ArticleStore, BookmarkStore, Database, EvictionPolicy, init_database
from newscache.ingestion import FeedClient
from newscache.paging import PagedViewBuilder, PagingConfig
from newscache.sync import FeedSynchronizer

from .helpers import BASE_TIME


@pytest.fixture
def db(tmp_path: Path):
    database = Database(tmp_path / "news.db")
    init_database(database)
    yield database
    database.close()


@pytest.fixture
def articles(db):
    return ArticleStore(db)


@pytest.fixture
def bookmarks(db):
    return BookmarkStore(db)


@pytest.fixture
def eviction(articles):
    return EvictionPolicy(articles, keep_limit=100)


@pytest.fixture
def builder(db, articles, bookmarks):
    return PagedViewBuilder(db, articles, bookmarks, PagingConfig(page_size=5, prefetch_distance=2))


@pytest.fixture
def make_synchronizer(db, articles, eviction):
    """Build a synchronizer around an httpx transport."""

    def factory(transport, api_key=None):
        client = FeedClient("https://feed.example.com", api_key=api_key, transport=transport)
        return FeedSynchronizer(client, db, articles, eviction, clock=lambda: BASE_TIME)

    return factory
