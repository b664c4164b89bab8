import asyncio

import httpx
import pytest

from newscache.db import ArticleStore, EvictionPolicy
from newscache.exceptions import StoreError
from newscache.ingestion import FeedClient, article_id_for
from newscache.sync import CancelToken, FeedSynchronizer

from .helpers import BASE_TIME, feed_transport, failing_transport, make_article, raw_article


def test_refresh_stores_normalized_articles(make_synchronizer, articles):
    feed = {"general": [raw_article(1), raw_article(2, author="", urlToImage=None)]}
    sync = make_synchronizer(feed_transport(feed))

    result = asyncio.run(sync.refresh("general"))

    assert result.success
    assert result.stored == 2
    stored = articles.get(article_id_for("https://news.example.com/2"))
    assert stored.author == "Unknown"
    assert stored.image_url is None
    assert stored.category == "general"
    assert stored.fetched_at == BASE_TIME


def test_refetching_same_urls_does_not_duplicate(make_synchronizer, articles):
    sync = make_synchronizer(feed_transport({"general": [raw_article(n) for n in range(5)]}))
    asyncio.run(sync.refresh("general"))
    asyncio.run(sync.refresh("general"))
    assert articles.count("general") == 5


def test_refresh_evicts_beyond_limit(make_synchronizer, articles):
    articles.upsert([make_article(n, "general", published=n) for n in range(1, 121)])
    sync = make_synchronizer(feed_transport({"general": []}))

    result = asyncio.run(sync.refresh("general"))

    assert result.evicted == 20
    assert articles.count("general") == 100


def test_network_failure_keeps_cached_rows(make_synchronizer, articles):
    articles.upsert([make_article(n, "general") for n in range(30)])
    sync = make_synchronizer(failing_transport())

    result = asyncio.run(sync.refresh("general"))

    assert not result.success
    assert result.error
    assert articles.count("general") == 30


def test_malformed_payload_is_absorbed(make_synchronizer, articles):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"{"))
    result = asyncio.run(make_synchronizer(transport).refresh("general"))
    assert not result.success
    assert articles.count("general") == 0


def test_token_cancelled_during_fetch_skips_write(make_synchronizer, articles):
    token = CancelToken()

    async def scenario():
        gate = asyncio.Event()
        sync = make_synchronizer(feed_transport({"general": [raw_article(1)]}, gate={"general": gate}))
        task = asyncio.create_task(sync.refresh("general", token))
        await asyncio.sleep(0.05)
        token.cancel()
        gate.set()
        return await task

    result = asyncio.run(scenario())
    assert result.cancelled
    assert articles.count("general") == 0


def test_cancellation_during_write_rolls_back_upsert_and_eviction(db, articles):
    token = CancelToken()
    articles.upsert([make_article(n, "general", published=n) for n in range(1, 106)])

    class CancellingEviction(EvictionPolicy):
        def evict(self, category):
            result = super().evict(category)
            token.cancel()
            return result

    client = FeedClient("https://feed.example.com", transport=feed_transport({"general": [raw_article(999)]}))
    sync = FeedSynchronizer(client, db, articles, CancellingEviction(articles))

    result = asyncio.run(sync.refresh("general", token))

    assert result.cancelled
    assert articles.count("general") == 105
    assert articles.get(article_id_for("https://news.example.com/999")) is None


def test_store_failure_propagates(db, eviction):
    class BrokenStore(ArticleStore):
        def upsert(self, articles):
            raise StoreError("disk I/O error")

    broken = BrokenStore(db)
    client = FeedClient("https://feed.example.com", transport=feed_transport({"general": [raw_article(1)]}))
    sync = FeedSynchronizer(client, db, broken, eviction)

    with pytest.raises(StoreError):
        asyncio.run(sync.refresh("general"))
