import asyncio

import pytest

from newscache.coordinator import (
    BookmarksCoordinator,
    BookmarkToggled,
    CacheCoordinator,
    CategorySelected,
    ErrorDismissed,
    RetryClicked,
    SearchQueryChanged,
)
from newscache.db import BookmarkStore, Database
from newscache.exceptions import StoreError

from .helpers import failing_transport, feed_transport, make_article, raw_article, wait_until

CATEGORIES = ["general", "sports", "tech"]


class BrokenBookmarkStore(BookmarkStore):
    def add(self, article_id, bookmarked_at=None):
        raise StoreError("disk I/O error")


def _coordinator(make_synchronizer, builder, bookmarks, transport):
    return CacheCoordinator(
        make_synchronizer(transport),
        builder,
        bookmarks,
        default_category="general",
        categories=CATEGORIES,
    )


def test_refresh_fills_the_feed(make_synchronizer, builder, bookmarks):
    transport = feed_transport({"general": [raw_article(1), raw_article(2)]})

    async def scenario():
        coordinator = await _coordinator(make_synchronizer, builder, bookmarks, transport).start()
        try:
            await coordinator.wait_for_refresh()
            state = coordinator.current_state
            assert not state.is_refreshing
            assert state.error_message is None
            await wait_until(lambda: len(coordinator.feed.snapshot) == 2)
        finally:
            await coordinator.close()

    asyncio.run(scenario())


def test_failed_refresh_keeps_cached_rows(make_synchronizer, builder, articles, bookmarks):
    articles.upsert([make_article(n, "general") for n in range(1, 31)])

    async def scenario():
        coordinator = _coordinator(make_synchronizer, builder, bookmarks, failing_transport())
        await coordinator.start()
        try:
            # Cached rows are visible before the refresh settles
            assert len(coordinator.feed.snapshot) == 15
            await coordinator.wait_for_refresh()
            state = coordinator.current_state
            assert not state.is_refreshing
            assert state.error_message
            assert articles.count("general") == 30
            assert len(coordinator.feed.snapshot) == 15

            coordinator.dismiss_error()
            assert coordinator.current_state.error_message is None
        finally:
            await coordinator.close()

    asyncio.run(scenario())


def test_switching_category_cancels_the_old_refresh(make_synchronizer, builder, articles, bookmarks):
    articles.upsert([make_article(n, "sports") for n in range(1, 6)])
    gate = {"general": asyncio.Event()}
    transport = feed_transport({"general": [raw_article(n) for n in range(100, 110)]}, gate=gate)

    async def scenario():
        coordinator = await _coordinator(make_synchronizer, builder, bookmarks, transport).start()
        try:
            assert coordinator.current_state.is_refreshing
            await coordinator.select_category("sports")

            state = coordinator.current_state
            assert state.selected_category == "sports"
            assert coordinator.feed.key == ("articles", "sports", "")
            assert len(coordinator.feed.snapshot) == 5

            gate["general"].set()
            await coordinator.wait_for_refresh()
            await asyncio.sleep(0.1)
            assert articles.count("general") == 0
            assert coordinator.current_state.selected_category == "sports"
        finally:
            await coordinator.close()

    asyncio.run(scenario())


def test_unknown_category_is_rejected(make_synchronizer, builder, bookmarks):
    async def scenario():
        coordinator = await _coordinator(
            make_synchronizer, builder, bookmarks, feed_transport({})
        ).start(refresh=False)
        try:
            with pytest.raises(ValueError):
                await coordinator.select_category("weather")
        finally:
            await coordinator.close()

    asyncio.run(scenario())


def test_search_replaces_and_closes_the_feed(make_synchronizer, builder, articles, bookmarks):
    articles.upsert([make_article(1, "general", title="Smith wins"), make_article(2, "general")])

    async def scenario():
        coordinator = await _coordinator(
            make_synchronizer, builder, bookmarks, feed_transport({})
        ).start(refresh=False)
        try:
            old = coordinator.feed
            await coordinator.handle_event(SearchQueryChanged("smith"))
            assert old.closed
            assert coordinator.current_state.search_query == "smith"
            assert [item.title for item in coordinator.feed.snapshot.items] == ["Smith wins"]

            same = coordinator.feed
            await coordinator.set_search_query("smith")
            assert coordinator.feed is same
        finally:
            await coordinator.close()

    asyncio.run(scenario())


def test_toggle_bookmark_updates_store_and_feed(make_synchronizer, builder, articles, bookmarks):
    article = make_article(1, "general")
    articles.upsert([article])

    async def scenario():
        coordinator = await _coordinator(
            make_synchronizer, builder, bookmarks, feed_transport({})
        ).start(refresh=False)
        try:
            assert await coordinator.toggle_bookmark(article.article_id)
            assert bookmarks.contains(article.article_id)
            assert article.article_id in coordinator.bookmarked_ids.value
            await wait_until(lambda: coordinator.feed.snapshot.items[0].is_bookmarked)

            await coordinator.handle_event(BookmarkToggled(article.article_id))
            assert not bookmarks.contains(article.article_id)
            await wait_until(lambda: not coordinator.feed.snapshot.items[0].is_bookmarked)
        finally:
            await coordinator.close()

    asyncio.run(scenario())


def test_failed_bookmark_write_is_reported_and_reverted(make_synchronizer, builder, db, articles):
    article = make_article(1, "general")
    articles.upsert([article])
    broken = BrokenBookmarkStore(db)

    async def scenario():
        coordinator = await _coordinator(
            make_synchronizer, builder, broken, feed_transport({})
        ).start(refresh=False)
        try:
            assert not await coordinator.toggle_bookmark(article.article_id)
            assert coordinator.current_state.error_message.startswith("Local cache error: ")
            assert article.article_id not in coordinator.bookmarked_ids.value
        finally:
            await coordinator.close()

    asyncio.run(scenario())


def test_events_dispatch(make_synchronizer, builder, bookmarks):
    transport = feed_transport({}, status=500)

    async def scenario():
        coordinator = await _coordinator(make_synchronizer, builder, bookmarks, transport).start()
        try:
            await coordinator.wait_for_refresh()
            assert coordinator.current_state.error_message

            await coordinator.handle_event(ErrorDismissed())
            assert coordinator.current_state.error_message is None

            await coordinator.handle_event(RetryClicked())
            assert coordinator.current_state.is_refreshing
            await coordinator.wait_for_refresh()
            assert coordinator.current_state.error_message

            await coordinator.handle_event(CategorySelected("tech"))
            assert coordinator.current_state.selected_category == "tech"

            with pytest.raises(TypeError):
                await coordinator.handle_event(object())
        finally:
            await coordinator.close()

    asyncio.run(scenario())


def test_bookmarks_coordinator(builder, articles, bookmarks):
    rows = [make_article(n) for n in range(1, 3)]
    articles.upsert(rows)

    async def scenario():
        coordinator = await BookmarksCoordinator(builder, bookmarks).start()
        try:
            assert len(coordinator.feed.snapshot) == 0
            assert await coordinator.toggle_bookmark(rows[0].article_id)
            await wait_until(lambda: len(coordinator.feed.snapshot) == 1)

            await coordinator.handle_event(BookmarkToggled(rows[0].article_id))
            await wait_until(lambda: len(coordinator.feed.snapshot) == 0)
            assert not bookmarks.contains(rows[0].article_id)
        finally:
            await coordinator.close()

    asyncio.run(scenario())


def test_home_feed_follows_bookmarks_made_elsewhere(make_synchronizer, builder, articles, bookmarks):
    article = make_article(1, "general")
    articles.upsert([article])

    async def scenario():
        home = await _coordinator(
            make_synchronizer, builder, bookmarks, feed_transport({})
        ).start(refresh=False)
        saved = await BookmarksCoordinator(builder, bookmarks).start()
        try:
            assert not home.feed.snapshot.items[0].is_bookmarked

            assert await saved.toggle_bookmark(article.article_id)
            await wait_until(lambda: home.feed.snapshot.items[0].is_bookmarked)
            assert article.article_id in home.bookmarked_ids.value

            await home.select_category("sports")
            await home.select_category("general")
            assert home.feed.snapshot.items[0].is_bookmarked

            await saved.toggle_bookmark(article.article_id)
            await wait_until(lambda: not home.feed.snapshot.items[0].is_bookmarked)
        finally:
            await saved.close()
            await home.close()

    asyncio.run(scenario())


def test_feed_swap_picks_up_bookmarks_from_another_connection(make_synchronizer, builder, db, articles, bookmarks):
    article = make_article(1, "general")
    articles.upsert([article])

    async def scenario():
        home = await _coordinator(
            make_synchronizer, builder, bookmarks, feed_transport({})
        ).start(refresh=False)
        other = Database(db.path)
        try:
            BookmarkStore(other).add(article.article_id)

            await home.select_category("general")
            assert article.article_id in home.bookmarked_ids.value
            await wait_until(lambda: home.feed.snapshot.items[0].is_bookmarked)
        finally:
            other.close()
            await home.close()

    asyncio.run(scenario())
