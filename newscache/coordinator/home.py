"""Cache coordinator for the home feed."""

import asyncio
import logging
from typing import FrozenSet, Optional, Sequence

from ..channel import StateChannel
from ..db import BookmarkStore, LiveQuery
from ..exceptions import StoreError
from ..models import CacheState
from ..paging import PagedFeed, PagedViewBuilder
from ..sync import CancelToken, FeedSynchronizer
from .events import (
    BookmarkToggled,
    CategorySelected,
    ErrorDismissed,
    RetryClicked,
    SearchQueryChanged,
)

logger = logging.getLogger(__name__)

REFRESH_FAILED_MESSAGE = "Failed to refresh articles"
STORE_ERROR_PREFIX = "Local cache error"


class CacheCoordinator:
    """Tie background refreshes and live paged views to the current selection.

    Only one refresh and one paged feed are active at a time. Switching
    category cancels the superseded refresh and replaces the feed; cached
    rows of the new category show up without waiting for the network.
    """

    def __init__(
        self,
        synchronizer: FeedSynchronizer,
        builder: PagedViewBuilder,
        bookmarks: BookmarkStore,
        default_category: str = "general",
        categories: Optional[Sequence[str]] = None,
    ) -> None:
        """Initialize cache coordinator."""
        self.synchronizer = synchronizer
        self.builder = builder
        self.bookmarks = bookmarks
        self.categories = list(categories) if categories else None
        self.state: StateChannel[CacheState] = StateChannel(
            CacheState(selected_category=default_category)
        )
        # Non-authoritative snapshot for feed annotation; the store wins
        self.bookmarked_ids: StateChannel[FrozenSet[str]] = StateChannel(frozenset())
        self.feeds: StateChannel[PagedFeed] = StateChannel(distinct=False)
        self._feed: Optional[PagedFeed] = None
        self._refresh_task: Optional[asyncio.Task] = None
        self._refresh_token: Optional[CancelToken] = None
        self._live_ids: Optional[LiveQuery[FrozenSet[str]]] = None
        self._ids_task: Optional[asyncio.Task] = None
        self._selection_lock = asyncio.Lock()

    @property
    def current_state(self) -> CacheState:
        return self.state.value

    @property
    def feed(self) -> Optional[PagedFeed]:
        """Paged feed of the current selection."""
        return self._feed

    def _update(self, **changes) -> None:
        self.state.publish(self.state.value.model_copy(update=changes))

    async def start(self, refresh: bool = True) -> "CacheCoordinator":
        """Follow bookmarks and observe the default category."""
        await self._follow_bookmarks()
        await self._observe_category(self.current_state.selected_category, refresh)
        return self

    async def handle_event(self, event) -> None:
        if isinstance(event, CategorySelected):
            await self.select_category(event.category)
        elif isinstance(event, SearchQueryChanged):
            await self.set_search_query(event.search_query)
        elif isinstance(event, BookmarkToggled):
            await self.toggle_bookmark(event.article_id)
        elif isinstance(event, RetryClicked):
            self.retry()
        elif isinstance(event, ErrorDismissed):
            self.dismiss_error()
        else:
            raise TypeError(f"Unknown event: {event!r}")

    async def select_category(self, category: str) -> None:
        """Switch category: cancel the old refresh, show cache, refresh anew."""
        if self.categories is not None and category not in self.categories:
            raise ValueError(f"Unknown category: {category}")
        await self._observe_category(category, refresh=True)

    async def _observe_category(self, category: str, refresh: bool) -> None:
        self._cancel_refresh()
        self._update(selected_category=category, is_refreshing=False, error_message=None)
        await self._swap_feed()
        if refresh:
            self._start_refresh(category)

    async def set_search_query(self, search_query: str) -> None:
        """Filter the current category; replaces the paged feed."""
        if search_query == self.current_state.search_query:
            return
        self._update(search_query=search_query)
        await self._swap_feed()

    def retry(self) -> None:
        """Refresh the current category again."""
        self._start_refresh(self.current_state.selected_category)

    def dismiss_error(self) -> None:
        self._update(error_message=None)

    async def _follow_bookmarks(self) -> None:
        if self._live_ids is not None:
            return
        live = self.bookmarks.observe_ids()
        try:
            await live.start()
        except StoreError as e:
            logger.error("Following bookmarks failed: %s", e)
            self._update(error_message=f"{STORE_ERROR_PREFIX}: {e}")
            await live.close()
            return
        self._live_ids = live
        self.bookmarked_ids.publish(frozenset(live.value))
        self._ids_task = asyncio.create_task(self._forward_bookmarks(live))

    async def _forward_bookmarks(self, live: LiveQuery[FrozenSet[str]]) -> None:
        async for ids in live.subscribe():
            self.bookmarked_ids.publish(frozenset(ids))

    async def _swap_feed(self) -> None:
        async with self._selection_lock:
            # Other processes write without notifying this one
            await self._reconcile_bookmarks()
            state = self.current_state
            old = self._feed
            self._feed = None
            if old is not None:
                await old.close()
            feed = self.builder.paged_view(
                state.selected_category,
                state.search_query,
                self.bookmarked_ids,
            )
            self._feed = feed
            try:
                await feed.start()
            except StoreError as e:
                logger.error("Opening %s failed: %s", feed.key, e)
                self._update(error_message=f"{STORE_ERROR_PREFIX}: {e}")
            self.feeds.publish(feed)

    def _start_refresh(self, category: str) -> None:
        self._cancel_refresh()
        token = CancelToken()
        self._refresh_token = token
        self._update(is_refreshing=True)
        self._refresh_task = asyncio.create_task(self._run_refresh(category, token))

    def _cancel_refresh(self) -> None:
        if self._refresh_token is not None:
            self._refresh_token.cancel()
        if self._refresh_task is not None and not self._refresh_task.done():
            self._refresh_task.cancel()
        self._refresh_token = None
        self._refresh_task = None

    async def _run_refresh(self, category: str, token: CancelToken) -> None:
        try:
            result = await self.synchronizer.refresh(category, token)
        except asyncio.CancelledError:
            logger.debug("Refresh of %s cancelled", category)
            raise
        except StoreError as e:
            logger.error("Refresh of %s hit a store failure: %s", category, e)
            if token is self._refresh_token:
                self._update(is_refreshing=False, error_message=f"{STORE_ERROR_PREFIX}: {e}")
            return

        if token is not self._refresh_token or result.cancelled:
            return
        if result.success:
            self._update(is_refreshing=False, error_message=None)
        else:
            self._update(
                is_refreshing=False,
                error_message=result.error or REFRESH_FAILED_MESSAGE,
            )

    async def wait_for_refresh(self) -> None:
        """Wait until the in-flight refresh, if any, has finished."""
        task = self._refresh_task
        if task is not None:
            await asyncio.wait({task})

    async def toggle_bookmark(self, article_id: str) -> bool:
        """
        Toggle a bookmark.

        The in-memory set flips first for immediate feedback, then the
        change is persisted and the set reconciled with the store.

        Returns:
            Whether the article is bookmarked afterwards
        """
        current = self.bookmarked_ids.value
        bookmark = article_id not in current
        self.bookmarked_ids.publish(current | {article_id} if bookmark else current - {article_id})

        try:
            if bookmark:
                await asyncio.to_thread(self.bookmarks.add, article_id)
            else:
                await asyncio.to_thread(self.bookmarks.remove, article_id)
        except StoreError as e:
            logger.error("Toggling bookmark %s failed: %s", article_id, e)
            self._update(error_message=f"{STORE_ERROR_PREFIX}: {e}")

        await self._reconcile_bookmarks()
        return article_id in self.bookmarked_ids.value

    async def _reconcile_bookmarks(self) -> None:
        try:
            ids = await asyncio.to_thread(self.bookmarks.all_ids)
        except StoreError as e:
            logger.error("Reading bookmarks failed: %s", e)
            self._update(error_message=f"{STORE_ERROR_PREFIX}: {e}")
            return
        self.bookmarked_ids.publish(frozenset(ids))

    async def close(self) -> None:
        """Cancel the refresh and tear down the feed."""
        task = self._refresh_task
        self._cancel_refresh()
        if task is not None:
            await asyncio.wait({task})
        if self._live_ids is not None:
            await self._live_ids.close()
            self._live_ids = None
        ids_task, self._ids_task = self._ids_task, None
        if ids_task is not None:
            ids_task.cancel()
            await asyncio.wait({ids_task})
        if self._feed is not None:
            await self._feed.close()
            self._feed = None
        self.feeds.close()
        self.bookmarked_ids.close()
        self.state.close()
