"""Coordinator for the bookmarked-articles view."""

import asyncio
import logging
from typing import Optional

from ..db import BookmarkStore
from ..paging import PagedFeed, PagedViewBuilder
from .events import BookmarkToggled

logger = logging.getLogger(__name__)


class BookmarksCoordinator:
    """Serve the bookmarked view, which follows the bookmark store directly."""

    def __init__(self, builder: PagedViewBuilder, bookmarks: BookmarkStore) -> None:
        self.builder = builder
        self.bookmarks = bookmarks
        self._feed: Optional[PagedFeed] = None

    @property
    def feed(self) -> Optional[PagedFeed]:
        return self._feed

    async def start(self) -> "BookmarksCoordinator":
        if self._feed is None:
            self._feed = self.builder.bookmarked_view()
            await self._feed.start()
        return self

    async def handle_event(self, event) -> None:
        if isinstance(event, BookmarkToggled):
            await self.toggle_bookmark(event.article_id)
        else:
            raise TypeError(f"Unknown event: {event!r}")

    async def toggle_bookmark(self, article_id: str) -> bool:
        """Toggle a bookmark. Returns whether it is bookmarked afterwards."""
        if await asyncio.to_thread(self.bookmarks.contains, article_id):
            await asyncio.to_thread(self.bookmarks.remove, article_id)
            logger.debug("Removed bookmark %s", article_id)
            return False
        await asyncio.to_thread(self.bookmarks.add, article_id)
        logger.debug("Added bookmark %s", article_id)
        return True

    async def close(self) -> None:
        if self._feed is not None:
            await self._feed.close()
            self._feed = None
