"""Live paginated feed for one logical subscription."""

import asyncio
import logging
from typing import AsyncIterator, Callable, FrozenSet, Optional, Sequence, Tuple

from ..channel import StateChannel
from ..db import LiveQuery
from ..exceptions import StoreError
from .config import PagingConfig
from .pager import Pager, PagingData

logger = logging.getLogger(__name__)

# (bookmarked ids, generation, window size, emit) -> Pager
PagerFactory = Callable[[FrozenSet[str], int, int, Callable[[PagingData], None]], Pager]


class PagedFeed:
    """Paginated, bookmark-annotated view that rebuilds on bookmark changes.

    Each change of the bookmarked-id set tears the current pager down and
    starts a new one, so every snapshot is annotated against a single set.
    A feed serves one key; a new category or query needs a new feed.
    """

    def __init__(
        self,
        key: Tuple[str, ...],
        pager_factory: PagerFactory,
        bookmarked_ids: StateChannel[FrozenSet[str]],
        config: PagingConfig,
        resources: Sequence[LiveQuery] = (),
    ) -> None:
        self.key = key
        self.config = config
        self._pager_factory = pager_factory
        self._bookmarked_ids = bookmarked_ids
        self._resources = list(resources)
        self._channel: StateChannel[PagingData] = StateChannel()
        self._pager: Optional[Pager] = None
        self._generation = 0
        self._follow_task: Optional[asyncio.Task] = None
        self._ready = asyncio.Event()
        self._closed = False

    @property
    def snapshot(self) -> PagingData:
        """Latest published window, empty before the first load."""
        if self._channel.has_value:
            return self._channel.value
        return PagingData()

    @property
    def closed(self) -> bool:
        return self._closed

    async def start(self) -> "PagedFeed":
        """Start following bookmarks and wait for the first window."""
        if self._follow_task is not None:
            return self
        for resource in self._resources:
            await resource.start()
        self._follow_task = asyncio.create_task(self._follow())
        ready = asyncio.create_task(self._ready.wait())
        await asyncio.wait({ready, self._follow_task}, return_when=asyncio.FIRST_COMPLETED)
        if self._follow_task.done() and not self._follow_task.cancelled():
            ready.cancel()
            # Surface a failed first load to the caller
            self._follow_task.result()
        return self

    async def _follow(self) -> None:
        async for ids in self._bookmarked_ids.subscribe():
            if self._closed:
                return
            try:
                await self._rebuild(frozenset(ids))
            except StoreError as e:
                if not self._ready.is_set():
                    raise
                logger.error("Rebuilding paged view %s failed: %s", self.key, e)
                continue
            self._ready.set()

    async def _rebuild(self, ids: FrozenSet[str]) -> None:
        old = self._pager
        window = max(len(self.snapshot), self.config.initial_load_size)
        self._generation += 1
        if old is not None:
            await old.close()
        pager = self._pager_factory(ids, self._generation, window, self._publish)
        self._pager = pager
        logger.debug("Paged view %s: generation %d", self.key, self._generation)
        await pager.start()

    def _publish(self, data: PagingData) -> None:
        if not self._closed:
            self._channel.publish(data)

    async def load_more(self) -> bool:
        """Load the next page of the current generation."""
        if self._closed or self._pager is None:
            return False
        return await self._pager.load_more()

    async def access(self, index: int) -> None:
        """Tell the feed which row is on screen so it can prefetch."""
        if not self._closed and self._pager is not None:
            await self._pager.access(index)

    def stream(self) -> AsyncIterator[PagingData]:
        """Iterate over published windows until the feed is closed."""
        return self._channel.subscribe()

    async def close(self) -> None:
        """Tear the feed down. No window is published afterwards."""
        if self._closed:
            return
        self._closed = True
        self._channel.close()
        task, self._follow_task = self._follow_task, None
        if task is not None:
            task.cancel()
            await asyncio.wait({task})
        if self._pager is not None:
            await self._pager.close()
            self._pager = None
        for resource in self._resources:
            await resource.close()
