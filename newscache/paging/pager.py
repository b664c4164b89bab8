"""Windowed loader that follows store invalidations."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from ..db import Database
from ..exceptions import StoreError
from ..models import Article, ArticleView
from .config import PagingConfig
from .source import PagingSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PagingData:
    """Snapshot of the loaded window of a paginated view."""

    items: Tuple[ArticleView, ...] = ()
    end_reached: bool = False
    generation: int = 0

    def __len__(self) -> int:
        return len(self.items)


class Pager:
    """Load a paging source page by page and publish each new window.

    When a committed write touches the source's tables, a fresh source is
    built and the whole loaded window is reloaded from it, so a snapshot
    always reflects one store state at or after the last observed write.
    """

    def __init__(
        self,
        db: Database,
        source_factory: Callable[[], PagingSource],
        transform: Callable[[Article], ArticleView],
        config: PagingConfig,
        emit: Callable[[PagingData], None],
        generation: int = 0,
        initial_size: Optional[int] = None,
    ) -> None:
        self.db = db
        self.source_factory = source_factory
        self.transform = transform
        self.config = config
        self.generation = generation
        self.initial_size = initial_size or config.initial_load_size
        self._emit = emit
        self._source: Optional[PagingSource] = None
        self._items: List[ArticleView] = []
        self._end_reached = False
        self._lock = asyncio.Lock()
        self._invalidated = asyncio.Event()
        self._watch_task: Optional[asyncio.Task] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._closed = False

    @property
    def loaded(self) -> int:
        return len(self._items)

    @property
    def end_reached(self) -> bool:
        return self._end_reached

    async def start(self) -> None:
        """Subscribe to invalidations and load the initial window."""
        loop = asyncio.get_running_loop()
        invalidated = self._invalidated

        def on_change(_tables) -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(invalidated.set)

        tables = self.source_factory().tables
        self._unsubscribe = self.db.tracker.subscribe(tables, on_change)
        await self._reload(self.initial_size)
        if not self._closed:
            self._watch_task = asyncio.create_task(self._watch())

    async def _reload(self, size: int) -> None:
        async with self._lock:
            if self._closed:
                return
            source = self.source_factory()
            result = await asyncio.to_thread(source.load, 0, size)
            if self._closed:
                return
            self._source = source
            self._items = [self.transform(article) for article in result.items]
            self._end_reached = result.end_reached
            self._publish()

    async def load_more(self) -> bool:
        """Append the next page. Returns False when nothing was added."""
        async with self._lock:
            if self._closed or self._end_reached or self._source is None:
                return False
            result = await asyncio.to_thread(
                self._source.load, len(self._items), self.config.page_size
            )
            if self._closed:
                return False
            self._items.extend(self.transform(article) for article in result.items)
            self._end_reached = result.end_reached
            self._publish()
            return bool(result.items)

    async def access(self, index: int) -> None:
        """Record that ``index`` is displayed; prefetch when near the end."""
        if index >= len(self._items) - self.config.prefetch_distance:
            await self.load_more()

    async def _watch(self) -> None:
        while True:
            await self._invalidated.wait()
            self._invalidated.clear()
            try:
                await self._reload(max(len(self._items), self.initial_size))
            except StoreError as e:
                logger.error("Reloading paged view failed: %s", e)

    def _publish(self) -> None:
        if self._closed:
            return
        self._emit(
            PagingData(
                items=tuple(self._items),
                end_reached=self._end_reached,
                generation=self.generation,
            )
        )

    async def close(self) -> None:
        """Stop following the store. Nothing is published afterwards."""
        self._closed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        task, self._watch_task = self._watch_task, None
        if task is not None:
            task.cancel()
            await asyncio.wait({task})
