"""Live queries that re-run when their tables change."""

import asyncio
import logging
from typing import AsyncIterator, Callable, Generic, Iterable, Optional, TypeVar

from ..channel import StateChannel
from ..exceptions import StoreError
from .connection import Database

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LiveQuery(Generic[T]):
    """Publish the result of ``fetch`` now and after every relevant commit."""

    def __init__(self, db: Database, tables: Iterable[str], fetch: Callable[[], T]) -> None:
        self.db = db
        self.tables = frozenset(tables)
        self.fetch = fetch
        self.channel: StateChannel[T] = StateChannel()
        self._dirty: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def value(self) -> T:
        return self.channel.value

    async def start(self) -> "LiveQuery[T]":
        if self._task is not None:
            return self

        loop = asyncio.get_running_loop()
        dirty = asyncio.Event()
        self._dirty = dirty

        def on_change(_tables) -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(dirty.set)

        # Subscribe before the first fetch so no commit falls in between
        self._unsubscribe = self.db.tracker.subscribe(self.tables, on_change)
        self.channel.publish(await asyncio.to_thread(self.fetch))
        self._task = asyncio.create_task(self._run())
        return self

    async def _run(self) -> None:
        while True:
            await self._dirty.wait()
            self._dirty.clear()
            try:
                value = await asyncio.to_thread(self.fetch)
            except StoreError as e:
                logger.error("Live query on %s failed: %s", sorted(self.tables), e)
                continue
            self.channel.publish(value)

    def subscribe(self) -> AsyncIterator[T]:
        return self.channel.subscribe()

    async def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            await asyncio.wait({task})
        self.channel.close()
