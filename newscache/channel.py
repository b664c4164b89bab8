"""Conflated publish/subscribe channel for live views."""

import asyncio
from typing import AsyncIterator, Generic, Set, TypeVar

T = TypeVar("T")

_MISSING = object()


class StateChannel(Generic[T]):
    """Holds the latest published value and wakes subscribers on change.

    Subscribers always see the most recent value; intermediate values
    published while a subscriber is busy are skipped. All methods must be
    called from the event loop thread.
    """

    def __init__(self, initial=_MISSING, *, distinct: bool = True) -> None:
        self._value = initial
        self._version = 0 if initial is _MISSING else 1
        self._distinct = distinct
        self._waiters: Set[asyncio.Event] = set()
        self._closed = False

    @property
    def has_value(self) -> bool:
        return self._value is not _MISSING

    @property
    def value(self) -> T:
        if self._value is _MISSING:
            raise LookupError("Channel has no value yet")
        return self._value

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, value: T) -> bool:
        """Publish a value. Returns False if it was dropped."""
        if self._closed:
            return False
        if self._distinct and self._value is not _MISSING and value == self._value:
            return False
        self._value = value
        self._version += 1
        for waiter in self._waiters:
            waiter.set()
        return True

    def close(self) -> None:
        """Stop delivery. Subscribers finish without seeing pending values."""
        self._closed = True
        for waiter in self._waiters:
            waiter.set()

    async def subscribe(self) -> AsyncIterator[T]:
        """Iterate over published values, starting with the current one."""
        seen = 0
        event = asyncio.Event()
        self._waiters.add(event)
        try:
            while not self._closed:
                if self._version > seen:
                    seen = self._version
                    yield self._value
                    continue
                await event.wait()
                event.clear()
        finally:
            self._waiters.discard(event)
