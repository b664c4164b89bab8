"""Cancellation token shared between a refresh task and its write thread."""

import threading
from contextlib import contextmanager
from typing import Iterator

from ..exceptions import RefreshCancelled


class CancelToken:
    """Thread-safe flag marking a refresh as superseded.

    ``cancel`` and ``commit_guard`` share a lock, so once ``cancel`` has
    returned no guarded commit can still go through.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()

    def cancel(self) -> None:
        with self._lock:
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RefreshCancelled("Refresh was superseded")

    @contextmanager
    def commit_guard(self) -> Iterator[None]:
        """Hold off ``cancel`` while committing; refuse if already cancelled."""
        with self._lock:
            self.raise_if_cancelled()
            yield
