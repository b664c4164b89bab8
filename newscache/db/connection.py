"""Database connection management."""

import logging
import sqlite3
import threading
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Callable, ContextManager, Dict, FrozenSet, Iterable, Iterator, List, Optional, Set, Tuple, Union

from ..exceptions import StoreError

logger = logging.getLogger(__name__)

Listener = Callable[[FrozenSet[str]], None]


def _icontains(value: Optional[str], query: str) -> bool:
    """Case-insensitive substring test registered as an SQL function."""
    if value is None or query is None:
        return False
    return query.casefold() in value.casefold()


class InvalidationTracker:
    """Notify listeners when a committed transaction touched their tables.

    Listeners are called on the committing thread and must hand work off
    to their own event loop.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: Dict[int, Tuple[FrozenSet[str], Listener]] = {}
        self._next_id = 0

    def subscribe(self, tables: Iterable[str], listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unregisters it."""
        with self._lock:
            listener_id = self._next_id
            self._next_id += 1
            self._listeners[listener_id] = (frozenset(tables), listener)

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(listener_id, None)

        return unsubscribe

    def notify(self, tables: Iterable[str]) -> None:
        changed = frozenset(tables)
        with self._lock:
            listeners = list(self._listeners.values())
        for watched, listener in listeners:
            hit = watched & changed
            if not hit:
                continue
            try:
                listener(hit)
            except Exception:
                logger.exception("Invalidation listener failed for tables %s", sorted(hit))


class _Transaction:
    def __init__(self, conn: sqlite3.Connection, tables: Set[str]) -> None:
        self.conn = conn
        self.tables = tables
        self.changes_at_start = conn.total_changes


class Database:
    """SQLite handle shared by the article and bookmark stores.

    Construct exactly one per process at startup and pass it to every
    consumer. Writes go through a single connection guarded by a lock.
    File databases run in WAL mode and give each reading thread its own
    connection, so reads proceed while a write is in progress.
    """

    def __init__(self, path: Union[str, Path], wal: bool = True) -> None:
        self.path = str(path)
        self.in_memory = self.path == ":memory:"
        self.tracker = InvalidationTracker()
        self._write_lock = threading.RLock()
        self._local = threading.local()
        self._readers: List[sqlite3.Connection] = []
        self._readers_lock = threading.Lock()
        self._closed = False
        try:
            self._writer = self._connect()
            if wal and not self.in_memory:
                self._writer.execute("PRAGMA journal_mode=WAL")
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open database {self.path}: {e}") from e

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self.path,
            timeout=30.0,
            isolation_level=None,
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        conn.create_function("icontains", 2, _icontains, deterministic=True)
        return conn

    def _reader(self) -> sqlite3.Connection:
        conn = getattr(self._local, "reader", None)
        if conn is None:
            conn = self._connect()
            self._local.reader = conn
            with self._readers_lock:
                self._readers.append(conn)
        return conn

    @property
    def closed(self) -> bool:
        return self._closed

    @contextmanager
    def transaction(
        self,
        *tables: str,
        guard: Optional[Callable[[], ContextManager[None]]] = None,
    ) -> Iterator[sqlite3.Connection]:
        """Open a write transaction, or join the one open on this thread.

        ``tables`` names what the body may modify; listeners of those tables
        are notified once the outermost transaction commits. ``guard`` is
        entered around the commit of an outermost transaction; raising from
        it rolls the transaction back.
        """
        if self._closed:
            raise StoreError("Database is closed")

        active: Optional[_Transaction] = getattr(self._local, "txn", None)
        if active is not None:
            active.tables.update(tables)
            yield active.conn
            return

        committed = False
        with self._write_lock:
            txn = _Transaction(self._writer, set(tables))
            self._local.txn = txn
            try:
                self._writer.execute("BEGIN IMMEDIATE")
                yield self._writer
                with guard() if guard is not None else nullcontext():
                    self._writer.commit()
                committed = True
            except sqlite3.Error as e:
                self._writer.rollback()
                raise StoreError(f"Transaction failed: {e}") from e
            except BaseException:
                self._writer.rollback()
                raise
            finally:
                self._local.txn = None

        if committed and txn.tables and self._writer.total_changes != txn.changes_at_start:
            self.tracker.notify(txn.tables)

    @contextmanager
    def read(self) -> Iterator[sqlite3.Connection]:
        """Get a connection for reading.

        Inside a transaction this is the transaction's own connection, so
        reads observe its uncommitted writes.
        """
        if self._closed:
            raise StoreError("Database is closed")

        active: Optional[_Transaction] = getattr(self._local, "txn", None)
        if active is not None:
            yield active.conn
            return

        try:
            if self.in_memory:
                with self._write_lock:
                    yield self._writer
            else:
                yield self._reader()
        except sqlite3.Error as e:
            raise StoreError(f"Query failed: {e}") from e

    def executescript(self, sql: str) -> None:
        """Run a multi-statement script outside any transaction."""
        with self._write_lock:
            try:
                self._writer.executescript(sql)
            except sqlite3.Error as e:
                raise StoreError(f"Script failed: {e}") from e

    def close(self) -> None:
        """Close all connections."""
        if self._closed:
            return
        self._closed = True
        with self._readers_lock:
            readers, self._readers = self._readers, []
        for conn in readers:
            conn.close()
        with self._write_lock:
            self._writer.close()
