"""
Per-entry mutual exclusion for the coordination façade.

The database row lock (SELECT ... FOR UPDATE) serializes writers across
processes on PostgreSQL; this registry serializes writers inside one process,
which is all SQLite offers.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class EntryLockRegistry:
    """Hands out one re-entrant lock per inventory entry id."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.RLock] = {}

    def _lock_for(self, entry_id: int) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(entry_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[entry_id] = lock
            return lock

    @contextmanager
    def hold(self, entry_id: int) -> Iterator[None]:
        lock = self._lock_for(entry_id)
        with lock:
            yield

    def forget(self, entry_id: int) -> None:
        """Drop the lock of a deleted entry."""
        with self._guard:
            self._locks.pop(entry_id, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


entry_locks = EntryLockRegistry()
