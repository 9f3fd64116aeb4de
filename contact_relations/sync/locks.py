"""Per-contact locks for single-writer reconciliation."""

import threading
from contextlib import contextmanager


class ContactLocks:
    """One re-entrant lock per uid, created on first use."""

    def __init__(self):
        self._locks: dict[str, threading.RLock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, uid: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(uid)
            if lock is None:
                lock = self._locks[uid] = threading.RLock()
            return lock

    @contextmanager
    def hold(self, uid: str):
        lock = self._lock_for(uid)
        with lock:
            yield
