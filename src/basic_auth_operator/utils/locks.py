"""Keyed locks serializing work per object identity within this process."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class KeyedLock:
    """Hands out one re-entrant lock per key.

    Locks are created lazily and kept for the process lifetime; the number of
    keys is bounded by the number of objects the operator watches.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def _lock_for(self, key: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """Hold the lock for ``key`` for the duration of the block."""
        lock = self._lock_for(key)
        with lock:
            yield

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


# One lock per BasicAuthenticator identity
resource_locks = KeyedLock()

# One lock per sidecar target workload
workload_locks = KeyedLock()
