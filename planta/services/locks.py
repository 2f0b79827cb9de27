"""
Keyed mutual exclusion for the start/resume critical section.

Two requests for the same (area table, VIN) must not both see "no pending
task" and both insert one. Handlers run in the FastAPI threadpool, so a
per-key threading.Lock serializes them inside a single API process.
"""
import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator


class KeyedLock:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, threading.Lock] = {}
        self._waiters: Dict[Hashable, int] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            self._waiters[key] = self._waiters.get(key, 0) + 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


vin_locks = KeyedLock()
