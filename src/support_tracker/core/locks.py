"""Per-symbol locks shared by the watchlist service and the refresher."""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class SymbolLocks:
    """Registry handing out one lock per uppercase symbol."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def lock_for(self, symbol: str) -> threading.Lock:
        key = symbol.upper()
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, symbol: str) -> Iterator[None]:
        """Hold the lock for ``symbol`` for the duration of the block."""
        with self.lock_for(symbol):
            yield
