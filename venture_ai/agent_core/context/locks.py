"""Per-key mutual exclusion for conversation turns.

Every turn reads and writes the conversation state and the single pending
invocation of its context, so turns for the same key must run one at a time.
Turns for different keys never share a lock.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class KeyedLock:
    """Map of context key to ``asyncio.Lock``.

    Locks are created on first use and dropped once no task holds or waits on
    them, so the map only grows with the number of concurrently active keys.
    """

    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    @asynccontextmanager
    async def acquire(self, key: str) -> AsyncIterator[None]:
        """Hold the lock for ``key`` for the duration of the ``async with`` block."""
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def size(self) -> int:
        """Number of keys with a live lock."""
        return len(self._locks)
