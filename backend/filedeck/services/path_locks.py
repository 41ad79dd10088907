"""Keyed asyncio locks, one writer per cached path."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class PathLocks:
    """Per-path mutual exclusion for preview generation and invalidation.

    Entries are dropped as soon as nobody holds or waits for them.
    """

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, path: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(path, asyncio.Lock())
        self._users[path] = self._users.get(path, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[path] -= 1
            if self._users[path] == 0:
                del self._users[path]
                del self._locks[path]

    def is_locked(self, path: str) -> bool:
        lock = self._locks.get(path)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
