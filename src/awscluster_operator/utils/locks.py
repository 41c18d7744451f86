"""
Per-resource serialization of reconciliations.

kopf serializes handlers of one object, but the AWSCluster can also be
reconciled from the Cluster watch and from the resync timer. Every entry
point takes the lock of the AWSCluster identity first so at most one
reconciliation per resource is in flight.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field


@dataclass
class KeyedLocks:
    """Lazily created asyncio locks keyed by ``namespace/name``."""

    locks: dict[str, asyncio.Lock] = field(default_factory=dict)
    waiters: dict[str, int] = field(default_factory=dict)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self.locks.setdefault(key, asyncio.Lock())
        self.waiters[key] = self.waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self.waiters[key] -= 1
            if self.waiters[key] == 0:
                # Nobody else holds or waits for this identity
                del self.waiters[key]
                del self.locks[key]

    def __len__(self) -> int:
        return len(self.locks)
