"""Per-booking mutation serialisation.

Mutations on disjoint bookings run concurrently; two mutations touching the
same booking id run one after the other in arrival order. A booking's lock
lives only while some mutation holds or waits for it.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterable
from contextlib import AsyncExitStack, asynccontextmanager


class BookingLocks:
    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def _checkout(self, booking_id: str) -> asyncio.Lock:
        lock = self._locks.get(booking_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[booking_id] = lock
        self._users[booking_id] = self._users.get(booking_id, 0) + 1
        return lock

    def _checkin(self, booking_id: str) -> None:
        remaining = self._users[booking_id] - 1
        if remaining:
            self._users[booking_id] = remaining
        else:
            del self._users[booking_id]
            del self._locks[booking_id]

    @asynccontextmanager
    async def hold(self, booking_ids: Iterable[str]) -> AsyncIterator[None]:
        # Sorted acquisition so overlapping multi-booking batches cannot deadlock.
        ordered = sorted(set(booking_ids))
        locks = [self._checkout(booking_id) for booking_id in ordered]
        try:
            async with AsyncExitStack() as stack:
                for lock in locks:
                    await stack.enter_async_context(lock)
                yield
        finally:
            for booking_id in ordered:
                self._checkin(booking_id)
