"""Polling feed adapter — implements BookingFeed over listBookings/listDrivers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from shuttle_dispatch.adapters.functions_api.client import FunctionsCallError, FunctionsClient
from shuttle_dispatch.adapters.functions_api.record_mapper import (
    bookings_from_records,
    drivers_from_records,
)
from shuttle_dispatch.application.ports.booking_feed import BookingFeed, FeedSnapshot
from shuttle_dispatch.config import settings
from shuttle_dispatch.domain.entities.booking import Booking
from shuttle_dispatch.domain.entities.driver import Driver
from shuttle_dispatch.domain.errors import FeedError
from shuttle_dispatch.domain.value_objects.enums import BookingScope

logger = logging.getLogger(__name__)

# listBookings caps a single page at this many items.
PAGE_SIZE = 100


def _pickup_sort_key(booking: Booking) -> tuple[int, int, str]:
    pickup = booking.schedule.pickup_timestamp
    return (0 if pickup is not None else 1, pickup or 0, booking.id)


class PollingBookingFeed(BookingFeed):
    """Re-fetches bookings and drivers every ``poll_seconds`` or on ``refresh()``."""

    def __init__(self, client: FunctionsClient | None = None, poll_seconds: float | None = None):
        self._client = client or FunctionsClient()
        self._poll_seconds = poll_seconds if poll_seconds is not None else settings.feed_poll_seconds
        self._wake = asyncio.Event()

    async def refresh(self) -> None:
        self._wake.set()

    async def _list(self, endpoint: str, params: dict | None = None) -> dict:
        try:
            return await self._client.call(endpoint, method="GET", params=params)
        except FunctionsCallError as exc:
            raise FeedError(f"{endpoint}: {exc}") from exc

    async def fetch_bookings(
        self,
        scope: BookingScope,
        status: str | None = None,
        limit: int = 120,
    ) -> list[Booking]:
        """Page through listBookings until ``limit`` items or the last page.

        Raises:
            FeedError: a page could not be fetched.
        """
        records: list = []
        cursor: str | None = None
        while len(records) < limit:
            params: dict = {"scope": scope.value, "limit": min(PAGE_SIZE, limit - len(records))}
            if status:
                params["status"] = status
            if cursor:
                params["cursor"] = cursor
            page = await self._list("listBookings", params)
            items = page.get("items")
            if isinstance(items, list):
                records.extend(items)
            cursor = page.get("nextCursor") if isinstance(page.get("nextCursor"), str) else None
            if not cursor or not items:
                break
        bookings = bookings_from_records(records[:limit])
        bookings.sort(key=_pickup_sort_key)
        return bookings

    async def fetch_drivers(self) -> list[Driver]:
        page = await self._list("listDrivers")
        items = page.get("items")
        drivers = drivers_from_records(items if isinstance(items, list) else [])
        drivers.sort(key=lambda d: (d.name.casefold(), d.id))
        return drivers

    async def snapshot(self, scope: BookingScope, status: str | None = None, limit: int = 120) -> FeedSnapshot:
        """One full snapshot; a failed fetch becomes an error snapshot."""
        try:
            bookings, drivers = await asyncio.gather(
                self.fetch_bookings(scope, status, limit), self.fetch_drivers()
            )
        except FeedError as exc:
            logger.exception("Feed fetch failed")
            return FeedSnapshot(error=str(exc) or FeedError.title)
        logger.debug("Feed snapshot: %d booking(s), %d driver(s)", len(bookings), len(drivers))
        return FeedSnapshot(bookings=tuple(bookings), drivers=tuple(drivers))

    async def subscribe(
        self,
        scope: BookingScope,
        status: str | None = None,
        limit: int = 120,
    ) -> AsyncIterator[FeedSnapshot]:
        yield FeedSnapshot(loading=True)
        while True:
            self._wake.clear()
            yield await self.snapshot(scope, status, limit)
            try:
                await asyncio.wait_for(self._wake.wait(), timeout=self._poll_seconds)
            except asyncio.TimeoutError:
                pass
