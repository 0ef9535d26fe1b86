"""DispatchSession — the operator's working state over the live feed.

Holds the latest snapshot plus everything the operator picked (day, filters,
view, search, selection) and derives the board from it on demand.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Iterable
from datetime import timezone, tzinfo

from shuttle_dispatch.application.ports.booking_feed import BookingFeed, FeedSnapshot
from shuttle_dispatch.domain.entities.booking import Booking
from shuttle_dispatch.domain.entities.booking_view import BookingView
from shuttle_dispatch.domain.entities.driver import Driver
from shuttle_dispatch.domain.policies.board import Board, compute_board
from shuttle_dispatch.domain.policies.queue_filters import (
    DispatcherFilters,
    build_roster,
    compose_views,
    is_default_view,
    resolve_view,
)
from shuttle_dispatch.domain.policies.status_transitions import bulk_requires_reason
from shuttle_dispatch.domain.value_objects.day_window import DayWindow
from shuttle_dispatch.domain.value_objects.enums import BookingScope

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class DispatchSession:
    def __init__(self, tz: tzinfo = timezone.utc, feed_limit: int = 120, owner_id: str = "local"):
        self.tz = tz
        self.owner_id = owner_id
        self.feed_limit = feed_limit
        self.bookings: tuple[Booking, ...] = ()
        self.drivers: tuple[Driver, ...] = ()
        self.loading = True
        self.feed_error: str | None = None
        self.filters = DispatcherFilters()
        self.search = ""
        self.day = DayWindow.containing(_now_ms(), tz)
        self.selection: set[str] = set()
        self._saved_views: list[BookingView] = []
        self._view_id = "upcoming"
        self._scope_changed = asyncio.Event()

    # ---- feed ----

    def apply_snapshot(self, snapshot: FeedSnapshot) -> None:
        """Adopt a snapshot; an error snapshot keeps the last good data."""
        self.loading = snapshot.loading
        if snapshot.error:
            if snapshot.error != self.feed_error:
                logger.warning("Feed degraded: %s", snapshot.error)
            self.feed_error = snapshot.error
            return
        if snapshot.loading:
            return

        self.feed_error = None
        self.bookings = tuple(snapshot.bookings)
        self.drivers = tuple(snapshot.drivers)
        known = {booking.id for booking in self.bookings}
        self.selection &= known

    async def follow(self, feed: BookingFeed) -> None:
        """Consume the feed until cancelled.

        A change of view scope closes the current subscription at once, even
        while it is idle between polls, and opens one for the new scope.
        """
        while True:
            scope = self.active_view.scope
            self._scope_changed.clear()
            logger.info("Subscribing to feed (scope=%s, limit=%d)", scope.value, self.feed_limit)
            consumer = asyncio.create_task(self._consume(feed, scope))
            waiter = asyncio.create_task(self._scope_changed.wait())
            try:
                await asyncio.wait({consumer, waiter}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                for task in (consumer, waiter):
                    task.cancel()
                await asyncio.gather(consumer, waiter, return_exceptions=True)
            if consumer.done() and not consumer.cancelled():
                consumer.result()
                if self.active_view.scope == scope:
                    logger.info("Feed subscription ended (scope=%s)", scope.value)
                    return

    async def _consume(self, feed: BookingFeed, scope: BookingScope) -> None:
        async with contextlib.aclosing(feed.subscribe(scope, limit=self.feed_limit)) as snapshots:
            async for snapshot in snapshots:
                if self.active_view.scope != scope:
                    return
                self.apply_snapshot(snapshot)

    # ---- lookups ----

    def booking(self, booking_id: str) -> Booking | None:
        for booking in self.bookings:
            if booking.id == booking_id:
                return booking
        return None

    def bookings_by_ids(self, booking_ids: Iterable[str]) -> list[Booking]:
        """Known bookings among ``booking_ids``, in request order; unknown ids are skipped."""
        index = {booking.id: booking for booking in self.bookings}
        return [index[booking_id] for booking_id in dict.fromkeys(booking_ids) if booking_id in index]

    def driver(self, driver_id: str) -> Driver | None:
        return build_roster(self.drivers, self.bookings).get(driver_id)

    def selected_bookings(self) -> list[Booking]:
        return [booking for booking in self.bookings if booking.id in self.selection]

    # ---- views ----

    @property
    def views(self) -> list[BookingView]:
        return compose_views(self._saved_views)

    @property
    def active_view(self) -> BookingView:
        return resolve_view(self.views, self._view_id)

    def set_saved_views(self, views: Iterable[BookingView]) -> None:
        previous = self.active_view.scope
        self._saved_views = [view for view in views if not is_default_view(view.id)]
        if self.active_view.id != self._view_id:
            self._view_id = self.active_view.id
        self._note_scope(previous)

    def set_view(self, view_id: str) -> BookingView:
        """Switch views; the selection never carries across views."""
        previous = self.active_view.scope
        view = resolve_view(self.views, view_id)
        self._view_id = view.id
        self.selection.clear()
        self._note_scope(previous)
        return view

    def _note_scope(self, previous: BookingScope) -> None:
        if self.active_view.scope != previous:
            self._scope_changed.set()

    # ---- filters, day, search ----

    def set_filters(self, filters: DispatcherFilters) -> None:
        self.filters = filters

    def set_search(self, search: str) -> None:
        self.search = search or ""

    def set_day(self, day: DayWindow) -> None:
        self.day = day

    def previous_day(self) -> DayWindow:
        self.day = self.day.previous()
        return self.day

    def next_day(self) -> DayWindow:
        self.day = self.day.next()
        return self.day

    def today(self, now_ms: int | None = None) -> DayWindow:
        self.day = DayWindow.containing(now_ms if now_ms is not None else _now_ms(), self.tz)
        return self.day

    # ---- selection ----

    def select(self, booking_ids: Iterable[str], *, mode: str = "replace") -> set[str]:
        """Update the selection. ``mode`` is one of replace, add, remove, toggle."""
        known = {booking.id for booking in self.bookings}
        ids = {booking_id for booking_id in booking_ids if booking_id in known}
        if mode == "replace":
            self.selection = ids
        elif mode == "add":
            self.selection |= ids
        elif mode == "remove":
            self.selection -= ids
        elif mode == "toggle":
            self.selection ^= ids
        else:
            raise ValueError(f"Unknown selection mode: {mode}")
        return self.selection

    def clear_selection(self) -> None:
        self.selection.clear()

    def reason_required_for(self, status: str) -> bool:
        return bulk_requires_reason((b.current_status() for b in self.selected_bookings()), status)

    # ---- board ----

    def board(self, now_ms: int | None = None) -> Board:
        return compute_board(
            list(self.bookings),
            list(self.drivers),
            self.day,
            self.filters,
            self.active_view,
            search=self.search,
            now_ms=now_ms,
        )
