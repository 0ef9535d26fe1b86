"""BoardPolicy — compose filters, views, roster and timelines into the dispatcher board.

``compute_board`` is the single seam a host calls on every feed snapshot or
operator filter change. It holds no state: identical inputs give equal boards.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from shuttle_dispatch.domain.entities.booking import Booking
from shuttle_dispatch.domain.entities.booking_view import BookingView
from shuttle_dispatch.domain.entities.driver import Driver
from shuttle_dispatch.domain.policies.queue_filters import (
    DEFAULT_VIEWS,
    DispatcherFilters,
    airport_options,
    bookings_for_day,
    build_roster,
    matches_queue_filters,
    matches_search,
    matches_view,
)
from shuttle_dispatch.domain.policies.timeline import Placement, build_timeline
from shuttle_dispatch.domain.value_objects.day_window import DayWindow
from shuttle_dispatch.domain.value_objects.enums import BookingStatus


@dataclass(frozen=True)
class StatusSummary:
    unassigned: int = 0
    assigned: int = 0
    en_route: int = 0
    completed: int = 0
    cancelled: int = 0


@dataclass(frozen=True)
class DriverColumn:
    driver: Driver
    placements: tuple[Placement, ...]
    lane_count: int


@dataclass(frozen=True)
class Board:
    unassigned_queue: tuple[Booking, ...]
    driver_columns: tuple[DriverColumn, ...]
    status_summary: StatusSummary
    airport_options: tuple[str, ...] = field(default_factory=tuple)
    # Reference instant and day the board was computed for.
    now_ms: int | None = None
    day: DayWindow | None = None


def summarize_statuses(bookings: list[Booking]) -> StatusSummary:
    unassigned = assigned = en_route = completed = cancelled = 0
    for booking in bookings:
        status = booking.current_status()
        if booking.is_assigned():
            assigned += 1
        else:
            unassigned += 1
        if status in (BookingStatus.EN_ROUTE.value, BookingStatus.ON_TRIP.value):
            en_route += 1
        elif status == BookingStatus.COMPLETED.value:
            completed += 1
        elif status == BookingStatus.CANCELLED.value:
            cancelled += 1
    return StatusSummary(
        unassigned=unassigned,
        assigned=assigned,
        en_route=en_route,
        completed=completed,
        cancelled=cancelled,
    )


def compute_board(
    bookings: list[Booking],
    drivers: list[Driver],
    day: DayWindow,
    filters: DispatcherFilters | None = None,
    view: BookingView | None = None,
    *,
    search: str = "",
    now_ms: int | None = None,
) -> Board:
    """Build the unassigned queue, per-driver timelines and status counts for a day.

    Args:
        bookings: the feed snapshot; an empty list is a valid input.
        drivers: driver directory; unknown assignees are stubbed in.
        day: the local day on the board.
        filters: queue-only filters (window/airport/pax/luggage).
        view: view predicate applied to every booking on the board.
        search: free-text narrowing of the unassigned queue.
        now_ms: reference instant for the "next 2 hours" window. Pass it
            explicitly to keep the result reproducible.
    """
    filters = filters or DispatcherFilters()
    view = view or DEFAULT_VIEWS[0]
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    in_view = [booking for booking in bookings if matches_view(booking, view)]
    day_bookings = bookings_for_day(in_view, day)

    queue = tuple(
        booking
        for booking in day_bookings
        if not booking.is_assigned()
        and matches_queue_filters(booking, filters, day, now_ms)
        and matches_search(booking, search)
    )

    roster = build_roster(drivers, day_bookings)
    by_driver: dict[str, list[Booking]] = {driver_id: [] for driver_id in roster}
    for booking in day_bookings:
        if booking.driver_id:
            by_driver[booking.driver_id].append(booking)

    columns = []
    for driver in sorted(roster.values(), key=lambda d: (d.name.casefold(), d.id)):
        layout = build_timeline(by_driver[driver.id], day)
        columns.append(
            DriverColumn(driver=driver, placements=layout.placements, lane_count=layout.lane_count)
        )

    return Board(
        unassigned_queue=queue,
        driver_columns=tuple(columns),
        status_summary=summarize_statuses(day_bookings),
        airport_options=tuple(airport_options(day_bookings)),
        now_ms=now_ms,
        day=day,
    )
