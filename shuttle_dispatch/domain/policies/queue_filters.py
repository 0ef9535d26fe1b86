"""QueueFilterPolicy — dispatcher filters, views, search and roster synthesis."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from shuttle_dispatch.domain.entities.booking import Booking
from shuttle_dispatch.domain.entities.booking_view import BookingView
from shuttle_dispatch.domain.entities.driver import Driver
from shuttle_dispatch.domain.policies.classification import (
    classify_luggage_bucket,
    classify_passenger_bucket,
    extract_airport_code,
    matches_pickup_window,
)
from shuttle_dispatch.domain.policies.timeline import resolve_pickup_ms
from shuttle_dispatch.domain.value_objects.day_window import DayWindow
from shuttle_dispatch.domain.value_objects.enums import (
    BookingScope,
    LuggageBucket,
    PaxBucket,
    PaymentPreference,
    PickupWindow,
)

ALL = "all"
NO_AIRPORT = "other"


@dataclass(frozen=True)
class DispatcherFilters:
    pickup_window: PickupWindow = PickupWindow.ALL
    airport: str = ALL
    pax: PaxBucket = PaxBucket.ALL
    luggage: LuggageBucket = LuggageBucket.ALL


DEFAULT_VIEWS: tuple[BookingView, ...] = (
    BookingView(id="upcoming", name="Upcoming", scope=BookingScope.UPCOMING),
    BookingView(id="assigned", name="Assigned", scope=BookingScope.UPCOMING, status="assigned"),
    BookingView(id="pay-now", name="Pay now", scope=BookingScope.UPCOMING, payment=PaymentPreference.PAY_NOW.value),
    BookingView(id="past", name="Past 30d", scope=BookingScope.PAST),
)


def compose_views(saved: Iterable[BookingView]) -> list[BookingView]:
    """Built-in views first, then the operator's saved views."""
    return [*DEFAULT_VIEWS, *saved]


def resolve_view(views: list[BookingView], view_id: str | None) -> BookingView:
    for view in views:
        if view.id == view_id:
            return view
    return views[0] if views else DEFAULT_VIEWS[0]


def is_default_view(view_id: str) -> bool:
    return any(view.id == view_id for view in DEFAULT_VIEWS)


def matches_view(booking: Booking, view: BookingView) -> bool:
    """Driver (substring of id or name), payment and status predicates of a view."""
    driver_filter = (view.driver or "").lower()
    if driver_filter and driver_filter != ALL:
        driver_id = (booking.assignment.driver_id or "").lower()
        driver_name = (booking.assignment.driver_name or "").lower()
        if not ((driver_id and driver_filter in driver_id) or (driver_name and driver_filter in driver_name)):
            return False

    payment_filter = view.payment or ""
    if payment_filter and payment_filter != ALL:
        preference = booking.payment.preference or PaymentPreference.PAY_ON_ARRIVAL.value
        if preference != payment_filter:
            return False

    status_filter = (view.status or "").lower()
    if status_filter and status_filter != ALL and booking.current_status() != status_filter:
        return False
    return True


def matches_search(booking: Booking, search: str | None) -> bool:
    needle = (search or "").strip().lower()
    if not needle:
        return True
    haystack = " ".join(
        str(value)
        for value in (
            booking.id,
            booking.booking_number,
            booking.passenger.name,
            booking.passenger.phone,
            booking.passenger.email,
            booking.trip.origin,
            booking.trip.origin_address,
            booking.trip.destination,
            booking.trip.destination_address,
        )
        if value not in (None, "")
    ).lower()
    return needle in haystack


def matches_queue_filters(
    booking: Booking,
    filters: DispatcherFilters,
    day: DayWindow,
    now_ms: int,
) -> bool:
    pickup = resolve_pickup_ms(booking, day.tz)
    if pickup is None or not day.contains(pickup):
        return False
    if not matches_pickup_window(filters.pickup_window, pickup, now_ms, day.tz):
        return False
    airport = extract_airport_code(booking) or NO_AIRPORT
    if filters.airport != ALL and filters.airport != airport:
        return False
    if filters.pax != PaxBucket.ALL and filters.pax != classify_passenger_bucket(booking):
        return False
    if filters.luggage != LuggageBucket.ALL and filters.luggage != classify_luggage_bucket(booking):
        return False
    return True


def bookings_for_day(bookings: Iterable[Booking], day: DayWindow) -> list[Booking]:
    """Bookings whose pickup resolves inside the day, sorted by pickup (stable)."""
    dated = []
    for booking in bookings:
        pickup = resolve_pickup_ms(booking, day.tz)
        if pickup is not None and day.contains(pickup):
            dated.append((pickup, booking))
    dated.sort(key=lambda entry: entry[0])
    return [booking for _, booking in dated]


def airport_options(bookings: Iterable[Booking]) -> list[str]:
    codes = {code for code in (extract_airport_code(b) for b in bookings) if code}
    return sorted(codes)


def build_roster(drivers: Iterable[Driver], bookings: Iterable[Booking]) -> dict[str, Driver]:
    """Known drivers plus a stub for every assignee the directory does not know."""
    roster = {driver.id: driver for driver in drivers}
    for booking in bookings:
        driver_id = booking.driver_id
        if driver_id and driver_id not in roster:
            roster[driver_id] = Driver.stub_for(booking)
    return roster