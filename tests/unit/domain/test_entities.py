"""Tests for domain entities and value objects."""

from datetime import date, timezone

from shuttle_dispatch.domain.entities.booking import Assignment, Booking, Trip
from shuttle_dispatch.domain.entities.driver import Driver
from shuttle_dispatch.domain.value_objects.day_window import DayWindow
from tests.factories import at, make_booking


def test_booking_without_driver_id_is_unassigned():
    booking = Booking(id="b1", assignment=Assignment(driver_name="Stale Name"))
    assert not booking.is_assigned()
    assert booking.driver_id is None


def test_empty_driver_id_reads_as_unassigned():
    booking = Booking(id="b1", assignment=Assignment(driver_id=""))
    assert not booking.is_assigned()
    assert booking.driver_id is None


def test_missing_status_reads_as_pending():
    assert Booking(id="b1").current_status() == "pending"
    assert Booking(id="b1", status="  ").current_status() == "pending"
    assert Booking(id="b1", status="Confirmed").current_status() == "confirmed"


def test_label_prefers_booking_number():
    assert make_booking("abc", booking_number=1042).label() == "#1042"
    assert make_booking("abc").label() == "abc"


def test_route_falls_back_to_addresses():
    booking = Booking(id="b1", trip=Trip(origin_address="12 Main St", destination="YLW"))
    assert booking.route() == "12 Main St → YLW"


def test_driver_stub_uses_assignment_fields():
    booking = make_booking("b1", driver_id="drv-123456")
    booking.trip.vehicle_selections = ["chevyExpress"]
    stub = Driver.stub_for(booking)
    assert stub.id == "drv-123456"
    assert stub.name == "Driver drv-"
    assert stub.vehicle == "chevyExpress"


def test_driver_stub_keeps_known_name():
    stub = Driver.stub_for(make_booking("b1", driver_id="d9", driver_name="Sam"))
    assert stub.name == "Sam"
    assert stub.vehicle is None


def test_day_window_bounds(day):
    assert day.start_ms == at(0)
    assert day.end_ms == at(0, day=date(2025, 3, 15))
    assert day.contains(at(23, 59))
    assert not day.contains(day.end_ms)


def test_day_window_navigation(day):
    assert day.next().day == date(2025, 3, 15)
    assert day.previous().day == date(2025, 3, 13)
    assert DayWindow.containing(at(13, 30), timezone.utc) == day


def test_minutes_since_start(day):
    assert day.minutes_since_start(at(9, 30)) == 570
