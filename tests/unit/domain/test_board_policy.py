"""Tests for compute_board."""

from datetime import date

from shuttle_dispatch.domain.entities.booking_view import BookingView
from shuttle_dispatch.domain.entities.driver import Driver
from shuttle_dispatch.domain.policies.board import compute_board
from shuttle_dispatch.domain.policies.queue_filters import DispatcherFilters
from shuttle_dispatch.domain.value_objects.enums import PaxBucket
from tests.factories import at, make_booking

NOW = at(0, 0)


def _fixture_bookings():
    return [
        make_booking("q1", pickup=at(8), passengers=2),
        make_booking("q2", pickup=at(6), passengers=6),
        make_booking("a1", pickup=at(9), driver_id="d1", status="assigned"),
        make_booking("a2", pickup=at(9, 20), driver_id="d1", status="en_route"),
        make_booking("g1", pickup=at(12), driver_id="ghost", driver_name="Ghost Rider", status="on_trip"),
        make_booking("x1", pickup=at(10), status="cancelled"),
        make_booking("tomorrow", pickup=at(8, day=date(2025, 3, 15))),
    ]


def test_empty_feed_gives_empty_board(day):
    board = compute_board([], [], day, now_ms=NOW)
    assert board.unassigned_queue == ()
    assert board.driver_columns == ()
    assert board.status_summary.unassigned == 0


def test_queue_holds_unassigned_bookings_of_the_day_in_pickup_order(day):
    board = compute_board(_fixture_bookings(), [Driver(id="d1", name="Zed")], day, now_ms=NOW)
    assert [b.id for b in board.unassigned_queue] == ["q2", "q1", "x1"]


def test_driver_columns_include_stubs_and_sort_by_name(day):
    drivers = [Driver(id="d1", name="zed"), Driver(id="d2", name="Amy")]
    board = compute_board(_fixture_bookings(), drivers, day, now_ms=NOW)

    assert [c.driver.id for c in board.driver_columns] == ["d2", "ghost", "d1"]
    amy, ghost, zed = board.driver_columns
    assert amy.placements == () and amy.lane_count == 1
    assert ghost.driver.name == "Ghost Rider"
    assert [p.booking.id for p in zed.placements] == ["a1", "a2"]
    assert zed.lane_count == 2
    assert zed.placements[1].conflict


def test_status_summary(day):
    summary = compute_board(_fixture_bookings(), [], day, now_ms=NOW).status_summary
    assert summary.unassigned == 3
    assert summary.assigned == 3
    assert summary.en_route == 2
    assert summary.cancelled == 1
    assert summary.completed == 0


def test_filters_only_narrow_the_queue(day):
    board = compute_board(
        _fixture_bookings(), [], day, DispatcherFilters(pax=PaxBucket.LARGE), now_ms=NOW
    )
    assert [b.id for b in board.unassigned_queue] == ["q2"]
    assert sum(len(c.placements) for c in board.driver_columns) == 3


def test_search_only_narrows_the_queue(day):
    bookings = _fixture_bookings()
    bookings[0].passenger.name = "Grace Hopper"
    board = compute_board(bookings, [], day, search="grace", now_ms=NOW)
    assert [b.id for b in board.unassigned_queue] == ["q1"]
    assert len(board.driver_columns) == 2


def test_view_applies_to_whole_board(day):
    view = BookingView(id="v", name="Ghost only", driver="ghost")
    board = compute_board(_fixture_bookings(), [Driver(id="d1", name="Zed")], day, view=view, now_ms=NOW)
    assert board.unassigned_queue == ()
    assert [len(c.placements) for c in board.driver_columns] == [1, 0]
    assert board.status_summary.assigned == 1


def test_airport_options_cover_the_day(day):
    board = compute_board(_fixture_bookings(), [], day, now_ms=NOW)
    assert board.airport_options == ("YLW",)


def test_compute_board_is_idempotent(day):
    bookings = _fixture_bookings()
    drivers = [Driver(id="d1", name="Zed")]
    first = compute_board(bookings, drivers, day, now_ms=NOW)
    second = compute_board(bookings, drivers, day, now_ms=NOW)
    assert first == second


def test_snapshot_order_does_not_matter(day):
    bookings = _fixture_bookings()
    forward = compute_board(bookings, [], day, now_ms=NOW)
    backward = compute_board(list(reversed(bookings)), [], day, now_ms=NOW)
    assert [b.id for b in forward.unassigned_queue] == [b.id for b in backward.unassigned_queue]
    assert forward.driver_columns == backward.driver_columns
