"""Tests for DispatchSession state handling and feed following."""

from __future__ import annotations

import asyncio
from datetime import date

import pytest

from shuttle_dispatch.application.ports.booking_feed import BookingFeed, FeedSnapshot
from shuttle_dispatch.application.use_cases.dispatch_session import DispatchSession
from shuttle_dispatch.domain.entities.booking_view import BookingView
from shuttle_dispatch.domain.entities.driver import Driver
from shuttle_dispatch.domain.value_objects.day_window import DayWindow
from shuttle_dispatch.domain.value_objects.enums import BookingScope
from tests.factories import BOARD_DATE, at, make_booking


class QueueFeed(BookingFeed):
    """Feed fed by the test, one queue per scope; blocks between snapshots like a live subscription."""

    def __init__(self):
        self.queues: dict[BookingScope, asyncio.Queue[FeedSnapshot]] = {
            scope: asyncio.Queue() for scope in BookingScope
        }
        self.subscriptions: list[BookingScope] = []
        self.closed: list[BookingScope] = []
        self.refreshes = 0

    async def subscribe(self, scope, status=None, limit=120):
        self.subscriptions.append(scope)
        try:
            while True:
                yield await self.queues[scope].get()
        finally:
            self.closed.append(scope)

    async def refresh(self):
        self.refreshes += 1


def _session(*bookings, drivers=()):
    session = DispatchSession()
    session.set_day(DayWindow.for_date(BOARD_DATE))
    session.apply_snapshot(FeedSnapshot(bookings=tuple(bookings), drivers=tuple(drivers)))
    return session


async def _settle():
    for _ in range(20):
        await asyncio.sleep(0)


# ─── snapshots ──────────────────────────────────────────────────────


def test_new_session_is_loading():
    session = DispatchSession()
    assert session.loading
    assert session.bookings == ()


def test_snapshot_replaces_data_and_clears_loading():
    session = _session(make_booking("b1"), drivers=[Driver(id="d1", name="Dana")])
    assert not session.loading
    assert [b.id for b in session.bookings] == ["b1"]
    assert session.driver("d1").name == "Dana"


def test_error_snapshot_keeps_last_good_data():
    session = _session(make_booking("b1"))
    session.apply_snapshot(FeedSnapshot(error="Unable to load bookings"))

    assert session.feed_error == "Unable to load bookings"
    assert [b.id for b in session.bookings] == ["b1"]

    session.apply_snapshot(FeedSnapshot(bookings=(make_booking("b2"),)))
    assert session.feed_error is None
    assert [b.id for b in session.bookings] == ["b2"]


def test_snapshot_prunes_selection_to_known_bookings():
    session = _session(make_booking("b1"), make_booking("b2"))
    session.select(["b1", "b2"])

    session.apply_snapshot(FeedSnapshot(bookings=(make_booking("b2"),)))

    assert session.selection == {"b2"}


def test_driver_lookup_falls_back_to_stub_for_unknown_assignee():
    session = _session(make_booking("b1", driver_id="ghost", driver_name="Ghost Rider"))
    assert session.driver("ghost").name == "Ghost Rider"
    assert session.driver("nobody") is None


# ─── selection ──────────────────────────────────────────────────────


def test_selection_modes_ignore_unknown_ids():
    session = _session(make_booking("b1"), make_booking("b2"), make_booking("b3"))

    assert session.select(["b1", "zzz"]) == {"b1"}
    assert session.select(["b2"], mode="add") == {"b1", "b2"}
    assert session.select(["b1"], mode="remove") == {"b2"}
    assert session.select(["b2", "b3"], mode="toggle") == {"b3"}
    assert [b.id for b in session.selected_bookings()] == ["b3"]

    with pytest.raises(ValueError):
        session.select(["b1"], mode="invert")


def test_bookings_by_ids_keeps_request_order_and_drops_unknown():
    session = _session(make_booking("b1"), make_booking("b2"))
    assert [b.id for b in session.bookings_by_ids(["b2", "x", "b1", "b2"])] == ["b2", "b1"]


def test_reason_required_follows_the_selection():
    session = _session(make_booking("b1", status="pending"), make_booking("b2", status="assigned"))
    session.select(["b1"])
    assert not session.reason_required_for("confirmed")
    session.select(["b2"], mode="add")
    assert session.reason_required_for("confirmed")


# ─── views, day, board ──────────────────────────────────────────────


def test_switching_views_clears_selection():
    session = _session(make_booking("b1"))
    session.select(["b1"])

    view = session.set_view("past")

    assert view.scope == BookingScope.PAST
    assert session.selection == set()


def test_saved_views_cannot_shadow_defaults():
    session = DispatchSession()
    session.set_saved_views(
        [BookingView(id="upcoming", name="Hijack"), BookingView(id="mine", name="Mine", driver="sam")]
    )
    assert [v.id for v in session.views] == ["upcoming", "assigned", "pay-now", "past", "mine"]
    assert session.set_view("mine").driver == "sam"


def test_removed_saved_view_falls_back_to_first_default():
    session = DispatchSession()
    session.set_saved_views([BookingView(id="mine", name="Mine")])
    session.set_view("mine")

    session.set_saved_views([])

    assert session.active_view.id == "upcoming"


def test_day_navigation():
    session = _session()
    assert session.previous_day().day == date(2025, 3, 13)
    assert session.next_day().next().day == date(2025, 3, 15)
    assert session.today(now_ms=at(23, 59)).day == BOARD_DATE


def test_board_reflects_session_state():
    session = _session(
        make_booking("q1", pickup=at(8), passenger_name="Grace Hopper"),
        make_booking("q2", pickup=at(9)),
        make_booking("a1", pickup=at(10), driver_id="d1"),
        drivers=[Driver(id="d1", name="Dana")],
    )
    session.set_search("grace")

    board = session.board(now_ms=at(0))

    assert [b.id for b in board.unassigned_queue] == ["q1"]
    assert [c.driver.id for c in board.driver_columns] == ["d1"]


# ─── follow ─────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_follow_applies_snapshots_from_the_active_scope():
    feed = QueueFeed()
    session = DispatchSession(feed_limit=50)
    task = asyncio.create_task(session.follow(feed))
    try:
        await feed.queues[BookingScope.UPCOMING].put(FeedSnapshot(loading=True))
        await _settle()
        assert session.loading

        await feed.queues[BookingScope.UPCOMING].put(FeedSnapshot(bookings=(make_booking("b1"),)))
        await _settle()
        assert [b.id for b in session.bookings] == ["b1"]
        assert feed.subscriptions == [BookingScope.UPCOMING]
    finally:
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
    assert feed.closed == [BookingScope.UPCOMING]


@pytest.mark.asyncio
async def test_scope_change_resubscribes_without_waiting_for_a_snapshot():
    feed = QueueFeed()
    session = DispatchSession()
    task = asyncio.create_task(session.follow(feed))
    try:
        await feed.queues[BookingScope.UPCOMING].put(FeedSnapshot(bookings=(make_booking("b1"),)))
        await _settle()

        session.set_view("past")
        await _settle()

        assert feed.subscriptions == [BookingScope.UPCOMING, BookingScope.PAST]
        assert feed.closed == [BookingScope.UPCOMING]

        # The old scope's subscription is gone, so its data never lands.
        await feed.queues[BookingScope.UPCOMING].put(FeedSnapshot(bookings=(make_booking("stale"),)))
        await feed.queues[BookingScope.PAST].put(FeedSnapshot(bookings=(make_booking("old"),)))
        await _settle()
        assert [b.id for b in session.bookings] == ["old"]
    finally:
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


@pytest.mark.asyncio
async def test_switching_between_views_with_the_same_scope_keeps_the_subscription():
    feed = QueueFeed()
    session = DispatchSession()
    task = asyncio.create_task(session.follow(feed))
    try:
        await _settle()
        session.set_view("assigned")
        session.set_view("pay-now")
        await _settle()
        assert feed.subscriptions == [BookingScope.UPCOMING]
    finally:
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


@pytest.mark.asyncio
async def test_dropping_the_active_saved_view_resubscribes():
    feed = QueueFeed()
    session = DispatchSession()
    archive = BookingView(id="archive", name="Archive", scope=BookingScope.PAST)
    session.set_saved_views([archive])
    session.set_view("archive")
    task = asyncio.create_task(session.follow(feed))
    try:
        await _settle()
        session.set_saved_views([])
        await _settle()
        assert feed.subscriptions == [BookingScope.PAST, BookingScope.UPCOMING]
    finally:
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


@pytest.mark.asyncio
async def test_follow_returns_when_the_feed_ends(feed):
    feed.snapshots = [FeedSnapshot(bookings=(make_booking("b1"),))]
    session = DispatchSession()

    await asyncio.wait_for(session.follow(feed), timeout=1)

    assert [b.id for b in session.bookings] == ["b1"]


@pytest.mark.asyncio
async def test_follow_surfaces_a_crashed_subscription():
    class BrokenFeed(QueueFeed):
        async def subscribe(self, scope, status=None, limit=120):
            raise RuntimeError("feed exploded")
            yield

    with pytest.raises(RuntimeError, match="feed exploded"):
        await asyncio.wait_for(DispatchSession().follow(BrokenFeed()), timeout=1)
