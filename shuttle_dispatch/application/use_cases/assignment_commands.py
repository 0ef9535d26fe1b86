"""AssignmentCommandProcessor — assign/unassign with optimistic undo history."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from shuttle_dispatch.application.booking_locks import BookingLocks
from shuttle_dispatch.application.ports.booking_feed import BookingFeed
from shuttle_dispatch.application.ports.mutation_api import (
    AssignDriverRequest,
    MutationApi,
    NotifyOptions,
)
from shuttle_dispatch.application.use_cases.command_result import (
    CommandResult,
    as_mutation_failure,
    plural_bookings,
)
from shuttle_dispatch.domain.entities.booking import Assignment, Booking
from shuttle_dispatch.domain.entities.driver import Driver
from shuttle_dispatch.domain.errors import UndoFailure, ValidationError
from shuttle_dispatch.domain.value_objects.enums import Tone
from shuttle_dispatch.domain.value_objects.toast import Toast

logger = logging.getLogger(__name__)

UNDO_HISTORY_DEPTH = 20


@dataclass(frozen=True)
class UndoEntry:
    """A booking's assignment right before a mutation; None means unassigned."""

    booking_id: str
    previous_assignment: Assignment | None
    token: int = field(default=0, compare=False)


class UndoStack:
    """Bounded, most-recent-first history of assignment changes.

    Entries are keyed by a token so a failed mutation removes exactly the
    entry it pushed, even when other mutations resolved in between.
    """

    def __init__(self, depth: int = UNDO_HISTORY_DEPTH):
        self._depth = depth
        self._entries: list[UndoEntry] = []
        self._tokens = itertools.count(1)

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> tuple[UndoEntry, ...]:
        return tuple(self._entries)

    def push(self, booking_id: str, previous: Assignment | None) -> UndoEntry:
        entry = UndoEntry(booking_id=booking_id, previous_assignment=previous, token=next(self._tokens))
        self._entries.insert(0, entry)
        del self._entries[self._depth:]
        return entry

    def pop(self) -> UndoEntry | None:
        if not self._entries:
            return None
        return self._entries.pop(0)

    def restore(self, entry: UndoEntry) -> None:
        """Put a popped entry back on top so the same undo can be retried."""
        self._entries.insert(0, entry)
        del self._entries[self._depth:]

    def discard(self, entry: UndoEntry) -> bool:
        for index, candidate in enumerate(self._entries):
            if candidate.token == entry.token:
                del self._entries[index]
                return True
        return False

    def clear(self) -> None:
        self._entries.clear()


def _previous_assignment(booking: Booking) -> Assignment | None:
    return booking.assignment if booking.is_assigned() else None


class AssignmentCommandProcessor:
    """Drag-and-drop and form-driven assignment share this one code path."""

    def __init__(
        self,
        mutation_api: MutationApi,
        feed: BookingFeed | None = None,
        history_depth: int = UNDO_HISTORY_DEPTH,
        locks: BookingLocks | None = None,
    ):
        self._api = mutation_api
        self._feed = feed
        self._locks = locks or BookingLocks()
        self.undo_stack = UndoStack(history_depth)

    async def assign(
        self,
        bookings: Sequence[Booking],
        driver: Driver,
        notify: NotifyOptions = NotifyOptions(),
    ) -> CommandResult:
        """Assign bookings to a driver, recording one undo entry per booking."""
        if not bookings:
            return CommandResult.rejected(
                ValidationError("Choose at least one booking to assign.", title="Select bookings")
            )
        if not driver.id.strip():
            return CommandResult.rejected(
                ValidationError("Provide the driver's ID before assigning.", title="Driver ID required")
            )

        targets = [booking for booking in bookings if booking.driver_id != driver.id]
        if not targets:
            logger.warning("Assign skipped: %d booking(s) already on driver %s", len(bookings), driver.id)
            return CommandResult.warning(
                "Already assigned",
                f"{driver.name} already has {'this trip' if len(bookings) == 1 else 'these trips'}.",
                [b.id for b in bookings],
            )

        previous = targets[0].assignment
        entries = [self.undo_stack.push(b.id, _previous_assignment(b)) for b in targets]
        booking_ids = tuple(b.id for b in targets)
        request = AssignDriverRequest(
            booking_ids=booking_ids,
            driver_id=driver.id,
            driver_name=driver.name,
            driver_phone=driver.phone or previous.driver_phone,
            driver_email=driver.email or previous.driver_email,
            notify=notify,
        )

        try:
            async with self._locks.hold(booking_ids):
                await self._api.assign_driver(request)
        except Exception as exc:
            for entry in entries:
                self.undo_stack.discard(entry)
            logger.exception("Assign %s → driver %s failed", ", ".join(booking_ids), driver.id)
            return CommandResult.failed("Unable to assign", as_mutation_failure(exc), booking_ids)

        logger.info("Assigned %s → driver %s", ", ".join(booking_ids), driver.id)
        await self._refresh()
        subject = targets[0].label() if len(targets) == 1 else plural_bookings(len(targets))
        return CommandResult.success("Assignment updated", f"{subject} → {driver.name}", booking_ids)

    async def unassign(
        self,
        bookings: Sequence[Booking],
        notify: NotifyOptions = NotifyOptions(),
    ) -> CommandResult:
        """Return bookings to the unassigned queue."""
        if not bookings:
            return CommandResult.rejected(
                ValidationError("Choose at least one booking to unassign.", title="Select bookings")
            )

        targets = [booking for booking in bookings if booking.is_assigned()]
        if not targets:
            logger.warning("Unassign skipped: %d booking(s) already unassigned", len(bookings))
            return CommandResult.warning(
                "Already unassigned",
                "This booking is already in the queue." if len(bookings) == 1
                else "These bookings are already in the queue.",
                [b.id for b in bookings],
            )

        entries = [self.undo_stack.push(b.id, _previous_assignment(b)) for b in targets]
        booking_ids = tuple(b.id for b in targets)
        request = AssignDriverRequest(booking_ids=booking_ids, driver_id="", notify=notify)

        try:
            async with self._locks.hold(booking_ids):
                await self._api.assign_driver(request)
        except Exception as exc:
            for entry in entries:
                self.undo_stack.discard(entry)
            logger.exception("Unassign %s failed", ", ".join(booking_ids))
            return CommandResult.failed("Unable to unassign", as_mutation_failure(exc), booking_ids)

        logger.info("Unassigned %s", ", ".join(booking_ids))
        await self._refresh()
        subject = targets[0].label() if len(targets) == 1 else plural_bookings(len(targets))
        return CommandResult(
            ok=True,
            toast=Toast("Booking returned", f"{subject} moved to unassigned queue.", Tone.WARNING),
            booking_ids=booking_ids,
        )

    async def undo(self, lookup: Callable[[str], Booking | None] | None = None) -> CommandResult:
        """Reverse the most recent assignment change.

        Args:
            lookup: resolves a booking id against the current snapshot. When
                given and the booking is gone, the entry is dropped.
        """
        entry = self.undo_stack.pop()
        if entry is None:
            return CommandResult.warning(
                "Nothing to undo", "Assignments will appear here once you move bookings."
            )

        booking = lookup(entry.booking_id) if lookup is not None else None
        if lookup is not None and booking is None:
            logger.warning("Undo dropped: booking %s no longer in view", entry.booking_id)
            return CommandResult.warning(
                "Undo unavailable", "That booking is no longer in view.", [entry.booking_id]
            )
        label = booking.label() if booking is not None else entry.booking_id

        previous = entry.previous_assignment
        if previous is not None and previous.driver_id:
            request = AssignDriverRequest(
                booking_ids=(entry.booking_id,),
                driver_id=previous.driver_id,
                driver_name=previous.driver_name,
                driver_phone=previous.driver_phone,
                driver_email=previous.driver_email,
            )
        else:
            request = AssignDriverRequest(booking_ids=(entry.booking_id,), driver_id="")

        try:
            async with self._locks.hold(request.booking_ids):
                await self._api.assign_driver(request)
        except Exception as exc:
            self.undo_stack.restore(entry)
            logger.exception("Undo for booking %s failed", entry.booking_id)
            return CommandResult.failed(
                "Undo failed", UndoFailure(str(exc) or "Please try again shortly."), [entry.booking_id]
            )

        await self._refresh()
        if request.driver_id:
            logger.info("Undo restored booking %s → driver %s", entry.booking_id, request.driver_id)
            return CommandResult.success(
                "Assignment restored",
                f"{label} reassigned to {previous.driver_name or previous.driver_id}.",
                [entry.booking_id],
            )
        logger.info("Undo cleared assignment of booking %s", entry.booking_id)
        return CommandResult.success(
            "Assignment cleared", f"{label} returned to the unassigned queue.", [entry.booking_id]
        )

    async def _refresh(self) -> None:
        if self._feed is None:
            return
        try:
            await self._feed.refresh()
        except Exception:
            logger.exception("Feed refresh request failed")
