"""Port interface for the live booking/driver feed."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass, field

from shuttle_dispatch.domain.entities.booking import Booking
from shuttle_dispatch.domain.entities.driver import Driver
from shuttle_dispatch.domain.value_objects.enums import BookingScope


@dataclass(frozen=True)
class FeedSnapshot:
    """A full current snapshot; never a delta."""

    bookings: tuple[Booking, ...] = field(default_factory=tuple)
    drivers: tuple[Driver, ...] = field(default_factory=tuple)
    loading: bool = False
    error: str | None = None


class BookingFeed(ABC):
    @abstractmethod
    def subscribe(
        self,
        scope: BookingScope,
        status: str | None = None,
        limit: int = 120,
    ) -> AsyncIterator[FeedSnapshot]:
        """Yield a snapshot per update until the consumer stops iterating.

        Failures are delivered as snapshots with ``error`` set, not raised.
        """
        ...

    @abstractmethod
    async def refresh(self) -> None:
        """Ask for a new snapshot as soon as possible."""
        ...
