"""BookingView entity — a named scope/status/driver/payment filter preset."""

from dataclasses import dataclass

from shuttle_dispatch.domain.value_objects.enums import BookingScope


@dataclass
class BookingView:
    id: str
    name: str
    scope: BookingScope = BookingScope.UPCOMING
    status: str = "all"
    driver: str = "all"
    payment: str = "all"
    created_at: int | None = None
    updated_at: int | None = None
