"""Driver entity — an assignable operator resource."""

from __future__ import annotations

from dataclasses import dataclass, field

from shuttle_dispatch.domain.entities.booking import Booking


@dataclass
class Driver:
    id: str
    name: str
    phone: str | None = None
    email: str | None = None
    vehicle: str | None = None
    status: str | None = None
    duty_status: str | None = None  # "on" | "off" | "break"
    shift_start: int | None = None
    shift_end: int | None = None
    active: bool | None = None
    compliance: dict = field(default_factory=dict)

    @classmethod
    def stub_for(cls, booking: Booking) -> "Driver":
        """Minimal stand-in for a driver known only through a booking's assignment."""
        driver_id = booking.assignment.driver_id or ""
        vehicles = booking.trip.vehicle_selections
        return cls(
            id=driver_id,
            name=booking.assignment.driver_name or f"Driver {driver_id[:4]}",
            phone=booking.assignment.driver_phone,
            email=booking.assignment.driver_email,
            vehicle=vehicles[0] if vehicles else None,
        )
