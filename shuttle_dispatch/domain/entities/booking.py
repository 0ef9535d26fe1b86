"""Booking entity — a scheduled ride request as seen by dispatch."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Trip:
    origin: str | None = None
    origin_address: str | None = None
    destination: str | None = None
    destination_address: str | None = None
    direction: str | None = None
    passenger_count: int | None = None
    include_return: bool = False
    vehicle_selections: list[str] = field(default_factory=list)


@dataclass
class Schedule:
    pickup_timestamp: int | None = None  # epoch millis
    pickup_date: str | None = None  # YYYY-MM-DD, local
    pickup_time: str | None = None  # HH:MM, local
    return_pickup_timestamp: int | None = None
    flight_number: str | None = None
    notes: str | None = None


@dataclass
class Passenger:
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    baggage: str | None = None
    special_notes: str | None = None


@dataclass
class Payment:
    preference: str | None = None
    base_cents: int | None = None
    gst_cents: int | None = None
    tip_cents: int | None = None
    total_cents: int | None = None
    currency: str | None = None
    adjusted_manually: bool = False
    adjusted_by: str | None = None
    adjusted_at: int | None = None
    adjustment_reason_code: str | None = None
    adjustment_note: str | None = None


@dataclass(frozen=True)
class Assignment:
    driver_id: str | None = None
    driver_name: str | None = None
    driver_phone: str | None = None
    driver_email: str | None = None
    assigned_at: int | None = None

    @property
    def is_assigned(self) -> bool:
        return bool(self.driver_id)


@dataclass(frozen=True)
class StatusHistoryEntry:
    status: str
    timestamp: int | None = None
    actor: str | None = None
    note: str | None = None
    reason_code: str | None = None


@dataclass
class Booking:
    id: str
    status: str | None = None
    booking_number: int | None = None
    trip: Trip = field(default_factory=Trip)
    schedule: Schedule = field(default_factory=Schedule)
    passenger: Passenger = field(default_factory=Passenger)
    payment: Payment = field(default_factory=Payment)
    assignment: Assignment = field(default_factory=Assignment)
    status_history: list[StatusHistoryEntry] = field(default_factory=list)
    pricing_duration_minutes: float | None = None  # distance-derived estimate
    created_at: int | None = None
    updated_at: int | None = None

    @property
    def driver_id(self) -> str | None:
        return self.assignment.driver_id or None

    def is_assigned(self) -> bool:
        return self.assignment.is_assigned

    def current_status(self) -> str:
        """Lower-cased status, reading a missing status as ``pending``."""
        return (self.status or "pending").strip().lower() or "pending"

    def label(self) -> str:
        """Operator-facing reference: booking number when known, else the id."""
        if self.booking_number is not None:
            return f"#{self.booking_number}"
        return self.id

    def route(self) -> str:
        origin = self.trip.origin or self.trip.origin_address or "Origin"
        destination = self.trip.destination or self.trip.destination_address or "Destination"
        return f"{origin} → {destination}"
