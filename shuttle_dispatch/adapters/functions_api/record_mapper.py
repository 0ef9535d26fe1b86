"""Record mappers — loosely-typed JSON documents into domain entities.

Every field is optional on the wire. Anything with the wrong type is dropped
to None rather than failing the whole snapshot; a record without an id is
skipped entirely.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from datetime import datetime, timezone

from shuttle_dispatch.domain.entities.booking import (
    Assignment,
    Booking,
    Passenger,
    Payment,
    Schedule,
    StatusHistoryEntry,
    Trip,
)
from shuttle_dispatch.domain.entities.driver import Driver

logger = logging.getLogger(__name__)


# ─── Field coercion ──────────────────────────────────────────────────


def clean_string(value: object) -> str | None:
    """Strip whitespace and return None for empty or non-string values."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value if value else None


def normalize_timestamp(value: object) -> int | None:
    """Epoch millis from a number, a ``{"_seconds", "_nanoseconds"}`` map or an ISO string."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value) or value <= 0:
            return None
        return int(value)
    if isinstance(value, dict):
        seconds = value.get("_seconds", value.get("seconds"))
        nanos = value.get("_nanoseconds", value.get("nanoseconds"))
        nanos = nanos if isinstance(nanos, int) and not isinstance(nanos, bool) else 0
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            return int(seconds * 1000 + nanos // 1_000_000)
        return None
    if isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return int(parsed.timestamp() * 1000)
    return None


def _int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _float(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if math.isfinite(value) else None


def _dict(value: object) -> dict:
    return value if isinstance(value, dict) else {}


def _first(*values: object) -> str | None:
    for value in values:
        cleaned = clean_string(value)
        if cleaned is not None:
            return cleaned
    return None


# ─── Bookings ────────────────────────────────────────────────────────


def _trip(raw: dict) -> Trip:
    selections = raw.get("vehicleSelections")
    return Trip(
        origin=clean_string(raw.get("origin")),
        origin_address=clean_string(raw.get("originAddress")),
        destination=clean_string(raw.get("destination")),
        destination_address=clean_string(raw.get("destinationAddress")),
        direction=clean_string(raw.get("direction")),
        passenger_count=_int(raw.get("passengerCount")),
        include_return=raw.get("includeReturn") is True,
        vehicle_selections=[s for s in selections if isinstance(s, str)] if isinstance(selections, list) else [],
    )


def _schedule(raw: dict) -> Schedule:
    return Schedule(
        pickup_timestamp=normalize_timestamp(raw.get("pickupTimestamp")),
        pickup_date=clean_string(raw.get("pickupDate")),
        pickup_time=clean_string(raw.get("pickupTime")),
        return_pickup_timestamp=normalize_timestamp(raw.get("returnPickupTimestamp")),
        flight_number=clean_string(raw.get("flightNumber")),
        notes=clean_string(raw.get("notes")),
    )


def _passenger(raw: dict) -> Passenger:
    return Passenger(
        name=_first(raw.get("primaryPassenger"), raw.get("name")),
        phone=clean_string(raw.get("phone")),
        email=clean_string(raw.get("email")),
        baggage=clean_string(raw.get("baggage")),
        special_notes=clean_string(raw.get("specialNotes")),
    )


def _payment(raw: dict) -> Payment:
    reason = _dict(raw.get("adjustmentReason"))
    return Payment(
        preference=clean_string(raw.get("preference")),
        base_cents=_int(raw.get("baseCents")),
        gst_cents=_int(raw.get("gstCents")),
        tip_cents=_int(raw.get("tipCents", raw.get("tipAmountCents"))),
        total_cents=_int(raw.get("totalCents")),
        currency=clean_string(raw.get("currency")),
        adjusted_manually=raw.get("adjustedManually") is True,
        adjusted_by=_first(raw.get("adjustedByName"), raw.get("adjustedBy")),
        adjusted_at=normalize_timestamp(raw.get("adjustedAt")),
        adjustment_reason_code=clean_string(reason.get("code")),
        adjustment_note=_first(raw.get("adjustmentNote"), reason.get("note")),
    )


def _assignment(raw: dict) -> Assignment:
    return Assignment(
        driver_id=clean_string(raw.get("driverId")),
        driver_name=clean_string(raw.get("driverName")),
        driver_phone=clean_string(raw.get("driverPhone")),
        driver_email=clean_string(raw.get("driverEmail")),
        assigned_at=normalize_timestamp(raw.get("assignedAt")),
    )


def _history(raw: object) -> list[StatusHistoryEntry]:
    if not isinstance(raw, list):
        return []
    entries = []
    for item in raw:
        if not isinstance(item, dict):
            entries.append(StatusHistoryEntry(status="unknown"))
            continue
        actor = item.get("actor")
        actor_name = _first(actor.get("name"), actor.get("uid")) if isinstance(actor, dict) else clean_string(actor)
        entries.append(
            StatusHistoryEntry(
                status=clean_string(item.get("status")) or "unknown",
                timestamp=normalize_timestamp(item.get("timestamp")),
                actor=actor_name,
                note=clean_string(item.get("note")),
                reason_code=clean_string(item.get("reasonCode")),
            )
        )
    return entries


def booking_from_record(record: object) -> Booking | None:
    """Map one ``listBookings`` item; None when it has no usable id."""
    if not isinstance(record, dict):
        return None
    booking_id = clean_string(record.get("id"))
    if booking_id is None:
        return None
    pricing = _dict(record.get("pricing"))
    distance = _dict(pricing.get("distanceDetails"))
    return Booking(
        id=booking_id,
        status=clean_string(record.get("status")),
        booking_number=_int(record.get("bookingNumber")),
        trip=_trip(_dict(record.get("trip"))),
        schedule=_schedule(_dict(record.get("schedule"))),
        passenger=_passenger(_dict(record.get("passenger"))),
        payment=_payment(_dict(record.get("payment"))),
        assignment=_assignment(_dict(record.get("assignment"))),
        status_history=_history(record.get("statusHistory")),
        pricing_duration_minutes=_float(distance.get("durationMinutes")),
        created_at=normalize_timestamp(record.get("createdAt")),
        updated_at=normalize_timestamp(record.get("updatedAt")),
    )


def bookings_from_records(records: Iterable[object]) -> list[Booking]:
    bookings = []
    skipped = 0
    for record in records:
        booking = booking_from_record(record)
        if booking is None:
            skipped += 1
            continue
        bookings.append(booking)
    if skipped:
        logger.warning("Skipped %d booking record(s) without an id", skipped)
    return bookings


# ─── Drivers ─────────────────────────────────────────────────────────


def driver_from_record(record: object) -> Driver | None:
    if not isinstance(record, dict):
        return None
    driver_id = clean_string(record.get("id"))
    if driver_id is None:
        return None
    shift = _dict(record.get("shift"))
    active = record.get("active", record.get("isActive"))
    return Driver(
        id=driver_id,
        name=_first(record.get("name"), record.get("fullName")) or "Unnamed driver",
        phone=_first(record.get("phone"), record.get("phoneNumber")),
        email=_first(record.get("email"), record.get("contactEmail")),
        vehicle=_first(record.get("vehicle"), record.get("vehicleLabel")),
        status=clean_string(record.get("status")),
        duty_status=clean_string(record.get("dutyStatus")),
        shift_start=normalize_timestamp(shift.get("start", record.get("shiftStart"))),
        shift_end=normalize_timestamp(shift.get("end", record.get("shiftEnd"))),
        active=active if isinstance(active, bool) else None,
        compliance=_dict(record.get("compliance")),
    )


def drivers_from_records(records: Iterable[object]) -> list[Driver]:
    return [driver for driver in (driver_from_record(r) for r in records) if driver is not None]
