"""Request schemas and response serializers for the dispatch API."""

from __future__ import annotations

from datetime import date, timezone, tzinfo

from pydantic import BaseModel, Field

from shuttle_dispatch.application.ports.mutation_api import NotifyOptions
from shuttle_dispatch.application.use_cases.command_result import CommandResult
from shuttle_dispatch.domain.entities.booking import Booking
from shuttle_dispatch.domain.entities.booking_view import BookingView
from shuttle_dispatch.domain.entities.driver import Driver
from shuttle_dispatch.domain.policies.board import Board
from shuttle_dispatch.domain.policies.classification import (
    classify_luggage_bucket,
    classify_passenger_bucket,
    classify_pickup_window,
    extract_airport_code,
    luggage_label,
)
from shuttle_dispatch.domain.policies.queue_filters import ALL, DispatcherFilters
from shuttle_dispatch.domain.policies.status_transitions import (
    allowed_transitions,
    status_label,
    status_tone,
)
from shuttle_dispatch.domain.policies.timeline import Placement, resolve_pickup_ms
from shuttle_dispatch.domain.value_objects.enums import (
    BookingScope,
    LuggageBucket,
    PaxBucket,
    PickupWindow,
    SmsRecipient,
)

# ── Requests ────────────────────────────────────────────────────────


class FiltersRequest(BaseModel):
    pickup_window: PickupWindow = PickupWindow.ALL
    airport: str = ALL
    pax: PaxBucket = PaxBucket.ALL
    luggage: LuggageBucket = LuggageBucket.ALL

    def to_domain(self) -> DispatcherFilters:
        return DispatcherFilters(
            pickup_window=self.pickup_window,
            airport=self.airport or ALL,
            pax=self.pax,
            luggage=self.luggage,
        )


class DayRequest(BaseModel):
    """Either an explicit date or a relative move."""

    day: date | None = None
    move: str | None = Field(default=None, pattern="^(previous|next|today)$")


class ViewRequest(BaseModel):
    view_id: str


class SearchRequest(BaseModel):
    search: str = ""


class SelectionRequest(BaseModel):
    booking_ids: list[str] = Field(default_factory=list)
    mode: str = Field(default="replace", pattern="^(replace|add|remove|toggle|clear)$")


class NotifyRequest(BaseModel):
    sms: bool = False
    email: bool = False
    push: bool = False

    def to_domain(self) -> NotifyOptions:
        return NotifyOptions(sms=self.sms, email=self.email, push=self.push)


class AssignRequest(BaseModel):
    booking_ids: list[str] | None = None  # defaults to the current selection
    driver_id: str
    driver_name: str | None = None
    driver_phone: str | None = None
    driver_email: str | None = None
    notify: NotifyRequest = Field(default_factory=NotifyRequest)


class UnassignRequest(BaseModel):
    booking_ids: list[str] | None = None
    notify: NotifyRequest = Field(default_factory=NotifyRequest)


class StatusRequest(BaseModel):
    booking_ids: list[str] | None = None
    status: str
    reason_code: str = ""
    note: str = ""


class PricingRequest(BaseModel):
    booking_ids: list[str] | None = None
    base: str
    gst: str
    total: str
    tip: str = ""
    reason_code: str = ""
    reason_note: str = ""
    require_second_approval: bool = False


class SmsRequest(BaseModel):
    booking_ids: list[str] | None = None
    message: str
    recipient: SmsRecipient = SmsRecipient.PASSENGER


class SaveViewRequest(BaseModel):
    id: str | None = None
    name: str = Field(min_length=1, max_length=120)
    scope: BookingScope = BookingScope.UPCOMING
    status: str = ALL
    driver: str = ALL
    payment: str = ALL


class ComputeBoardRequest(BaseModel):
    """Raw feed records plus operator state, for a stateless board computation."""

    bookings: list[dict] = Field(default_factory=list)
    drivers: list[dict] = Field(default_factory=list)
    day: date
    timezone: str | None = None
    filters: FiltersRequest = Field(default_factory=FiltersRequest)
    view: SaveViewRequest | None = None
    search: str = ""
    now_ms: int | None = None


# ── Serializers ─────────────────────────────────────────────────────


def serialize_booking(b: Booking, now_ms: int | None = None, tz: tzinfo = timezone.utc) -> dict:
    status = b.current_status()
    pickup = resolve_pickup_ms(b, tz)
    window = None
    if pickup is not None and now_ms is not None:
        window = classify_pickup_window(pickup, now_ms, tz).value
    return {
        "id": b.id,
        "label": b.label(),
        "booking_number": b.booking_number,
        "status": status,
        "status_label": status_label(status),
        "status_tone": status_tone(status).value,
        "allowed_transitions": sorted(allowed_transitions(status)),
        "route": b.route(),
        "pickup_timestamp": b.schedule.pickup_timestamp,
        "pickup_window": window,
        "passenger": {
            "name": b.passenger.name,
            "phone": b.passenger.phone,
            "email": b.passenger.email,
            "baggage": b.passenger.baggage,
        },
        "passenger_count": b.trip.passenger_count,
        "pax_bucket": classify_passenger_bucket(b).value,
        "luggage_bucket": classify_luggage_bucket(b).value,
        "luggage_label": luggage_label(b),
        "airport": extract_airport_code(b),
        "payment": {
            "preference": b.payment.preference,
            "total_cents": b.payment.total_cents,
            "currency": b.payment.currency,
        },
        "assignment": {
            "driver_id": b.assignment.driver_id,
            "driver_name": b.assignment.driver_name,
        }
        if b.is_assigned()
        else None,
    }


def serialize_driver(d: Driver) -> dict:
    return {
        "id": d.id,
        "name": d.name,
        "phone": d.phone,
        "email": d.email,
        "vehicle": d.vehicle,
        "status": d.status,
        "duty_status": d.duty_status,
        "shift_start": d.shift_start,
        "shift_end": d.shift_end,
    }


def serialize_placement(p: Placement, now_ms: int | None = None, tz: tzinfo = timezone.utc) -> dict:
    return {
        "booking": serialize_booking(p.booking, now_ms, tz),
        "lane": p.lane,
        "left_ratio": p.left_ratio,
        "width_ratio": p.width_ratio,
        "start_minutes": p.start_minutes,
        "duration_minutes": p.duration_minutes,
        "conflict": p.conflict,
        "gap_minutes": p.gap_minutes,
        "warnings": list(p.warnings),
    }


def serialize_board(board: Board) -> dict:
    summary = board.status_summary
    now_ms = board.now_ms
    tz = board.day.tz if board.day is not None else timezone.utc
    return {
        "unassigned_queue": [serialize_booking(b, now_ms, tz) for b in board.unassigned_queue],
        "driver_columns": [
            {
                "driver": serialize_driver(column.driver),
                "lane_count": column.lane_count,
                "placements": [serialize_placement(p, now_ms, tz) for p in column.placements],
            }
            for column in board.driver_columns
        ],
        "status_summary": {
            "unassigned": summary.unassigned,
            "assigned": summary.assigned,
            "en_route": summary.en_route,
            "completed": summary.completed,
            "cancelled": summary.cancelled,
        },
        "airport_options": list(board.airport_options),
    }


def serialize_view(v: BookingView) -> dict:
    return {
        "id": v.id,
        "name": v.name,
        "scope": v.scope.value,
        "status": v.status,
        "driver": v.driver,
        "payment": v.payment,
    }


def serialize_result(result: CommandResult) -> dict:
    data = {
        "ok": result.ok,
        "toast": result.toast.to_dict(),
        "booking_ids": list(result.booking_ids),
    }
    if result.total_recipients is not None:
        data["total_recipients"] = result.total_recipients
    return data
