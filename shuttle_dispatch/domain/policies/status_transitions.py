"""StatusTransitionPolicy — allowed booking status moves and reason-code rules."""

from __future__ import annotations

from collections.abc import Iterable

from shuttle_dispatch.domain.errors import ValidationError
from shuttle_dispatch.domain.value_objects.enums import (
    BookingStatus as S,
    StatusReasonCode,
    Tone,
)

# Forward one step, back one step (a correction), or cancel.
STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    S.PENDING.value: frozenset({S.AWAITING_PAYMENT.value, S.CONFIRMED.value, S.CANCELLED.value}),
    S.AWAITING_PAYMENT.value: frozenset({S.CONFIRMED.value, S.CANCELLED.value}),
    S.CONFIRMED.value: frozenset({S.ASSIGNED.value, S.CANCELLED.value}),
    S.ASSIGNED.value: frozenset({S.EN_ROUTE.value, S.CONFIRMED.value, S.CANCELLED.value}),
    S.EN_ROUTE.value: frozenset({S.ARRIVED.value, S.ASSIGNED.value, S.CANCELLED.value}),
    S.ARRIVED.value: frozenset({S.ON_TRIP.value, S.EN_ROUTE.value, S.CANCELLED.value}),
    S.ON_TRIP.value: frozenset({S.COMPLETED.value, S.ARRIVED.value, S.CANCELLED.value}),
    S.COMPLETED.value: frozenset(),
    S.CANCELLED.value: frozenset(),
}

STATUS_REASON_REQUIRED = frozenset({S.CANCELLED.value})

TRANSITION_REASON_REQUIRED = frozenset(
    {
        (S.ASSIGNED.value, S.CONFIRMED.value),
        (S.EN_ROUTE.value, S.ASSIGNED.value),
        (S.ARRIVED.value, S.EN_ROUTE.value),
        (S.ON_TRIP.value, S.ARRIVED.value),
    }
)

STATUS_REASON_CODES = frozenset(code.value for code in StatusReasonCode)

STATUS_LABELS: dict[str, str] = {
    S.PENDING.value: "Pending",
    S.AWAITING_PAYMENT.value: "Awaiting payment",
    S.CONFIRMED.value: "Confirmed",
    S.ASSIGNED.value: "Assigned",
    S.EN_ROUTE.value: "En route",
    S.ARRIVED.value: "Arrived",
    S.ON_TRIP.value: "On trip",
    S.COMPLETED.value: "Completed",
    S.CANCELLED.value: "Cancelled",
}

STATUS_TONES: dict[str, Tone] = {
    S.PENDING.value: Tone.SECONDARY,
    S.AWAITING_PAYMENT.value: Tone.WARNING,
    S.CONFIRMED.value: Tone.PRIMARY,
    S.ASSIGNED.value: Tone.SECONDARY,
    S.EN_ROUTE.value: Tone.PRIMARY,
    S.ARRIVED.value: Tone.SECONDARY,
    S.ON_TRIP.value: Tone.PRIMARY,
    S.COMPLETED.value: Tone.SUCCESS,
    S.CANCELLED.value: Tone.DANGER,
}


def _normalize(status: str | None) -> str:
    return (status or "").strip().lower() or S.PENDING.value


def allowed_transitions(current: str | None) -> frozenset[str]:
    """Statuses reachable from ``current``; unknown statuses reach nothing."""
    return STATUS_TRANSITIONS.get(_normalize(current), frozenset())


def can_transition(current: str | None, next_status: str | None) -> bool:
    return _normalize(next_status) in allowed_transitions(current)


def requires_reason(current: str | None, next_status: str | None) -> bool:
    """Reason code is mandatory for cancellations and for sensitive reverts."""
    current_norm = _normalize(current)
    next_norm = _normalize(next_status)
    return (
        next_norm in STATUS_REASON_REQUIRED
        or (current_norm, next_norm) in TRANSITION_REASON_REQUIRED
    )


def bulk_requires_reason(current_statuses: Iterable[str | None], next_status: str | None) -> bool:
    """Fail closed: one booking needing a reason makes the whole batch need one."""
    return any(requires_reason(current, next_status) for current in current_statuses)


def validate_transition(
    current: str | None,
    next_status: str | None,
    reason_code: str | None = None,
    *,
    reason_required: bool | None = None,
) -> None:
    """Raise ValidationError unless ``current → next_status`` may be submitted.

    ``reason_required`` overrides the per-pair rule, which is how a bulk
    submission applies the batch-wide requirement to every booking.
    """
    current_norm = _normalize(current)
    next_norm = _normalize(next_status)
    if not can_transition(current_norm, next_norm):
        raise ValidationError(
            f"Cannot move a booking from {status_label(current_norm)} to {status_label(next_norm)}.",
            title="Invalid status change",
        )
    needs_reason = requires_reason(current_norm, next_norm) if reason_required is None else reason_required
    code = (reason_code or "").strip()
    if needs_reason and not code:
        raise ValidationError("Pick a reason code before submitting.", title="Reason required")
    if code and code not in STATUS_REASON_CODES:
        raise ValidationError(f"Unknown reason code '{code}'.", title="Invalid reason code")


def status_label(status: str | None) -> str:
    normalized = _normalize(status)
    return STATUS_LABELS.get(normalized, normalized.replace("_", " ").capitalize())


def status_tone(status: str | None) -> Tone:
    """Display tone; anything unrecognised gets the neutral tone."""
    return STATUS_TONES.get(_normalize(status), Tone.SECONDARY)
