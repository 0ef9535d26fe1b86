"""Classification — bucket labels the dispatcher queue filters on.

Every function here is total: malformed or missing booking fields fall into a
default bucket instead of raising.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone, tzinfo

from shuttle_dispatch.domain.entities.booking import Booking
from shuttle_dispatch.domain.value_objects.enums import (
    LuggageBucket,
    PaxBucket,
    PickupWindow,
)

NEXT_WINDOW_MINUTES = 120

_HEAVY_LUGGAGE = re.compile(
    r"\b(oversize|oversized|snowboard|ski|bike|stroller|heavy|large|4|5|6|7|8|9|10)\b"
)
_AIRPORT_CODE = re.compile(r"\(([A-Z]{3,4})\)")


def _local_hour(pickup_ms: int, tz: tzinfo) -> int:
    return datetime.fromtimestamp(pickup_ms / 1000, tz=tz).hour


def classify_pickup_window(
    pickup_ms: int,
    now_ms: int,
    tz: tzinfo = timezone.utc,
) -> PickupWindow:
    """Bucket a pickup instant: ``next2h`` first, else by local hour of day."""
    if pickup_ms <= now_ms + NEXT_WINDOW_MINUTES * 60_000:
        return PickupWindow.NEXT_2H
    hour = _local_hour(pickup_ms, tz)
    if 5 <= hour < 12:
        return PickupWindow.MORNING
    if 12 <= hour < 17:
        return PickupWindow.AFTERNOON
    if 17 <= hour < 22:
        return PickupWindow.EVENING
    return PickupWindow.OVERNIGHT


def matches_pickup_window(
    window: PickupWindow,
    pickup_ms: int,
    now_ms: int,
    tz: tzinfo = timezone.utc,
) -> bool:
    """Filter predicate for one window.

    Unlike :func:`classify_pickup_window` the hour windows match on hour alone,
    so a pickup 90 minutes out still shows under "morning".
    """
    if window == PickupWindow.ALL:
        return True
    if window == PickupWindow.NEXT_2H:
        return pickup_ms <= now_ms + NEXT_WINDOW_MINUTES * 60_000
    hour = _local_hour(pickup_ms, tz)
    if window == PickupWindow.MORNING:
        return 5 <= hour < 12
    if window == PickupWindow.AFTERNOON:
        return 12 <= hour < 17
    if window == PickupWindow.EVENING:
        return 17 <= hour < 22
    return hour >= 22 or hour < 5


def classify_passenger_bucket(booking: Booking) -> PaxBucket:
    count = booking.trip.passenger_count
    if not isinstance(count, int) or isinstance(count, bool):
        count = 0
    if count >= 5:
        return PaxBucket.LARGE
    if count >= 3:
        return PaxBucket.MEDIUM
    return PaxBucket.SMALL


def classify_luggage_bucket(booking: Booking) -> LuggageBucket:
    baggage = (booking.passenger.baggage or "").lower()
    if not baggage.strip():
        return LuggageBucket.NONE
    if _HEAVY_LUGGAGE.search(baggage) or "extra large" in baggage:
        return LuggageBucket.HEAVY
    return LuggageBucket.STANDARD


def luggage_label(booking: Booking) -> str | None:
    bucket = classify_luggage_bucket(booking)
    if bucket == LuggageBucket.NONE:
        return None
    if bucket == LuggageBucket.HEAVY:
        return "Heavy load"
    return "Standard load"


def extract_airport_code(booking: Booking) -> str | None:
    """First ``(XXX)``/``(XXXX)`` code in the trip fields.

    Falls back to the first comma-delimited segment of the first non-empty
    candidate, so "Kelowna, BC" groups under "Kelowna".
    """
    candidates = [
        value
        for value in (
            booking.trip.destination,
            booking.trip.origin,
            booking.trip.destination_address,
            booking.trip.origin_address,
        )
        if isinstance(value, str) and value
    ]
    for candidate in candidates:
        match = _AIRPORT_CODE.search(candidate)
        if match:
            return match.group(1)
    if not candidates:
        return None
    fallback = candidates[0].split(",")[0].strip()
    return fallback or None
