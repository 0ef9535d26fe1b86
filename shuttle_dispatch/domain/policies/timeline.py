"""TimelinePolicy — place one driver's bookings on a lane timeline spanning one local day.

Lane packing and conflict detection are deliberately independent:

* lanes are assigned by greedy first-fit over pickup order, where a lane is
  reusable only once its last trip ended at least ``turnaround_buffer`` minutes
  before the new pickup;
* conflicts and tight-turnaround warnings are measured against one running
  "occupied until" cursor for the whole driver, not per lane.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, tzinfo

from shuttle_dispatch.domain.entities.booking import Booking
from shuttle_dispatch.domain.value_objects.day_window import MS_PER_MINUTE, DayWindow

# Tunable dispatch policy, not physics.
DEFAULT_TRIP_DURATION_MIN = 75
MIN_TRIP_DURATION_MIN = 45
TURNAROUND_BUFFER_MIN = 30
MIN_WIDTH_RATIO = 0.045

OVERLAP_WARNING = "Overlaps with previous trip"

_TIME_FORMATS = ("%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M%p")


@dataclass(frozen=True)
class Placement:
    booking: Booking
    lane: int
    left_ratio: float
    width_ratio: float
    start_minutes: float
    duration_minutes: float
    conflict: bool
    gap_minutes: float | None
    warnings: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TimelineLayout:
    placements: tuple[Placement, ...]
    lane_count: int


def _parse_local_pickup(pickup_date: str, pickup_time: str | None, tz: tzinfo) -> int | None:
    try:
        day = datetime.strptime(pickup_date.strip(), "%Y-%m-%d").date()
    except ValueError:
        return None
    raw_time = (pickup_time or "").strip() or "00:00"
    for fmt in _TIME_FORMATS:
        try:
            clock = datetime.strptime(raw_time.upper(), fmt).time()
        except ValueError:
            continue
        local = datetime.combine(day, clock, tzinfo=tz)
        return int(local.timestamp() * 1000)
    return None


def resolve_pickup_ms(booking: Booking, tz: tzinfo) -> int | None:
    """Pickup instant in epoch millis, or None when it cannot be resolved.

    The stored timestamp wins; otherwise ``pickup_date`` + ``pickup_time`` are
    read as local time in ``tz``.
    """
    timestamp = booking.schedule.pickup_timestamp
    if isinstance(timestamp, (int, float)) and not isinstance(timestamp, bool):
        if math.isfinite(timestamp):
            return int(timestamp)
    if booking.schedule.pickup_date:
        return _parse_local_pickup(booking.schedule.pickup_date, booking.schedule.pickup_time, tz)
    return None


def estimate_duration_minutes(
    booking: Booking,
    *,
    default_minutes: float = DEFAULT_TRIP_DURATION_MIN,
    min_minutes: float = MIN_TRIP_DURATION_MIN,
) -> float:
    duration = booking.pricing_duration_minutes
    if isinstance(duration, (int, float)) and math.isfinite(duration) and duration > 0:
        return max(float(duration), min_minutes)
    return default_minutes


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def build_timeline(
    bookings: list[Booking],
    day: DayWindow,
    *,
    turnaround_buffer: float = TURNAROUND_BUFFER_MIN,
    default_minutes: float = DEFAULT_TRIP_DURATION_MIN,
    min_minutes: float = MIN_TRIP_DURATION_MIN,
    min_width_ratio: float = MIN_WIDTH_RATIO,
) -> TimelineLayout:
    """Lay out one driver's bookings for one day.

    Args:
        bookings: bookings already filtered to a single driver, any order.
        day: the local day being rendered.

    Returns:
        TimelineLayout with placements in pickup order and the lane count,
        which is never below 1 so an empty driver still gets a row.
    """
    day_start = day.start_ms
    day_end = day.end_ms
    # 23 or 25 hours on DST transition days.
    day_minutes = (day_end - day_start) / MS_PER_MINUTE

    entries: list[tuple[int, Booking]] = []
    for booking in bookings:
        pickup = resolve_pickup_ms(booking, day.tz)
        if pickup is None or not (day_start <= pickup < day_end):
            continue
        entries.append((pickup, booking))
    # Stable: identical pickups keep their input order.
    entries.sort(key=lambda entry: entry[0])

    placements: list[Placement] = []
    lane_ends: list[float] = []
    previous_end: float | None = None

    for pickup, booking in entries:
        start = day.minutes_since_start(pickup)
        if start >= day_minutes:
            continue
        end = start + estimate_duration_minutes(
            booking, default_minutes=default_minutes, min_minutes=min_minutes
        )
        clamped_start = max(0.0, start)
        clamped_end = min(day_minutes, end)
        if clamped_end <= clamped_start:
            continue

        lane = next(
            (index for index, lane_end in enumerate(lane_ends) if lane_end <= start - turnaround_buffer),
            None,
        )
        if lane is None:
            lane = len(lane_ends)
            lane_ends.append(end)
        else:
            lane_ends[lane] = max(lane_ends[lane], end)

        duration = max(clamped_end - clamped_start, min_minutes)
        left = max(0.0, min(1.0, clamped_start / day_minutes))
        width = min(1.0 - left, max(duration / day_minutes, min_width_ratio))

        gap: float | None = None
        warnings: list[str] = []
        if previous_end is not None:
            gap = clamped_start - previous_end
            if gap < 0:
                warnings.append(OVERLAP_WARNING)
            elif gap < turnaround_buffer:
                warnings.append(f"Tight turnaround ({_round_half_up(gap)}m)")

        placements.append(
            Placement(
                booking=booking,
                lane=lane,
                left_ratio=left,
                width_ratio=width,
                start_minutes=clamped_start,
                duration_minutes=duration,
                conflict=gap is not None and gap < 0,
                gap_minutes=gap,
                warnings=tuple(warnings),
            )
        )
        previous_end = clamped_end if previous_end is None else max(previous_end, clamped_end)

    return TimelineLayout(placements=tuple(placements), lane_count=max(len(lane_ends), 1))
