"""DayWindow value object — one local calendar day as [start_ms, end_ms)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo

MS_PER_MINUTE = 60_000


@dataclass(frozen=True)
class DayWindow:
    day: date
    tz: tzinfo = timezone.utc

    @classmethod
    def for_date(cls, day: date, tz: tzinfo = timezone.utc) -> "DayWindow":
        return cls(day=day, tz=tz)

    @classmethod
    def containing(cls, instant_ms: int, tz: tzinfo = timezone.utc) -> "DayWindow":
        """The local day that contains the given epoch-millis instant."""
        local = datetime.fromtimestamp(instant_ms / 1000, tz=tz)
        return cls(day=local.date(), tz=tz)

    @property
    def start_ms(self) -> int:
        start = datetime.combine(self.day, time.min, tzinfo=self.tz)
        return int(start.timestamp() * 1000)

    @property
    def end_ms(self) -> int:
        # Exclusive; a DST day is 23 or 25 hours long.
        end = datetime.combine(self.day + timedelta(days=1), time.min, tzinfo=self.tz)
        return int(end.timestamp() * 1000)

    def contains(self, instant_ms: int) -> bool:
        return self.start_ms <= instant_ms < self.end_ms

    def previous(self) -> "DayWindow":
        return DayWindow(day=self.day - timedelta(days=1), tz=self.tz)

    def next(self) -> "DayWindow":
        return DayWindow(day=self.day + timedelta(days=1), tz=self.tz)

    def minutes_since_start(self, instant_ms: int) -> float:
        return (instant_ms - self.start_ms) / MS_PER_MINUTE
