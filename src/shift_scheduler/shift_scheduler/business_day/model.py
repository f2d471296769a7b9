from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.constants import (
    DEFAULT_BUSINESS_DAY_END_HOUR,
    DEFAULT_BUSINESS_DAY_START_HOUR,
    MAX_BUSINESS_DAY_END_HOUR,
    MINUTES_PER_DAY,
)
from ..core.exceptions import InvalidRangeError


@dataclass(frozen=True)
class WallClockTime:
    """A clock reading (hour, minute) without any date attached."""

    hour: int
    minute: int

    def __post_init__(self) -> None:
        if not (0 <= int(self.hour) <= 23 and 0 <= int(self.minute) <= 59):
            raise InvalidRangeError(f"Invalid time {self.hour}:{self.minute} (expected HH:MM)")

    @classmethod
    def from_time(cls, value: time) -> "WallClockTime":
        return cls(value.hour, value.minute)

    @classmethod
    def from_minutes(cls, minutes: int) -> "WallClockTime":
        """Wall-clock reading of a minute offset, wrapping past midnight."""
        minutes = int(minutes) % MINUTES_PER_DAY
        return cls(minutes // 60, minutes % 60)

    @property
    def minutes_of_day(self) -> int:
        return self.hour * 60 + self.minute

    def to_time(self) -> time:
        return time(self.hour, self.minute)

    def format(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True)
class BusinessDayConfig:
    """Operating window of a corporation.

    ``end_hour`` may go past 24 (28 means 04:00 on the following calendar day).
    """

    start_hour: int = DEFAULT_BUSINESS_DAY_START_HOUR
    end_hour: int = DEFAULT_BUSINESS_DAY_END_HOUR

    def __post_init__(self) -> None:
        if not 0 <= self.start_hour < 24:
            raise InvalidRangeError(f"Business day start hour {self.start_hour} must be within 0-23")
        if not self.start_hour < self.end_hour <= self.start_hour + 24:
            raise InvalidRangeError(
                f"Business day end hour {self.end_hour} must be after {self.start_hour} and at most 24 hours later"
            )

    @classmethod
    def from_raw(cls, start_hour: Optional[int], end_hour: Optional[int]) -> "BusinessDayConfig":
        """Build a window from stored corporation settings.

        Missing values fall back to the defaults, and an end hour that is not after
        the start hour is read as "next day" (8 / 4 becomes 8 / 28).
        """
        start = DEFAULT_BUSINESS_DAY_START_HOUR if start_hour is None else int(start_hour)
        end = DEFAULT_BUSINESS_DAY_END_HOUR if end_hour is None else int(end_hour)

        start = min(max(start, 0), 23)
        if end <= start:
            end += 24
        end = min(max(end, 1), MAX_BUSINESS_DAY_END_HOUR)
        end = min(max(end, start + 1), start + 24)
        return cls(start_hour=start, end_hour=end)

    @property
    def start_minute(self) -> int:
        return self.start_hour * 60

    @property
    def end_minute(self) -> int:
        return self.end_hour * 60

    def label(self) -> str:
        end_display = self.end_hour - 24 if self.end_hour > 24 else self.end_hour
        return f"{self.start_hour:02d}:00 ~ {end_display:02d}:00"


@dataclass(frozen=True)
class ShiftRange:
    """A (date, start, end) triple as entered; only meaningful through a business day."""

    work_date: date
    start: WallClockTime
    end: WallClockTime


@dataclass(frozen=True)
class NormalizedRange:
    """A range validated against a business day, on both axes."""

    work_date: date
    start_minute: int
    end_minute: int
    start_at: datetime
    end_at: datetime

    @property
    def duration_minutes(self) -> int:
        return self.end_minute - self.start_minute

    @property
    def start(self) -> WallClockTime:
        return WallClockTime.from_minutes(self.start_minute)

    @property
    def end(self) -> WallClockTime:
        return WallClockTime.from_minutes(self.end_minute)

    def overlaps(self, other: "NormalizedRange") -> bool:
        return self.start_minute < other.end_minute and other.start_minute < self.end_minute
