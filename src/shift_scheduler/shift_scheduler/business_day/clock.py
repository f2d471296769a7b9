from __future__ import annotations

from datetime import date, datetime, timedelta

from ..core.constants import MINUTES_PER_DAY
from ..core.enums import TimeBoundary
from ..core.exceptions import InvalidRangeError
from .model import BusinessDayConfig, NormalizedRange, ShiftRange, WallClockTime


class BusinessDayClock:
    """Maps wall-clock readings onto the business-day minute axis.

    Readings earlier than the opening hour belong to the early-morning tail of the
    business day and are shifted by one day (+1440 minutes).
    """

    def __init__(self, config: BusinessDayConfig):
        self._config = config

    @property
    def config(self) -> BusinessDayConfig:
        return self._config

    def to_business_minute(self, t: WallClockTime) -> int:
        minute = t.minutes_of_day
        if minute < self._config.start_minute:
            minute += MINUTES_PER_DAY
        return minute

    def is_allowed_start(self, t: WallClockTime) -> bool:
        # A shift may not begin exactly at closing time.
        m = self.to_business_minute(t)
        return self._config.start_minute <= m < self._config.end_minute

    def is_allowed_end(self, t: WallClockTime) -> bool:
        m = self.to_business_minute(t)
        return self._config.start_minute <= m <= self._config.end_minute

    def is_allowed(self, t: WallClockTime, boundary: TimeBoundary) -> bool:
        if boundary == TimeBoundary.START:
            return self.is_allowed_start(t)
        return self.is_allowed_end(t)

    def at_business_minute(self, work_date: date, minute: int) -> datetime:
        return datetime.combine(work_date, datetime.min.time()) + timedelta(minutes=int(minute))

    def normalize(self, work_date: date, t: WallClockTime) -> datetime:
        """Timestamp of ``t`` within the business day that opens on ``work_date``."""
        return self.at_business_minute(work_date, self.to_business_minute(t))

    def normalize_range(self, rng: ShiftRange) -> NormalizedRange:
        return self.validate_range(rng.work_date, rng.start, rng.end)

    def validate_range(self, work_date: date, start: WallClockTime, end: WallClockTime) -> NormalizedRange:
        if not self.is_allowed_start(start):
            raise InvalidRangeError(
                f"Start time {start} is outside business hours. ({self._config.label()})"
            )
        if not self.is_allowed_end(end):
            raise InvalidRangeError(f"End time {end} is outside business hours. ({self._config.label()})")

        start_m = self.to_business_minute(start)
        end_m = self.to_business_minute(end)
        if end_m <= start_m:
            raise InvalidRangeError("End time must be after start time.")

        return NormalizedRange(
            work_date=work_date,
            start_minute=start_m,
            end_minute=end_m,
            start_at=self.at_business_minute(work_date, start_m),
            end_at=self.at_business_minute(work_date, end_m),
        )
