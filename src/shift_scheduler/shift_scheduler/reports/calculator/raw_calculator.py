from __future__ import annotations

from .base import DurationCalculator
from ...business_day.clock import BusinessDayClock
from ...core.exceptions import InvalidRangeError
from ...shifts.model import Shift


class RawDurationCalculator(DurationCalculator):
    """Raw rule: end - start on the business-minute axis; invalid ranges count 0."""

    def scheduled_minutes(self, shift: Shift, clock: BusinessDayClock) -> int:
        try:
            rng = clock.normalize_range(shift.time_range)
        except InvalidRangeError:
            return 0
        return rng.duration_minutes
