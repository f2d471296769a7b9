from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional

from ..business_day.clock import BusinessDayClock
from ..business_day.model import NormalizedRange, WallClockTime
from ..core.constants import SLOT_STEP_MINUTES
from ..core.enums import Granularity, TimeBoundary
from ..core.exceptions import InvalidRangeError
from .model import Shift


@dataclass(frozen=True)
class _Occupied:
    shift: Shift
    start_at: datetime
    end_at: datetime


class ConflictDetector:
    """Checks candidate times against a worker's other approved shifts on one date.

    Both bounds are exclusive: touching an existing shift is not a conflict, so
    back-to-back shifts are allowed.
    """

    def __init__(
        self,
        clock: BusinessDayClock,
        work_date: date,
        existing: Iterable[Shift],
        *,
        exclude_ids: Iterable[int] = (),
    ):
        self._clock = clock
        self._work_date = work_date
        excluded = {int(i) for i in exclude_ids}
        self._occupied = [
            _Occupied(s, clock.normalize(work_date, s.start), clock.normalize(work_date, s.end))
            for s in existing
            if s.approved and s.shift_id not in excluded
        ]

    def is_conflicted(self, t: WallClockTime) -> bool:
        at = self._clock.normalize(self._work_date, t)
        return any(o.start_at < at < o.end_at for o in self._occupied)

    def is_minute_disabled(self, t: WallClockTime, boundary: TimeBoundary) -> bool:
        if not self._clock.is_allowed(t, boundary):
            return True
        return self.is_conflicted(t)

    def is_hour_disabled(self, hour: int, boundary: TimeBoundary) -> bool:
        # An hour stays selectable while any quarter inside it is free.
        for minute in range(0, 60, SLOT_STEP_MINUTES):
            if not self.is_minute_disabled(WallClockTime(hour, minute), boundary):
                return False
        return True

    def is_slot_disabled(self, t: WallClockTime, granularity: Granularity, boundary: TimeBoundary) -> bool:
        if granularity == Granularity.HOURS:
            return self.is_hour_disabled(t.hour, boundary)
        return self.is_minute_disabled(t, boundary)

    def find_overlap(self, candidate: NormalizedRange) -> Optional[Shift]:
        """First approved shift whose range overlaps ``candidate``.

        Stored ranges that are not valid under the current window are skipped.
        """
        for o in self._occupied:
            try:
                existing = self._clock.normalize_range(o.shift.time_range)
            except InvalidRangeError:
                continue
            if candidate.overlaps(existing):
                return o.shift
        return None
