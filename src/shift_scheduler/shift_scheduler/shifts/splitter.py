from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Tuple

from ..core.constants import MEAL_BREAK_MINUTES, SPLIT_THRESHOLD_MINUTES
from ..core.exceptions import InvalidRangeError
from .model import SplitPlan, WorkSession


class SessionSplitter:
    """Meal-break rule: a shift of 6 hours or more becomes two sessions.

    The break is centered on the shift's midpoint.
    """

    def __init__(self, *, threshold_minutes: int = SPLIT_THRESHOLD_MINUTES, break_minutes: int = MEAL_BREAK_MINUTES):
        self._threshold = int(threshold_minutes)
        self._break = int(break_minutes)

    @staticmethod
    def _total_minutes(start: datetime, end: datetime) -> int:
        return int((end - start).total_seconds() // 60)

    def needs_split(self, start: datetime, end: datetime) -> bool:
        return self._total_minutes(start, end) >= self._threshold

    def split(self, start: datetime, end: datetime) -> Optional[SplitPlan]:
        total = self._total_minutes(start, end)
        if total <= 0:
            return None

        offset = total // 2 - self._break // 2
        if offset <= 0:
            raise InvalidRangeError(f"Shift of {total} minutes is too short to split around a meal break")

        break_start = start + timedelta(minutes=offset)
        break_end = break_start + timedelta(minutes=self._break)
        return SplitPlan(
            first=WorkSession(start=start, end=break_start),
            second=WorkSession(start=break_end, end=end),
        )

    @staticmethod
    def combine(plan: SplitPlan) -> Tuple[datetime, datetime]:
        return plan.first.start, plan.second.end
