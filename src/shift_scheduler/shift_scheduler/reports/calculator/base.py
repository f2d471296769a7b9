from __future__ import annotations

from abc import ABC, abstractmethod

from ...business_day.clock import BusinessDayClock
from ...shifts.model import Shift


class DurationCalculator(ABC):
    """Calculator interface (Strategy Pattern for scheduled time)."""

    @abstractmethod
    def scheduled_minutes(self, shift: Shift, clock: BusinessDayClock) -> int:
        raise NotImplementedError
